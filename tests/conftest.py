"""Shared fixtures: a scripted chat client and loguru output routed to caplog."""

from __future__ import annotations

import json
import logging
from types import SimpleNamespace
from typing import Any, Callable, Dict, List

import pytest
from loguru import logger as loguru_logger

from models import FormState
from usage import UsageLedger


class PropagateHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        logging.getLogger(record.name).handle(record)


@pytest.fixture(scope="session", autouse=True)
def configure_loguru_for_pytest_caplog():
    """Route loguru records through standard logging so caplog sees them."""
    try:
        loguru_logger.remove(0)
    except ValueError:
        pass
    loguru_logger.add(PropagateHandler(), format="{message}", level="DEBUG")


class FakeChatClient:
    """Stands in for ``openai.OpenAI``: replays scripted replies and records every request.

    A reply may be a string, a dict/list (sent as JSON) or an exception to raise.
    """

    def __init__(self, replies: List[Any], *, total_tokens: int = 42):
        self.replies = list(replies)
        self.requests: List[Dict[str, Any]] = []
        self.total_tokens = total_tokens
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def _create(self, **kwargs: Any) -> SimpleNamespace:
        self.requests.append(kwargs)
        if not self.replies:
            raise AssertionError(f"Unexpected chat completion call #{len(self.requests)}")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if not isinstance(reply, str):
            reply = json.dumps(reply)
        message = SimpleNamespace(content=reply)
        return SimpleNamespace(
            choices=[SimpleNamespace(message=message, finish_reason="stop")],
            usage=SimpleNamespace(total_tokens=self.total_tokens),
        )

    def system_prompt(self, index: int = -1) -> str:
        return self.requests[index]["messages"][0]["content"]

    def user_prompt(self, index: int = -1) -> str:
        return self.requests[index]["messages"][1]["content"]


@pytest.fixture
def fake_client() -> Callable[..., FakeChatClient]:
    def factory(*replies: Any, total_tokens: int = 42) -> FakeChatClient:
        return FakeChatClient(list(replies), total_tokens=total_tokens)

    return factory


@pytest.fixture
def ledger(tmp_path) -> UsageLedger:
    return UsageLedger(tmp_path / "usage.db", sleep=lambda _: None)


@pytest.fixture
def form() -> FormState:
    return FormState(
        tab="create",
        business_description="We sell handmade ceramic mugs to coffee lovers in Portland.",
        product_service_name="Clayworks Mugs",
        target_audience="Coffee enthusiasts",
        key_message="Every mug is one of a kind",
        call_to_action="Shop the collection",
        model="gpt-4o",
    )
