from __future__ import annotations

"""Chat-completion client plumbing shared by every generator."""

import json
import os
import re
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from loguru import logger
from openai import (
    APIConnectionError,
    APITimeoutError,
    InternalServerError,
    OpenAI,
    RateLimitError,
)

from config import (
    BASE_DELAY,
    DEFAULT_USER,
    MAX_DELAY,
    MAX_RETRIES,
    PROVIDERS,
    REQUEST_TIMEOUT,
    max_tokens_for,
    provider_for,
)
from usage import UsageLedger

RETRYABLE = (RateLimitError, APIConnectionError, APITimeoutError, InternalServerError)

JSON_CODE_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
EDGE_BACKTICKS = re.compile(r"^```|```$")

Progress = Optional[Callable[[str], None]]


def report(progress: Progress, message: str) -> None:
    logger.info(message)
    if progress is not None:
        progress(message)


@dataclass
class Completion:
    text: str
    total_tokens: int = 0
    finish_reason: Optional[str] = None


def get_api_config(model: str) -> Dict[str, Any]:
    """Resolve base URL, API key and output token limit for a model."""
    available = {name: os.getenv(str(provider["env"])) for name, provider in PROVIDERS.items()}
    if not any(available.values()):
        raise RuntimeError("No API keys available. Please check your environment variables.")

    name = provider_for(model) or "OpenAI"
    provider = PROVIDERS[name]
    api_key = available[name]
    if not api_key:
        message = f"{name} API key not available. Please add {provider['env']} to your .env file."
        if provider.get("help"):
            message = f"{message} {provider['help']}"
        logger.error(message)
        raise RuntimeError(message)
    return {
        "api_key": api_key,
        "base_url": provider["base_url"],
        "max_tokens": max_tokens_for(model),
    }


def create_client(model: str, api_key: str | None = None) -> OpenAI:
    if api_key:
        name = provider_for(model) or "OpenAI"
        return OpenAI(api_key=api_key, base_url=str(PROVIDERS[name]["base_url"]), max_retries=0)
    config = get_api_config(model)
    return OpenAI(api_key=config["api_key"], base_url=config["base_url"], max_retries=0)


def resolve_client(client: Optional[OpenAI], model: str) -> OpenAI:
    return client if client is not None else create_client(model)


def clean_json_response(text: str) -> str:
    """Strip markdown fences the models sometimes wrap around JSON."""
    try:
        json.loads(text)
        return text
    except ValueError:
        pass
    match = JSON_CODE_BLOCK.search(text)
    if match and match.group(1):
        return match.group(1).strip()
    cleaned = EDGE_BACKTICKS.sub("", text).strip()
    if cleaned.startswith("json"):
        cleaned = cleaned[4:].strip()
    return cleaned


def parse_json(text: str) -> Any:
    return json.loads(clean_json_response(text))


def friendly_error_message(exc: BaseException) -> str:
    message = str(exc) or "An error occurred while processing your request."
    status = getattr(exc, "status_code", None)
    if status == 429 or "429" in message:
        return "Rate limit exceeded. Please try again in a moment."
    if status in (401, 403) or "401" in message or "403" in message:
        return "Authentication error. Please check your API keys in the .env file."
    if (status is not None and status >= 500) or any(code in message for code in ("500", "502", "503", "504")):
        return "The AI service is currently experiencing issues. Please try again later."
    if isinstance(exc, APITimeoutError) or "timeout" in message.lower():
        return "The request timed out. Please try again or use a different model."
    return message


def _create_with_retry(client: OpenAI, **kwargs: Any) -> Any:
    for attempt in range(MAX_RETRIES):
        try:
            return client.chat.completions.create(**kwargs)
        except RETRYABLE as exc:
            if attempt == MAX_RETRIES - 1:
                raise
            delay = min(BASE_DELAY * (2**attempt), MAX_DELAY)
            logger.warning(
                "API {}, retrying in {}s (attempt {}/{})",
                type(exc).__name__,
                delay,
                attempt + 1,
                MAX_RETRIES,
            )
            time.sleep(delay)
    raise RuntimeError("retry loop exited without return or raise")


def chat_completion(
    client: OpenAI,
    *,
    model: str,
    system: str,
    user: str,
    temperature: float,
    max_tokens: int | None = None,
    json_mode: bool = False,
    timeout: float | None = None,
    operation: str = "chat_completion",
    usage: UsageLedger | None = None,
    session_id: str | None = None,
    brief_description: str | None = None,
) -> Completion:
    """Send one system/user exchange and record its token usage."""
    kwargs: Dict[str, Any] = {
        "model": model,
        "messages": [
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ],
        "temperature": temperature,
        "max_tokens": max_tokens or max_tokens_for(model),
        "timeout": timeout or REQUEST_TIMEOUT,
    }
    if json_mode:
        kwargs["response_format"] = {"type": "json_object"}

    logger.debug(
        "{}: model={} system={} chars user={} chars json={}",
        operation,
        model,
        len(system),
        len(user),
        json_mode,
    )
    response = _create_with_retry(client, **kwargs)

    choice = response.choices[0] if response.choices else None
    text = (choice.message.content or "") if choice else ""
    total_tokens = getattr(getattr(response, "usage", None), "total_tokens", 0) or 0

    if usage is not None and total_tokens > 0:
        try:
            usage.track_token_usage(
                user_id=DEFAULT_USER,
                tokens=total_tokens,
                model=model,
                operation=operation,
                brief_description=brief_description,
                session_id=session_id,
            )
        except RuntimeError as exc:
            # Stays queued on the ledger for a background retry.
            logger.error("Token usage for {} not recorded: {}", operation, exc)

    return Completion(
        text=text.strip(),
        total_tokens=total_tokens,
        finish_reason=getattr(choice, "finish_reason", None),
    )


__all__ = [
    "Completion",
    "chat_completion",
    "clean_json_response",
    "create_client",
    "friendly_error_message",
    "get_api_config",
    "parse_json",
    "report",
    "resolve_client",
]
