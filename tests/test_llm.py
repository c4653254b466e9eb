from __future__ import annotations

import logging

import httpx
import pytest
from openai import APIConnectionError, APITimeoutError

from llm import (
    chat_completion,
    clean_json_response,
    friendly_error_message,
    get_api_config,
    parse_json,
    report,
)

PROVIDER_KEYS = ("OPENAI_API_KEY", "DEEPSEEK_API_KEY", "GROK_API_KEY")


@pytest.fixture
def no_keys(monkeypatch):
    for key in PROVIDER_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_clean_json_response_strips_fences():
    assert clean_json_response('{"a": 1}') == '{"a": 1}'
    assert clean_json_response('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert parse_json('Here you go:\n```\n[1, 2]\n```') == [1, 2]


def test_parse_json_raises_on_garbage():
    with pytest.raises(ValueError):
        parse_json("not json at all")


def test_friendly_error_messages():
    assert friendly_error_message(RuntimeError("HTTP 429 Too Many Requests")).startswith("Rate limit")
    assert friendly_error_message(RuntimeError("401 Unauthorized")).startswith("Authentication error")
    assert friendly_error_message(RuntimeError("502 Bad Gateway")).startswith("The AI service")
    assert friendly_error_message(RuntimeError("Read timeout")).startswith("The request timed out")
    assert friendly_error_message(RuntimeError("boom")) == "boom"


def test_get_api_config_requires_some_key(no_keys):
    with pytest.raises(RuntimeError, match="No API keys available"):
        get_api_config("gpt-4o")


def test_get_api_config_names_missing_provider_key(no_keys, monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    with pytest.raises(RuntimeError, match="GROK_API_KEY"):
        get_api_config("grok-4-latest")

    config = get_api_config("gpt-4o")
    assert config["api_key"] == "sk-test"
    assert config["base_url"] == "https://api.openai.com/v1"
    assert config["max_tokens"] == 4096


def test_chat_completion_builds_request_and_tracks_usage(fake_client, ledger):
    client = fake_client("  Hello there  ", total_tokens=120)
    completion = chat_completion(
        client,
        model="gpt-4o",
        system="sys",
        user="usr",
        temperature=0.3,
        json_mode=True,
        operation="unit_test",
        usage=ledger,
        session_id="s-1",
    )

    assert completion.text == "Hello there"
    assert completion.total_tokens == 120
    request = client.requests[0]
    assert request["messages"] == [
        {"role": "system", "content": "sys"},
        {"role": "user", "content": "usr"},
    ]
    assert request["response_format"] == {"type": "json_object"}
    assert request["max_tokens"] == 4096
    rows = ledger.summary(session_id="s-1")
    assert rows[0]["operation_type"] == "unit_test"
    assert rows[0]["tokens_used"] == 120


def test_chat_completion_propagates_non_retryable_errors(fake_client):
    client = fake_client(RuntimeError("bad request"))
    with pytest.raises(RuntimeError, match="bad request"):
        chat_completion(client, model="gpt-4o", system="s", user="u", temperature=0.5)
    assert len(client.requests) == 1


def test_report_logs_and_calls_progress(caplog):
    seen = []
    with caplog.at_level(logging.INFO):
        report(seen.append, "Halfway there")
    assert seen == ["Halfway there"]
    assert "Halfway there" in caplog.text


def _chat_request() -> httpx.Request:
    return httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def test_transport_errors_are_retried_with_backoff(fake_client, mocker):
    sleep = mocker.patch("llm.time.sleep")
    client = fake_client(
        APIConnectionError(request=_chat_request()),
        APITimeoutError(request=_chat_request()),
        "Recovered copy",
    )

    completion = chat_completion(client, model="gpt-4o", system="s", user="u", temperature=0.5)

    assert completion.text == "Recovered copy"
    assert len(client.requests) == 3
    assert [call.args[0] for call in sleep.call_args_list] == [1, 2]


def test_transport_errors_reraise_after_three_attempts(fake_client, mocker):
    sleep = mocker.patch("llm.time.sleep")
    client = fake_client(*(APIConnectionError(request=_chat_request()) for _ in range(3)))

    with pytest.raises(APIConnectionError):
        chat_completion(client, model="gpt-4o", system="s", user="u", temperature=0.5)

    assert len(client.requests) == 3
    assert sleep.call_count == 2
