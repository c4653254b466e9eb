from __future__ import annotations

from models import WordCountTarget
from refinement import revise_content_for_word_count
from wordcount import extract_word_count


def words(count: int) -> str:
    return " ".join(["mug"] * count)


def test_copy_within_window_is_returned_untouched(fake_client, form):
    client = fake_client()
    content = words(140)

    result = revise_content_for_word_count(content, WordCountTarget(target=150), form, client=client)

    assert result is content
    assert client.requests == []


def test_single_revision_when_first_pass_lands(fake_client, form, ledger):
    client = fake_client(words(148))
    messages = []

    result = revise_content_for_word_count(
        words(50), WordCountTarget(target=150), form, client=client, usage=ledger, progress=messages.append
    )

    assert extract_word_count(result) == 148
    assert len(client.requests) == 1
    request = client.requests[0]
    assert request["temperature"] == 0.5
    assert "response_format" not in request
    assert messages[0].startswith("Content needs revision: 50 words")
    assert ledger.summary()[0]["operation_type"] == "revise_word_count"


def test_structured_revision_is_parsed(fake_client, form):
    revised = {"headline": "Mugs", "sections": [{"title": "Why", "content": words(150)}]}
    client = fake_client(revised)
    content = {"headline": "Mugs", "sections": [{"title": "Why", "content": words(20)}]}

    result = revise_content_for_word_count(content, WordCountTarget(target=150), form, client=client)

    assert result == revised
    assert client.requests[0]["response_format"] == {"type": "json_object"}


def test_prioritised_copy_runs_second_and_emergency_passes(fake_client, form):
    strict = form.model_copy(update={"prioritize_word_count": True})
    client = fake_client(words(100), words(110), words(150))

    result = revise_content_for_word_count(words(40), WordCountTarget(target=150), strict, client=client)

    assert extract_word_count(result) == 150
    assert [request["temperature"] for request in client.requests] == [0.5, 0.6, 0.9]


def test_failed_emergency_keeps_second_revision(fake_client, form):
    strict = form.model_copy(update={"prioritize_word_count": True})
    client = fake_client(words(100), words(110), RuntimeError("boom"))

    result = revise_content_for_word_count(words(40), WordCountTarget(target=150), strict, client=client)

    assert extract_word_count(result) == 110


def test_first_revision_error_returns_original(fake_client, form):
    client = fake_client(RuntimeError("503 Service Unavailable"))
    messages = []
    content = words(30)

    result = revise_content_for_word_count(
        content, WordCountTarget(target=150), form, client=client, progress=messages.append
    )

    assert result == content
    assert "experiencing issues" in messages[-1]


def test_range_target_revises_content_above_maximum(fake_client, form):
    client = fake_client(words(50))

    result = revise_content_for_word_count(
        words(80), WordCountTarget(target=50, min=40, max=60), form, client=client
    )

    assert extract_word_count(result) == 50
    assert len(client.requests) == 1
