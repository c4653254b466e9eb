from __future__ import annotations

from types import SimpleNamespace

import pytest

from suggestions import (
    TEMPLATE_MODEL,
    build_suggestion_prompt,
    generate_template_json_suggestion,
    get_suggestions,
    parse_suggestions,
)


def test_json_prompt_embeds_context_and_instructions():
    prompt = build_suggestion_prompt("We sell {mugs}", "keywords", "gpt-4o", "Spanish")
    assert "SEO keywords and key phrases" in prompt
    assert "We sell {mugs}" in prompt
    assert "in Spanish language" in prompt
    assert '{"suggestions": ["Suggestion 1", "Suggestion 2", "Suggestion 3"]}' in prompt


def test_plain_list_prompt_for_grok():
    prompt = build_suggestion_prompt("Mugs", "unknownField", "grok-4-latest", "English")
    assert "suggestions for the unknownField field" in prompt
    assert "simple numbered list" in prompt


@pytest.mark.parametrize(
    "reply, field_type, expected",
    [
        ('{"suggestions": ["Warm", " Cozy ", ""]}', "desiredEmotion", ["Warm", "Cozy"]),
        ('["Awareness", "Decision"]', "readerFunnelStage", ["Awareness", "Decision"]),
        ('{"marketing_funnel_stages": ["Consideration"]}', "readerFunnelStage", ["Consideration"]),
        ('{"ideas": ["Handmade", 3, "Local"]}', "keywords", ["Handmade", "Local"]),
        ('{"note": "nothing"}', "keywords", []),
    ],
)
def test_parse_json_shapes(reply, field_type, expected):
    assert parse_suggestions(reply, field_type, "gpt-4o") == expected


def test_parse_numbered_list():
    reply = "Here you go:\n1. First idea\n2.Second idea\n\nThanks!"
    assert parse_suggestions(reply, "keywords", "grok-4-latest") == ["First idea", "Second idea"]


def test_get_suggestions_requests_json(fake_client):
    client = fake_client({"suggestions": ["Coffee lovers", "Gift buyers"]})

    suggestions = get_suggestions("Handmade mugs", "targetAudience", "gpt-4o", client=client)

    assert suggestions == ["Coffee lovers", "Gift buyers"]
    request = client.requests[0]
    assert request["temperature"] == 0.8
    assert request["max_tokens"] == 1024
    assert request["response_format"] == {"type": "json_object"}


def test_get_suggestions_validates_input():
    with pytest.raises(ValueError, match="Text and field type are required"):
        get_suggestions("", "keywords", "gpt-4o")


def test_get_suggestions_empty_reply(fake_client):
    assert get_suggestions("Mugs", "keywords", "gpt-4o", client=fake_client("")) == []


def test_get_suggestions_truncated_reply_is_an_error():
    response = SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=""), finish_reason="length")],
        usage=None,
    )
    client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=lambda **_: response)))

    with pytest.raises(RuntimeError, match="hit token limit"):
        get_suggestions("Mugs", "keywords", "grok-4-latest", client=client)


def test_get_suggestions_propagates_bad_json(fake_client):
    with pytest.raises(ValueError):
        get_suggestions("Mugs", "keywords", "gpt-4o", client=fake_client("not json at all"))


def test_template_suggestion_builds_form(fake_client):
    reply = {
        "originalCopy": "A 400 word post about brewing pour-over coffee",
        "projectDescription": "Pour-over blog",
        "wordCount": "Custom",
        "customWordCount": 400,
        "tone": "Friendly",
        "outputStructure": [{"value": "introduction", "label": "Introduction", "wordCount": 80}],
        "enhanceForGEO": True,
    }
    client = fake_client(reply)

    form = generate_template_json_suggestion("Blog post about pour-over coffee", client=client)

    assert form.original_copy.startswith("A 400 word post")
    assert form.custom_word_count == 400
    assert form.output_structure[0].word_count == 80
    assert form.enhance_for_geo is True
    assert client.requests[0]["model"] == TEMPLATE_MODEL
    assert client.requests[0]["max_tokens"] == 4000


def test_template_suggestion_requires_instruction():
    with pytest.raises(ValueError):
        generate_template_json_suggestion("   ")
