from __future__ import annotations

import pytest

from models import OutputStructureElement, WordCountTarget
from voices import (
    PERSONA_TRAITS,
    VOICE_STYLE_VALUES,
    VOICE_STYLES,
    build_restyle_system_prompt,
    build_restyle_user_prompt,
    generate_headlines,
    restyle_copy_with_persona,
)
from wordcount import extract_word_count

STRUCTURED = {
    "headline": "Handmade mugs",
    "sections": [{"title": "Why clay", "content": "Clay keeps coffee warm."}],
}


def words(count: int) -> str:
    return " ".join(["think"] * count)


def test_voice_catalogue_covers_personas_with_traits():
    assert [category["category"] for category in VOICE_STYLES][0] == "Humanization Options"
    assert "humanizeNoAIDetection" in VOICE_STYLE_VALUES
    assert set(PERSONA_TRAITS) - {"humanizeNoAIDetection"} <= set(VOICE_STYLE_VALUES)


def test_system_prompt_includes_traits_and_json_note():
    prompt = build_restyle_system_prompt(STRUCTURED, "Seth Godin", "English")
    assert "Seth Godin's voice is characterized by:" in prompt
    assert "- Thought-provoking questions" in prompt
    assert "valid JSON object" in prompt


def test_strict_system_prompt_demands_exact_count(form):
    strict = form.model_copy(update={"prioritize_word_count": True})
    prompt = build_restyle_system_prompt("copy", "Steve Jobs", "English", strict, WordCountTarget(target=200))
    assert "MUST be EXACTLY 200 words" in prompt


def test_user_prompt_for_sections_keeps_titles():
    prompt = build_restyle_user_prompt(STRUCTURED, "Simon Sinek")
    assert "Clay keeps coffee warm." in prompt
    assert "keep the same section titles" in prompt


def test_user_prompt_for_faq_form_ends_with_schema(form):
    faq = form.model_copy(update={"output_structure": [OutputStructureElement(value="faqJson", label="FAQ (JSON)")]})
    prompt = build_restyle_user_prompt(STRUCTURED, "Marie Forleo", faq)
    assert prompt.endswith("- Do NOT include any text before or after the JSON object")


def test_user_prompt_word_count_difference(form):
    strict = form.model_copy(update={"prioritize_word_count": True})
    prompt = build_restyle_user_prompt(words(120), "Gary Halbert", strict, WordCountTarget(target=150))
    assert "Current word count of source text: 120 words" in prompt
    assert "You need to ADD 30 words" in prompt


def test_headline_prompt_lists_originals():
    prompt = build_restyle_user_prompt(["First", "Second"], "David Ogilvy")
    assert "1. First\n2. Second" in prompt
    assert '"headlines" array containing exactly 2' in prompt


def test_restyle_plain_text(fake_client):
    client = fake_client("Here is the thing. Mugs matter.")

    result = restyle_copy_with_persona("Mugs are good.", "Seth Godin", "gpt-4o", client=client)

    assert result.content == "Here is the thing. Mugs matter."
    assert result.persona_used == "Seth Godin"
    assert client.requests[0]["max_tokens"] == 4096
    assert "response_format" not in client.requests[0]


def test_restyle_structured_copy_parses_json(fake_client):
    restyled = {"headline": "Why clay?", "sections": [{"title": "Why clay", "content": "Because warmth wins."}]}
    client = fake_client(restyled)

    result = restyle_copy_with_persona(STRUCTURED, "Simon Sinek", "gpt-4o", client=client)

    assert result.content == restyled
    assert client.requests[0]["response_format"] == {"type": "json_object"}


def test_restyle_unparseable_structured_reply_is_wrapped(fake_client):
    result = restyle_copy_with_persona(STRUCTURED, "Steve Jobs", "gpt-4o", client=fake_client("One more thing."))

    assert result.content == {
        "headline": "Steve Jobs's Version",
        "sections": [{"title": "Restyled Content", "content": "One more thing."}],
    }


def test_restyle_headlines_returns_list(fake_client):
    client = fake_client({"headlines": ["Think clay.", "Think warm."]})

    result = restyle_copy_with_persona(["Clay mugs", "Warm mugs"], "Steve Jobs", "gpt-4o", client=client)

    assert result.content == ["Think clay.", "Think warm."]


def test_restyle_failure_is_wrapped(fake_client):
    with pytest.raises(RuntimeError, match="Failed to generate Brené Brown's voice style: Rate limit exceeded"):
        restyle_copy_with_persona(
            "copy", "Brené Brown", "gpt-4o", client=fake_client(RuntimeError("Error code: 429"))
        )


def test_restyle_empty_reply_is_an_error(fake_client):
    with pytest.raises(RuntimeError, match="returned empty content"):
        restyle_copy_with_persona("copy", "Seth Godin", "gpt-4o", client=fake_client(""))


def test_strict_restyle_is_revised_in_persona(fake_client, form):
    strict = form.model_copy(update={"prioritize_word_count": True})
    client = fake_client(words(60), words(150))

    result = restyle_copy_with_persona("copy", "Seth Godin", "gpt-4o", form=strict, client=client)

    assert extract_word_count(result.content) == 150
    assert "Maintain Seth Godin's distinctive voice" in client.user_prompt(1)


def test_restyle_with_form_runs_geo_score(fake_client, form):
    geo_form = form.model_copy(update={"generate_geo_score": True})
    client = fake_client(words(150), {"overall": 77})

    result = restyle_copy_with_persona("copy", "Seth Godin", "gpt-4o", form=geo_form, client=client)

    assert result.geo_score.overall == 77
    assert result.faq_schema is None


def test_generate_headlines_without_persona(fake_client, form):
    client = fake_client({"headlines": ["One", "Two", "Three", "Four"]})

    headlines = generate_headlines("copy", None, form, client=client)

    assert headlines == ["One", "Two", "Three"]
    assert "Write exactly 3 distinct headline options" in client.user_prompt()


def test_generate_headlines_in_persona_voice(fake_client, form):
    client = fake_client(["Plain one", "Plain two"], {"headlines": ["Bold one", "Bold two"]})

    headlines = generate_headlines("copy", "Gary Halbert", form, 2, client=client)

    assert headlines == ["Bold one", "Bold two"]
    assert len(client.requests) == 2
