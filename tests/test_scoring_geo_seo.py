from __future__ import annotations

import pytest

from geo import ERROR_SUGGESTION, build_geo_prompt, calculate_geo_score
from scoring import (
    EVALUATION_ERROR_TIPS,
    build_evaluation_prompt,
    evaluate_content_quality,
    evaluate_prompt,
    generate_content_scores,
)
from seo import (
    extract_faq_pairs,
    faq_schema_from_content,
    generate_faq_schema_from_text,
    generate_seo_metadata,
    sanitize_faq_schema,
)


# --- content scores ------------------------------------------------------------


def test_content_scores_include_word_count_context(fake_client):
    client = fake_client({"overall": 81, "clarity": "Clear", "wordCountAccuracy": 90})

    scores = generate_content_scores("one two three four", "Alternative copy", "gpt-4o", target_word_count=5, client=client)

    assert scores.overall == 81
    assert scores.word_count_accuracy == 90
    prompt = client.user_prompt()
    assert "- Actual word count: 4 words" in prompt
    assert "- Difference: -1 words (20.0%)" in prompt


def test_content_scores_fall_back_on_error(fake_client):
    scores = generate_content_scores("copy", "Generated copy", "gpt-4o", client=fake_client(ValueError("bad")))

    assert scores.overall == 70
    assert scores.clarity == "Not evaluated due to an error."


def test_content_scores_empty_reply(fake_client):
    scores = generate_content_scores("copy", "Generated copy", "gpt-4o", client=fake_client(""))
    assert scores.overall == 0


# --- prompt and content evaluation ---------------------------------------------


def test_evaluation_prompt_marks_missing_fields(form):
    prompt = build_evaluation_prompt(form)
    assert "**Business Description:**" in prompt
    assert "- **Brand Values:** Not specified" in prompt
    assert "- **Word Count Target:** 150 words (Medium: 100-200)" in prompt


def test_evaluate_prompt_parses_tips(fake_client, form):
    evaluation = evaluate_prompt(form, client=fake_client({"score": 64, "tips": ["Add pain points"]}))
    assert evaluation.score == 64
    assert evaluation.tips == ["Add pain points"]


def test_evaluate_prompt_error_tips(fake_client, form):
    evaluation = evaluate_prompt(form, client=fake_client("not json"))
    assert evaluation.score == 0
    assert evaluation.tips == EVALUATION_ERROR_TIPS


def test_evaluate_prompt_requires_source(form):
    with pytest.raises(ValueError):
        evaluate_prompt(form.model_copy(update={"business_description": ""}))


def test_content_quality_fallback(fake_client):
    quality = evaluate_content_quality("Mugs.", "key message", "gpt-4o", client=fake_client(""))
    assert quality.score == 50
    assert "key message" in quality.tips[0]


# --- GEO -----------------------------------------------------------------------


def test_geo_prompt_lists_criteria_and_context(form):
    prompt = build_geo_prompt("Some copy", form.model_copy(update={"geo_regions": "Oregon"}))
    assert "Total possible: 100 points" in prompt
    assert "- Target Regions: Oregon" in prompt
    assert "7. **Optional TL;DR / Answer Box** (10 points max)" in prompt


def test_geo_score_skips_malformed_breakdown(fake_client, form):
    reply = {
        "overall": 66.6,
        "breakdown": [{"criterion": "Scannable Structure", "score": 12, "detected": True}, {"score": 3}],
        "suggestions": ["Use more headings"],
    }
    score = calculate_geo_score("copy", form, client=fake_client(reply))

    assert score.overall == 67
    assert [item.criterion for item in score.breakdown] == ["Scannable Structure"]
    assert score.suggestions == ["Use more headings"]


def test_geo_score_error_fallback(fake_client, form):
    score = calculate_geo_score("copy", form, client=fake_client(["not", "an", "object"]))
    assert score.overall == 0
    assert score.suggestions == [ERROR_SUGGESTION]


# --- SEO and FAQ schema -------------------------------------------------------------


def test_seo_metadata_keeps_known_keys(fake_client, form):
    client = fake_client({"urlSlugs": ["clay-mugs"], "ogTitles": "not a list", "unknown": ["x"]})

    metadata = generate_seo_metadata("copy", form, client=client)

    assert metadata.url_slugs == ["clay-mugs"]
    assert metadata.og_titles == []
    assert client.requests[0]["max_tokens"] == 2048


def test_seo_metadata_error_returns_empty(fake_client, form):
    metadata = generate_seo_metadata("copy", form, client=fake_client("{broken"))
    assert metadata.url_slugs == []


def test_extract_faq_pairs_from_bold_questions():
    text = "**What is it?**\nA handmade mug.\n\n**How much?**\nTwenty dollars"
    assert extract_faq_pairs(text) == [("What is it?", "A handmade mug."), ("How much?", "Twenty dollars")]


def test_faq_schema_from_structured_sections():
    content = {
        "headline": "FAQ",
        "sections": [
            {"title": "Intro", "content": "Welcome."},
            {"title": "1.  Do you ship abroad?", "content": "Yes,   we ship worldwide"},
        ],
    }
    schema = faq_schema_from_content(content)

    entity = schema["mainEntity"][0]
    assert len(schema["mainEntity"]) == 1
    assert entity["name"] == "Do you ship abroad?"
    assert entity["acceptedAnswer"]["text"] == "Yes, we ship worldwide."


def test_faq_schema_from_content_without_questions():
    assert faq_schema_from_content("Just a paragraph of copy.") is None


def test_sanitize_caps_long_answers():
    schema = {
        "@type": "FAQPage",
        "mainEntity": [{"name": "Why?", "acceptedAnswer": {"text": "a" * 500}}],
    }
    text = sanitize_faq_schema(schema)["mainEntity"][0]["acceptedAnswer"]["text"]
    assert text == "a" * 400 + "..."


def test_llm_faq_schema_falls_back_to_empty(fake_client, form):
    assert generate_faq_schema_from_text("copy", form, client=fake_client(RuntimeError("boom"))) == {}


def test_sanitize_drops_malformed_entries(caplog):
    schema = {
        "@type": "FAQPage",
        "mainEntity": [
            {"name": "What is it?", "acceptedAnswer": "A mug."},
            "Is it handmade?",
            {"name": "Is it glazed?", "acceptedAnswer": {"text": "Yes"}},
        ],
    }

    entities = sanitize_faq_schema(schema)["mainEntity"]

    assert [entity["name"] for entity in entities] == ["Is it glazed?"]
    assert entities[0]["acceptedAnswer"]["text"] == "Yes."
    assert "Skipping malformed FAQ entry" in caplog.text


def test_faq_page_without_usable_entries_yields_none():
    schema = {"@type": "FAQPage", "mainEntity": [{"name": "What is it?", "acceptedAnswer": "A mug."}]}
    assert faq_schema_from_content(schema) is None


def test_structured_pairs_accept_non_string_list_items():
    content = {
        "headline": "FAQ",
        "sections": [{"title": "What sizes exist?", "listItems": [12, {"oz": 16}]}],
    }
    entity = faq_schema_from_content(content)["mainEntity"][0]
    assert entity["acceptedAnswer"]["text"] == "12 {'oz': 16}."
