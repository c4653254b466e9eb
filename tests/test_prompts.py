from __future__ import annotations

import json

import pytest

from models import OutputStructureElement, WordCountTarget
from prompts import (
    build_payload,
    build_system_prompt,
    build_user_prompt,
    excluded_terms_block,
    geo_bullets,
    has_qa_format,
    key_information,
    main,
    section_list,
    wants_tldr,
)


def test_create_prompt_includes_brief_and_key_information(form):
    payload = build_payload(form)

    assert "Create compelling marketing copy based on this business description" in payload["user"]
    assert form.business_description in payload["user"]
    assert "- Product/Service Name: Clayworks Mugs" in payload["user"]
    assert "at least 150 words" in payload["user"]
    assert "English language with a Professional tone" in payload["system"]
    assert "create compelling new marketing copy" in payload["system"]


def test_improve_prompt_uses_original_copy(form):
    improve = form.model_copy(update={"tab": "improve", "original_copy": "Our mugs are nice."})
    payload = build_payload(improve)

    assert "Improve this existing marketing copy" in payload["user"]
    assert "Our mugs are nice." in payload["user"]
    assert "improve the existing marketing copy" in payload["system"]


def test_empty_source_is_rejected(form):
    with pytest.raises(ValueError, match="business_description is empty"):
        build_payload(form.model_copy(update={"business_description": "  "}))


def test_structured_output_requests_json_and_section_targets(form):
    structured = form.model_copy(
        update={
            "output_structure": [
                OutputStructureElement(value="header", label="Header", word_count=40),
                OutputStructureElement(value="benefits", label="Benefits", word_count=110),
            ]
        }
    )
    info = WordCountTarget(target=150)
    system = build_system_prompt(structured, info)
    user = build_user_prompt(structured, info)

    assert "JSON object with a headline and sections" in system
    assert '- "Header": 40 words' in system
    assert "1. Header (target: 40 words)" in user
    assert "2. Benefits (target: 110 words)" in user
    assert "Structure your response in this JSON format" in user


def test_qa_structure_switches_json_example(form):
    qa = form.model_copy(update={"output_structure": [OutputStructureElement(value="qaFormat", label="Q&A")]})
    assert has_qa_format(qa)
    user = build_user_prompt(qa, WordCountTarget(target=150))
    assert "for Q&A content" in user
    assert "Frequently Asked Questions" in user


def test_tldr_only_for_plain_text_geo_copy(form):
    geo = form.model_copy(update={"enhance_for_geo": True})
    assert wants_tldr(geo)
    assert build_system_prompt(geo, WordCountTarget(target=150)).startswith("ABSOLUTE MANDATORY REQUIREMENT")

    structured = geo.model_copy(update={"output_structure": [OutputStructureElement(value="header")]})
    assert not wants_tldr(structured)


def test_geo_system_prompt_prefers_regions_over_location(form):
    geo = form.model_copy(update={"enhance_for_geo": True, "geo_regions": "Canada", "location": "Portland"})
    system = build_system_prompt(geo, WordCountTarget(target=150))
    assert "targeting the specified regions: Canada" in system
    assert "Serving businesses in Portland" not in system


def test_range_targets_describe_flexible_window(form):
    system = build_system_prompt(form, WordCountTarget(target=50, min=40, max=60))
    assert "must be between 40-60 words" in system


def test_strict_short_content_block(form):
    strict = form.model_copy(update={"prioritize_word_count": True})
    system = build_system_prompt(strict, WordCountTarget(target=40))
    assert "ULTRA-CRITICAL FOR VERY SHORT CONTENT (40 WORDS)" in system


def test_excluded_terms_hard_and_soft(form):
    assert excluded_terms_block(form) == ""
    with_terms = form.model_copy(update={"excluded_terms": "cheap, plastic"})
    assert "Do not mention or reference any of these terms" in excluded_terms_block(with_terms)
    assert "if word count permits" in excluded_terms_block(with_terms, soft=True)


def test_geo_bullets_lead_with_regions(form):
    block = geo_bullets(
        form.model_copy(update={"geo_regions": "EU"}),
        heading="GEO:",
        first="Be quotable",
        rest=["Answer questions"],
    )
    lines = block.splitlines()
    assert lines[0] == "GEO:"
    assert "EU" in lines[2]
    assert lines[-1] == "• Answer questions"


def test_key_information_skips_empty_fields(form):
    info = key_information(form)
    assert info.startswith("Key information:")
    assert "Brand values" not in info


def test_main_prints_prompts_for_exported_form(form, tmp_path, capsys):
    path = tmp_path / "form.json"
    path.write_text(json.dumps({"formState": form.model_dump(mode="json", by_alias=True)}), encoding="utf-8")

    main([str(path)])

    out = capsys.readouterr().out
    assert "## CREATE prompt" in out
    assert "Clayworks Mugs" in out


def test_section_list_falls_back_to_catalogue_labels(form):
    structured = form.model_copy(update={"output_structure": [OutputStructureElement(value="callToAction")]})
    assert "1. Call to Action" in section_list(structured)
