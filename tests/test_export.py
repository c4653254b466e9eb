from __future__ import annotations

import json

import pytest
from docx import Document

from export import (
    content_to_markdown,
    export_form_state,
    format_copy_result_as_markdown,
    import_form_state,
    markdown_to_docx,
    markdown_to_html,
    save_copy_outputs,
    slugify,
)
from models import CopyResult, GeoCriterion, GeoScoreData, OutputStructureElement, ScoreData, SeoMetadata

STRUCTURED = {
    "tldr": "Handmade mugs that keep coffee warm.",
    "headline": "Clayworks Mugs",
    "sections": [
        {"title": "Why clay", "content": "Clay holds heat."},
        {"title": "Colours", "listItems": ["Sand", "Slate"]},
    ],
}


def test_slugify():
    assert slugify("Steve Jobs") == "steve-jobs"
    assert slugify("!!!") == "copy"


def test_structured_content_to_markdown():
    assert content_to_markdown(STRUCTURED) == (
        "**TL;DR:** Handmade mugs that keep coffee warm.\n\n"
        "## Clayworks Mugs\n\n"
        "### Why clay\n\n"
        "Clay holds heat.\n\n"
        "### Colours\n\n"
        "- Sand\n"
        "- Slate"
    )


def test_unstructured_dict_becomes_code_block():
    assert content_to_markdown({"@type": "FAQPage"}).startswith("```json\n")


def test_result_markdown_includes_extras(form):
    result = CopyResult(
        improved_copy="Plain copy here.",
        word_count_accuracy=85,
        seo_metadata=SeoMetadata(url_slugs=["clay-mugs"]),
        geo_score=GeoScoreData(
            overall=72,
            breakdown=[GeoCriterion(criterion="Authority Signals", score=6, explanation="Some proof")],
            suggestions=["Add numbers"],
        ),
        content_scores=ScoreData(overall=88, clarity="Clear", improvement_explanation="Tighter than before."),
        faq_schema={"@type": "FAQPage", "mainEntity": []},
    )

    text = format_copy_result_as_markdown(result, form)

    assert text.startswith("# Clayworks Mugs\n")
    assert "- Word count: 3 (target: Medium: 100-200)" in text
    assert "- Word count accuracy: 85%" in text
    assert "**URL Slugs**\n- clay-mugs" in text
    assert "- **Authority Signals** (6): Some proof" in text
    assert "## Content Score: 88/100" in text
    assert "## FAQ Schema (JSON-LD)" in text


def test_markdown_to_html_wraps_document():
    html = markdown_to_html("## Hello\n\n- one\n- two", title="Mugs")
    assert "<h2>Hello</h2>" in html
    assert "<li>one</li>" in html
    assert html.startswith("<!DOCTYPE html>")
    assert "<title>Mugs</title>" in html


def test_markdown_to_docx(tmp_path):
    path = markdown_to_docx("# Title\n\nSome **bold** text\n\n---\n\n- item", tmp_path / "out.docx")

    doc = Document(str(path))
    texts = [para.text for para in doc.paragraphs]
    assert texts == ["Title", "Some bold text", "item"]
    assert doc.paragraphs[1].runs[1].bold


def test_save_copy_outputs_writes_each_format(form, tmp_path):
    result = CopyResult(improved_copy=STRUCTURED, session_id="s1")

    paths = save_copy_outputs(result, form, tmp_path, stem="Alternative", formats=["md", "html", "json", "md"])

    assert set(paths) == {"md", "html", "json"}
    assert paths["md"].name.startswith("alternative_")
    assert "## Clayworks Mugs" in paths["md"].read_text(encoding="utf-8")
    assert "<title>Clayworks Mugs (Alternative)</title>" in paths["html"].read_text(encoding="utf-8")
    assert json.loads(paths["json"].read_text(encoding="utf-8"))["sessionId"] == "s1"


def test_form_state_round_trip(form, tmp_path):
    structured = form.model_copy(
        update={"output_structure": [OutputStructureElement(value="header", label="Header", word_count=40)]}
    )
    path = export_form_state(structured, tmp_path / "forms" / "form.json")

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["version"] == "1.0"
    assert payload["formState"]["productServiceName"] == "Clayworks Mugs"
    assert import_form_state(path).model_dump() == structured.model_dump()


def test_import_rejects_files_without_form_state(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"tone": "Friendly"}), encoding="utf-8")
    with pytest.raises(ValueError, match="Invalid file format"):
        import_form_state(path)


def test_markdown_to_html_escapes_title():
    page = markdown_to_html("Body", title="Mugs <Tall> & Short")
    assert "<title>Mugs &lt;Tall&gt; &amp; Short</title>" in page
