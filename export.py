from __future__ import annotations

"""Render generated copy as Markdown, HTML, DOCX or JSON and move form state in and out of files."""

import html
import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import markdown as md
from docx import Document
from docx.enum.text import WD_PARAGRAPH_ALIGNMENT
from loguru import logger

from models import Content, CopyResult, FormState, SeoMetadata
from wordcount import extract_word_count, is_structured

FORM_EXPORT_VERSION = "1.0"

HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.*)$")
BULLET_PATTERN = re.compile(r"^[-*+]\s+(.*)$")
NUMBER_PATTERN = re.compile(r"^\d+[.)]\s+(.*)$")
BOLD_SPLIT = re.compile(r"(\*\*[^*]+\*\*)")
SLUG_STRIP = re.compile(r"[^a-z0-9]+")

SEO_LABELS = [
    ("url_slugs", "URL Slugs"),
    ("meta_descriptions", "Meta Descriptions"),
    ("h1_variants", "H1 Variants"),
    ("h2_headings", "H2 Headings"),
    ("h3_headings", "H3 Headings"),
    ("og_titles", "Open Graph Titles"),
    ("og_descriptions", "Open Graph Descriptions"),
]


def slugify(value: str) -> str:
    slug = SLUG_STRIP.sub("-", value.lower()).strip("-")
    return slug or "copy"


def content_to_markdown(content: Content) -> str:
    """Structured copy becomes headline, section headings and bullet lists; text passes through."""
    if isinstance(content, str):
        return content.strip()
    if not is_structured(content):
        return f"```json\n{json.dumps(content, indent=2, ensure_ascii=False)}\n```"

    lines: List[str] = []
    if content.get("tldr"):
        lines += [f"**TL;DR:** {content['tldr']}", ""]
    lines += [f"## {content['headline']}", ""]
    for section in content["sections"]:
        if not isinstance(section, dict):
            lines += [str(section), ""]
            continue
        if section.get("title"):
            lines += [f"### {section['title']}", ""]
        if section.get("content"):
            lines += [str(section["content"]).strip(), ""]
        items = section.get("listItems") or section.get("list_items") or []
        if items:
            lines += [f"- {item}" for item in items]
            lines.append("")
    return "\n".join(lines).strip()


def _seo_markdown(seo: SeoMetadata) -> str:
    blocks = []
    for field, label in SEO_LABELS:
        values = getattr(seo, field)
        if values:
            blocks.append(f"**{label}**\n" + "\n".join(f"- {value}" for value in values))
    return "\n\n".join(blocks)


def format_copy_result_as_markdown(result: CopyResult, form: FormState, *, title: Optional[str] = None) -> str:
    """Single Markdown document holding the copy plus whichever extras were generated."""
    heading = title or form.product_service_name or form.brief_description or "Generated Copy"
    target = form.custom_word_count if form.word_count == "Custom" else form.word_count
    lines = [
        f"# {heading}",
        f"_Generated: {datetime.now():%Y-%m-%d %H:%M} with {form.model}_",
        "",
        f"- Language: {form.language}",
        f"- Tone: {form.tone}",
        f"- Word count: {extract_word_count(result.improved_copy)} (target: {target})",
    ]
    if result.word_count_accuracy is not None:
        lines.append(f"- Word count accuracy: {result.word_count_accuracy}%")
    lines += ["", "---", "", content_to_markdown(result.improved_copy)]

    if result.seo_metadata is not None:
        seo = _seo_markdown(result.seo_metadata)
        if seo:
            lines += ["", "---", "", "## SEO Metadata", "", seo]

    if result.geo_score is not None:
        lines += ["", "---", "", f"## GEO Score: {result.geo_score.overall}/100", ""]
        for item in result.geo_score.breakdown:
            lines.append(f"- **{item.criterion}** ({item.score:g}): {item.explanation}")
        if result.geo_score.suggestions:
            lines += ["", "**Suggestions**"]
            lines += [f"- {suggestion}" for suggestion in result.geo_score.suggestions]

    if result.content_scores is not None:
        scores = result.content_scores
        lines += [
            "",
            "---",
            "",
            f"## Content Score: {scores.overall}/100",
            "",
            f"- Clarity: {scores.clarity}",
            f"- Persuasiveness: {scores.persuasiveness}",
            f"- Tone match: {scores.tone_match}",
            f"- Engagement: {scores.engagement}",
        ]
        if scores.improvement_explanation:
            lines += ["", scores.improvement_explanation]

    if result.faq_schema:
        lines += [
            "",
            "---",
            "",
            "## FAQ Schema (JSON-LD)",
            "",
            "```json",
            json.dumps(result.faq_schema, indent=2, ensure_ascii=False),
            "```",
        ]
    return "\n".join(lines).strip() + "\n"


def markdown_to_html(markdown_text: str, *, title: Optional[str] = None) -> str:
    body = md.markdown(markdown_text, extensions=["extra", "sane_lists"])
    if title is None:
        return body
    return (
        "<!DOCTYPE html>\n<html>\n<head>\n<meta charset=\"utf-8\">\n"
        f"<title>{html.escape(title)}</title>\n</head>\n<body>\n{body}\n</body>\n</html>\n"
    )


def _add_runs(paragraph: Any, text: str) -> None:
    for chunk in BOLD_SPLIT.split(text):
        if not chunk:
            continue
        if chunk.startswith("**") and chunk.endswith("**"):
            paragraph.add_run(chunk[2:-2]).bold = True
        else:
            paragraph.add_run(chunk)


def markdown_to_docx(markdown_text: str, output_path: Path | str, *, title: Optional[str] = None) -> Path:
    """Convert Markdown text into a simple Word document."""
    doc = Document()
    if title:
        doc.add_heading(title, level=1)

    in_code_block = False
    code_buffer: List[str] = []

    for raw_line in markdown_text.replace("\r\n", "\n").split("\n"):
        stripped = raw_line.strip()

        if stripped.startswith("```"):
            if in_code_block:
                para = doc.add_paragraph("\n".join(code_buffer))
                para.style = "Intense Quote"
                para.alignment = WD_PARAGRAPH_ALIGNMENT.LEFT
                code_buffer.clear()
            in_code_block = not in_code_block
            continue
        if in_code_block:
            code_buffer.append(raw_line)
            continue
        if not stripped or stripped == "---":
            continue

        heading_match = HEADING_PATTERN.match(stripped)
        if heading_match:
            doc.add_heading(heading_match.group(2), level=min(len(heading_match.group(1)), 6))
            continue
        bullet_match = BULLET_PATTERN.match(stripped)
        if bullet_match:
            _add_runs(doc.add_paragraph(style="List Bullet"), bullet_match.group(1))
            continue
        number_match = NUMBER_PATTERN.match(stripped)
        if number_match:
            _add_runs(doc.add_paragraph(style="List Number"), number_match.group(1))
            continue
        if stripped.startswith(">"):
            para = doc.add_paragraph(stripped.lstrip("> "))
            para.style = "Intense Quote"
            continue
        _add_runs(doc.add_paragraph(), stripped)

    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    doc.save(str(path))
    return path


def save_markdown_outputs(markdown_text: str, output_dir: Path | str, *, stem: str = "copy") -> Path:
    """Write Markdown under a timestamped name in ``output_dir``."""
    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M")
    md_output = out_dir / f"{slugify(stem)}_{timestamp}.md"
    md_output.write_text(markdown_text, encoding="utf-8")
    logger.info("Saved Markdown to {}", md_output.resolve())
    return md_output


def save_copy_outputs(
    result: CopyResult,
    form: FormState,
    output_dir: Path | str,
    *,
    stem: str = "copy",
    formats: Iterable[str] = ("md",),
) -> Dict[str, Path]:
    """Save one draft in every requested format; returns the written paths keyed by format."""
    formats = list(dict.fromkeys(formats))
    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    title = f"{form.product_service_name or 'Generated Copy'} ({stem})"
    markdown_text = format_copy_result_as_markdown(result, form, title=title)

    paths: Dict[str, Path] = {}
    if "md" in formats:
        paths["md"] = save_markdown_outputs(markdown_text, out_dir, stem=stem)
    base = out_dir / f"{slugify(stem)}_{datetime.now():%Y-%m-%d_%H-%M}"
    if "html" in formats:
        paths["html"] = base.with_suffix(".html")
        paths["html"].write_text(markdown_to_html(markdown_text, title=title), encoding="utf-8")
    if "docx" in formats:
        paths["docx"] = markdown_to_docx(markdown_text, base.with_suffix(".docx"))
    if "json" in formats:
        paths["json"] = base.with_suffix(".json")
        paths["json"].write_text(result.model_dump_json(by_alias=True, indent=2), encoding="utf-8")

    for fmt, path in paths.items():
        print(f"✅ Saved {fmt.upper()} to {path.resolve()}")
    return paths


def export_form_state(form: FormState, path: Path | str) -> Path:
    """Write the form as ``{"formState", "exportedAt", "version"}`` JSON."""
    payload = {
        "formState": form.model_dump(mode="json", by_alias=True),
        "exportedAt": datetime.now(timezone.utc).isoformat(),
        "version": FORM_EXPORT_VERSION,
    }
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    return target


def import_form_state(path: Path | str) -> FormState:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict) or not isinstance(data.get("formState"), dict):
        raise ValueError("Invalid file format")
    if data.get("version") not in (None, FORM_EXPORT_VERSION):
        logger.warning("Form export version {} may not be fully compatible", data.get("version"))
    return FormState.model_validate(data["formState"])


__all__ = [
    "content_to_markdown",
    "export_form_state",
    "format_copy_result_as_markdown",
    "import_form_state",
    "markdown_to_docx",
    "markdown_to_html",
    "save_copy_outputs",
    "save_markdown_outputs",
    "slugify",
]
