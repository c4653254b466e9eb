from __future__ import annotations

"""Word counting, target calculation and tolerance rules for generated copy."""

import json
import re
from typing import Any

from config import (
    DEFAULT_LITTLE_TOLERANCE,
    DEFAULT_STRICT_TOLERANCE,
    DEFAULT_WORD_COUNT,
    SHORT_CONTENT_LIMIT,
    WORD_COUNT_PRESETS,
)
from models import FormState, ToleranceSettings, WordCountTarget

CODE_BLOCK_PATTERN = re.compile(r"```[\s\S]*?```")
INLINE_CODE_PATTERN = re.compile(r"`([^`]+)`")
BOLD_PATTERN = re.compile(r"\*\*(.*?)\*\*")
ITALIC_PATTERN = re.compile(r"\*(.*?)\*")
HEADER_PATTERN = re.compile(r"^#{1,6}\s+", re.MULTILINE)
LIST_MARKER_PATTERN = re.compile(r"^[-*+]\s+", re.MULTILINE)
LINK_PATTERN = re.compile(r"\[(.*?)\]\(.*?\)")
HTML_TAG_PATTERN = re.compile(r"<[^>]*>")

# Accuracy score for each band of percentage difference from the target.
ACCURACY_BANDS = ((2, 100), (5, 95), (10, 85), (15, 75), (20, 65), (30, 50), (50, 30))


def strip_markdown(text: str) -> str:
    if not text:
        return ""
    cleaned = CODE_BLOCK_PATTERN.sub("", text)
    cleaned = INLINE_CODE_PATTERN.sub(r"\1", cleaned)
    cleaned = BOLD_PATTERN.sub(r"\1", cleaned)
    cleaned = ITALIC_PATTERN.sub(r"\1", cleaned)
    cleaned = HEADER_PATTERN.sub("", cleaned)
    cleaned = LIST_MARKER_PATTERN.sub("", cleaned)
    cleaned = LINK_PATTERN.sub(r"\1", cleaned)
    return HTML_TAG_PATTERN.sub("", cleaned)


def count_words(text: str) -> int:
    if not text or not text.strip():
        return 0
    return len(text.split())


def is_structured(content: Any) -> bool:
    return isinstance(content, dict) and bool(content.get("headline")) and isinstance(
        content.get("sections"), list
    )


def _section_text(section: Any) -> str:
    if not isinstance(section, dict):
        return str(section)
    body = section.get("content") or "\n".join(
        str(item) for item in section.get("listItems") or section.get("list_items") or []
    )
    return f"{section.get('title', '')}\n{body}"


def flatten_content(content: Any) -> str:
    """Render generated content as the plain text that gets word-counted."""
    if not content:
        return ""
    if isinstance(content, str):
        return content
    if is_structured(content):
        sections = "\n\n".join(_section_text(section) for section in content["sections"])
        return f"{content['headline']}\n\n{sections}"
    if isinstance(content, list) and all(isinstance(item, str) for item in content):
        return "\n".join(content)
    return json.dumps(content, ensure_ascii=False)


def extract_word_count(content: Any) -> int:
    return count_words(flatten_content(content))


def word_count_accuracy(actual: int, target: int) -> int:
    if target <= 0:
        return 100
    percent_difference = abs(actual - target) / target * 100
    for limit, score in ACCURACY_BANDS:
        if percent_difference <= limit:
            return score
    return 0


def _preset_word_count(word_count: str) -> int:
    for name, value in WORD_COUNT_PRESETS.items():
        if name in word_count:
            return value
    return DEFAULT_WORD_COUNT


def calculate_target_word_count(form: FormState) -> WordCountTarget:
    custom = (form.custom_word_count or 0) if form.word_count == "Custom" else 0
    structure_total = sum(element.word_count or 0 for element in form.output_structure)

    target = _preset_word_count(form.word_count)
    if custom > 0 and structure_total > 0:
        target = max(custom, structure_total)
    elif custom > 0:
        target = custom
    elif structure_total > 0:
        target = structure_total

    if form.adhere_to_little_word_count and target < 100:
        tolerance = form.little_word_count_tolerance_percentage or DEFAULT_LITTLE_TOLERANCE
        amount = round(target * tolerance / 100)
        return WordCountTarget(target=target, min=max(1, target - amount), max=target + amount)
    return WordCountTarget(target=target)


def get_word_count_tolerance(form: FormState, target: int) -> ToleranceSettings:
    is_short = target <= SHORT_CONTENT_LIMIT
    if form.adhere_to_little_word_count and target < 100:
        tolerance = form.little_word_count_tolerance_percentage or DEFAULT_LITTLE_TOLERANCE
        return ToleranceSettings(
            minimum_acceptable_percentage=100 - tolerance,
            maximum_acceptable_percentage=100 + tolerance,
            is_short_content=True,
            tolerance_mode="flexible",
        )
    if form.prioritize_word_count:
        tolerance = form.word_count_tolerance_percentage or DEFAULT_STRICT_TOLERANCE
        return ToleranceSettings(
            minimum_acceptable_percentage=100 - tolerance,
            maximum_acceptable_percentage=100 + tolerance if is_short else None,
            is_short_content=is_short,
            tolerance_mode="strict",
        )
    return ToleranceSettings(
        minimum_acceptable_percentage=95 if is_short else 90,
        is_short_content=is_short,
        tolerance_mode="normal",
    )


def needs_word_count_revision(actual: int, target_info: WordCountTarget, form: FormState) -> bool:
    """True when generated copy misses its range or its tolerance window."""
    if target_info.is_range:
        return actual < target_info.min or actual > target_info.max
    tolerance = get_word_count_tolerance(form, target_info.target)
    percentage = percentage_of_target(actual, target_info.target)
    if percentage < tolerance.minimum_acceptable_percentage:
        return True
    maximum = tolerance.maximum_acceptable_percentage
    return maximum is not None and percentage > maximum


def percentage_of_target(actual: int, target: int) -> float:
    if target <= 0:
        return 100.0
    return actual / target * 100


def structured_to_plain_text(content: Any) -> str:
    """Plain-text rendering with bullet glyphs, for sharing and clipboard-style exports."""
    if isinstance(content, str):
        return content
    if not is_structured(content):
        return flatten_content(content)
    lines = [content["headline"], ""]
    for section in content["sections"]:
        if not isinstance(section, dict):
            continue
        if section.get("title"):
            lines.append(section["title"])
        if section.get("content"):
            lines.append(section["content"])
        for item in section.get("listItems") or section.get("list_items") or []:
            lines.append(f"• {item}")
        lines.append("")
    return "\n".join(lines).strip()


__all__ = [
    "calculate_target_word_count",
    "count_words",
    "extract_word_count",
    "flatten_content",
    "get_word_count_tolerance",
    "is_structured",
    "needs_word_count_revision",
    "percentage_of_target",
    "strip_markdown",
    "structured_to_plain_text",
    "word_count_accuracy",
]
