from __future__ import annotations

import pytest

from models import FormState, OutputStructureElement, WordCountTarget
from wordcount import (
    calculate_target_word_count,
    count_words,
    extract_word_count,
    flatten_content,
    get_word_count_tolerance,
    needs_word_count_revision,
    strip_markdown,
    structured_to_plain_text,
    word_count_accuracy,
)

STRUCTURED = {
    "headline": "Mugs for mornings",
    "sections": [
        {"title": "Why clay", "content": "Clay keeps coffee warm."},
        {"title": "Perks", "listItems": ["Handmade", "Dishwasher safe"]},
    ],
}


def test_count_words_handles_blank_text():
    assert count_words("") == 0
    assert count_words("   \n ") == 0
    assert count_words("one two  three\nfour") == 4


def test_strip_markdown_removes_formatting():
    text = "# Title\n**bold** and *italic* [link](http://x.test)\n- item\n<b>tag</b>"
    assert strip_markdown(text) == "Title\nbold and italic link\nitem\ntag"


def test_flatten_structured_content():
    assert flatten_content(STRUCTURED) == (
        "Mugs for mornings\n\nWhy clay\nClay keeps coffee warm.\n\nPerks\nHandmade\nDishwasher safe"
    )
    assert extract_word_count(STRUCTURED) == 13


def test_flatten_headline_list_and_other_objects():
    assert flatten_content(["One", "Two"]) == "One\nTwo"
    assert flatten_content({"foo": "bar"}) == '{"foo": "bar"}'
    assert flatten_content(None) == ""


@pytest.mark.parametrize(
    ("actual", "expected"),
    [(100, 100), (98, 100), (95, 95), (110, 85), (85, 75), (80, 65), (70, 50), (50, 30), (40, 0)],
)
def test_word_count_accuracy_bands(actual, expected):
    assert word_count_accuracy(actual, 100) == expected


def test_target_uses_preset_custom_and_structure():
    assert calculate_target_word_count(FormState(word_count="Short: 50-100")).target == 75
    assert calculate_target_word_count(FormState(word_count="Long: 200-400")).target == 300
    assert calculate_target_word_count(FormState(word_count="Custom", custom_word_count=420)).target == 420

    structure = [
        OutputStructureElement(value="problem", word_count=120),
        OutputStructureElement(value="solution", word_count=200),
    ]
    form = FormState(word_count="Custom", custom_word_count=250, output_structure=structure)
    assert calculate_target_word_count(form).target == 320


def test_little_word_count_gives_a_range():
    form = FormState(
        word_count="Custom",
        custom_word_count=50,
        adhere_to_little_word_count=True,
        little_word_count_tolerance_percentage=20,
    )
    target = calculate_target_word_count(form)
    assert (target.target, target.min, target.max) == (50, 40, 60)
    assert target.is_range


def test_tolerance_modes():
    strict = get_word_count_tolerance(FormState(prioritize_word_count=True), 100)
    assert strict.tolerance_mode == "strict"
    assert strict.minimum_acceptable_percentage == 98
    assert strict.maximum_acceptable_percentage == 102

    long_strict = get_word_count_tolerance(FormState(prioritize_word_count=True), 400)
    assert long_strict.maximum_acceptable_percentage is None

    normal = get_word_count_tolerance(FormState(), 400)
    assert (normal.tolerance_mode, normal.minimum_acceptable_percentage) == ("normal", 90)


def test_needs_revision_respects_range_and_tolerance():
    form = FormState(prioritize_word_count=True)
    assert needs_word_count_revision(90, WordCountTarget(target=100), form)
    assert not needs_word_count_revision(99, WordCountTarget(target=100), form)
    assert needs_word_count_revision(105, WordCountTarget(target=100), form)
    assert not needs_word_count_revision(45, WordCountTarget(target=50, min=40, max=60), form)
    assert needs_word_count_revision(61, WordCountTarget(target=50, min=40, max=60), form)


def test_structured_to_plain_text_uses_bullets():
    assert structured_to_plain_text(STRUCTURED) == (
        "Mugs for mornings\n\nWhy clay\nClay keeps coffee warm.\n\nPerks\n• Handmade\n• Dishwasher safe"
    )


def test_list_items_that_are_not_strings_are_counted():
    content = {"headline": "H", "sections": [{"title": "T", "listItems": [{"text": "one two"}, 3]}]}

    assert "{'text': 'one two'}\n3" in flatten_content(content)
    assert extract_word_count(content) == 6
