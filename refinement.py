from __future__ import annotations

"""Word-count correction passes for generated copy.

Copy that misses its target goes through up to three LLM revisions: a
targeted first revision, a harder second attempt when the first one still
misses, and an emergency expansion when word count is prioritised and the
copy is still short.
"""

import json
from typing import Any, List, Optional

from loguru import logger
from openai import OpenAI

from llm import Progress, chat_completion, friendly_error_message, parse_json, report, resolve_client
from models import Content, FormState, WordCountTarget
from prompts import STANDARD_JSON_EXAMPLE
from usage import UsageLedger
from wordcount import count_words, extract_word_count, flatten_content, is_structured

# Acceptance window applied before any revision is attempted.
MIN_ACCEPTABLE_PERCENTAGE = 90
MAX_ACCEPTABLE_PERCENTAGE = 110

SECOND_PASS_STRICT = 98
SECOND_PASS_NORMAL = 95
EMERGENCY_THRESHOLD = 0.95

EXPANSION_POINTS = [
    "Adding specific examples or case studies",
    "Expanding on benefits with more detail",
    "Including supporting evidence or statistics",
    "Elaborating on how the product/service solves problems",
    "Adding relevant context that enhances understanding",
    "Detailing implementation steps, processes, or methodologies",
    "Providing background information, industry context, or comparative analysis",
]

EMERGENCY_EXPANSION_POINTS = [
    "Detailed examples and real-world applications",
    "Expanded explanations of key benefits and features",
    "Supporting evidence, statistics, or case studies",
    "Step-by-step processes or methodologies",
    "Background context and industry insights",
    "Comparisons that highlight unique value",
    "Anticipated questions with thorough answers",
]

RESPONSE_EXAMPLE = """{
  "headline": "Your headline here",
  "sections": [
    {
      "title": "Section title",
      "content": "Section content..."
    },
    {
      "title": "Another section",
      "listItems": ["Item 1", "Item 2", "Item 3"]
    }
  ],
  "wordCountAccuracy": 95
}"""

EMERGENCY_EXAMPLE = """{
  "headline": "Your headline here",
  "sections": [
    {
      "title": "Section title",
      "content": "Section content..."
    }
  ],
  "wordCountAccuracy": 95
}"""


def _numbered(points: List[str]) -> str:
    return "\n".join(f"{index}. {point}" for index, point in enumerate(points, start=1))


def _range_status(words: int, target_info: WordCountTarget, *, verbose: bool = False) -> str:
    if words < target_info.min:
        return f"{target_info.min - words} words below minimum"
    if words > target_info.max:
        return f"{words - target_info.max} words above maximum"
    return "within range but can be optimized" if verbose else "within range"


def _parse_revision(text: str, structured: bool, stage: str) -> Content:
    if not structured:
        return text
    try:
        return parse_json(text)
    except ValueError as exc:
        logger.warning("Error parsing {} JSON, using text response: {}", stage, exc)
        return text


# --- First revision ----------------------------------------------------------


def _first_system_prompt(
    form: FormState,
    target_info: WordCountTarget,
    words: int,
    persona: str | None,
    json_output: bool,
) -> str:
    target = target_info.target
    flexible = target_info.is_range
    if flexible:
        if words < target_info.min:
            position = (
                f"The content is currently {target_info.min - words} words BELOW the minimum. "
                f"Add essential words to reach at least {target_info.min} words."
            )
        elif words > target_info.max:
            position = (
                f"The content is currently {words - target_info.max} words ABOVE the maximum. "
                f"Remove unnecessary words to stay within {target_info.max} words."
            )
        else:
            position = (
                f"The content is within range but could be optimized toward the {target} word target."
            )
        prompt = (
            "You are an expert copywriter who specializes in creating concise, impactful SHORT content. "
            f"Your task is to revise the provided content to be between {target_info.min}-{target_info.max} "
            f"words (target: {target} words). This is SHORT content with flexible word count tolerance "
            "to maintain natural phrasing and quality.\n\n"
            f"{position}\n\n"
            f"FLEXIBLE RANGE: The final word count must be between {target_info.min}-{target_info.max} "
            f"words, ideally close to {target} words."
        )
        if persona:
            prompt += (
                f"\n\nIMPORTANT: This content is written in the voice style of {persona}. You MUST maintain "
                f"{persona}'s distinctive voice, tone, and writing style while adjusting the word count. "
                f"{persona}'s voice is a critical aspect that must be preserved throughout the revision."
            )
    else:
        difference = words - target
        percentage = abs(difference) / target * 100 if target else 0
        if target <= 150:
            if difference > 0:
                direction = (
                    f"The content is currently {difference} words TOO LONG. Remove unnecessary words, "
                    "adjectives, and phrases while preserving the core message."
                )
            else:
                direction = (
                    f"The content is currently {abs(difference)} words TOO SHORT. Add only essential, "
                    "high-impact words that strengthen the message."
                )
            prompt = (
                "You are an expert copywriter who specializes in creating concise, impactful SHORT content. "
                f"Your task is to revise the provided content to be EXACTLY {target} words. This is SHORT "
                "content requiring extreme precision - every word must be essential.\n\n"
                f"{direction}\n\n"
                "CRITICAL: For short content, precision is everything. The final word count must be "
                f"EXACTLY {target} words."
            )
        else:
            if difference > 0:
                direction = (
                    f"The content is currently {difference} words ({percentage:.1f}%) TOO LONG. You MUST "
                    "trim unnecessary details, redundant phrases, and verbose explanations while "
                    "preserving all key points."
                )
            else:
                direction = (
                    f"The content is currently {abs(difference)} words ({percentage:.1f}%) TOO SHORT. You "
                    "MUST add substantial details, comprehensive examples, case studies, supporting "
                    f"evidence, or thorough elaborations to reach EXACTLY {target} words."
                )
            prompt = (
                "You are an expert copywriter with a NON-NEGOTIABLE task: revise the provided content to "
                f"match the target word count of {target} words EXACTLY. This is an ABSOLUTE REQUIREMENT "
                "with ZERO tolerance for deviation.\n\n"
                f"{direction}\n\n"
                "CRITICAL SUCCESS METRIC: The revised content MUST contain EXACTLY "
                f"{target} words - no approximation, no tolerance. You MUST NOT return your response until "
                f"you have meticulously counted the words and confirmed it is EXACTLY {target} words."
            )
        if persona:
            prompt += (
                "\n\nCRITICAL REMINDER: Many revision attempts fail to maintain both the target word count "
                f"AND {persona}'s voice. Your task is to achieve BOTH objectives:\n"
                f"1. Reaching EXACTLY {target} words\n"
                f"2. Maintaining {persona}'s distinctive voice and style\n"
                f"If expanding, add content that sounds authentically like {persona} would write it."
            )

    if json_output:
        prompt += "\n\nYour response MUST be a valid JSON object."
    prompt += (
        "\n\nIMPORTANT: If expanding the content, do NOT add filler or repetitive content. Instead:\n"
        + _numbered(EXPANSION_POINTS)
    )
    if flexible:
        prompt += (
            f"\n\nFLEXIBLE WORD COUNT: Aim for {target} words but anywhere between "
            f"{target_info.min}-{target_info.max} words is acceptable."
        )
    else:
        prompt += (
            "\n\nABSOLUTELY CRITICAL - WORD COUNT VERIFICATION REQUIRED:\n"
            "1. Write your revised content\n"
            "2. Count every single word meticulously\n"
            f"3. If not EXACTLY {target} words, revise again\n"
            "4. Repeat until you achieve the exact target\n"
            "5. Only then submit your response\n\n"
            "NO TOLERANCE, NO APPROXIMATION, NO EXCUSES.\n"
            f"FAILURE TO ACHIEVE EXACTLY {target} WORDS = COMPLETE FAILURE."
        )
    return prompt


def _first_user_prompt(
    form: FormState,
    target_info: WordCountTarget,
    text: str,
    words: int,
    persona: str | None,
    json_output: bool,
) -> str:
    target = target_info.target
    flexible = target_info.is_range
    lines = [
        f'Please revise this content to match the target word count:\n\n"""\n{text}\n"""',
        "",
        f"Current word count: {words} words",
        f"Target word count: {target} words",
    ]
    if flexible:
        lines.append(f"Target range: {target_info.min}-{target_info.max} words")
        lines.append(f"Status: {_range_status(words, target_info, verbose=True)}")
    else:
        difference = words - target
        lines.append(
            f"Difference: {difference} words too many" if difference > 0 else f"Difference: {abs(difference)} words too few"
        )

    lines.extend(
        [
            "",
            "Guidelines:",
            f"- Maintain the {form.tone} tone",
            "- Keep the same key messages and information",
            "- Remove unnecessary details or repetition without losing key points"
            if words > target
            else "- Add relevant details, examples, or elaborations that enhance the copy",
            f"- Ensure the content remains in {form.language} language",
            "- Preserve the overall structure and flow",
        ]
    )
    if persona:
        lines.append(f"- Maintain {persona}'s distinctive voice and writing style throughout")
        lines.append(f"- Any added content must sound like {persona} wrote it")
    if flexible:
        lines.append(f"- Aim for the {target} word target within the {target_info.min}-{target_info.max} range")
    else:
        lines.append(
            f"- Count your words meticulously to ensure you hit the target word count of EXACTLY {target} words"
        )

    if json_output:
        lines.extend(
            [
                "",
                "Return your response as a JSON object with this structure:",
                RESPONSE_EXAMPLE,
                "",
                "Make sure to include a headline and appropriate sections with either paragraph content or list items.",
            ]
        )
    else:
        lines.extend(["", "Provide your response as plain text with appropriate paragraphs and formatting."])

    if form.force_keyword_integration and form.keywords:
        lines.extend(["", f"Make sure to naturally integrate these keywords: {form.keywords}"])

    if persona:
        lines.append("")
        if flexible:
            lines.append(
                "VERY IMPORTANT REMINDER: Your task has TWO equally critical requirements:\n"
                f"1. The content must be between {target_info.min}-{target_info.max} words\n"
                f"2. The content must maintain {persona}'s authentic voice and style"
            )
        else:
            lines.append(
                "VERY IMPORTANT REMINDER: Your task has TWO equally critical requirements:\n"
                f"1. The content must be EXACTLY {target} words\n"
                f"2. The content must maintain {persona}'s authentic voice and style\n"
                "DO NOT SUBMIT your response until you've verified it meets both requirements."
            )
    return "\n".join(lines)


# --- Second attempt ----------------------------------------------------------


def _second_system_prompt(
    target_info: WordCountTarget,
    words: int,
    persona: str | None,
    structured: bool,
) -> str:
    target = target_info.target
    flexible = target_info.is_range
    words_missing = target - words
    percent_missing = round(words_missing / target * 100) if target else 0

    parts = [
        "You are an expert copywriter with a FINAL, CRITICAL ATTEMPT to fix content that is not meeting "
        "word count requirements." + (" Your response MUST be a valid JSON object." if structured else "")
    ]
    if flexible:
        parts.append(
            f"FLEXIBLE RANGE EMERGENCY: The content must be adjusted to fit within "
            f"{target_info.min}-{target_info.max} words (target: {target} words)."
        )
    else:
        parts.append(
            f"EMERGENCY SITUATION: The content provided is {words_missing} words ({percent_missing}%) "
            f"short of the required {target} word target."
        )
    parts.append(
        "THIS IS YOUR FINAL CHANCE. Your task is to revise this content by adding substantive, valuable content:\n"
        + _numbered(EMERGENCY_EXPANSION_POINTS)
        + "\n\nDO NOT use filler text, repetition, or fluff. Every added word must add genuine value."
    )
    if flexible:
        parts.append(
            f"REQUIREMENT: The final content must be between {target_info.min}-{target_info.max} words, "
            f"ideally close to {target} words."
        )
    else:
        parts.append(
            f"ABSOLUTE REQUIREMENT: The final content MUST be exactly {target} words. FAILURE TO DELIVER "
            f"EXACTLY {target} WORDS IS NOT AN OPTION. YOU MUST NOT RETURN YOUR RESPONSE UNTIL YOU HAVE "
            f"VERIFIED IT CONTAINS EXACTLY {target} WORDS."
        )
    if persona:
        requirement = (
            f"1. Word count between {target_info.min}-{target_info.max} words"
            if flexible
            else f"1. Word count of EXACTLY {target} words"
        )
        parts.append(
            f"CRITICAL: This content must sound like it was written by {persona}. Maintain their "
            "distinctive voice, tone, vocabulary and style in every added sentence.\n\n"
            "YOUR SUCCESS DEPENDS ON TWO EQUALLY IMPORTANT CRITERIA:\n"
            f"{requirement}\n"
            f"2. Authentic {persona} voice and style\n\n"
            "Many attempts fail on one of these criteria. You must succeed on BOTH."
        )
    return "\n\n".join(parts)


def _second_user_prompt(
    form: FormState,
    target_info: WordCountTarget,
    text: str,
    words: int,
    persona: str | None,
    structured: bool,
) -> str:
    target = target_info.target
    flexible = target_info.is_range
    is_short = target <= 150
    difference = words - target
    words_missing = target - words
    percent_missing = round(words_missing / target * 100) if target else 0
    condensing = is_short and difference > 0

    if is_short and not flexible:
        verb = "condense" if difference > 0 else "expand"
        adjust = (
            f"Words to remove: {difference} words" if difference > 0 else f"Words to add: {abs(difference)} words"
        )
        guidance = (
            "Remove every word that does not carry meaning. Cut adjectives, filler phrases and redundancy."
            if difference > 0
            else "Add only precise, high-impact words that strengthen the core message."
        )
        prompt = (
            f"This content needs to be EXACTLY {target} words for SHORT content requiring precision.\n\n"
            f'Content to {verb}:\n"""\n{text}\n"""\n\n'
            f"Current word count: {words} words\n"
            f"Required word count: EXACTLY {target} words\n"
            f"{adjust}\n\n"
            f"{guidance}\n\n"
            "CRITICAL: This is SHORT content. Every word must be purposeful and essential. The final count "
            f"must be EXACTLY {target} words."
        )
    elif flexible:
        prompt = (
            "FLEXIBLE RANGE REVISION: This content needs adjustment to fit the target word range.\n\n"
            f'Content to adjust:\n"""\n{text}\n"""\n\n'
            f"Current word count: {words} words\n"
            f"Target range: {target_info.min}-{target_info.max} words\n"
            f"Ideal target: {target} words\n"
            f"Status: {_range_status(words, target_info)}\n\n"
            "Adjust the content to fit comfortably within the target range while maintaining quality and natural flow."
        )
    else:
        bullets = "\n".join(f"- {point}" for point in EMERGENCY_EXPANSION_POINTS)
        prompt = (
            f"EMERGENCY WORD COUNT CORRECTION REQUIRED: This content is {words_missing} words short of the "
            f"required {target} word target.\n\n"
            f'Content to expand:\n"""\n{text}\n"""\n\n'
            f"Current word count: {words} words\n"
            f"Required word count: {target} words\n"
            f"Words missing: {words_missing} words ({percent_missing}%)\n\n"
            f"THIS IS YOUR FINAL OPPORTUNITY to expand this content to EXACTLY {target} words.\n\n"
            "YOU MUST add high-quality, substantive content that enhances its value:\n"
            f"{bullets}\n\n"
            "ADD DEPTH, EXAMPLES, AND THOROUGH ELABORATION - NEVER FILLER TEXT."
        )

    requirements = [f"- Maintain the {form.tone} tone and {form.language} language"]
    if condensing:
        requirements.extend(
            [
                "- Be extremely concise and impactful",
                "- Remove every unnecessary word",
                "- Preserve only the essential message",
            ]
        )
    elif flexible:
        requirements.extend(
            [
                "- Fit comfortably within the target range",
                "- Keep phrasing natural and readable",
                f"- Land as close to {target} words as possible",
            ]
        )
    else:
        requirements.extend(
            [
                "- Preserve all existing content and key messages",
                "- Add substantial new information, examples and explanations",
                "- Include comprehensive details that give the reader real value",
            ]
        )
    if flexible:
        requirements.append(f"- Stay within the {target_info.min}-{target_info.max} word range")
    else:
        requirements.append(f"- Reach EXACTLY {target} words with NO DEVIATION WHATSOEVER")
    if persona:
        requirements.extend(
            [
                f"- Sound authentically like {persona} throughout",
                f"- Use {persona}'s characteristic vocabulary, rhythm and phrasing",
                f"- Make any added material read as if {persona} wrote it",
            ]
        )
    requirements.append("- Be formatted according to the original structure")

    sections = [prompt, f"Your {'condensed' if condensing else 'expanded'} version must:\n" + "\n".join(requirements)]
    if structured:
        sections.append(f"{RESPONSE_EXAMPLE}\n\nReturn your response in valid JSON format.")
    if form.keywords:
        sections.append(f"Make sure to naturally integrate these keywords in the expanded sections: {form.keywords}")

    if persona:
        range_text = (
            f"between {target_info.min}-{target_info.max} words" if flexible else f"EXACTLY {target} words"
        )
        sections.append(
            f"FINAL REMINDER: Your response must be {range_text} AND sound like {persona}'s authentic "
            "writing style. I will check both requirements carefully before accepting your response."
        )
    elif flexible:
        sections.append(
            f"FINAL VERIFICATION: Ensure the content is within {target_info.min}-{target_info.max} words before submitting."
        )
    else:
        sections.append(
            "FINAL VERIFICATION REQUIREMENT:\n"
            "1. Write the revised content\n"
            "2. Count every word\n"
            f"3. If not EXACTLY {target} words, keep revising\n"
            f"4. Submit only when the count is EXACTLY {target} words"
        )
    return "\n\n".join(sections)


# --- Emergency expansion -----------------------------------------------------


def _emergency_prompts(
    content: Content,
    target: int,
    words: int,
    persona: str | None,
    structured: bool,
) -> tuple[str, str]:
    json_note = "Your response MUST be a valid JSON object. " if structured else ""
    if persona:
        system = (
            f"You are {persona}. EMERGENCY TASK: Your ONLY job is to expand this content to EXACTLY {target} "
            "words while maintaining my distinctive voice. Add substantive, valuable content - detailed "
            "examples, case studies, elaborations, and supporting evidence. Never use filler or fluff. "
            f"{json_note}CRITICAL: Count every word before submitting - it MUST be EXACTLY {target} words "
            "or you have FAILED."
        )
        add_line = (
            f"Add more substantive content in {persona}'s voice - the stories, examples and arguments "
            f"{persona} would naturally use."
        )
    else:
        system = (
            "You are an expert copywriter with a CRITICAL EMERGENCY TASK: expand this content to EXACTLY "
            f"{target} words. Add substantive, valuable content - detailed examples, case studies, "
            f"elaborations, and supporting evidence. Never use filler or fluff. {json_note}CRITICAL: Count "
            f"every word before submitting - it MUST be EXACTLY {target} words or you have FAILED."
        )
        add_line = "Add more substantive content - examples, analogies, elaborations, details, and supporting evidence."

    body = content if isinstance(content, str) else json.dumps(content, indent=2, ensure_ascii=False)
    percentage = round(words / target * 100) if target else 100
    output_note = (
        f"Return your response as a JSON object with this structure:\n{EMERGENCY_EXAMPLE}"
        if structured
        else "Provide your response as plain text with appropriate formatting."
    )
    user = (
        f"This content needs to be expanded to EXACTLY {target} words:\n\n{body}\n\n"
        f"Current length: {words} words\n"
        f"Target length: {target} words (currently at {percentage}%)\n\n"
        f"{add_line}\n\n"
        f"ABSOLUTE REQUIREMENT: The final content MUST be EXACTLY {target} words.\n\n"
        f"{output_note}"
    )
    return system, user


def _emergency_revision(
    client: OpenAI,
    content: Content,
    target: int,
    form: FormState,
    persona: str | None,
    usage: UsageLedger | None,
) -> Optional[Content]:
    """Last-resort expansion; returns None when it produced nothing usable."""
    structured = is_structured(content)
    words = extract_word_count(content)
    system, user = _emergency_prompts(content, target, words, persona, structured)
    try:
        completion = chat_completion(
            client,
            model=form.model,
            system=system,
            user=user,
            temperature=0.9,
            json_mode=structured,
            timeout=90,
            operation="revise_word_count_emergency",
            usage=usage,
            session_id=form.session_id,
            brief_description=f"Emergency word count expansion (target: {target})",
        )
    except Exception as exc:
        logger.error("Emergency revision failed: {}", exc)
        return None
    if not completion.text:
        return None
    return _parse_revision(completion.text, structured, "emergency revision")


# --- Entry point -------------------------------------------------------------


def _second_pass_needed(words: int, target_info: WordCountTarget, form: FormState) -> bool:
    if target_info.is_range:
        return words < target_info.min or words > target_info.max
    percentage = words / target_info.target * 100 if target_info.target else 100
    threshold = SECOND_PASS_STRICT if form.prioritize_word_count else SECOND_PASS_NORMAL
    return percentage < threshold


def revise_content_for_word_count(
    content: Content,
    target_info: WordCountTarget,
    form: FormState,
    *,
    client: OpenAI | None = None,
    usage: UsageLedger | None = None,
    persona: str | None = None,
    progress: Progress = None,
) -> Content:
    """Bring ``content`` to its word target; returns the input unchanged when already acceptable.

    Errors in the first revision fall back to the original content and errors
    in later passes fall back to the previous revision, so this never raises
    for LLM failures.
    """
    target = target_info.target
    text = flatten_content(content)
    words = count_words(text)
    percentage = words / target * 100 if target else 100

    if target_info.is_range:
        needs_revision = words < target_info.min or words > target_info.max
        reason = f"{words} words is outside the {target_info.min}-{target_info.max} range"
    else:
        needs_revision = (
            percentage < MIN_ACCEPTABLE_PERCENTAGE or percentage > MAX_ACCEPTABLE_PERCENTAGE
        )
        reason = f"{words} words is {percentage:.1f}% of the {target} word target"

    if not needs_revision:
        report(progress, f"Content within acceptable range: {words} words ({percentage:.1f}% of target)")
        return content
    report(progress, f"Content needs revision: {reason}")

    try:
        client = resolve_client(client, form.model)
        json_output = bool(form.output_structure) or is_structured(content)
        completion = chat_completion(
            client,
            model=form.model,
            system=_first_system_prompt(form, target_info, words, persona, json_output),
            user=_first_user_prompt(form, target_info, text, words, persona, json_output),
            temperature=0.5,
            json_mode=json_output,
            timeout=60,
            operation="revise_word_count",
            usage=usage,
            session_id=form.session_id,
            brief_description=f"Refine word count (target: {target})",
        )
        revised: Content = _parse_revision(completion.text, json_output, "revised content")
    except Exception as exc:
        message = friendly_error_message(exc)
        logger.error("Error revising content: {}", exc)
        report(progress, f"Error revising content: {message}. Using original content.")
        return content

    revised_words = extract_word_count(revised)
    report(progress, f"First revision: {revised_words} words (target: {target})")
    if not _second_pass_needed(revised_words, target_info, form):
        return revised

    report(progress, f"Revision still off target ({revised_words} words), making a second attempt")
    structured = is_structured(revised)
    try:
        completion = chat_completion(
            client,
            model=form.model,
            system=_second_system_prompt(target_info, revised_words, persona, structured),
            user=_second_user_prompt(
                form, target_info, flatten_content(revised), revised_words, persona, structured
            ),
            temperature=0.6,
            json_mode=structured,
            timeout=90,
            operation="revise_word_count_second_attempt",
            usage=usage,
            session_id=form.session_id,
            brief_description=f"Second word count revision (target: {target})",
        )
        second: Content = _parse_revision(completion.text, structured, "second revision")
    except Exception as exc:
        message = friendly_error_message(exc)
        logger.error("Second revision failed: {}", exc)
        report(progress, f"Error in second revision: {message}. Using first revision.")
        return revised

    second_words = extract_word_count(second)
    report(progress, f"Second revision: {second_words} words (target: {target})")
    if (
        not target_info.is_range
        and form.prioritize_word_count
        and second_words < target * EMERGENCY_THRESHOLD
    ):
        report(progress, "Content still short after two revisions, running emergency expansion")
        emergency = _emergency_revision(client, second, target, form, persona, usage)
        if emergency is not None:
            report(progress, f"Emergency revision: {extract_word_count(emergency)} words (target: {target})")
            return emergency
    return second


__all__ = ["revise_content_for_word_count"]
