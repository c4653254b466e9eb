from __future__ import annotations

"""Alternative and humanized rewrites of generated copy."""

import json
from textwrap import dedent
from typing import List, Optional

from loguru import logger
from openai import OpenAI

from geo import calculate_geo_score
from llm import Progress, chat_completion, parse_json, report, resolve_client
from models import Content, FormState, GeoScoreData, VariantResult, WordCountTarget
from prompts import (
    FAQ_PAGE_FORMAT,
    NO_SEO_METADATA,
    PLAIN_TEXT_NOTE,
    QA_RULES,
    STANDARD_JSON_EXAMPLE,
    TLDR_REMINDER,
    excluded_terms_block,
    geo_bullets,
    has_qa_format,
    qa_json_example,
    section_list,
    tldr_preamble,
    tldr_user_reminder,
    uses_json_format,
    wants_tldr,
)
from refinement import revise_content_for_word_count
from seo import faq_schema_from_content, generate_faq_schema_from_text, generate_seo_metadata
from usage import UsageLedger
from wordcount import calculate_target_word_count, extract_word_count, flatten_content

ALTERNATIVE_INTRO = "You are an expert copywriter who excels at creating alternative versions of marketing content."
HUMANIZER_INTRO = (
    "You are a top-tier copywriter who transforms text into a warm, conversational, relatable voice "
    "while preserving meaning and structure."
)

HUMANIZED_QA_RULES = dedent(
    """
    CRITICAL Q&A FORMATTING RULES:
    - Each section title MUST be a complete question ending with a question mark
    - Each section content MUST be a well-formatted answer paragraph in humanized tone
    - Questions should cover different aspects of the topic
    - Answers should be informative, conversational, and include relatable examples
    - NEVER combine multiple questions in one title
    - NEVER run Q&A content together without clear separation
    - Keep the humanized, warm tone throughout all answers
    """
).strip()

AI_DETECTION_AVOIDANCE = dedent(
    """
    CRITICAL AI DETECTION AVOIDANCE INSTRUCTIONS:
    To make the output indistinguishable from AI-generated content detectors, apply the following techniques:
    • Vary sentence length and structure to avoid robotic flow.
    • Use occasional conversational filler phrases ("you know", "I mean", "honestly").
    • Mention something plausibly human: a quick anecdote, minor opinion, or light cultural reference.
    • Avoid perfect structure or symmetry, write like you're talking to a friend.
    • Don't over-polish; let it feel slightly rough or spontaneous.
    • Allow light redundancy or hesitation, just as a real person would.
    """
).strip()


def humanized_tldr_preamble(language: str) -> str:
    return dedent(
        f"""
        CRITICAL FORMATTING REQUIREMENT - TL;DR SUMMARY PLACEMENT:

        You MUST begin your response with a TL;DR summary as the very first element. This is NON-NEGOTIABLE.

        FORMAT: Start your output with "TL;DR: [1-2 sentence summary]" followed by a blank line, then the main content.

        EXAMPLE FORMAT:
        TL;DR: [Your concise summary here that directly answers the main question.]

        [Rest of your content follows here...]

        This TL;DR must:
        • Be the absolute first element in your output
        • Be 1-2 sentences maximum
        • Directly answer the main user intent
        • Be written in plain, natural {language} language with humanized tone
        • Focus on core value/result/benefit
        • Avoid hype or fluff

        FAILURE TO PLACE TL;DR AT THE VERY BEGINNING IS UNACCEPTABLE.

        ---
        """
    ).strip()


def _structure_blocks(
    form: FormState,
    *,
    qa_block: str,
    standard_lead: str,
    subject: str,
) -> tuple[List[str], bool]:
    """Output-format instructions; the flag is True when the prompt must end here (FAQPage JSON)."""
    if not uses_json_format(form):
        blocks = [PLAIN_TEXT_NOTE]
        if form.enhance_for_geo and form.add_tldr_summary:
            blocks.append(tldr_user_reminder(subject))
        return blocks, False

    if has_qa_format(form):
        blocks = [qa_block]
    else:
        blocks = [
            f"{standard_lead}:\n{STANDARD_JSON_EXAMPLE}",
            "Make sure to include a headline and appropriate sections with either paragraph content or list items.",
        ]
    if form.wants_faq_json:
        blocks.append(FAQ_PAGE_FORMAT)
        return blocks, True
    blocks.append(section_list(form))
    return blocks, False


def build_alternative_system_prompt(form: FormState, target: int) -> str:
    parts = []
    if wants_tldr(form):
        parts.append(tldr_preamble(form.language, rest="alternative marketing copy content"))
    parts.append(ALTERNATIVE_INTRO)
    parts.append(
        "Your task is to create a compelling alternative version of the marketing copy provided, with a "
        "different approach or angle.\n"
        "The alternative version should maintain the key message and purpose, but present it in a fresh way.\n"
        f"Maintain the {form.tone} tone and stay within the approximate target of {target} words."
    )
    parts.append(NO_SEO_METADATA)
    parts.append(
        f"IMPORTANT: The copy must be {target} words or longer. Do not conclude early.\n"
        "If you need more content to reach the word count, add depth through examples, explanations, and elaboration."
    )
    return "\n\n".join(parts)


def build_alternative_user_prompt(form: FormState, copy_text: str, target: int) -> str:
    info = [
        f"- Target audience: {form.target_audience or 'Not specified'}",
        f"- Key message: {form.key_message or 'Not specified'}",
        f"- Call to action: {form.call_to_action or 'Not specified'}",
        f"- Tone: {form.tone}",
        f"- Language: {form.language}",
        f"- Target word count: {target} words",
    ]
    if form.geo_regions:
        info.append(f"- Target Countries/Regions: {form.geo_regions}")
    if form.location:
        info.append(f"- Target Location/Region: {form.location}")

    parts = [
        "Generate an alternative version of this marketing copy with a different approach or angle.",
        f'Original copy:\n"""\n{copy_text}\n"""',
        "Key information to maintain:\n" + "\n".join(info),
    ]
    extras = [
        f"Keywords to include: {form.keywords}" if form.keywords else "",
        f"Brand values: {form.brand_values}" if form.brand_values else "",
        f"Desired emotion: {form.desired_emotion}" if form.desired_emotion else "",
    ]
    if any(extras):
        parts.append("\n".join(line for line in extras if line))
    if form.section:
        parts.append(f'This is for the "{form.section}" section.')
    excluded = excluded_terms_block(form)
    if excluded:
        parts.append(excluded)

    blocks, stop = _structure_blocks(
        form,
        qa_block=f"Structure your response in this JSON format for Q&A content:\n{qa_json_example()}\n\n{QA_RULES}",
        standard_lead="Please structure your response in this JSON format",
        subject="alternative content",
    )
    parts.extend(blocks)
    if stop:
        return "\n\n".join(parts)

    if form.force_keyword_integration and form.keywords:
        parts.append(
            f"IMPORTANT: Make sure to naturally integrate all of these keywords throughout the copy: {form.keywords}"
        )
    if form.force_elaborations_examples:
        parts.append(
            "IMPORTANT: Include detailed explanations, specific examples, and where appropriate, brief case "
            "studies or scenarios to fully elaborate on your points. Make sure to substantiate claims with "
            "evidence or reasoning."
        )
    if form.enhance_for_geo:
        parts.append(
            geo_bullets(
                form,
                heading=(
                    "GENERATIVE ENGINE OPTIMIZATION (GEO) ENABLED: Structure this alternative content to be "
                    "highly quotable and summarizable by AI assistants:"
                ),
                first="Start with clear, direct answers",
                rest=[
                    "Use question-based subheadings where logical",
                    "Include authority signals (examples, results, credentials)",
                    "Keep formatting scannable with short paragraphs and bullet points",
                    "Use natural, specific language AI tools can easily process and quote",
                ],
            )
        )
        if wants_tldr(form):
            parts.append(TLDR_REMINDER)

    if target <= 50:
        parts.append(
            dedent(
                f"""
                ULTRA-CRITICAL WORD COUNT REQUIREMENT: The content must be EXACTLY {target} words.
                - Count every single word meticulously before submitting
                - Do NOT exceed {target} words under any circumstances
                - Do NOT fall short of {target} words under any circumstances
                - Focus ONLY on the core message in exactly {target} words
                - IGNORE all other instructions if they conflict with achieving exactly {target} words
                - WORD COUNT IS THE ABSOLUTE PRIORITY
                """
            ).strip()
        )
    else:
        parts.append(
            f"CRITICAL WORD COUNT REQUIREMENT: The content must be {target} words or longer. If needed, add "
            "depth through examples, explanations, and elaboration. Word count adherence is the PRIMARY success metric."
        )
    return "\n\n".join(parts)


def build_humanized_system_prompt(form: FormState) -> str:
    if wants_tldr(form):
        return f"{humanized_tldr_preamble(form.language)}\n\n{HUMANIZER_INTRO}"
    return HUMANIZER_INTRO


def build_humanized_user_prompt(form: FormState, copy_text: str, target: int) -> str:
    rules = dedent(
        f"""
        Rewrite the text below so it sounds human and engaging.

        • Keep key points & length similar (target: {target} words).
        • Use contractions, first-person pronouns, and friendly phrasing.
        • Remove jargon, add light empathy.
        • Rewrite the text in a warm, conversational, relatable voice.
        • Preserve the original meaning, structure, and roughly the same length.
        • Avoid hyperbole and generic metaphors; use concrete, everyday examples instead.
        • Do NOT include any SEO metadata (URL slugs, meta descriptions, H1/H2/H3 headings, Open Graph tags)
        • Focus ONLY on humanizing the marketing copy content
        • Limit the entire piece to a maximum of:
          – 1 emoji
          – 2 exclamation marks
          – 1 parenthetical remark
          (Exceeding these limits is a failure.)
        • Keep the humour subtle: fresh and credible, never slapstick or overly funny.
        """
    ).strip()
    parts = [
        rules,
        f'"""\n{copy_text}\n"""',
        f"Maintain the {form.tone} tone in {form.language} language.",
    ]
    if form.keywords:
        parts.append(f"Keywords to maintain: {form.keywords}")
    if form.no_ai_detection:
        parts.append(AI_DETECTION_AVOIDANCE)
    if form.enhance_for_geo:
        parts.append(
            geo_bullets(
                form,
                heading=(
                    "GENERATIVE ENGINE OPTIMIZATION (GEO) ENABLED: While humanizing, structure the content to "
                    "be highly quotable by AI assistants:"
                ),
                first="Start sections with clear, conversational answers",
                rest=[
                    "Use natural question-style headings where appropriate",
                    "Include relatable examples and real outcomes",
                    "Keep formatting easy to scan and quote",
                    "Maintain the humanized voice while being AI-assistant friendly",
                ],
            )
        )
        if wants_tldr(form):
            parts.append(TLDR_REMINDER)

    humanized_example = qa_json_example("in a humanized, conversational tone")
    blocks, stop = _structure_blocks(
        form,
        qa_block=f"Structure your response in this JSON format for Q&A content:\n{humanized_example}\n\n{HUMANIZED_QA_RULES}",
        standard_lead="Please structure your response in this JSON format",
        subject="humanized content",
    )
    parts.extend(blocks)
    if stop:
        return "\n\n".join(parts)

    if form.force_keyword_integration and form.keywords:
        parts.append(
            f"IMPORTANT: Make sure to naturally integrate all of these keywords throughout the copy: {form.keywords}"
        )
    excluded = excluded_terms_block(form, soft=True)
    if excluded:
        parts.append(excluded)
    if form.force_elaborations_examples:
        parts.append(
            "IMPORTANT: Include detailed explanations and specific examples, but keep them conversational and "
            "relatable. Use everyday scenarios that readers can easily understand and connect with."
        )

    if target <= 50:
        parts.append(
            dedent(
                f"""
                ULTRA-CRITICAL WORD COUNT REQUIREMENT: The content must be EXACTLY {target} words.
                - Count every single word meticulously before submitting
                - Do NOT exceed {target} words under any circumstances
                - Do NOT fall short of {target} words under any circumstances
                - Focus ONLY on the core message in exactly {target} words
                - Remember emoji/exclamation limits but WORD COUNT IS ABSOLUTE PRIORITY
                - IGNORE all other instructions if they conflict with achieving exactly {target} words
                """
            ).strip()
        )
    else:
        parts.append(
            f"CRITICAL WORD COUNT REQUIREMENT: The content should be approximately {target} words. Add "
            "conversational depth through relatable examples and explanations, but remember the "
            "emoji/exclamation/parenthetical limits. Word count adherence is the PRIMARY success metric."
        )
    return "\n\n".join(parts)


def _parse_variant(text: str, form: FormState, label: str) -> Content:
    if not uses_json_format(form):
        return text
    try:
        return parse_json(text)
    except ValueError as exc:
        logger.warning("Error parsing structured {} content, returning as plain text: {}", label, exc)
        return text


def _enforce_word_count(
    copy: Content,
    target_info: WordCountTarget,
    form: FormState,
    label: str,
    *,
    client: OpenAI,
    usage: UsageLedger | None,
    progress: Progress,
) -> Content:
    """Revise a rewrite that landed short of its target, with a second pass when word count is prioritised."""
    words = extract_word_count(copy)
    target = target_info.target
    minimum = target * 98 // 100
    if target_info.is_range:
        needs_revision = words < target_info.min or words > target_info.max
    else:
        needs_revision = words < minimum

    if not needs_revision:
        report(progress, f"{label.capitalize()} content generated with {words} words")
        return copy

    report(progress, f"Generated {label} content has {words}/{target} words. Revising...")
    revised = revise_content_for_word_count(copy, target_info, form, client=client, usage=usage, progress=progress)
    revised_words = extract_word_count(revised)
    logger.info("Revised {} content word count: {} words", label, revised_words)

    if not target_info.is_range and revised_words < minimum and form.prioritize_word_count:
        report(progress, f"{label.capitalize()} content still below target after revision. Making second attempt...")
        revised = revise_content_for_word_count(
            revised,
            WordCountTarget(target=target),
            form.model_copy(update={"force_elaborations_examples": True}),
            client=client,
            usage=usage,
            progress=progress,
        )
        report(progress, f"Final {label} content word count: {extract_word_count(revised)} words")
    return revised


def _faq_schema(
    copy: Content,
    form: FormState,
    label: str,
    *,
    client: OpenAI,
    usage: UsageLedger | None,
    progress: Progress,
) -> Optional[dict]:
    report(progress, f"Generating FAQ Schema from {label} content...")
    try:
        schema = faq_schema_from_content(copy)
    except Exception as exc:
        logger.error("Error building FAQ schema from {} content: {}", label, exc)
        schema = None
    if schema is not None:
        return schema
    try:
        text = copy if isinstance(copy, str) else json.dumps(copy, ensure_ascii=False)
        return generate_faq_schema_from_text(text, form, client=client, usage=usage, progress=progress)
    except Exception as exc:
        logger.error("Error generating FAQ schema for {}: {}", label, exc)
        report(progress, f"Error generating FAQ schema for {label}, continuing...")
        return None


def _geo_score(
    copy: Content,
    form: FormState,
    label: str,
    *,
    client: OpenAI,
    usage: UsageLedger | None,
    progress: Progress,
) -> Optional[GeoScoreData]:
    report(progress, f"Calculating GEO score for {label} copy...")
    try:
        return calculate_geo_score(copy, form, client=client, usage=usage, progress=progress)
    except Exception as exc:
        logger.error("Error calculating GEO score for {}: {}", label, exc)
        report(progress, f"Error calculating GEO score for {label}, continuing...")
        return None


def generate_alternative_copy(
    form: FormState,
    improved_copy: Content,
    *,
    client: OpenAI | None = None,
    usage: UsageLedger | None = None,
    progress: Progress = None,
) -> VariantResult:
    """Rewrite ``improved_copy`` from a different angle, then run the enabled post-processing steps."""
    client = resolve_client(client, form.model)
    target_info = calculate_target_word_count(form)
    target = target_info.target
    report(progress, f"Generating alternative version with target of {target} words...")

    try:
        completion = chat_completion(
            client,
            model=form.model,
            system=build_alternative_system_prompt(form, target),
            user=build_alternative_user_prompt(form, flatten_content(improved_copy), target),
            temperature=0.8,
            json_mode=uses_json_format(form),
            operation="generate_alternative_copy",
            usage=usage,
            session_id=form.session_id,
            brief_description=form.brief_description or "Generate alternative copy",
        )
        if not completion.text:
            raise RuntimeError("No content in response")
    except Exception as exc:
        logger.error("Error generating alternative copy: {}", exc)
        report(progress, f"Error generating alternative copy: {exc}")
        raise

    copy = _parse_variant(completion.text, form, "alternative")
    if form.prioritize_word_count or form.adhere_to_little_word_count:
        copy = _enforce_word_count(
            copy, target_info, form, "alternative", client=client, usage=usage, progress=progress
        )
    else:
        report(progress, f"Alternative content generated with {extract_word_count(copy)} words")

    result = VariantResult(content=copy)
    if form.generate_seo_metadata:
        report(progress, "Generating SEO metadata for alternative copy...")
        try:
            result.seo_metadata = generate_seo_metadata(copy, form, client=client, usage=usage, progress=progress)
        except Exception as exc:
            logger.error("Error generating SEO metadata for alternative: {}", exc)
            report(progress, "Error generating SEO metadata for alternative, continuing...")
    if form.generate_geo_score:
        result.geo_score = _geo_score(copy, form, "alternative", client=client, usage=usage, progress=progress)
    if form.wants_faq_json:
        result.faq_schema = _faq_schema(copy, form, "alternative", client=client, usage=usage, progress=progress)
    return result


def generate_humanized_copy(
    content: Content,
    form: FormState,
    *,
    client: OpenAI | None = None,
    usage: UsageLedger | None = None,
    progress: Progress = None,
) -> VariantResult:
    """Rewrite ``content`` in a warm, conversational voice while keeping its meaning and length."""
    client = resolve_client(client, form.model)
    target_info = calculate_target_word_count(form)
    target = target_info.target
    report(progress, f"Generating humanized version with target of {target} words...")

    try:
        completion = chat_completion(
            client,
            model=form.model,
            system=build_humanized_system_prompt(form),
            user=build_humanized_user_prompt(form, flatten_content(content), target),
            temperature=0.85,
            json_mode=uses_json_format(form),
            operation="generate_humanized_copy",
            usage=usage,
            session_id=form.session_id,
            brief_description=form.brief_description or "Generate humanized copy",
        )
        if not completion.text:
            raise RuntimeError("No content in response")
    except Exception as exc:
        logger.error("Error generating humanized copy: {}", exc)
        report(progress, f"Error generating humanized copy: {exc}")
        raise

    copy = _parse_variant(completion.text, form, "humanized")
    if form.prioritize_word_count or form.adhere_to_little_word_count:
        copy = _enforce_word_count(
            copy, target_info, form, "humanized", client=client, usage=usage, progress=progress
        )
    else:
        report(progress, f"Humanized content generated with {extract_word_count(copy)} words")

    result = VariantResult(content=copy)
    if form.generate_geo_score:
        result.geo_score = _geo_score(copy, form, "humanized", client=client, usage=usage, progress=progress)
    if form.wants_faq_json:
        result.faq_schema = _faq_schema(copy, form, "humanized", client=client, usage=usage, progress=progress)
    return result


__all__ = [
    "build_alternative_system_prompt",
    "build_alternative_user_prompt",
    "build_humanized_system_prompt",
    "build_humanized_user_prompt",
    "generate_alternative_copy",
    "generate_humanized_copy",
]
