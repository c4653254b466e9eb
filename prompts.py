from __future__ import annotations

"""Prompt builders for the main copy request plus the blocks other generators share."""

import argparse
import json
import sys
from pathlib import Path
from textwrap import dedent
from typing import Dict, Iterable, List

from config import structure_label
from models import FormState, WordCountTarget
from wordcount import calculate_target_word_count

EXPERT_INTRO = (
    "You are an expert copywriter with years of experience in creating persuasive, "
    "engaging, and effective marketing copy."
)

SECTION_GUIDANCE: Dict[str, str] = {
    "Hero Section": (
        "Focus on creating an attention-grabbing headline and compelling value proposition that "
        "immediately communicates the core benefit and establishes an emotional connection."
    ),
    "Benefits": (
        "Focus on clearly articulating the key benefits for the customer, with persuasive language "
        "that transforms features into meaningful advantages. Use benefit-driven headlines and "
        "supportive evidence."
    ),
    "Features": (
        'Describe the key features and how they solve specific problems for the user. Focus on the '
        '"so what" of each feature - explaining not just what it does, but why it matters to the user.'
    ),
    "Services": (
        "Outline the services offered with a focus on value delivered and outcomes achieved. "
        "Highlight differentiation factors and expertise."
    ),
    "About": (
        "Create an engaging narrative about the business, its mission, values, and unique story. "
        "Connect the organization's purpose to customer needs."
    ),
    "Testimonials": (
        "Frame testimonials effectively to maximize social proof, highlighting specific results and "
        "emotional impact. Create contextual introductions that enhance credibility."
    ),
    "FAQ": (
        "Create clear questions and informative answers that address common concerns while subtly "
        "reinforcing key selling points and overcoming objections."
    ),
    "Full Copy": (
        "Create a comprehensive marketing piece that covers all key aspects: problem identification, "
        "solution presentation, benefits explanation, feature details, and a compelling call to action."
    ),
}

NO_SEO_METADATA = dedent(
    """
    CRITICAL: DO NOT include any SEO metadata in your content output:
    - DO NOT include URL slugs, meta descriptions, or Open Graph tags
    - DO NOT include H1, H2, or H3 headings as metadata elements
    - DO NOT add any SEO-specific information to the content body
    - Focus ONLY on creating compelling marketing copy content
    - SEO metadata is handled separately and should NOT be part of your content
    """
).strip()

STANDARD_JSON_EXAMPLE = dedent(
    """
    {
      "headline": "Main headline goes here",
      "sections": [
        {
          "title": "Section title",
          "content": "Section content paragraph(s)"
        },
        {
          "title": "Another section title",
          "listItems": ["First bullet point", "Second bullet point"]
        }
      ],
      "wordCountAccuracy": 85 // Score 0-100 of how well you matched the target word count
    }
    """
).strip()

QA_RULES = dedent(
    """
    CRITICAL Q&A FORMATTING RULES:
    - Each section title MUST be a complete question ending with a question mark
    - Each section content MUST be a well-formatted answer paragraph
    - Questions should cover different aspects of the topic
    - Answers should be informative, specific, and include examples where helpful
    - NEVER combine multiple questions in one title
    - NEVER run Q&A content together without clear separation
    """
).strip()

FAQ_PAGE_FORMAT = dedent(
    """
    CRITICAL: You MUST structure your response as a FAQPage Schema JSON object in this EXACT format:
    {
      "@context": "https://schema.org",
      "@type": "FAQPage",
      "mainEntity": [
        {
          "@type": "Question",
          "name": "What is [specific question about the topic]?",
          "acceptedAnswer": {
            "@type": "Answer",
            "text": "Comprehensive answer explaining the topic with specific details and examples..."
          }
        },
        {
          "@type": "Question",
          "name": "How does [specific question about implementation/usage]?",
          "acceptedAnswer": {
            "@type": "Answer",
            "text": "Detailed answer with step-by-step explanations and practical information..."
          }
        }
      ]
    }

    MANDATORY JSON REQUIREMENTS:
    - Your response MUST be ONLY this JSON object - no additional text or explanations
    - Each question must be specific and relevant to the business/content
    - Each answer must be comprehensive and informative (minimum 50 words per answer)
    - Questions should cover different aspects: what, how, why, when, where, benefits, process, etc.
    - Generate 5-8 question-answer pairs total
    - All text must be properly escaped for JSON format
    - Do NOT include any text before or after the JSON object
    """
).strip()

TLDR_REMINDER = (
    "REMINDER: You have already been instructed to place a TL;DR summary at the absolute "
    "beginning of your output. This is critical for GEO optimization."
)

PLAIN_TEXT_NOTE = "Provide your response as plain text with appropriate paragraphs and formatting."

CLOSING_CHECKLIST = dedent(
    """
    Your copy should:
      1. Be persuasive, clear, and engaging with a logical flow that guides the reader
      2. Use proper grammar and spelling appropriate for the language ({language})
      3. Create fresh, original copy based on the provided information
      4. Highlight unique selling points and benefits effectively
      5. Include a compelling call to action where appropriate
      6. Speak directly to the audience's needs and desires
      7. Be scannable with appropriate headings, subheadings, and paragraph breaks
      8. Convey professionalism and authority in the subject matter

    The final output must meet or exceed the target word count of {target} words. Do not stop short. Expand all sections with meaningful content to reach this goal.
    """
).strip()


# --- Shared blocks -----------------------------------------------------------


def uses_json_format(form: FormState) -> bool:
    return bool(form.output_structure)


def has_qa_format(form: FormState) -> bool:
    return any(
        element.value == "qaFormat" or "q&a" in (element.label or "").lower()
        for element in form.output_structure
    )


def wants_tldr(form: FormState) -> bool:
    return form.enhance_for_geo and form.add_tldr_summary and not uses_json_format(form)


def tldr_preamble(language: str, *, rest: str = "marketing copy content") -> str:
    return dedent(
        f"""
        ABSOLUTE MANDATORY REQUIREMENT - TL;DR SUMMARY:

        Your response MUST begin with "TL;DR:" followed by exactly one concise sentence that directly answers the main question.

        EXACT FORMAT REQUIRED:
        TL;DR: [One clear sentence that directly answers what the user wants to know.]

        [blank line]

        [Rest of your {rest}...]

        CRITICAL TL;DR RULES:
        - Must be the first 3 characters: "TL;"
        - Only ONE sentence in the TL;DR
        - Answer the core question directly
        - Use natural {language} language
        - No hype words or marketing fluff
        - Follow with blank line, then main content

        FAILURE TO START WITH "TL;DR:" = COMPLETE REJECTION

        ---
        """
    ).strip()


def tldr_user_reminder(subject: str = "main content") -> str:
    return (
        'CRITICAL REMINDER: Your response MUST start with "TL;DR: [one sentence summary]" '
        f"followed by a blank line, then your {subject}. This is absolutely mandatory and cannot be skipped."
    )


def qa_json_example(answer_flavour: str = "") -> str:
    suffix = f" {answer_flavour}" if answer_flavour else ""
    return dedent(
        f"""
        {{
          "headline": "Frequently Asked Questions: [Topic]",
          "sections": [
            {{
              "title": "What is [specific question]?",
              "content": "Detailed answer paragraph providing comprehensive information{suffix}..."
            }},
            {{
              "title": "How does [specific question]?",
              "content": "Another detailed answer paragraph with examples and specifics{suffix}..."
            }}
          ],
          "wordCountAccuracy": 85
        }}
        """
    ).strip()


def json_format_block(form: FormState, *, lead: str = "Structure your response in this JSON format") -> str:
    if has_qa_format(form):
        return f"{lead} for Q&A content:\n{qa_json_example()}\n\n{QA_RULES}"
    return f"{lead}:\n{STANDARD_JSON_EXAMPLE}"


def section_list(form: FormState) -> str:
    lines = ["Include these specific sections in the exact order:"]
    for index, element in enumerate(form.output_structure, start=1):
        target = f" (target: {element.word_count} words)" if element.word_count else ""
        lines.append(f"{index}. {element.label or structure_label(element.value)}{target}")
    lines.append("")
    lines.append(
        "Ensure each section meets its target word count. If a section is underdeveloped, "
        "expand it with more examples, details, or elaboration."
    )
    return "\n".join(lines)


def excluded_terms_block(form: FormState, *, soft: bool = False) -> str:
    if not form.excluded_terms.strip():
        return ""
    if soft:
        return (
            f"TERMS TO EXCLUDE (if word count permits): Avoid these terms when possible: {form.excluded_terms}\n"
            "Use alternative terminology only if it doesn't interfere with the exact word count requirement."
        )
    return (
        f"TERMS TO EXCLUDE: Do not mention or reference any of these terms in your response: {form.excluded_terms}\n"
        "Use alternative terminology or avoid these topics entirely."
    )


def geo_bullets(form: FormState, *, heading: str, first: str, rest: List[str]) -> str:
    """GEO checklist used by the rewrite generators; regions lead when provided."""
    bullets: List[str] = []
    regions = form.geo_regions.strip()
    if regions:
        bullets.append(f"• Optimize for visibility in AI assistants targeting these regions: {regions}")
        bullets.append(f"• Include regional relevance, localized phrasing, or examples for {regions}")
    bullets.append(f"• {first}")
    bullets.extend(f"• {line}" for line in rest)
    return f"{heading}\n\n" + "\n".join(bullets)


def geo_system_instructions(form: FormState) -> str:
    parts = [
        "GEO TARGETING ENABLED: Adapt the output to improve visibility in AI-generated answers "
        "for location-based queries."
    ]
    regions = form.geo_regions.strip()
    location = form.location.strip()
    if regions:
        parts.append(
            dedent(
                f"""
                The user specified target countries or regions: "{regions}".
                Optimize the content for visibility in AI assistants (ChatGPT, Claude, Gemini) targeting the specified regions: {regions}.
                • Include regional relevance, localized phrasing, or examples where helpful
                • Ensure the output appeals to audiences in those areas
                • Naturally reference these regions in examples, testimonials, or CTAs where appropriate
                • Use culturally relevant terminology and concepts for these regions
                """
            ).strip()
        )
    elif location:
        parts.append(
            dedent(
                f"""
                The user specified a target location or region: "{location}".
                • Naturally include this location in the content, such as:
                  – "Serving businesses in {location}"
                  – "Helping companies across {location} thrive"
                • Reference the region in examples, testimonials, or CTAs
                • Maintain a natural tone—avoid overstuffing location terms
                """
            ).strip()
        )
    else:
        parts.append(
            dedent(
                """
                The user did not specify a location, but their business appears to serve a global audience.
                • Focus on making content discoverable and quotable without adding geographical references
                • Use language that appeals to a broad audience without mentioning specific locations, regions, or countries
                • Keep the messaging universal and location-neutral while maintaining GEO optimization benefits
                """
            ).strip()
        )
    if wants_tldr(form):
        parts.append(TLDR_REMINDER)
    return "\n\n".join(parts)


def tone_level_instruction(tone_level: int) -> str:
    if tone_level < 25:
        return "Use a very formal tone that is appropriate for academic or corporate contexts."
    if tone_level < 50:
        return "Use a moderately formal tone that is professional but approachable."
    if tone_level < 75:
        return "Use a conversational tone that balances professionalism with approachability."
    return "Use a casual, friendly tone that feels like a conversation with a trusted friend."


# --- Main copy prompts ---------------------------------------------------------


def _word_count_phrasing(target_info: WordCountTarget) -> str:
    target = target_info.target
    if target_info.is_range:
        return dedent(
            f"""
            The copy **must be between {target_info.min}-{target_info.max} words** (ideally {target} words).
            This is SHORT content with flexible word count tolerance to maintain natural phrasing.
            Focus on quality and natural flow within this range.
            """
        ).strip()
    if target <= 150:
        return dedent(
            f"""
            The copy **must be EXACTLY {target} words** — not more, not less.
            This is a SHORT content piece requiring precision and conciseness.
            Every single word must be carefully chosen and essential.
            Do not add unnecessary elaboration or filler. Focus on impact and clarity.
            Count your words meticulously before submitting.
            """
        ).strip()
    return dedent(
        f"""
        You MUST generate content until this EXACT word count is achieved.
        If you are short of {target} words, you MUST add more depth, examples, case studies, detailed explanations, and elaboration until you reach EXACTLY {target} words.
        Do NOT stop writing until you have EXACTLY {target} words.
        CRITICAL: You will be rejected if the word count is not EXACTLY {target} words.
        """
    ).strip()


def _output_requirements(target: int) -> str:
    return dedent(
        f"""
        ULTRA-CRITICAL OUTPUT REQUIREMENTS - WORD COUNT IS EVERYTHING:
          - The word count MUST be EXACTLY {target} words or your response will be COMPLETELY REJECTED
          - COUNT EVERY SINGLE WORD before submitting - if not EXACTLY {target} words, DO NOT SUBMIT
          - Your response must contain ONLY the generated marketing copy
          - Do NOT include any introductory text, concluding remarks, or explanations
          - Do NOT include meta-commentary about how the copy meets requirements
          - Do NOT include self-assessments or justifications
          - Do NOT explain your process or reasoning
          - Output ONLY the requested marketing content and nothing else
          - WORD COUNT VERIFICATION IS MANDATORY: Count words, verify {target} exactly, then submit
          - FAILURE TO MEET EXACTLY {target} WORDS = COMPLETE FAILURE AND REJECTION
        """
    ).strip()


def _strict_word_count_block(target: int) -> str:
    if target <= 150:
        block = dedent(
            f"""
            CRITICAL: You MUST create content that is EXACTLY {target} words. This is SHORT content requiring extreme precision.

            RULES FOR SHORT CONTENT:
            - Count every single word before submitting
            - Do NOT exceed {target} words under any circumstances
            - Do NOT fall short of {target} words
            - Remove any unnecessary words, adjectives, or phrases
            - Focus on maximum impact with minimum words
            - This is a precision exercise, not a creativity exercise

            REMEMBER: For short content like slogans, headlines, or brief descriptions, every word counts. Quality over quantity.
            """
        ).strip()
        if target <= 50:
            block += "\n\n" + dedent(
                f"""
                ULTRA-CRITICAL FOR VERY SHORT CONTENT ({target} WORDS):
                - This is EXTREMELY short content requiring ABSOLUTE precision
                - Every single word must be counted meticulously
                - Focus ONLY on the core message in exactly {target} words
                """
            ).strip()
        return block
    return dedent(
        f"""
        ABSOLUTE REQUIREMENT: The generated output MUST be EXACTLY {target} words.

        IF YOUR OUTPUT IS SHORT OF {target} WORDS:
        - Add more elaboration, detailed examples, comprehensive case studies, in-depth explanations
        - Include supporting evidence, statistics, expert opinions, practical applications
        - Add contextual information, background details, implementation steps

        WORD COUNT VERIFICATION: Before submitting, count every single word. If it's not EXACTLY {target} words, you MUST revise until it is.
        FAILURE TO MEET AT LEAST {target} WORDS WILL RESULT IN CONTENT REJECTION.
        FAILURE TO MEET EXACTLY {target} WORDS WILL RESULT IN COMPLETE REJECTION.
        """
    ).strip()


def build_system_prompt(form: FormState, target_info: WordCountTarget) -> str:
    target = target_info.target
    parts: List[str] = []
    if wants_tldr(form):
        parts.append(tldr_preamble(form.language))
    parts.append(EXPERT_INTRO)
    parts.append(
        "Your task is to create new marketing copy based on the provided information.\n\n"
        f"The copy should be in {form.language} language with a {form.tone} tone.\n\n"
        + _word_count_phrasing(target_info)
    )
    if form.tab == "create":
        parts.append(
            "You will create compelling new marketing copy based on the business description provided. "
            "Your copy should effectively communicate the unique value proposition and connect with the "
            "target audience at an emotional level."
        )
    else:
        parts.append(
            "You will improve the existing marketing copy while maintaining its core message. Your "
            "improvements should enhance clarity, persuasiveness, engagement, and strategic alignment "
            "while preserving the essential brand identity."
        )
    parts.append(_output_requirements(target))
    parts.append(NO_SEO_METADATA)
    parts.append(tone_level_instruction(form.tone_level))

    if form.preferred_writing_style:
        parts.append(f"Preferred writing style: {form.preferred_writing_style}")
    if form.language_style_constraints:
        constraints = "\n".join(f"- {item}" for item in form.language_style_constraints)
        parts.append(f"Language style constraints to follow:\n{constraints}")
    if form.section:
        line = f'This copy is for the "{form.section}" section.'
        guidance = SECTION_GUIDANCE.get(form.section)
        parts.append(f"{line} {guidance}" if guidance else line)

    if uses_json_format(form):
        if has_qa_format(form):
            block = dedent(
                """
                You must format your response as a JSON object with a headline and sections.

                CRITICAL Q&A FORMATTING REQUIREMENTS:
                - When creating Q&A content, each question MUST be a separate section
                - Each question should be formatted as a clear, standalone question ending with a question mark
                - Each answer should be a comprehensive, well-formatted response in paragraph form
                - NEVER run questions and answers together in continuous text
                - ALWAYS separate each Q&A pair clearly
                - Each question should be specific and actionable
                - Each answer should be informative and complete
                """
            ).strip()
        else:
            block = (
                "You must format your response as a JSON object with a headline and sections. This "
                "structured format should enhance readability and impact, not constrain your creativity."
            )
        allocations = [
            f'- "{element.label or structure_label(element.value)}": {element.word_count} words'
            for element in form.output_structure
            if element.word_count
        ]
        if allocations:
            block += " Follow these specific word count allocations for each section:\n"
            block += "\n".join(allocations)
            block += (
                "\n\nEnsure each section meets its target word count. If one is underdeveloped, "
                "expand that section until it reaches the specified length."
            )
        parts.append(block)

    if form.force_keyword_integration and form.keywords:
        parts.append(
            f"IMPORTANT: You MUST naturally integrate all of these keywords throughout the copy: "
            f"{form.keywords}. Keywords should be placed strategically where they enhance meaning and "
            "SEO value, not forced in ways that disrupt readability."
        )
    if form.force_elaborations_examples:
        parts.append(
            "IMPORTANT: You MUST provide detailed explanations, comprehensive examples, case studies, "
            "and in-depth elaboration throughout the copy. Expand on every point with supporting "
            "evidence, real-world applications, and specific details to reach the target word count."
        )
    if form.enhance_for_geo:
        parts.append(geo_system_instructions(form))
    if form.prioritize_word_count or form.adhere_to_little_word_count:
        parts.append(_strict_word_count_block(target))

    parts.append(CLOSING_CHECKLIST.format(language=form.language, target=target))
    return "\n\n".join(parts)


def key_information(form: FormState) -> str:
    fields = [
        ("Target audience", form.target_audience),
        ("Key message", form.key_message),
        ("Call to action", form.call_to_action),
        ("Desired emotion", form.desired_emotion),
        ("Brand values", form.brand_values),
        ("Keywords", form.keywords),
        ("Context", form.context),
        ("Industry/Niche", form.industry_niche),
        ("Product/Service Name", form.product_service_name),
        ("Reader's Stage in Funnel", form.reader_funnel_stage),
        ("Target Countries/Regions", form.geo_regions),
    ]
    lines = ["Key information:"]
    lines.extend(f"- {label}: {value}" for label, value in fields if value)
    return "\n".join(lines)


def _user_word_count_reminder(target: int) -> str:
    if target <= 50:
        return dedent(
            f"""
            ULTRA-CRITICAL WORD COUNT REQUIREMENT: This is VERY SHORT content requiring EXACTLY {target} words.
            - Count every single word meticulously before submitting
            - Do NOT exceed {target} words under any circumstances
            - Do NOT fall short of {target} words under any circumstances
            - Every word must be essential and high-impact
            - Remove any unnecessary words, adjectives, or connecting phrases
            - Focus ONLY on the core message
            - IGNORE all other instructions if they conflict with achieving exactly {target} words
            - WORD COUNT IS THE ABSOLUTE PRIORITY - NOTHING ELSE MATTERS

            FINAL CHECK: Before submitting, count your words. If not exactly {target}, revise immediately.
            """
        ).strip()
    if target <= 150:
        return dedent(
            f"""
            CRITICAL WORD COUNT REQUIREMENT: This is SHORT content requiring EXACTLY {target} words.
            - Do NOT exceed this count
            - Do NOT fall short of this count
            - Every word must be essential and impactful
            - Remove any unnecessary words or phrases
            - Count your words before submitting
            - Word count takes ABSOLUTE PRIORITY over all other instructions
            """
        ).strip()
    return dedent(
        f"""
        CRITICAL WORD COUNT REQUIREMENT: The entire copy must be EXACTLY {target} words.

        MANDATORY INSTRUCTIONS:
        - Write until you reach EXACTLY {target} words - not approximately, but EXACTLY
        - Add substantial depth through detailed examples, comprehensive explanations, case studies, and thorough elaboration
        - Include supporting evidence, expert opinions, statistical data, practical applications
        - Provide step-by-step processes, implementation details, background context
        - DO NOT use filler text - every added word must provide genuine value
        - DO NOT summarize or conclude until you have reached EXACTLY {target} words
        - COUNT YOUR WORDS METICULOUSLY before submitting your response

        ABSOLUTE PRIORITY: Word count adherence to EXACTLY {target} words is the PRIMARY success metric. Nothing else matters if this requirement is not met.

        VERIFICATION: Before you submit your response, count every single word. If it's not EXACTLY {target} words, you MUST revise until it is.
        """
    ).strip()


def build_user_prompt(form: FormState, target_info: WordCountTarget) -> str:
    target = target_info.target
    if form.tab == "create":
        opening = f'Create compelling marketing copy based on this business description:\n\n"""\n{form.business_description}\n"""'
    else:
        opening = f'Improve this existing marketing copy:\n\n"""\n{form.original_copy}\n"""'
    parts = [opening, key_information(form)]
    parts.append(
        f"- Target length: The copy MUST be at least {target} words long.\n"
        f"- Tone: {form.tone}\n"
        f"- Language: {form.language}"
    )

    urls = [url.strip() for url in form.competitor_urls if url.strip()]
    if urls:
        parts.append(
            "Competitor URLs to consider for differentiation:\n" + "\n".join(f"- {url}" for url in urls)
        )
    if form.competitor_copy_text.strip():
        parts.append(f'Competitor copy to outperform:\n"""\n{form.competitor_copy_text.strip()}\n"""')
    if form.target_audience_pain_points.strip():
        parts.append(
            f'Target audience pain points to address:\n"""\n{form.target_audience_pain_points.strip()}\n"""'
        )

    if uses_json_format(form):
        parts.append(json_format_block(form))
        if form.wants_faq_json:
            parts.append("Note: FAQ JSON Schema will be automatically generated from your Q&A content.")
        parts.append(section_list(form))
    else:
        parts.append(PLAIN_TEXT_NOTE)
        if form.enhance_for_geo and form.add_tldr_summary:
            parts.append(tldr_user_reminder())

    parts.append(_user_word_count_reminder(target))
    return "\n\n".join(parts)


def build_payload(form: FormState, target_info: WordCountTarget | None = None) -> Dict[str, str]:
    if not form.source_text.strip():
        field = "business_description" if form.tab == "create" else "original_copy"
        raise ValueError(f"{field} is empty. Provide the text to work from before generating copy.")
    info = target_info or calculate_target_word_count(form)
    return {
        "system": build_system_prompt(form, info),
        "user": build_user_prompt(form, info),
    }


def print_payload(label: str, payload: Dict[str, str]) -> None:
    print(f"## {label.upper()} prompt")
    print(f"system = \"\"\"{payload['system']}\"\"\"")
    print(f"user = \"\"\"{payload['user']}\"\"\"")
    print()


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Print the copy generation prompts for a saved form.")
    parser.add_argument("form_file", type=Path, help="Form state JSON (as written by the export command)")
    return parser.parse_args(list(argv) if argv is not None else None)


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)
    try:
        raw = json.loads(args.form_file.read_text(encoding="utf-8"))
        form = FormState.model_validate(raw.get("formState", raw))
        payload = build_payload(form)
    except Exception as exc:  # pragma: no cover - CLI convenience
        sys.stderr.write(f"Error loading form: {exc}\n")
        raise SystemExit(1) from exc
    print_payload(form.tab, payload)


if __name__ == "__main__":
    main()


__all__ = [
    "FAQ_PAGE_FORMAT",
    "NO_SEO_METADATA",
    "PLAIN_TEXT_NOTE",
    "STANDARD_JSON_EXAMPLE",
    "TLDR_REMINDER",
    "build_payload",
    "build_system_prompt",
    "build_user_prompt",
    "excluded_terms_block",
    "geo_bullets",
    "has_qa_format",
    "json_format_block",
    "key_information",
    "print_payload",
    "section_list",
    "tldr_preamble",
    "uses_json_format",
    "wants_tldr",
]
