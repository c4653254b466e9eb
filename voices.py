from __future__ import annotations

"""Restyle generated copy in a named voice: generic styles, humanizers and famous copywriters."""

import json
from textwrap import dedent
from typing import Any, Dict, List, Optional

from loguru import logger
from openai import OpenAI

from config import max_tokens_for
from geo import calculate_geo_score
from llm import Progress, chat_completion, friendly_error_message, parse_json, report, resolve_client
from models import Content, FormState, RestyleResult, WordCountTarget
from prompts import excluded_terms_block, geo_bullets, has_qa_format
from refinement import revise_content_for_word_count
from seo import faq_schema_from_content, generate_faq_schema_from_text
from usage import UsageLedger
from wordcount import (
    calculate_target_word_count,
    count_words,
    extract_word_count,
    flatten_content,
    is_structured,
)

VOICE_STYLES: List[Dict[str, Any]] = [
    {
        "category": "Humanization Options",
        "options": [
            {
                "value": "Humanize",
                "label": "Humanize",
                "tooltip": (
                    "Transform text into a warm, conversational, relatable voice while preserving meaning "
                    "and structure. Uses natural language patterns with subtle constraints on emojis and "
                    "exclamation marks."
                ),
            },
            {
                "value": "humanizeNoAIDetection",
                "label": "Humanize (No AI Detection)",
                "tooltip": (
                    "Transform text into natural, human-sounding content with imperfections, casual phrases, "
                    "and conversational flow designed to avoid AI detection systems."
                ),
            },
        ],
    },
    {
        "category": "Generic Tone/Style",
        "options": [
            {
                "value": "Luxury Brand",
                "label": "Luxury Brand",
                "tooltip": "Sophisticated, exclusive, refined. Uses precise language with an air of exclusivity and timeless elegance.",
            },
            {
                "value": "Tech Startup",
                "label": "Tech Startup",
                "tooltip": "Modern, innovative, solution-oriented. Fast-paced with technical precision and forward-thinking language.",
            },
            {
                "value": "Professional Formal",
                "label": "Professional Formal",
                "tooltip": "Polished, authoritative, structured. Ideal for corporate communications requiring credibility.",
            },
            {
                "value": "Friendly Conversational",
                "label": "Friendly Conversational",
                "tooltip": "Warm, approachable, relatable. Uses casual language that builds connection and trust.",
            },
            {
                "value": "Bold Direct",
                "label": "Bold Direct",
                "tooltip": "Straightforward, confident, no-nonsense. Gets right to the point with clear value statements.",
            },
            {
                "value": "Cool Trendy",
                "label": "Cool Trendy",
                "tooltip": "Fresh, contemporary, culturally aware. Perfect for youth-oriented brands and modern audiences.",
            },
            {
                "value": "Minimalist",
                "label": "Minimalist",
                "tooltip": "Clean, essential, focused. Uses fewer words with greater impact, emphasizing clarity and simplicity.",
            },
            {
                "value": "Playful",
                "label": "Playful",
                "tooltip": "Fun, lighthearted, engaging. Uses humor and creativity to capture attention and create enjoyment.",
            },
            {
                "value": "High-End Exclusive",
                "label": "High-End Exclusive",
                "tooltip": "Premium, select, aspirational. Creates a sense of belonging to an elite group with privileged access.",
            },
            {
                "value": "Soft Empathetic",
                "label": "Soft Empathetic",
                "tooltip": "Caring, understanding, supportive. Focuses on emotional connection and addressing pain points.",
            },
        ],
    },
    {
        "category": "Personas",
        "options": [
            {
                "value": "Alex Hormozi",
                "label": "Alex Hormozi",
                "tooltip": "Framework-focused, value-first, direct. Great for SaaS and offers.",
            },
            {
                "value": "Brené Brown",
                "label": "Brené Brown",
                "tooltip": "Empathetic, vulnerable, emotionally intelligent. Good for community or values-based messaging.",
            },
            {
                "value": "David Ogilvy",
                "label": "David Ogilvy",
                "tooltip": (
                    "Fact-driven, research-backed, elegant persuasion. The father of advertising's approach "
                    "to long-form copy that sells through education and credibility."
                ),
            },
            {
                "value": "Don Draper",
                "label": "Don Draper",
                "tooltip": "Emotional, cinematic, persuasion-heavy. Ideal for product storytelling or brand positioning.",
            },
            {
                "value": "Donald Miller",
                "label": "Donald Miller",
                "tooltip": "Clear, story-structured, benefit-driven. Ideal for service pages and value propositions.",
            },
            {
                "value": "Elon Musk",
                "label": "Elon Musk",
                "tooltip": "Visionary, technical, future-focused. Ideal for innovative tech products and moonshot ideas.",
            },
            {
                "value": "Gary Halbert",
                "label": "Gary Halbert",
                "tooltip": "Aggressive, emotional, classic direct-response copywriting. Perfect for high-conversion copy.",
            },
            {
                "value": "Maider Tomasena",
                "label": "Maider Tomasena",
                "tooltip": "Authentic, strategic, purpose-driven. Excellent for thoughtful business messaging and leadership content.",
            },
            {
                "value": "Marie Forleo",
                "label": "Marie Forleo",
                "tooltip": "Witty, upbeat, empowering. Best for women-focused branding or creator-led offers.",
            },
            {
                "value": "Richard Branson",
                "label": "Richard Branson",
                "tooltip": "Bold, adventurous, customer-focused. Excellent for disruptive brands and innovative services.",
            },
            {
                "value": "Seth Godin",
                "label": "Seth Godin",
                "tooltip": "Punchy, metaphorical, counter-intuitive. Great for thought leadership.",
            },
            {
                "value": "Simon Sinek",
                "label": "Simon Sinek",
                "tooltip": "Purpose-driven, inspirational, 'Start with Why' tone. Great for mission-oriented messaging.",
            },
            {
                "value": "Steve Jobs",
                "label": "Steve Jobs",
                "tooltip": "Bold, visionary, minimalist. Great for launches and hero sections.",
            },
            {
                "value": "Tony Robbins",
                "label": "Tony Robbins",
                "tooltip": "High-energy, motivational, urgency-driven. Great for personal development or sales.",
            },
        ],
    },
]

VOICE_STYLE_VALUES = [option["value"] for category in VOICE_STYLES for option in category["options"]]

PERSONA_TRAITS: Dict[str, List[str]] = {
    "Steve Jobs": [
        "Simple, direct, and clear language",
        "Short, impactful sentences",
        'Focus on product benefits and "why it matters"',
        'Use of contrasts ("X is good, but Y is revolutionary")',
        'Powerful adjectives like "incredible," "amazing," and "revolutionary"',
        "A sense of creating history and changing the world",
    ],
    "Seth Godin": [
        "Short, punchy paragraphs, often just one or two sentences",
        "Thought-provoking questions",
        "Metaphors and unexpected comparisons",
        "Conversational yet profound observations",
        "Challenges conventional thinking",
        "Often starts with a simple observation and builds to a deeper insight",
    ],
    "Marie Forleo": [
        "Warm, conversational and friendly tone",
        "Upbeat, positive, and encouraging language",
        "Empowering calls to action",
        "Personal anecdotes and relatable examples",
        "Use of questions to engage the reader",
        "Occasional playful humor and slang",
    ],
    "Brené Brown": [
        "Vulnerable, authentic, and deeply empathetic tone",
        "Research-backed insights combined with personal storytelling",
        "Language around courage, vulnerability, and emotional intelligence",
        "Warm but professional approach to difficult topics",
        "Use of inclusive, non-judgmental language",
        "Emphasis on human connection and belonging",
        "Gentle but powerful calls to action around personal growth",
    ],
    "Simon Sinek": [
        'Clear, focused on "why" over "what" or "how"',
        "Inspirational and purpose-driven",
        "Rhetorical questions that make the reader reflect",
        "Repetition of key concepts for emphasis",
        "Simple language to explain profound concepts",
        "Stories that illustrate principles in action",
        "Calm, measured pace with strategic pauses",
    ],
    "Gary Halbert": [
        'Direct, conversational, often addressing the reader as "you"',
        "Strong, bold claims backed by reasoning",
        "Authentic, sometimes rough-around-the-edges tone",
        "Storytelling that draws the reader in",
        "Strategic use of capitalization, italics, and emphasis",
        "Explicit promises and benefits to the reader",
        "Colorful expressions and memorable phrases",
    ],
    "David Ogilvy": [
        "Clear, elegant, and fact-driven language",
        "Sophisticated but never pretentious vocabulary",
        "Long-form copy with logical progression of ideas",
        "Emphasis on research and credibility",
        "Well-crafted, memorable phrases",
        "Respectful of the reader's intelligence",
        "Professional but with occasional witty observations",
    ],
    "humanizeNoAIDetection": [
        "Natural, conversational flow with varied sentence structures",
        "Subtle imperfections and human-like inconsistencies",
        "Personal touches and relatable language",
        "Avoiding overly polished or robotic phrasing",
        "Using contractions, colloquialisms, and natural speech patterns",
        "Incorporating minor grammatical variations that humans naturally use",
        "Balancing professionalism with authentic human expression",
    ],
}

SINGLE_SECTION_EXAMPLE = dedent(
    """
    {
      "headline": "Your restyled headline here",
      "sections": [
        {
          "title": "Content",
          "content": "Your restyled content here"
        }
      ],
      "wordCountAccuracy": 95
    }
    """
).strip()

RESTYLED_SECTIONS_EXAMPLE = dedent(
    """
    {
      "headline": "Your restyled headline here",
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
      "wordCountAccuracy": 95
    }
    """
).strip()


def _is_headline_list(content: Any) -> bool:
    return isinstance(content, list) and all(isinstance(item, str) for item in content)


def _persona_traits(persona: str) -> str:
    traits = PERSONA_TRAITS.get(persona)
    if not traits:
        return ""
    if persona == "humanizeNoAIDetection":
        lead = "For humanization with AI detection avoidance, your voice is characterized by:"
    else:
        lead = f"{persona}'s voice is characterized by:"
    return lead + "\n" + "\n".join(f"- {trait}" for trait in traits)


def _tldr_preamble(persona: str, language: str) -> str:
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
        • Be written in {persona}'s distinctive voice and {language} language
        • Focus on core value/result/benefit
        • Avoid hype or fluff

        FAILURE TO PLACE TL;DR AT THE VERY BEGINNING IS UNACCEPTABLE.

        ---
        """
    ).strip()


def _system_word_count(persona: str, target_info: WordCountTarget, form: Optional[FormState]) -> str:
    target = target_info.target
    strict = form is not None and (form.prioritize_word_count or form.adhere_to_little_word_count)
    if not strict:
        return (
            f"IMPORTANT: The final content should be approximately {target} words.\n"
            "If the content falls short of this target, add more examples, elaboration, or supporting "
            f"details while maintaining {persona}'s voice."
        )
    if target_info.is_range:
        return (
            f"FLEXIBLE WORD COUNT REQUIREMENT: The final content should be between "
            f"{target_info.min}-{target_info.max} words (ideally {target} words).\n"
            f"This flexible range allows for natural phrasing while maintaining {persona}'s distinctive voice.\n"
            "Quality and voice authenticity are prioritized over exact word count precision."
        )
    return dedent(
        f"""
        CRITICAL WORD COUNT REQUIREMENT: The final content MUST be EXACTLY {target} words. This is a non-negotiable requirement.

        You MUST count your words meticulously. If your first draft is shorter than {target} words, you MUST expand the content by adding more:
        - Detailed examples in {persona}'s style
        - Supporting evidence or anecdotes typical of {persona}
        - Additional context and background information
        - Supporting evidence, quotes, or statistics
        - Practical applications or implications

        Do NOT use filler text or repetitive content. Every added word must provide substantive value while maintaining {persona}'s distinctive voice.

        DO NOT conclude the content until you've reached {target} words. This word count is an absolute requirement.

        IMPORTANT WARNING: Many copywriters fail to meet the word count when applying voice styling. DO NOT make this mistake. Count your words carefully, and if you're even 10 words short, add more valuable content until you reach EXACTLY {target} words.
        """
    ).strip()


def build_restyle_system_prompt(
    content: Any,
    persona: str,
    language: str,
    form: Optional[FormState] = None,
    target_info: Optional[WordCountTarget] = None,
) -> str:
    headlines = _is_headline_list(content)
    parts = []
    if form is not None and form.enhance_for_geo and form.add_tldr_summary and not headlines:
        parts.append(_tldr_preamble(persona, language))
    parts.append(
        f"You are an expert copywriter who can perfectly mimic the voice, style, and mannerisms of {persona}.\n"
        f"Your task is to restyle the provided copy to sound exactly as if {persona} wrote it.\n"
        "Maintain all the key information and meaning, but transform the style to match "
        f"{persona}'s distinctive way of communicating.\n"
        f"The copy should be in {language} language."
    )
    if isinstance(content, dict):
        parts.append("IMPORTANT: You must return your response as a valid JSON object.")
    traits = _persona_traits(persona)
    if traits:
        parts.append(traits)
    parts.append(
        dedent(
            f"""
            CRITICAL OUTPUT REQUIREMENTS:
            - Your response must contain ONLY the restyled marketing copy in {persona}'s voice
            - Do NOT include any introductory text like "Here's how {persona} might say it:"
            - Do NOT include meta-commentary about the changes made
            - Do NOT include explanations of {persona}'s style or approach
            - Do NOT include self-assessments or justifications
            - Do NOT include any SEO metadata (URL slugs, meta descriptions, H1/H2/H3 headings, Open Graph tags)
            - Focus ONLY on the marketing copy content in {persona}'s voice
            - Output ONLY the requested restyled content and nothing else
            """
        ).strip()
    )
    if target_info is not None:
        parts.append(_system_word_count(persona, target_info, form))
    if headlines:
        parts.append(
            f"Your task is to transform the provided headline options into exactly {len(content)} headlines "
            f"that sound like they were written by {persona}."
        )
    return "\n\n".join(parts)


def _headline_user_prompt(headlines: List[str], persona: str) -> str:
    count = len(headlines)
    numbered = "\n".join(f"{index}. {headline}" for index, headline in enumerate(headlines, start=1))
    example = json.dumps(
        {"headlines": [f"First headline in {persona}'s style", f"Second headline in {persona}'s style"]},
        ensure_ascii=False,
    )
    rules = dedent(
        f"""
        The response must:
        1. Maintain the core message of each headline
        2. Capture {persona}'s distinctive voice and style
        3. Contain exactly {count} headlines
        4. Be returned as valid JSON
        """
    ).strip()
    return "\n\n".join(
        [
            f"Restyle the following {count} headline options to sound exactly like {persona} would write them. "
            f"Return exactly {count} headlines:",
            f"Original headlines:\n{numbered}",
            f'Please return your response as a JSON object with a "headlines" array containing exactly {count} '
            f"headline strings. For example:\n{example}",
            rules,
        ]
    )


def _user_word_count(
    persona: str,
    target_info: WordCountTarget,
    form: Optional[FormState],
    source_text: str,
) -> str:
    target = target_info.target
    strict = form is not None and (form.prioritize_word_count or form.adhere_to_little_word_count)
    if not strict:
        return (
            f"CRITICAL WORD COUNT REQUIREMENT: The final content should be approximately {target} words. "
            f"Please aim to match this target as closely as possible while maintaining {persona}'s voice. "
            "Word count adherence is the PRIMARY success metric."
        )
    if target_info.is_range:
        return (
            f"FLEXIBLE WORD COUNT REQUIREMENT: Your output should be between {target_info.min}-{target_info.max} "
            f"words (ideally {target} words).\n"
            f"This flexible range prioritizes natural phrasing and {persona}'s authentic voice over exact word "
            "count precision.\n"
            f"Any word count within this range while maintaining {persona}'s voice is successful."
        )

    blocks = [f"ABSOLUTELY CRITICAL: Your output MUST be EXACTLY {target} words in length."]
    if target <= 50:
        blocks.append(
            dedent(
                f"""
                This is VERY SHORT content requiring ABSOLUTE precision:
                - Count every single word meticulously before submitting
                - Do NOT exceed {target} words under any circumstances
                - Do NOT fall short of {target} words under any circumstances
                - Apply {persona}'s voice while staying within exactly {target} words
                - WORD COUNT IS THE ABSOLUTE PRIORITY - EVERYTHING ELSE IS SECONDARY
                - IGNORE all other instructions if they conflict with achieving exactly {target} words

                FINAL VERIFICATION: Before submitting, count your words. Must be exactly {target}.
                """
            ).strip()
        )
        return "\n\n".join(blocks)

    current = count_words(source_text)
    difference = target - current
    if difference > 0:
        change = f"You need to ADD {difference} words"
    else:
        change = f"You need to REMOVE {abs(difference)} words"
    action = "expand" if difference > 0 else "condense"
    blocks.append(
        f"Current word count of source text: {current} words\n"
        f"Target word count: {target} words\n"
        f"Difference: {change}"
    )
    blocks.append(
        f"You MUST count your words carefully before submitting your response. You MUST {action} the content "
        f"to match the target of {target} words."
    )
    blocks.append(
        f"WORD COUNT IS THE ABSOLUTE PRIMARY SUCCESS METRIC. {persona}'s voice is important, but achieving "
        f"{target} words EXACTLY is essential. Word count takes ABSOLUTE PRIORITY over term exclusions and "
        "all other instructions."
    )
    blocks.append(f"Do not conclude your response until you have verified it contains EXACTLY {target} words.")
    return "\n\n".join(blocks)


def _persona_faq_format(persona: str) -> str:
    return dedent(
        f"""
        CRITICAL: You MUST structure your response as a FAQPage Schema JSON object in this EXACT format:
        {{
          "@context": "https://schema.org",
          "@type": "FAQPage",
          "mainEntity": [
            {{
              "@type": "Question",
              "name": "What is [specific question about the topic]?",
              "acceptedAnswer": {{
                "@type": "Answer",
                "text": "Comprehensive answer in {persona}'s distinctive voice and style..."
              }}
            }},
            {{
              "@type": "Question",
              "name": "How does [specific question about implementation/usage]?",
              "acceptedAnswer": {{
                "@type": "Answer",
                "text": "Detailed answer with {persona}'s voice, including examples and practical information..."
              }}
            }}
          ]
        }}

        MANDATORY JSON REQUIREMENTS:
        - Your response MUST be ONLY this JSON object - no additional text or explanations
        - Each question must be specific and relevant to the business/content
        - Each answer must be written in {persona}'s distinctive voice and style
        - Generate 5-8 question-answer pairs total
        - All text must be properly escaped for JSON format
        - Do NOT include any text before or after the JSON object
        """
    ).strip()


def _persona_qa_format(persona: str) -> str:
    example = json.dumps(
        {
            "headline": f"Frequently Asked Questions: [Topic] in {persona}'s Voice",
            "sections": [
                {
                    "title": "What is [specific question]?",
                    "content": f"Detailed answer paragraph in {persona}'s distinctive voice and style...",
                },
                {
                    "title": "How does [specific question]?",
                    "content": f"Another detailed answer paragraph written as {persona} would respond...",
                },
            ],
            "wordCountAccuracy": 95,
        },
        indent=2,
        ensure_ascii=False,
    )
    return (
        "Since this is Q&A content, you MUST return your response as a JSON object with this exact structure:\n"
        f"{example}\n\n"
        f"CRITICAL: Transform each Q&A pair to sound like {persona} would ask and answer these questions. "
        f"Maintain clear separation between questions and answers while applying {persona}'s voice consistently."
    )


def build_restyle_user_prompt(
    content: Any,
    persona: str,
    form: Optional[FormState] = None,
    target_info: Optional[WordCountTarget] = None,
) -> str:
    if _is_headline_list(content):
        return _headline_user_prompt(content, persona)

    text = flatten_content(content)
    parts = [
        f"Restyle the following copy to sound exactly like {persona}. Keep all the key information intact "
        f'but transform the voice:\n\n"""\n{text}\n"""',
        f"Maintain all the key points and factual information, but apply {persona}'s distinctive voice, "
        f"vocabulary, cadence, and stylistic approach. The response should sound authentically like {persona} wrote it.",
    ]

    if form is not None and form.enhance_for_geo and form.add_tldr_summary:
        if isinstance(content, dict):
            placement = dedent(
                f"""
                For JSON format, include a "tldr" field as the FIRST field:
                {{
                  "tldr": "Brief 1-2 sentence summary in {persona}'s voice that directly answers what this content is about",
                  "headline": "...",
                  "sections": [...]
                }}
                """
            ).strip()
        else:
            placement = (
                "For plain text format, start with:\n"
                f"TL;DR: [Your 1-2 sentence summary in {persona}'s distinctive voice]\n\n"
                "[Then continue with the rest of your content]"
            )
        parts.append(
            "CRITICAL MANDATORY REQUIREMENT: YOU MUST GENERATE A TL;DR SUMMARY AS THE FIRST ELEMENT OF YOUR "
            f"RESPONSE IN {persona}'S VOICE.\n\n{placement}\n\n"
            "The TL;DR must:\n"
            f"- Be written in {persona}'s distinctive voice and style\n"
            "- Directly answer what this content is about and the main benefit\n"
            "- Be 1-2 sentences maximum\n\n"
            f"THIS IS NOT OPTIONAL. YOU MUST GENERATE THIS TL;DR SUMMARY IN {persona}'S VOICE."
        )

    if target_info is not None:
        parts.append(_user_word_count(persona, target_info, form, text))

    if form is not None:
        excluded = excluded_terms_block(form, soft=True)
        if excluded:
            parts.append(f"{excluded} Keep {persona}'s voice style throughout.")
        if form.enhance_for_geo:
            parts.append(
                geo_bullets(
                    form,
                    heading=(
                        f"GENERATIVE ENGINE OPTIMIZATION (GEO) ENABLED: While maintaining {persona}'s voice, "
                        "structure the content to be highly quotable by AI assistants:"
                    ),
                    first=f"Use {persona}'s approach to question-based headings",
                    rest=[
                        f"Include {persona}'s typical examples and authority signals",
                        f"Keep formatting scannable while preserving {persona}'s distinctive style",
                        f"Make it easy for AI tools to quote and summarize in {persona}'s voice",
                    ],
                )
            )
            if form.add_tldr_summary:
                parts.append(
                    "REMINDER: You have already been instructed to place a TL;DR summary at the absolute "
                    f"beginning of your output in {persona}'s voice. This is critical for GEO optimization."
                )

    if is_structured(content):
        if form is not None and form.wants_faq_json:
            parts.append(_persona_faq_format(persona))
            return "\n\n".join(parts)
        if form is not None and has_qa_format(form):
            parts.append(_persona_qa_format(persona))
        else:
            parts.append(
                "Since this is structured content with sections, you MUST return your response as a JSON "
                f"object with this exact structure:\n{RESTYLED_SECTIONS_EXAMPLE}"
            )
            parts.append(
                "Make sure to keep the same section titles and organization, just transform the writing "
                f"style to match {persona}."
            )
    elif isinstance(content, dict):
        parts.append(f"Return your response as a JSON object with this exact structure:\n{SINGLE_SECTION_EXAMPLE}")
    return "\n\n".join(parts)


def _fallback_structure(persona: str, text: str) -> Dict[str, Any]:
    return {
        "headline": f"{persona}'s Version",
        "sections": [{"title": "Restyled Content", "content": text}],
    }


def _parse_headlines(text: str, persona: str) -> List[str]:
    try:
        parsed = parse_json(text)
    except ValueError as exc:
        raise ValueError(
            f"Failed to parse {persona}'s headline response. The AI may have returned invalid JSON."
        ) from exc
    if isinstance(parsed, dict):
        parsed = parsed.get("headlines")
    if not isinstance(parsed, list):
        raise ValueError("Response is not an array of headlines")
    return [str(item) for item in parsed]


def _needs_revision(words: int, target_info: WordCountTarget) -> Optional[str]:
    if target_info.is_range:
        if words < target_info.min:
            return f"below range ({words} < {target_info.min})"
        if words > target_info.max:
            return f"above range ({words} > {target_info.max})"
        return None
    if words < target_info.target * 98 // 100:
        return f"too short ({words}/{target_info.target} words)"
    return None


def _persona_extras(
    result: RestyleResult,
    form: FormState,
    *,
    client: OpenAI,
    usage: UsageLedger | None,
    progress: Progress,
) -> RestyleResult:
    persona = result.persona_used
    if form.generate_geo_score:
        report(progress, f"Calculating GEO score for {persona}'s voice style...")
        try:
            result.geo_score = calculate_geo_score(
                result.content, form, client=client, usage=usage, progress=progress
            )
        except Exception as exc:
            logger.error("Error calculating GEO score for restyled content: {}", exc)
    if form.wants_faq_json and isinstance(result.content, (str, dict)):
        report(progress, "Generating FAQ Schema from restyled content...")
        try:
            schema = faq_schema_from_content(result.content)
        except Exception as exc:
            logger.error("Error building FAQ schema from restyled content: {}", exc)
            schema = None
        if schema is None:
            try:
                text = flatten_content(result.content)
                schema = generate_faq_schema_from_text(text, form, client=client, usage=usage, progress=progress)
            except Exception as exc:
                logger.error("Error generating FAQ schema for restyled content: {}", exc)
        result.faq_schema = schema
    return result


def restyle_copy_with_persona(
    content: Any,
    persona: str,
    model: str,
    language: str = "English",
    *,
    form: Optional[FormState] = None,
    target_word_count: Optional[int] = None,
    client: OpenAI | None = None,
    usage: UsageLedger | None = None,
    progress: Progress = None,
) -> RestyleResult:
    """Rewrite ``content`` as if ``persona`` wrote it.

    ``content`` may be plain text, a ``{"headline", "sections"}`` object or a
    list of headlines. Word count follows ``target_word_count`` or, when only a
    form is given, the form's own target. Failures are raised as RuntimeError
    with a readable message.
    """
    headlines = _is_headline_list(content)
    target_info: Optional[WordCountTarget] = None
    if form is not None:
        target_info = calculate_target_word_count(form)
        if target_word_count and target_word_count != target_info.target:
            target_info = WordCountTarget(target=target_word_count)
    elif target_word_count:
        target_info = WordCountTarget(target=target_word_count)
    if headlines:
        target_info = None

    client = resolve_client(client, model)
    suffix = f" with target of {target_info.target} words" if target_info else ""
    report(progress, f"Applying {persona}'s voice style{suffix}...")

    session_id = form.session_id if form is not None else None
    try:
        completion = chat_completion(
            client,
            model=model,
            system=build_restyle_system_prompt(content, persona, language, form, target_info),
            user=build_restyle_user_prompt(content, persona, form, target_info),
            temperature=0.7,
            max_tokens=max_tokens_for(model),
            json_mode=isinstance(content, (dict, list)),
            operation="apply_voice_style",
            usage=usage,
            session_id=session_id,
        )
        if not completion.text:
            raise RuntimeError(
                f"{persona} voice styling returned empty content. "
                "This may be due to content length or model limitations."
            )
        if headlines:
            restyled_headlines = _parse_headlines(completion.text, persona)
            report(progress, f"Generated {len(restyled_headlines)} headlines in {persona}'s voice")
            return RestyleResult(content=restyled_headlines, persona_used=persona)
    except Exception as exc:
        message = friendly_error_message(exc)
        logger.error("Error applying {}'s voice: {}", persona, exc)
        report(progress, f"Error applying {persona}'s voice: {message}")
        raise RuntimeError(f"Failed to generate {persona}'s voice style: {message}") from exc

    restyled: Content = completion.text
    if isinstance(content, dict):
        try:
            parsed = parse_json(completion.text)
        except ValueError as exc:
            logger.warning("Error parsing structured restyle response: {}", exc)
            return RestyleResult(content=_fallback_structure(persona, completion.text), persona_used=persona)
        if not is_structured(parsed):
            logger.warning("Restyled JSON lacks headline and sections, wrapping it")
            return RestyleResult(content=_fallback_structure(persona, completion.text), persona_used=persona)
        restyled = parsed

    words = extract_word_count(restyled)
    if target_info is not None:
        percent = round(words / target_info.target * 100) if target_info.target else 0
        report(progress, f"Generated content in {persona}'s voice: {words} words ({percent}% of target)")

    if (
        form is not None
        and target_info is not None
        and (form.prioritize_word_count or form.adhere_to_little_word_count)
    ):
        reason = _needs_revision(words, target_info)
        if reason:
            report(progress, f"{persona}-styled content {reason}. Revising...")
            revised = revise_content_for_word_count(
                restyled,
                target_info,
                form.model_copy(update={"prioritize_word_count": True, "force_elaborations_examples": True}),
                client=client,
                usage=usage,
                persona=persona,
                progress=progress,
            )
            if not revised or (isinstance(revised, str) and not revised.strip()):
                report(progress, "Content revision returned empty result. Using original content.")
            else:
                restyled = revised

    result = RestyleResult(content=restyled, persona_used=persona)
    if form is None:
        return result
    return _persona_extras(result, form, client=client, usage=usage, progress=progress)


def build_headline_prompt(content: Content, form: FormState, count: int) -> str:
    parts = [
        f"Write exactly {count} distinct headline options for the marketing copy below.",
        f'"""\n{flatten_content(content)}\n"""',
        f"- Language: {form.language}\n- Tone: {form.tone}",
    ]
    if form.keywords:
        parts.append(f"Work in these keywords where natural: {form.keywords}")
    if form.target_audience:
        parts.append(f"Target audience: {form.target_audience}")
    parts.append(
        f'Return a JSON object with a "headlines" array containing exactly {count} strings. '
        "Do not number the headlines or add commentary."
    )
    return "\n\n".join(parts)


def generate_headlines(
    content: Content,
    persona: Optional[str],
    form: FormState,
    count: Optional[int] = None,
    *,
    client: OpenAI | None = None,
    usage: UsageLedger | None = None,
    progress: Progress = None,
) -> List[str]:
    """Headline options for ``content``, restyled in ``persona``'s voice when one is given."""
    count = count or form.number_of_headlines
    client = resolve_client(client, form.model)
    report(progress, f"Generating {count} headline options...")
    completion = chat_completion(
        client,
        model=form.model,
        system=(
            "You are an expert copywriter who writes concise, compelling headlines. "
            "Respond with valid JSON only."
        ),
        user=build_headline_prompt(content, form, count),
        temperature=0.8,
        json_mode=True,
        operation="generate_headlines",
        usage=usage,
        session_id=form.session_id,
    )
    if not completion.text:
        raise RuntimeError("No headlines in response")
    headlines = _parse_headlines(completion.text, "the headline writer")[:count]
    if not persona:
        return headlines
    restyled = restyle_copy_with_persona(
        headlines,
        persona,
        form.model,
        form.language,
        form=form,
        client=client,
        usage=usage,
        progress=progress,
    )
    return list(restyled.content)


__all__ = [
    "PERSONA_TRAITS",
    "VOICE_STYLES",
    "VOICE_STYLE_VALUES",
    "build_restyle_system_prompt",
    "build_restyle_user_prompt",
    "generate_headlines",
    "restyle_copy_with_persona",
]
