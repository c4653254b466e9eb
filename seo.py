from __future__ import annotations

"""SEO metadata and FAQPage JSON-LD for generated copy."""

import json
import re
from textwrap import dedent
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger
from openai import OpenAI

from config import max_tokens_for
from llm import Progress, chat_completion, parse_json, report, resolve_client
from models import Content, FormState, SeoMetadata
from usage import UsageLedger
from wordcount import flatten_content, is_structured, strip_markdown

CHARACTER_LIMITS: Dict[str, int] = {
    "urlSlugs": 60,
    "metaDescriptions": 160,
    "h1Variants": 60,
    "h2Headings": 70,
    "h3Headings": 70,
    "ogTitles": 60,
    "ogDescriptions": 110,
}

SEO_SYSTEM_PROMPT = dedent(
    """
    You are an expert SEO strategist with ABSOLUTE CHARACTER LIMIT ENFORCEMENT.

    CRITICAL NON-NEGOTIABLE REQUIREMENTS:
    - NEVER EXCEED the specified character limits under ANY circumstances
    - If your generated content approaches the limit, IMMEDIATELY shorten it
    - Count characters meticulously for EVERY piece of content you generate
    - CHARACTER LIMITS ARE ABSOLUTE - exceeding them by even 1 character is COMPLETE FAILURE
    - If unsure about length, always err on the side of being shorter rather than longer

    Respond only in JSON using the format and limits provided. Do not include any explanations, markdown, or extra output, only return the final JSON. If you cannot generate content for any reason, return an empty JSON object with all required fields as empty arrays: {"urlSlugs":[],"metaDescriptions":[],"h1Variants":[],"h2Headings":[],"h3Headings":[],"ogTitles":[],"ogDescriptions":[]}.
    """
).strip()

FAQ_SYSTEM_PROMPT = dedent(
    """
    You are an expert in structured data and FAQ Schema generation.

    Your task is to analyze the provided text content and generate a valid FAQPage Schema (JSON-LD) object.

    CRITICAL REQUIREMENTS:
    - Extract or create relevant FAQ content from the provided text
    - Format as valid JSON-LD FAQPage Schema
    - Include 5-8 question-answer pairs
    - Each answer must be comprehensive (minimum 50 words)
    - Questions should cover different aspects: what, how, why, when, where, benefits, process, etc.

    Respond only with the JSON-LD object. No additional text or explanations.
    """
).strip()

FAQ_EXAMPLE = dedent(
    """
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
    """
).strip()

QUESTION_PATTERN = re.compile(
    r"^(?:\d+\.?\)?\s*(.+\?)\s*$|\*\*(.*?)\*\*|<b>(.*?)</b>|Question:\s*(.*))", re.IGNORECASE
)
LEADING_NUMBER = re.compile(r"^\d+\.\s*")
WHITESPACE = re.compile(r"\s+")
SENTENCE_END = re.compile(r"[.!?]$")

FAQ_ANSWER_LIMIT = 400


def _seo_user_prompt(text: str, form: FormState) -> str:
    keywords = [keyword.strip() for keyword in form.keywords.split(",") if keyword.strip()]
    prompt = {
        "task": (
            "Generate the following metadata and structural elements for the content below. Use the "
            "character limits EXACTLY as specified. If any field exceeds its limit, you MUST shorten it "
            "intelligently while preserving the meaning and keyword relevance."
        ),
        "content": text,
        "context": {
            "language": form.language,
            "tone": form.tone,
            "audience": form.target_audience or "General audience",
            "industry": [form.industry_niche] if form.industry_niche else ["General"],
            "keywords": keywords,
        },
        "characterLimits": CHARACTER_LIMITS,
        "exampleOutputFormat": {
            "urlSlugs": ["example-slug"] * form.num_url_slugs,
            "metaDescriptions": ["Example meta description"] * form.num_meta_descriptions,
            "h1Variants": ["Example H1"] * form.num_h1_variants,
            "h2Headings": ["Example H2"] * form.num_h2_variants,
            "h3Headings": ["Example H3"] * form.num_h3_variants,
            "ogTitles": ["Example OG Title"] * form.num_og_titles,
            "ogDescriptions": ["Example OG Description"] * form.num_og_descriptions,
        },
        "instructions": [
            "Your entire response MUST be a single valid JSON object using the same keys as in "
            "exampleOutputFormat. DO NOT include any explanation, markdown, extra text, or comments, only pure JSON.",
            "ABSOLUTE CHARACTER LIMIT ENFORCEMENT: Each value MUST NEVER exceed its character limit. "
            "Exceeding limits by even 1 character is COMPLETE FAILURE.",
            "COUNT CHARACTERS BEFORE SUBMITTING: For every string you generate, count the characters and "
            "ensure it stays within the specified maximum.",
            "IF APPROACHING LIMIT: Immediately shorten content by removing words, using abbreviations, or "
            "simplifying language.",
            "PRIORITY ORDER: 1) Stay within character limits (non-negotiable), 2) Include keywords, 3) Make compelling.",
            "Each string must be compelling, keyword-rich, and benefit-focused WITHIN the character constraints.",
            f"Use natural {form.language} phrasing appropriate for professional audiences.",
            "No explanations, markdown, comments, or narrative. Just pure JSON.",
            "FINAL VERIFICATION: Before submitting your JSON response, verify that EVERY string is within "
            "its character limit. NO EXCEPTIONS.",
        ],
    }
    return json.dumps(prompt, indent=2, ensure_ascii=False)


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value]


def generate_seo_metadata(
    content: Content,
    form: FormState,
    *,
    client: OpenAI | None = None,
    usage: UsageLedger | None = None,
    progress: Progress = None,
) -> SeoMetadata:
    """Ask the model for slugs, meta descriptions, headings and OG tags; empty lists on failure."""
    client = resolve_client(client, form.model)
    report(progress, "Generating SEO metadata and structural elements...")
    try:
        completion = chat_completion(
            client,
            model=form.model,
            system=SEO_SYSTEM_PROMPT,
            user=_seo_user_prompt(flatten_content(content), form),
            temperature=0.7,
            max_tokens=max_tokens_for(form.model) // 2,
            json_mode=True,
            operation="generate_seo_metadata",
            usage=usage,
            session_id=form.session_id,
            brief_description=form.brief_description or "Generate SEO metadata",
        )
        if not completion.text:
            logger.warning("Empty response from AI, returning empty SEO metadata")
            return SeoMetadata()
        parsed = parse_json(completion.text)
    except Exception as exc:
        logger.error("Error generating SEO metadata: {}", exc)
        report(progress, f"Error generating SEO metadata: {exc}")
        return SeoMetadata()

    if not isinstance(parsed, dict):
        return SeoMetadata()
    metadata = SeoMetadata(**{key: _string_list(parsed.get(key)) for key in CHARACTER_LIMITS})
    total = sum(len(values) for values in metadata.model_dump().values())
    report(progress, f"Generated {total} SEO metadata elements")
    return metadata


def generate_faq_schema_from_text(
    text: str,
    form: FormState,
    *,
    client: OpenAI | None = None,
    usage: UsageLedger | None = None,
    progress: Progress = None,
) -> Dict[str, Any]:
    """Have the model derive a FAQPage schema from free text; ``{}`` when it cannot."""
    client = resolve_client(client, form.model)
    report(progress, "Generating FAQ Schema from content...")
    user = "\n\n".join(
        [
            "Analyze this content and generate a FAQPage Schema (JSON-LD) object:",
            f'"""\n{text}\n"""',
            f"Generate a FAQPage Schema in this EXACT format:\n{FAQ_EXAMPLE}",
            "MANDATORY REQUIREMENTS:\n"
            "- Your response MUST be ONLY this JSON object - no additional text\n"
            "- Each question must be specific and relevant to the content\n"
            "- Each answer must be comprehensive and informative (minimum 50 words per answer)\n"
            "- Generate 5-8 question-answer pairs total\n"
            "- All text must be properly escaped for JSON format\n"
            f"- Language: {form.language}",
        ]
    )
    try:
        completion = chat_completion(
            client,
            model=form.model,
            system=FAQ_SYSTEM_PROMPT,
            user=user,
            temperature=0.7,
            max_tokens=max_tokens_for(form.model) // 2,
            json_mode=True,
            operation="generate_faq_schema_from_text",
            usage=usage,
            session_id=form.session_id,
            brief_description="Generate FAQ Schema from text content",
        )
        if not completion.text:
            logger.warning("Empty response from AI, returning empty FAQ schema")
            return {}
        schema = parse_json(completion.text)
    except Exception as exc:
        logger.error("Error generating FAQ schema from text: {}", exc)
        report(progress, f"Error generating FAQ schema: {exc}")
        return {}

    if not isinstance(schema, dict):
        return {}
    report(progress, f"Generated FAQ Schema with {len(schema.get('mainEntity') or [])} question-answer pairs")
    return schema


def extract_faq_pairs(text: str) -> List[Tuple[str, str]]:
    """Pull question/answer pairs out of numbered, bold or ``Question:`` style text."""
    pairs: List[Tuple[str, str]] = []
    question: Optional[str] = None
    answer: List[str] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        match = QUESTION_PATTERN.match(line)
        if match:
            if question and answer:
                pairs.append((strip_markdown(question), strip_markdown(" ".join(answer).strip())))
            answer = []
            question = next((group for group in match.groups() if group), line)
        elif question and line:
            answer.append(line)
    if question and answer:
        pairs.append((strip_markdown(question), strip_markdown(" ".join(answer).strip())))
    return pairs


def _structured_pairs(content: Dict[str, Any]) -> List[Tuple[str, str]]:
    pairs = []
    for section in content.get("sections", []):
        if not isinstance(section, dict):
            continue
        title = str(section.get("title") or "").strip()
        body = section.get("content") or " ".join(
            str(item) for item in section.get("listItems") or section.get("list_items") or []
        )
        if title.endswith("?") and body:
            pairs.append((title, str(body).strip()))
    return pairs


def build_faq_schema(pairs: List[Tuple[str, str]]) -> Dict[str, Any]:
    if not pairs:
        return {}
    return {
        "@context": "https://schema.org",
        "@type": "FAQPage",
        "mainEntity": [
            {
                "@type": "Question",
                "name": question,
                "acceptedAnswer": {"@type": "Answer", "text": answer},
            }
            for question, answer in pairs
        ],
    }


def sanitize_faq_schema(schema: Dict[str, Any], max_length: int = FAQ_ANSWER_LIMIT) -> Dict[str, Any]:
    """Normalise whitespace, drop list numbering and cap answer length."""
    if not schema or not schema.get("mainEntity"):
        return schema
    items = schema["mainEntity"]
    if isinstance(items, dict):
        items = [items]
    entities = []
    for item in items if isinstance(items, list) else []:
        # entries without a question object and an answer object are dropped
        if not isinstance(item, dict) or not isinstance(item.get("acceptedAnswer"), dict):
            logger.warning("Skipping malformed FAQ entry: {!r}", item)
            continue
        name = WHITESPACE.sub(" ", LEADING_NUMBER.sub("", str(item.get("name", "")))).strip()
        text = WHITESPACE.sub(" ", str(item["acceptedAnswer"].get("text", ""))).strip()
        if len(text) > max_length:
            text = text[:max_length].strip() + "..."
        if not SENTENCE_END.search(text):
            text += "."
        entities.append(
            {
                "@type": "Question",
                "name": name,
                "acceptedAnswer": {"@type": "Answer", "text": text},
            }
        )
    return {**schema, "mainEntity": entities}


def faq_schema_from_content(content: Content) -> Optional[Dict[str, Any]]:
    """Build FAQPage JSON-LD locally when the content already holds Q&A; None otherwise."""
    if isinstance(content, dict) and content.get("@type") == "FAQPage":
        schema = sanitize_faq_schema(content)
        return schema if schema and schema.get("mainEntity") else None
    if is_structured(content):
        pairs = _structured_pairs(content)
    elif isinstance(content, str):
        pairs = extract_faq_pairs(content)
    else:
        pairs = []
    if not pairs:
        return None
    return sanitize_faq_schema(build_faq_schema(pairs))


__all__ = [
    "CHARACTER_LIMITS",
    "build_faq_schema",
    "extract_faq_pairs",
    "faq_schema_from_content",
    "generate_faq_schema_from_text",
    "generate_seo_metadata",
    "sanitize_faq_schema",
]
