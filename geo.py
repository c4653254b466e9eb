from __future__ import annotations

"""GEO (generative engine optimisation) scoring for generated copy."""

import json
from textwrap import dedent
from typing import List, Tuple

from loguru import logger
from openai import OpenAI
from pydantic import ValidationError

from config import max_tokens_for
from llm import Progress, chat_completion, parse_json, report, resolve_client
from models import Content, FormState, GeoCriterion, GeoScoreData
from usage import UsageLedger
from wordcount import flatten_content

# (criterion, max points, what the evaluator checks)
GEO_CRITERIA: List[Tuple[str, int, List[str]]] = [
    (
        "Direct Answer Clarity",
        20,
        [
            "Does the content start with a concise, clear answer or summary?",
            "Is there a TL;DR or executive summary at the beginning?",
            "Can AI assistants easily extract the main answer?",
        ],
    ),
    (
        "Scannable Structure",
        15,
        [
            "Are there bullet points, short paragraphs, and clear subheadings?",
            "Is the content easy to scan and digest quickly?",
            "Are there H2/H3 headings that break up the content?",
        ],
    ),
    (
        "Question-Based Headings",
        10,
        [
            "Are headings phrased as questions that AI assistants can index?",
            "Do headings match common user queries?",
            "Would an AI assistant surface these headings as relevant answers?",
        ],
    ),
    (
        "Local Relevance or GEO Markers",
        20,
        [
            "Does the content mention specific locations, regions, or geographical markers?",
            "Are there phrases useful for local AI and search discovery?",
            'Examples: "in Mexico", "Querétaro", "serving clients across LATAM", etc.',
            "Note: This criterion gets full points if content is intentionally global/location-neutral",
        ],
    ),
    (
        "Quote-Friendly Sentences",
        15,
        [
            "Are there short, clear sentences that AI can easily quote?",
            "Does the content have standalone statements that make sense out of context?",
            "Are key points expressed in quotable, memorable phrases?",
        ],
    ),
    (
        "Authority Signals",
        10,
        [
            "Are examples, statistics, or credentials mentioned?",
            "Does the content include social proof or expertise indicators?",
            "Are there specific results, numbers, or case studies mentioned?",
        ],
    ),
    (
        "Optional TL;DR / Answer Box",
        10,
        [
            "If TL;DR is enabled in the form settings, was it included properly?",
            "Does the content have an answer-box style beginning?",
            "Is there a quick summary that directly addresses user intent?",
        ],
    ),
]

SYSTEM_PROMPT = dedent(
    """
    You are an expert in Generative Engine Optimization (GEO) - the practice of optimizing content for AI assistants like ChatGPT, Claude, and Gemini.

    Your task is to evaluate content based on how well it's optimized for AI-driven consumption and geographical visibility.

    You must respond with a valid JSON object only. All property names must be double-quoted.
    """
).strip()

RESPONSE_EXAMPLE = {
    "overall": 85,
    "breakdown": [
        {
            "criterion": "Direct Answer Clarity",
            "score": 18,
            "detected": True,
            "explanation": "Content starts with a clear summary that directly answers the user's main question.",
        },
        {
            "criterion": "Scannable Structure",
            "score": 12,
            "detected": True,
            "explanation": "Good use of subheadings and short paragraphs, though more bullet points would help.",
        },
        {
            "criterion": "Question-Based Headings",
            "score": 8,
            "detected": True,
            "explanation": "Some headings are question-based, but more could be rephrased as common user queries.",
        },
        {
            "criterion": "Local Relevance or GEO Markers",
            "score": 15,
            "detected": True,
            "explanation": "Good geographical context with specific location mentions relevant to the target audience.",
        },
        {
            "criterion": "Quote-Friendly Sentences",
            "score": 13,
            "detected": True,
            "explanation": "Contains several short, clear statements that AI assistants can easily quote.",
        },
        {
            "criterion": "Authority Signals",
            "score": 9,
            "detected": True,
            "explanation": "Includes specific examples and credentials that establish authority.",
        },
        {
            "criterion": "Optional TL;DR / Answer Box",
            "score": 10,
            "detected": True,
            "explanation": "TL;DR is properly included and directly addresses user intent.",
        },
    ],
    "suggestions": [
        "Add more bullet points to improve scannability",
        "Include more specific statistics or case studies for authority",
        "Rephrase some headings as questions users might ask",
    ],
}

EMPTY_RESPONSE_SUGGESTION = "Unable to evaluate GEO optimization due to empty AI response"
ERROR_SUGGESTION = "Error calculating GEO score. Please try again."


def _criteria_block() -> str:
    blocks = []
    for index, (name, points, questions) in enumerate(GEO_CRITERIA, start=1):
        lines = [f"{index}. **{name}** ({points} points max)"]
        lines.extend(f"   - {question}" for question in questions)
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def build_geo_prompt(text: str, form: FormState) -> str:
    context = "\n".join(
        [
            "CONTEXT INFORMATION:",
            f"- Target Language: {form.language}",
            f"- Content Type: {'New Copy' if form.tab == 'create' else 'Improved Copy'}",
            f"- Page Type: {form.page_type or 'Not specified'}",
            f"- Target Regions: {form.geo_regions or 'Not specified'}",
            f"- TL;DR Enabled: {'Yes' if form.add_tldr_summary else 'No'}",
            f"- GEO Enhancement Enabled: {'Yes' if form.enhance_for_geo else 'No'}",
        ]
    )
    closing = dedent(
        """
        IMPORTANT:
        - Calculate scores fairly based on what's actually present in the content
        - For "Local Relevance", give full points if content is intentionally global/location-neutral AND well-optimized
        - Only include suggestions if overall score is below 80
        - Ensure all JSON properties are properly quoted and the response is valid JSON
        """
    ).strip()
    return "\n\n".join(
        [
            f"Evaluate this content for GEO optimization based on the following {len(GEO_CRITERIA)} criteria. "
            "Each criterion has a maximum score shown:",
            f'CONTENT TO EVALUATE:\n"""\n{text}\n"""',
            f"SCORING CRITERIA (Total possible: {sum(points for _, points, _ in GEO_CRITERIA)} points):",
            _criteria_block(),
            context,
            "RESPONSE FORMAT:\nRespond with this exact JSON structure:\n" + json.dumps(RESPONSE_EXAMPLE, indent=2),
            closing,
        ]
    )


def _breakdown(raw: object) -> List[GeoCriterion]:
    if not isinstance(raw, list):
        return []
    items = []
    for entry in raw:
        try:
            items.append(GeoCriterion.model_validate(entry))
        except ValidationError as exc:
            logger.warning("Skipping malformed GEO criterion {!r}: {}", entry, exc)
    return items


def calculate_geo_score(
    content: Content,
    form: FormState,
    *,
    client: OpenAI | None = None,
    usage: UsageLedger | None = None,
    progress: Progress = None,
) -> GeoScoreData:
    """Score how quotable and AI-discoverable the copy is, out of 100."""
    client = resolve_client(client, form.model)
    report(progress, "Calculating GEO (Generative Engine Optimization) score...")
    try:
        completion = chat_completion(
            client,
            model=form.model,
            system=SYSTEM_PROMPT,
            user=build_geo_prompt(flatten_content(content), form),
            temperature=0.5,
            max_tokens=max_tokens_for(form.model) // 3,
            json_mode=True,
            operation="calculate_geo_score",
            usage=usage,
            session_id=form.session_id,
        )
        if not completion.text:
            logger.warning("Empty response from AI for GEO scoring, returning default score")
            return GeoScoreData(suggestions=[EMPTY_RESPONSE_SUGGESTION])
        parsed = parse_json(completion.text)
        if not isinstance(parsed, dict):
            raise ValueError("GEO score response is not a JSON object")
        suggestions = parsed.get("suggestions")
        score = GeoScoreData(
            overall=round(float(parsed.get("overall") or 0)),
            breakdown=_breakdown(parsed.get("breakdown")),
            suggestions=[str(item) for item in suggestions] if isinstance(suggestions, list) else [],
        )
    except Exception as exc:
        logger.error("Error calculating GEO score: {}", exc)
        report(progress, f"Error calculating GEO score: {exc}")
        return GeoScoreData(suggestions=[ERROR_SUGGESTION])

    report(progress, f"GEO score calculated: {score.overall}/100")
    return score


__all__ = ["GEO_CRITERIA", "build_geo_prompt", "calculate_geo_score"]
