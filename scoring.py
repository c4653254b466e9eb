from __future__ import annotations

"""Quality scores for generated copy and for the inputs a copy request starts from."""

from textwrap import dedent
from typing import Any, Dict, List

from loguru import logger
from openai import OpenAI

from config import max_tokens_for, structure_label
from llm import Progress, chat_completion, parse_json, report, resolve_client
from models import Content, ContentQualityScore, FormState, PromptEvaluation, ScoreData
from usage import UsageLedger
from wordcount import calculate_target_word_count, count_words, flatten_content

SCORE_SYSTEM_PROMPT = dedent(
    """
    You are an expert content evaluator who provides detailed scoring and analysis of marketing copy.
    Analyze the provided content based on clarity, persuasiveness, tone match, and engagement.
    Also evaluate how well the content matches the target word count (if provided).
    Provide a comprehensive assessment with scores and explanations.

    CRITICAL: You MUST respond with a valid JSON object only. All property names MUST be double-quoted. Do not include any text before or after the JSON object.
    """
).strip()

SCORE_RESPONSE_FORMAT = dedent(
    """
    Respond with a JSON object containing:
    1. overall: Overall quality score from 0-100
    2. clarity: Brief assessment of clarity (1-2 sentences)
    3. persuasiveness: Brief assessment of persuasiveness (1-2 sentences)
    4. toneMatch: Brief assessment of tone appropriateness (1-2 sentences)
    5. engagement: Brief assessment of how engaging the content is (1-2 sentences)
    6. wordCountAccuracy: Score from 0-100 on how well the content matches the target word count (only if target was provided)
    7. improvementExplanation: Detailed explanation of how this content meets the specified requirements and improves upon the original. Include commentary on how well it adheres to instructions like tone, word count, clarity goals, and any specific requirements that were met during generation.

    The JSON should follow this structure:
    {
      "overall": 85,
      "clarity": "The content clearly explains the value proposition with specific examples.",
      "persuasiveness": "The arguments are compelling and well-supported with evidence.",
      "toneMatch": "The tone is appropriately professional while remaining conversational.",
      "engagement": "The content uses storytelling elements that keep the reader interested.",
      "wordCountAccuracy": 90,
      "improvementExplanation": "This version successfully maintains professional tone while highlighting key benefits. It includes a clear CTA, avoids specified terms, focuses on outcomes, and meets the exact word count requirement."
    }
    """
).strip()

EMPTY_SCORE_NOTE = "Unable to evaluate - AI model returned empty response."
ERROR_SCORE_NOTE = "Not evaluated due to an error."
# Neutral score reported when scoring itself fails.
ERROR_SCORE = 70

EVALUATION_SYSTEM_PROMPT = dedent(
    """
    You are an expert marketing advisor and copywriting strategist who provides comprehensive analysis of marketing copy inputs.

    Your task is to evaluate ALL provided input fields for a marketing copy project, not just the main content. Analyze:

    1. COMPLETENESS: Which critical fields are missing or incomplete?
    2. CLARITY: Are the provided details clear and specific enough?
    3. COHERENCE: Do all the inputs work together logically and consistently?
    4. STRATEGIC VALUE: Will these inputs lead to effective marketing copy?
    5. ACTIONABILITY: Are the instructions clear enough for an AI to execute?

    Focus on identifying specific gaps, inconsistencies, and improvement opportunities across all input fields.
    Provide actionable, field-specific suggestions that will directly improve the quality of generated marketing copy.

    The goal is to help the user optimize their inputs BEFORE generating copy, saving time and improving results.
    """
).strip()

EVALUATION_INSTRUCTIONS = dedent(
    """
    ## EVALUATION INSTRUCTIONS
    Provide a detailed analysis focusing on:

    1. **Critical Missing Information**: What essential details are missing that would significantly impact copy quality?
    2. **Field-Specific Issues**: Which specific fields need improvement and why?
    3. **Coherence Problems**: Are there inconsistencies or conflicts between different inputs?
    4. **Strategic Gaps**: What strategic elements are missing for effective marketing copy?
    5. **Actionable Improvements**: Specific steps to enhance each problematic area.

    Respond with a JSON object containing:
    1. **score**: Overall readiness score from 0-100 (consider completeness, clarity, and coherence)
    2. **tips**: Array of 6-10 specific, actionable improvement suggestions

    Each tip should:
    - Clearly identify which field(s) it addresses
    - Explain the specific issue (missing, vague, inconsistent, etc.)
    - Provide actionable guidance on what to add or change
    - Explain why this improvement matters for copy generation

    The JSON should follow this structure:
    {
      "score": 75,
      "tips": [
        "Target Audience field needs more specific demographics and pain points. Add details like company size, industry, and specific challenges they face. This enables more targeted messaging.",
        "Key Message is missing or unclear. Define the main value proposition you want to communicate. This becomes the central theme that ties all copy elements together.",
        "Call to Action is generic. Specify exactly what action you want readers to take and create urgency. This directly impacts conversion rates."
      ]
    }
    """
).strip()

EVALUATION_ERROR_TIPS = [
    "There was an error evaluating your input.",
    "Please check your API keys and internet connection.",
    "Try again or proceed with generating content.",
]


def _fallback_scores(note: str, explanation: str, overall: int) -> ScoreData:
    return ScoreData(
        overall=overall,
        clarity=note,
        persuasiveness=note,
        tone_match=note,
        engagement=note,
        improvement_explanation=explanation,
    )


def generate_content_scores(
    content: Content,
    content_type: str,
    model: str,
    *,
    original_content: str | None = None,
    target_word_count: int | None = None,
    client: OpenAI | None = None,
    usage: UsageLedger | None = None,
    session_id: str | None = None,
    progress: Progress = None,
) -> ScoreData:
    """Score clarity, persuasiveness, tone and engagement; never raises for model failures."""
    client = resolve_client(client, model)
    text = "\n".join(content) if isinstance(content, list) else flatten_content(content)
    report(progress, f"Generating scores for {content_type}...")

    prompt = f'Please evaluate this {content_type}:\n\n"""\n{text}\n"""'
    if original_content:
        prompt += f'\n\nOriginal content for comparison:\n"""\n{original_content}\n"""'
    if target_word_count:
        words = count_words(text)
        difference = words - target_word_count
        prompt += (
            "\n\nWord count information:\n"
            f"- Actual word count: {words} words\n"
            f"- Target word count: {target_word_count} words\n"
            f"- Difference: {difference} words ({abs(difference) / target_word_count * 100:.1f}%)"
        )
    prompt += f"\n\n{SCORE_RESPONSE_FORMAT}"

    try:
        completion = chat_completion(
            client,
            model=model,
            system=SCORE_SYSTEM_PROMPT,
            user=prompt,
            temperature=0.5,
            max_tokens=round(max_tokens_for(model) / 3),
            json_mode=True,
            operation="generate_content_scores",
            usage=usage,
            session_id=session_id,
            brief_description=f"Score {content_type}",
        )
        if not completion.text:
            report(progress, f"AI model returned empty response for {content_type} scoring")
            return _fallback_scores(
                EMPTY_SCORE_NOTE,
                "Content scoring was not available due to an empty response from the AI model.",
                0,
            )
        scores = ScoreData.model_validate(parse_json(completion.text))
    except Exception as exc:
        logger.error("Error generating scores for {}: {}", content_type, exc)
        report(progress, f"Error generating scores: {exc}")
        return _fallback_scores(
            ERROR_SCORE_NOTE, "Could not evaluate due to a technical issue.", ERROR_SCORE
        )

    report(progress, f"Generated scores for {content_type}: {scores.overall}/100")
    return scores


def _or_unset(value: Any, default: str = "Not specified") -> str:
    return str(value) if value else default


def build_evaluation_prompt(form: FormState) -> str:
    target = calculate_target_word_count(form).target
    word_count = form.word_count
    if form.word_count == "Custom":
        word_count = f"{word_count} - {form.custom_word_count}"
    features = [
        label
        for enabled, label in (
            (form.generate_scores, "Scoring"),
            (form.prioritize_word_count, "Strict Word Count"),
            (form.force_keyword_integration, "Keyword Integration"),
            (form.force_elaborations_examples, "Detailed Examples"),
        )
        if enabled
    ]
    structure = [element.label or structure_label(element.value) for element in form.output_structure]
    urls = [url.strip() for url in form.competitor_urls if url.strip()]
    source_label = "Business Description" if form.tab == "create" else "Original Copy"

    sections: Dict[str, List[str]] = {
        "PROJECT SETUP": [
            f"- **Product/Service Name:** {_or_unset(form.product_service_name)}",
            f"- **Brief Description:** {_or_unset(form.brief_description)}",
            f"- **Page Type:** {_or_unset(form.page_type)}",
            f"- **Section:** {_or_unset(form.section)}",
        ],
        "TARGETING & AUDIENCE": [
            f"- **Target Audience:** {_or_unset(form.target_audience)}",
            f"- **Industry/Niche:** {_or_unset(form.industry_niche)}",
            f"- **Reader's Funnel Stage:** {_or_unset(form.reader_funnel_stage)}",
            f"- **Target Audience Pain Points:** {_or_unset(form.target_audience_pain_points)}",
        ],
        "STRATEGIC MESSAGING": [
            f"- **Key Message:** {_or_unset(form.key_message)}",
            f"- **Call to Action:** {_or_unset(form.call_to_action)}",
            f"- **Desired Emotion:** {_or_unset(form.desired_emotion)}",
            f"- **Brand Values:** {_or_unset(form.brand_values)}",
            f"- **Keywords:** {_or_unset(form.keywords)}",
            f"- **Context:** {_or_unset(form.context)}",
        ],
        "TONE & STYLE": [
            f"- **Language:** {form.language}",
            f"- **Tone:** {form.tone}",
            f"- **Tone Level:** {form.tone_level}",
            f"- **Preferred Writing Style:** {_or_unset(form.preferred_writing_style)}",
            f"- **Language Style Constraints:** {_or_unset(', '.join(form.language_style_constraints), 'None specified')}",
        ],
        "TECHNICAL SETTINGS": [
            f"- **Word Count Target:** {target} words ({word_count})",
            f"- **Output Structure:** {_or_unset(', '.join(structure), 'None specified')}",
            f"- **Priority Features:** {_or_unset(', '.join(features), 'None selected')}",
        ],
        "COMPETITIVE ANALYSIS": [
            f"- **Competitor URLs:** {_or_unset(', '.join(urls), 'None provided')}",
            f"- **Competitor Copy Text:** {_or_unset(form.competitor_copy_text, 'Not provided')}",
        ],
    }
    parts = [
        "Please conduct a comprehensive evaluation of these marketing copy inputs. Analyze ALL fields "
        "for completeness, clarity, coherence, and strategic value.",
        f'## PRIMARY CONTENT\n**{source_label}:**\n"{form.source_text}"',
    ]
    parts.extend(f"## {title}\n" + "\n".join(lines) for title, lines in sections.items())
    parts.append(EVALUATION_INSTRUCTIONS)
    return "\n\n".join(parts)


def evaluate_prompt(
    form: FormState,
    *,
    client: OpenAI | None = None,
    usage: UsageLedger | None = None,
    progress: Progress = None,
) -> PromptEvaluation:
    """Rate how ready the form inputs are for generation, with field-specific tips."""
    if not form.source_text.strip():
        raise ValueError("No text provided for evaluation")
    client = resolve_client(client, form.model)
    report(progress, "Evaluating input quality...")
    try:
        completion = chat_completion(
            client,
            model=form.model,
            system=EVALUATION_SYSTEM_PROMPT,
            user=build_evaluation_prompt(form),
            temperature=0.7,
            max_tokens=max_tokens_for(form.model) // 4,
            json_mode=True,
            operation="evaluate_prompt",
            usage=usage,
            session_id=form.session_id,
            brief_description=form.brief_description or "Evaluate input quality",
        )
        if not completion.text:
            raise ValueError("No content in response")
        evaluation = PromptEvaluation.model_validate(parse_json(completion.text))
    except Exception as exc:
        logger.error("Error evaluating prompt: {}", exc)
        report(progress, f"Error evaluating input: {exc}")
        return PromptEvaluation(score=0, tips=list(EVALUATION_ERROR_TIPS))

    report(progress, f"Input evaluation complete: {evaluation.score}/100")
    return evaluation


def evaluate_content_quality(
    content: str,
    content_type: str,
    model: str,
    *,
    client: OpenAI | None = None,
    usage: UsageLedger | None = None,
    progress: Progress = None,
) -> ContentQualityScore:
    if not content or not content.strip():
        raise ValueError("No content provided for evaluation")
    client = resolve_client(client, model)
    report(progress, f"Evaluating {content_type} quality...")
    prompt = dedent(
        """
        Respond with a JSON object containing:
        1. score: A numerical assessment from 0-100
        2. tips: An array of specific improvement suggestions (2-3 items)

        The JSON should follow this structure:
        {
          "score": 85,
          "tips": [
            "Add more details about X",
            "Clarify the target audience",
            "Include specific examples"
          ]
        }
        """
    ).strip()
    try:
        completion = chat_completion(
            client,
            model=model,
            system="You are an expert content evaluator. Provide a detailed assessment of the content quality.",
            user=f'Please evaluate this {content_type}:\n\n"{content}"\n\n{prompt}',
            temperature=0.7,
            max_tokens=max_tokens_for(model) // 4,
            json_mode=True,
            operation="evaluate_content_quality",
            usage=usage,
            brief_description=f"Evaluate {content_type}",
        )
        if not completion.text:
            raise ValueError("No content in response")
        quality = ContentQualityScore.model_validate(parse_json(completion.text))
    except Exception as exc:
        logger.error("Error evaluating {}: {}", content_type, exc)
        report(progress, f"Error evaluating {content_type}: {exc}")
        return ContentQualityScore(
            score=50,
            tips=[
                f"There was an error evaluating your {content_type}.",
                "Try again or proceed with generating content.",
            ],
        )

    report(progress, f"{content_type} evaluation complete: {quality.score}/100")
    return quality


__all__ = [
    "build_evaluation_prompt",
    "evaluate_content_quality",
    "evaluate_prompt",
    "generate_content_scores",
]
