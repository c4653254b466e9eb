from __future__ import annotations

"""Field suggestions for the copy form and natural-language form templates."""

import json
import re
from textwrap import dedent
from typing import Any, Dict, List

from loguru import logger
from openai import OpenAI

from config import LANGUAGES, OUTPUT_STRUCTURE_OPTIONS, PAGE_TYPES, TONES, WORD_COUNTS, max_tokens_for
from llm import Progress, chat_completion, parse_json, report, resolve_client
from models import FormState
from usage import UsageLedger

FIELD_INSTRUCTIONS: Dict[str, str] = {
    "keyMessage": "key messages that summarize the main point or value proposition",
    "targetAudience": "target audience descriptions focusing on demographics, interests, and needs",
    "callToAction": "effective calls to action that would motivate the user's target audience to take the next step",
    "desiredEmotion": "emotional responses that the content should evoke in the audience",
    "brandValues": "brand values that would align with this business",
    "keywords": "SEO keywords and key phrases that would be relevant",
    "context": "contextual information that would help create more effective copy",
    "industryNiche": "specific industry niches that best match this business",
    "readerFunnelStage": (
        "appropriate marketing funnel stages for this content (awareness, consideration, decision, etc.)"
    ),
    "preferredWritingStyle": "writing styles that would be most effective for this content",
    "targetAudiencePainPoints": "specific pain points or challenges that the target audience likely faces",
    "competitorCopyText": "suggestions for competitor copy examples that would be relevant to analyze",
}

# Models that ignore response_format and answer best with a numbered list.
PLAIN_LIST_MODELS = {"grok-4-latest"}

SUGGESTION_SYSTEM_PROMPT = (
    "You are an expert marketing advisor helping to generate suggestions for a marketing copy project.\n"
    "Provide practical, high-quality suggestions based on the context provided."
)

NUMBERED_LINE = re.compile(r"^\d+\.\s*")

TEMPLATE_MODEL = "gpt-4o"
TEMPLATE_MAX_TOKENS = 4000

TEMPLATE_EXAMPLE = {
    "originalCopy": "Detailed description of what to achieve based on the instruction",
    "projectDescription": "Brief project identifier",
    "language": "English",
    "tone": "Professional",
    "wordCount": "Custom",
    "customWordCount": 400,
    "model": "deepseek-chat",
    "pageType": "Other",
    "section": "Blog Post",
    "productServiceName": "Twitter Marketing Services",
    "briefDescription": "Blog post template for Twitter marketing",
    "targetAudience": "Social media managers and digital marketers looking to improve their Twitter strategy",
    "keyMessage": "Effective Twitter marketing drives engagement and conversions",
    "callToAction": "Start implementing these strategies",
    "keywords": "twitter marketing, social media strategy, engagement",
    "industryNiche": "marketing-advertising",
    "preferredWritingStyle": "Informative",
    "outputStructure": [
        {"value": "introduction", "label": "Introduction", "wordCount": 50},
        {"value": "problem", "label": "Problem", "wordCount": 100},
        {"value": "solution", "label": "Solution", "wordCount": 150},
        {"value": "benefits", "label": "Benefits", "wordCount": 75},
        {"value": "callToAction", "label": "Call to Action", "wordCount": 25},
    ],
    "generateSeoMetadata": True,
    "generateScores": True,
    "forceElaborationsExamples": True,
    "prioritizeWordCount": True,
    "numH2Variants": 3,
    "numH3Variants": 5,
}


def _quoted(values: List[str]) -> str:
    return "[" + ", ".join(json.dumps(value) for value in values) + "]"


def build_suggestion_prompt(text: str, field_type: str, model: str, language: str) -> str:
    instructions = FIELD_INSTRUCTIONS.get(field_type, f"suggestions for the {field_type} field")
    if model in PLAIN_LIST_MODELS:
        return dedent(
            f"""
            Based on this information, suggest 6-8 relevant {instructions} in {language} language:

            Context:
            \"\"\"
            {{text}}
            \"\"\"

            Please provide your suggestions as a simple numbered list:
            1. First suggestion
            2. Second suggestion
            3. Third suggestion
            (etc.)

            Keep suggestions concise and practical.
            """
        ).strip().replace("{text}", text)
    return dedent(
        f"""
        Based on the following information, suggest 6-8 relevant {instructions}.
        The suggestions should be in {language} language.

        Context:
        \"\"\"
        {{text}}
        \"\"\"

        Format your response as a JSON object with a "suggestions" array of strings like this:
        {{"suggestions": ["Suggestion 1", "Suggestion 2", "Suggestion 3"]}}

        Keep each suggestion concise and focused. No need for explanations or additional commentary.
        """
    ).strip().replace("{text}", text)


def parse_suggestions(content: str, field_type: str, model: str) -> List[str]:
    """Pull suggestion strings out of a numbered list or any JSON shape the models return."""
    if model in PLAIN_LIST_MODELS:
        items = [
            NUMBERED_LINE.sub("", line.strip()).strip()
            for line in content.splitlines()
            if NUMBERED_LINE.match(line.strip())
        ]
    else:
        parsed: Any = parse_json(content)
        if isinstance(parsed, list):
            items = parsed
        elif isinstance(parsed, dict):
            if isinstance(parsed.get("suggestions"), list):
                items = parsed["suggestions"]
            elif field_type == "readerFunnelStage" and isinstance(parsed.get("marketing_funnel_stages"), list):
                items = parsed["marketing_funnel_stages"]
            else:
                arrays = [value for value in parsed.values() if isinstance(value, list)]
                items = arrays[0] if arrays else []
        else:
            items = []
    return [item.strip() for item in items if isinstance(item, str) and item.strip()]


def get_suggestions(
    text: str,
    field_type: str,
    model: str,
    language: str = "English",
    *,
    client: OpenAI | None = None,
    usage: UsageLedger | None = None,
    progress: Progress = None,
) -> List[str]:
    """Suggest 6-8 values for a form field from the business description or original copy."""
    if not text or not field_type:
        raise ValueError("Text and field type are required")

    client = resolve_client(client, model)
    report(progress, f"Generating suggestions for {field_type}...")
    plain = model in PLAIN_LIST_MODELS

    try:
        completion = chat_completion(
            client,
            model=model,
            system=SUGGESTION_SYSTEM_PROMPT,
            user=build_suggestion_prompt(text, field_type, model, language),
            temperature=0.8,
            max_tokens=max_tokens_for(model) if plain else max_tokens_for(model) // 4,
            json_mode=not plain,
            operation="get_suggestions",
            usage=usage,
            brief_description=f"Suggestions for {field_type}",
        )
        if not completion.text:
            if completion.finish_reason == "length":
                raise RuntimeError(
                    f"{model} hit token limit during generation. "
                    "Try using a simpler context or switch to a different model."
                )
            report(progress, f"Empty response received from {model} AI")
            return []
        suggestions = parse_suggestions(completion.text, field_type, model)
    except Exception as exc:
        logger.error("Error generating suggestions for {}: {}", field_type, exc)
        report(progress, f"Error generating suggestions: {exc}")
        raise

    report(progress, f"Generated {len(suggestions)} suggestions for {field_type}")
    return suggestions


def build_template_system_prompt() -> str:
    structure_values = ", ".join(json.dumps(option["value"]) for option in OUTPUT_STRUCTURE_OPTIONS)
    return "\n\n".join(
        [
            "You are an expert template generator for a marketing copy tool. Your task is to analyze user "
            "instructions and generate a detailed, comprehensive JSON template for the FormState object.",
            "CRITICAL: You must respond with a valid JSON object only. No explanations, no markdown, no additional text.",
            "The JSON should represent a FormState object with the following structure and guidelines:",
            dedent(
                f"""
                REQUIRED FIELDS:
                - originalCopy: string (primary content field - use this for the main content description)
                - projectDescription: string (internal organization field)
                - language: one of {_quoted(LANGUAGES)}
                - tone: one of {_quoted(TONES)}
                - wordCount: one of {_quoted(WORD_COUNTS)}
                - customWordCount: number (if wordCount is "Custom")
                - model: "deepseek-chat" (default model)
                """
            ).strip(),
            dedent(
                f"""
                OPTIONAL FIELDS TO POPULATE WHEN RELEVANT:
                - pageType: one of {_quoted(PAGE_TYPES)}
                - section: string (e.g., "Hero Section", "Benefits", "Features", "FAQ", "Full Copy")
                - productServiceName: string
                - briefDescription: string
                - targetAudience: string (detailed audience description)
                - keyMessage: string
                - callToAction: string
                - desiredEmotion: string
                - brandValues: string
                - keywords: string
                - context: string
                - industryNiche: string
                - toneLevel: number (0-100, 50 is default)
                - readerFunnelStage: string
                - targetAudiencePainPoints: string
                - preferredWritingStyle: string
                - languageStyleConstraints: string[]
                - competitorUrls: string[] (max 3 URLs)
                - competitorCopyText: string
                - excludedTerms: string
                """
            ).strip(),
            dedent(
                """
                STRUCTURE AND FEATURES:
                - outputStructure: array of objects with {value: string, label: string, wordCount: number}
                - generateSeoMetadata: boolean
                - generateScores: boolean
                - generateGeoScore: boolean
                - prioritizeWordCount: boolean
                - forceKeywordIntegration: boolean
                - forceElaborationsExamples: boolean
                - enhanceForGEO: boolean
                - addTldrSummary: boolean
                - geoRegions: string

                SEO METADATA COUNTS (when generateSeoMetadata is true):
                - numUrlSlugs: number (1-5)
                - numMetaDescriptions: number (1-5)
                - numH1Variants: number (1-5)
                - numH2Variants: number (1-10)
                - numH3Variants: number (1-10)
                - numOgTitles: number (1-5)
                - numOgDescriptions: number (1-5)

                WORD COUNT FEATURES:
                - adhereToLittleWordCount: boolean (for content under 100 words)
                - littleWordCountTolerancePercentage: number (default 20)
                - wordCountTolerancePercentage: number (default 2)
                """
            ).strip(),
            f"OUTPUT STRUCTURE OPTIONS:\nAvailable values: {structure_values}",
            dedent(
                """
                INSTRUCTIONS:
                1. Analyze the user's instruction carefully
                2. Extract content type, word count, target audience, features needed
                3. Set appropriate values for all relevant fields
                4. Be comprehensive - fill in logical defaults and suggestions
                5. Make the template immediately usable for content generation
                6. Include relevant SEO and optimization features when appropriate
                7. Set realistic word count allocations for output structure elements
                8. Consider the content type when setting tone, style, and features
                """
            ).strip(),
        ]
    )


def build_template_user_prompt(instruction: str) -> str:
    analysis = dedent(
        """
        ANALYSIS REQUIREMENTS:
        1. Determine the content type and set appropriate pageType/section
        2. Extract word count requirements and set wordCount/customWordCount
        3. Infer target audience and industry from context
        4. Set appropriate tone and writing style
        5. Include relevant output structure with word count allocations
        6. Enable appropriate features (SEO, scoring, etc.)
        7. Fill in logical defaults for key messaging elements
        """
    ).strip()
    return "\n\n".join(
        [
            "Generate a comprehensive FormState JSON template based on this instruction:",
            f'"{instruction}"',
            analysis,
            "EXAMPLE TEMPLATE STRUCTURE:\n" + json.dumps(TEMPLATE_EXAMPLE, indent=2),
            "Generate a similar comprehensive template based on the user's instruction. Include all relevant "
            "fields and make logical inferences about what would make this template most effective.",
        ]
    )


def generate_template_json_suggestion(
    instruction: str,
    *,
    client: OpenAI | None = None,
    usage: UsageLedger | None = None,
) -> FormState:
    """Turn a plain-language brief ("a 400 word blog post about ...") into a filled-in form."""
    if not instruction.strip():
        raise ValueError("Instruction is required")
    client = resolve_client(client, TEMPLATE_MODEL)
    completion = chat_completion(
        client,
        model=TEMPLATE_MODEL,
        system=build_template_system_prompt(),
        user=build_template_user_prompt(instruction),
        temperature=0.7,
        max_tokens=TEMPLATE_MAX_TOKENS,
        json_mode=True,
        operation="generate_template_json_suggestion",
        usage=usage,
        brief_description=f"Template JSON for: {instruction[:50]}...",
    )
    if not completion.text:
        raise RuntimeError("AI returned empty response")
    template = parse_json(completion.text)
    if not isinstance(template, dict):
        raise ValueError("Template response is not a JSON object")
    logger.info("Template suggestion returned {} fields", len(template))
    return FormState.model_validate(template)


__all__ = [
    "FIELD_INSTRUCTIONS",
    "TEMPLATE_MODEL",
    "build_suggestion_prompt",
    "build_template_system_prompt",
    "build_template_user_prompt",
    "generate_template_json_suggestion",
    "get_suggestions",
    "parse_suggestions",
]
