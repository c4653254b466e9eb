from __future__ import annotations

"""FastAPI surface for generating, scoring and reworking marketing copy over HTTP."""

import os
from typing import Any, Dict, List, Optional, Union

import uvicorn
from fastapi import FastAPI, HTTPException
from loguru import logger
from openai import OpenAI
from pydantic import Field

from config import (
    DEFAULT_MODEL,
    LANGUAGE_STYLE_CONSTRAINTS,
    LANGUAGES,
    MODELS,
    OUTPUT_STRUCTURE_OPTIONS,
    PAGE_TYPES,
    PREFERRED_WRITING_STYLES,
    READER_FUNNEL_STAGES,
    SECTION_TYPES,
    TONES,
    USAGE_DB,
    WORD_COUNTS,
)
from geo import calculate_geo_score
from llm import create_client, friendly_error_message
from models import (
    CamelModel,
    Content,
    ContentQualityScore,
    CopyResult,
    FormState,
    GeoScoreData,
    PromptEvaluation,
    RestyleResult,
    ScoreData,
    SeoMetadata,
    VariantResult,
)
from modify import modify_content
from pipeline import generate_copy
from scoring import evaluate_content_quality, evaluate_prompt, generate_content_scores
from seo import faq_schema_from_content, generate_faq_schema_from_text, generate_seo_metadata
from suggestions import TEMPLATE_MODEL, generate_template_json_suggestion, get_suggestions
from usage import UsageLedger
from variants import generate_alternative_copy, generate_humanized_copy
from voices import VOICE_STYLES, generate_headlines, restyle_copy_with_persona
from wordcount import flatten_content

APP_DESCRIPTION = (
    "Generate, restyle and score marketing copy over HTTP so other tools can "
    "drive the copy maker without the command line."
)

app = FastAPI(
    title="Copy Maker API",
    description=APP_DESCRIPTION,
    version="0.1.0",
)

usage_ledger = UsageLedger(USAGE_DB)


class ApiRequest(CamelModel):
    api_key: Optional[str] = Field(
        default=None,
        description="Optional provider API key (falls back to the provider's env variable)",
    )


class FormRequest(ApiRequest):
    form: FormState


class ContentRequest(FormRequest):
    content: Content


class RestyleRequest(ApiRequest):
    content: Union[Content, List[str]]
    persona: str
    model: str = DEFAULT_MODEL
    language: str = "English"
    form: Optional[FormState] = None
    target_word_count: Optional[int] = Field(default=None, gt=0)


class HeadlinesRequest(ContentRequest):
    persona: Optional[str] = None
    count: Optional[int] = Field(default=None, ge=1, le=20)


class HeadlinesResponse(CamelModel):
    headlines: List[str]


class ScoresRequest(ApiRequest):
    content: Content
    content_type: str = "Generated copy"
    model: str = DEFAULT_MODEL
    original_content: Optional[str] = None
    target_word_count: Optional[int] = Field(default=None, gt=0)


class ContentQualityRequest(ApiRequest):
    content: str
    content_type: str = "copy"
    model: str = DEFAULT_MODEL


class FaqSchemaResponse(CamelModel):
    faq_schema: Optional[Dict[str, Any]] = None


class SuggestionsRequest(ApiRequest):
    text: str
    field_type: str
    model: str = DEFAULT_MODEL
    language: str = "English"


class SuggestionsResponse(CamelModel):
    suggestions: List[str]


class TemplateSuggestionRequest(ApiRequest):
    instruction: str


class ModifyRequest(ContentRequest):
    instruction: str


class ModifyResponse(CamelModel):
    content: Content


def _client(model: str, api_key: Optional[str]) -> OpenAI:
    return create_client(model, api_key)


def _server_error(exc: Exception) -> HTTPException:
    logger.exception("Request failed: {}", exc)
    return HTTPException(status_code=500, detail=friendly_error_message(exc))


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/options")
def options() -> Dict[str, Any]:
    """Choices for every select field on the copy form."""
    return {
        "models": MODELS,
        "languages": LANGUAGES,
        "tones": TONES,
        "wordCounts": WORD_COUNTS,
        "pageTypes": PAGE_TYPES,
        "sections": SECTION_TYPES,
        "outputStructure": OUTPUT_STRUCTURE_OPTIONS,
        "readerFunnelStages": READER_FUNNEL_STAGES,
        "writingStyles": PREFERRED_WRITING_STYLES,
        "languageStyleConstraints": LANGUAGE_STYLE_CONSTRAINTS,
    }


@app.get("/voices")
def voices() -> List[Dict[str, Any]]:
    return VOICE_STYLES


@app.post("/generate", response_model=CopyResult)
def api_generate(payload: FormRequest) -> CopyResult:
    if not payload.form.source_text.strip():
        raise HTTPException(status_code=400, detail="Business description or original copy is required")
    try:
        client = _client(payload.form.model, payload.api_key)
        return generate_copy(payload.form, client=client, usage=usage_ledger)
    except Exception as exc:
        raise _server_error(exc) from exc


@app.post("/alternative", response_model=VariantResult)
def api_alternative(payload: ContentRequest) -> VariantResult:
    try:
        client = _client(payload.form.model, payload.api_key)
        return generate_alternative_copy(payload.form, payload.content, client=client, usage=usage_ledger)
    except Exception as exc:
        raise _server_error(exc) from exc


@app.post("/humanize", response_model=VariantResult)
def api_humanize(payload: ContentRequest) -> VariantResult:
    try:
        client = _client(payload.form.model, payload.api_key)
        return generate_humanized_copy(payload.content, payload.form, client=client, usage=usage_ledger)
    except Exception as exc:
        raise _server_error(exc) from exc


@app.post("/restyle", response_model=RestyleResult)
def api_restyle(payload: RestyleRequest) -> RestyleResult:
    if not payload.persona.strip():
        raise HTTPException(status_code=400, detail="persona cannot be empty")
    model = payload.form.model if payload.form is not None else payload.model
    try:
        client = _client(model, payload.api_key)
        return restyle_copy_with_persona(
            payload.content,
            payload.persona,
            model,
            payload.language,
            form=payload.form,
            target_word_count=payload.target_word_count,
            client=client,
            usage=usage_ledger,
        )
    except Exception as exc:
        raise _server_error(exc) from exc


@app.post("/headlines", response_model=HeadlinesResponse)
def api_headlines(payload: HeadlinesRequest) -> HeadlinesResponse:
    try:
        client = _client(payload.form.model, payload.api_key)
        headlines = generate_headlines(
            payload.content,
            payload.persona,
            payload.form,
            payload.count,
            client=client,
            usage=usage_ledger,
        )
    except Exception as exc:
        raise _server_error(exc) from exc
    return HeadlinesResponse(headlines=headlines)


@app.post("/scores", response_model=ScoreData)
def api_scores(payload: ScoresRequest) -> ScoreData:
    try:
        client = _client(payload.model, payload.api_key)
        return generate_content_scores(
            payload.content,
            payload.content_type,
            payload.model,
            original_content=payload.original_content,
            target_word_count=payload.target_word_count,
            client=client,
            usage=usage_ledger,
        )
    except Exception as exc:
        raise _server_error(exc) from exc


@app.post("/geo-score", response_model=GeoScoreData)
def api_geo_score(payload: ContentRequest) -> GeoScoreData:
    try:
        client = _client(payload.form.model, payload.api_key)
        return calculate_geo_score(payload.content, payload.form, client=client, usage=usage_ledger)
    except Exception as exc:
        raise _server_error(exc) from exc


@app.post("/seo", response_model=SeoMetadata)
def api_seo(payload: ContentRequest) -> SeoMetadata:
    try:
        client = _client(payload.form.model, payload.api_key)
        return generate_seo_metadata(payload.content, payload.form, client=client, usage=usage_ledger)
    except Exception as exc:
        raise _server_error(exc) from exc


@app.post("/faq-schema", response_model=FaqSchemaResponse)
def api_faq_schema(payload: ContentRequest) -> FaqSchemaResponse:
    schema = faq_schema_from_content(payload.content)
    if schema is not None:
        return FaqSchemaResponse(faq_schema=schema)
    try:
        client = _client(payload.form.model, payload.api_key)
        schema = generate_faq_schema_from_text(
            flatten_content(payload.content), payload.form, client=client, usage=usage_ledger
        )
    except Exception as exc:
        raise _server_error(exc) from exc
    return FaqSchemaResponse(faq_schema=schema or None)


@app.post("/evaluate", response_model=PromptEvaluation)
def api_evaluate(payload: FormRequest) -> PromptEvaluation:
    if not payload.form.source_text.strip():
        raise HTTPException(status_code=400, detail="No text provided for evaluation")
    try:
        client = _client(payload.form.model, payload.api_key)
        return evaluate_prompt(payload.form, client=client, usage=usage_ledger)
    except Exception as exc:
        raise _server_error(exc) from exc


@app.post("/content-quality", response_model=ContentQualityScore)
def api_content_quality(payload: ContentQualityRequest) -> ContentQualityScore:
    if not payload.content.strip():
        raise HTTPException(status_code=400, detail="content cannot be empty")
    try:
        client = _client(payload.model, payload.api_key)
        return evaluate_content_quality(
            payload.content, payload.content_type, payload.model, client=client, usage=usage_ledger
        )
    except Exception as exc:
        raise _server_error(exc) from exc


@app.post("/suggestions", response_model=SuggestionsResponse)
def api_suggestions(payload: SuggestionsRequest) -> SuggestionsResponse:
    if not payload.text.strip() or not payload.field_type.strip():
        raise HTTPException(status_code=400, detail="Text and field type are required")
    try:
        client = _client(payload.model, payload.api_key)
        suggestions = get_suggestions(
            payload.text,
            payload.field_type,
            payload.model,
            payload.language,
            client=client,
            usage=usage_ledger,
        )
    except Exception as exc:
        raise _server_error(exc) from exc
    return SuggestionsResponse(suggestions=suggestions)


@app.post("/template-suggestion", response_model=FormState)
def api_template_suggestion(payload: TemplateSuggestionRequest) -> FormState:
    if not payload.instruction.strip():
        raise HTTPException(status_code=400, detail="instruction cannot be empty")
    try:
        client = _client(TEMPLATE_MODEL, payload.api_key)
        return generate_template_json_suggestion(payload.instruction, client=client, usage=usage_ledger)
    except Exception as exc:
        raise _server_error(exc) from exc


@app.post("/modify", response_model=ModifyResponse)
def api_modify(payload: ModifyRequest) -> ModifyResponse:
    if not payload.instruction.strip():
        raise HTTPException(status_code=400, detail="instruction cannot be empty")
    try:
        client = _client(payload.form.model, payload.api_key)
        content = modify_content(
            payload.content, payload.instruction, payload.form, client=client, usage=usage_ledger
        )
    except Exception as exc:
        raise _server_error(exc) from exc
    return ModifyResponse(content=content)


@app.get("/usage/status")
def usage_status(session_id: Optional[str] = None) -> Dict[str, Any]:
    usage_ledger.retry_failed_tracking()
    return {
        "queue": usage_ledger.tracking_queue_status(),
        "usage": usage_ledger.summary(session_id=session_id),
    }


def main() -> None:
    uvicorn.run("api:app", host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", "8000")))


if __name__ == "__main__":
    main()


__all__ = ["app", "main", "usage_ledger"]
