from __future__ import annotations

"""Pydantic payloads shared by the generators, the CLI and the HTTP API."""

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from config import DEFAULT_LITTLE_TOLERANCE, DEFAULT_MODEL, DEFAULT_STRICT_TOLERANCE

# Generated copy is either plain text or a {"headline", "sections"} object.
Content = Union[str, Dict[str, Any]]


class CamelModel(BaseModel):
    """Accepts both snake_case and the camelCase keys the LLMs and form exports use."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OutputStructureElement(CamelModel):
    value: str
    label: Optional[str] = None
    word_count: Optional[int] = Field(default=None, ge=0)


class SeoVariantCounts(CamelModel):
    num_url_slugs: int = Field(default=1, ge=1, le=5)
    num_meta_descriptions: int = Field(default=1, ge=1, le=5)
    num_h1_variants: int = Field(default=1, ge=1, le=5)
    num_h2_variants: int = Field(default=2, ge=1, le=10)
    num_h3_variants: int = Field(default=2, ge=1, le=10)
    num_og_titles: int = Field(default=1, ge=1, le=5)
    num_og_descriptions: int = Field(default=1, ge=1, le=5)


class FormState(SeoVariantCounts):
    tab: Literal["create", "improve"] = "create"
    language: str = "English"
    tone: str = "Professional"
    word_count: str = "Medium: 100-200"
    custom_word_count: Optional[int] = Field(default=150, ge=1)
    competitor_urls: List[str] = Field(default_factory=list)
    business_description: str = ""
    original_copy: str = ""
    page_type: str = "Homepage"
    section: str = ""
    target_audience: str = ""
    key_message: str = ""
    desired_emotion: str = ""
    call_to_action: str = ""
    brand_values: str = ""
    keywords: str = ""
    context: str = ""
    brief_description: str = ""
    product_service_name: str = ""
    industry_niche: str = ""
    reader_funnel_stage: str = ""
    target_audience_pain_points: str = ""
    competitor_copy_text: str = ""
    output_structure: List[OutputStructureElement] = Field(default_factory=list)
    preferred_writing_style: str = ""
    language_style_constraints: List[str] = Field(default_factory=list)
    excluded_terms: str = ""
    tone_level: int = Field(default=50, ge=0, le=100)
    model: str = DEFAULT_MODEL
    selected_persona: str = ""

    generate_seo_metadata: bool = False
    generate_scores: bool = False
    generate_geo_score: bool = False
    force_keyword_integration: bool = False
    force_elaborations_examples: bool = False
    prioritize_word_count: bool = False
    word_count_tolerance_percentage: int = Field(default=DEFAULT_STRICT_TOLERANCE, ge=0, le=50)
    adhere_to_little_word_count: bool = False
    little_word_count_tolerance_percentage: int = Field(
        default=DEFAULT_LITTLE_TOLERANCE, ge=0, le=100
    )
    enhance_for_geo: bool = Field(default=False, alias="enhanceForGEO")
    add_tldr_summary: bool = True
    location: str = ""
    geo_regions: str = ""
    no_ai_detection: bool = Field(default=False, alias="noAIDetection")
    number_of_headlines: int = Field(default=3, ge=1, le=20)
    session_id: Optional[str] = None

    def structure_values(self) -> List[str]:
        return [element.value for element in self.output_structure]

    def has_structure(self, value: str) -> bool:
        return value in self.structure_values()

    @property
    def wants_faq_json(self) -> bool:
        return any(
            element.value == "faqJson" or "faq (json)" in (element.label or "").lower()
            for element in self.output_structure
        )

    @property
    def source_text(self) -> str:
        return self.business_description if self.tab == "create" else self.original_copy


class Section(CamelModel):
    title: str = ""
    content: Optional[str] = None
    list_items: List[str] = Field(default_factory=list)


class StructuredCopy(CamelModel):
    headline: str = ""
    sections: List[Section] = Field(default_factory=list)
    word_count_accuracy: Optional[int] = None
    tldr: Optional[str] = None


class WordCountTarget(BaseModel):
    target: int
    min: Optional[int] = None
    max: Optional[int] = None

    @property
    def is_range(self) -> bool:
        return self.min is not None and self.max is not None


class ToleranceSettings(BaseModel):
    minimum_acceptable_percentage: float
    maximum_acceptable_percentage: Optional[float] = None
    is_short_content: bool
    tolerance_mode: Literal["strict", "flexible", "normal"]


class ScoreData(CamelModel):
    overall: int = 0
    clarity: str = ""
    persuasiveness: str = ""
    tone_match: str = ""
    engagement: str = ""
    word_count_accuracy: Optional[int] = None
    improvement_explanation: Optional[str] = None


class GeoCriterion(CamelModel):
    criterion: str
    score: float = 0
    detected: bool = False
    explanation: str = ""


class GeoScoreData(CamelModel):
    overall: int = 0
    breakdown: List[GeoCriterion] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)


class SeoMetadata(CamelModel):
    url_slugs: List[str] = Field(default_factory=list)
    meta_descriptions: List[str] = Field(default_factory=list)
    h1_variants: List[str] = Field(default_factory=list)
    h2_headings: List[str] = Field(default_factory=list)
    h3_headings: List[str] = Field(default_factory=list)
    og_titles: List[str] = Field(default_factory=list)
    og_descriptions: List[str] = Field(default_factory=list)


class PromptEvaluation(CamelModel):
    score: int = 0
    tips: List[str] = Field(default_factory=list)


class ContentQualityScore(CamelModel):
    score: int = 0
    tips: List[str] = Field(default_factory=list)


class CopyResult(CamelModel):
    improved_copy: Content
    seo_metadata: Optional[SeoMetadata] = None
    geo_score: Optional[GeoScoreData] = None
    faq_schema: Optional[Dict[str, Any]] = None
    content_scores: Optional[ScoreData] = None
    word_count_accuracy: Optional[int] = None
    prompt_used: str = ""
    session_id: Optional[str] = None


class VariantResult(CamelModel):
    content: Content
    seo_metadata: Optional[SeoMetadata] = None
    geo_score: Optional[GeoScoreData] = None
    faq_schema: Optional[Dict[str, Any]] = None


class RestyleResult(CamelModel):
    content: Union[Content, List[str]]
    persona_used: str
    geo_score: Optional[GeoScoreData] = None
    faq_schema: Optional[Dict[str, Any]] = None


__all__ = [
    "Content",
    "ContentQualityScore",
    "CopyResult",
    "FormState",
    "GeoCriterion",
    "GeoScoreData",
    "OutputStructureElement",
    "PromptEvaluation",
    "RestyleResult",
    "ScoreData",
    "Section",
    "SeoMetadata",
    "StructuredCopy",
    "ToleranceSettings",
    "VariantResult",
    "WordCountTarget",
]
