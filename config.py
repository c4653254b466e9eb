from __future__ import annotations

"""Central configuration for the copy maker: providers, limits and option catalogues."""

import os
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv

load_dotenv()

# ── Paths ──────────────────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent
OUTPUTS_DIR = BASE_DIR / "outputs"
USAGE_DB = Path(os.getenv("USAGE_DB") or OUTPUTS_DIR / "usage.db")

# ── Models & providers ─────────────────────────────────────────────────────
DEFAULT_MODEL = os.getenv("COPY_MAKER_MODEL", "deepseek-chat")
DEFAULT_USER = os.getenv("COPY_MAKER_USER", "anonymous")
SLACK_WEBHOOK_URL = os.getenv("SLACK_WEBHOOK_URL")

PROVIDERS: Dict[str, Dict[str, object]] = {
    "OpenAI": {
        "env": "OPENAI_API_KEY",
        "base_url": "https://api.openai.com/v1",
        "models": ["gpt-4o", "gpt-4-turbo", "gpt-3.5-turbo"],
    },
    "DeepSeek": {
        "env": "DEEPSEEK_API_KEY",
        "base_url": "https://api.deepseek.com/v1",
        "models": ["deepseek-chat"],
    },
    "Grok": {
        "env": "GROK_API_KEY",
        "base_url": "https://api.x.ai/v1",
        "models": ["grok-4-latest"],
        "help": "You can get a Grok API key from https://console.x.ai/",
    },
}

MODELS: List[Dict[str, str]] = [
    {"label": "DeepSeek V3 (deepseek-chat)", "value": "deepseek-chat"},
    {"label": "GPT-4 Omni (gpt-4o)", "value": "gpt-4o"},
    {"label": "GPT-4 Turbo (gpt-4-turbo)", "value": "gpt-4-turbo"},
    {"label": "GPT-3.5 Turbo (gpt-3.5-turbo)", "value": "gpt-3.5-turbo"},
    {"label": "Grok 4 Latest (grok-4-latest)", "value": "grok-4-latest"},
]

MAX_TOKENS_PER_MODEL: Dict[str, int] = {
    "deepseek-chat": 8000,
    "gpt-4o": 4096,
    "gpt-4-turbo": 4096,
    "gpt-3.5-turbo": 4096,
    "grok-4-latest": 4096,
}
DEFAULT_MAX_TOKENS = 4000

# USD per token
TOKEN_COST_PER_MODEL: Dict[str, float] = {
    "gpt-4o": 0.000005,
    "gpt-4-turbo": 0.000003,
    "gpt-3.5-turbo": 0.0000015,
    "deepseek-chat": 0.0000025,
    "grok-4-latest": 0.000015,
}
DEFAULT_TOKEN_COST = 0.000003

# ── LLM call settings ──────────────────────────────────────────────────────
MAX_RETRIES = 3
BASE_DELAY = 1  # seconds; 1, 2, 4
MAX_DELAY = 30
REQUEST_TIMEOUT = 120.0

# ── Word count settings ────────────────────────────────────────────────────
WORD_COUNT_PRESETS: Dict[str, int] = {"Short": 75, "Medium": 150, "Long": 300}
DEFAULT_WORD_COUNT = 150
SHORT_CONTENT_LIMIT = 150
DEFAULT_LITTLE_TOLERANCE = 20
DEFAULT_STRICT_TOLERANCE = 2

# ── Form option catalogues ─────────────────────────────────────────────────
LANGUAGES = ["English", "Spanish", "French", "German", "Italian", "Portuguese"]
TONES = ["Professional", "Friendly", "Bold", "Minimalist", "Creative", "Persuasive"]
PAGE_TYPES = ["Homepage", "About", "Services", "Contact", "Other"]
SECTION_TYPES = [
    "Hero Section",
    "Benefits",
    "Features",
    "Services",
    "About",
    "Testimonials",
    "FAQ",
    "Full Copy",
    "Other",
]
WORD_COUNTS = ["Short: 50-100", "Medium: 100-200", "Long: 200-400", "Custom"]

OUTPUT_STRUCTURE_OPTIONS: List[Dict[str, str]] = [
    {"value": "header1", "label": "Header 1"},
    {"value": "header2", "label": "Header 2"},
    {"value": "structured", "label": "Structured with clear Subheadings"},
    {"value": "paragraphs", "label": "Paragraph"},
    {"value": "problem", "label": "Problem"},
    {"value": "solution", "label": "Solution"},
    {"value": "benefits", "label": "Benefits"},
    {"value": "features", "label": "Features"},
    {"value": "bullets", "label": "Bullet Points"},
    {"value": "numbered", "label": "Numbered list"},
    {"value": "qaFormat", "label": "Q&A"},
    {"value": "faqJson", "label": "FAQ (JSON)"},
    {"value": "callToAction", "label": "Call to Action"},
    {"value": "testimonial", "label": "Testimonial"},
    {"value": "comparison", "label": "Comparison"},
    {"value": "statistics", "label": "Statistics"},
    {"value": "casestudy", "label": "Case Study"},
    {"value": "quote", "label": "Quote"},
    {"value": "summary", "label": "Summary"},
    {"value": "introduction", "label": "Introduction"},
    {"value": "conclusion", "label": "Conclusion"},
]

READER_FUNNEL_STAGES = ["Awareness", "Consideration", "Decision", "Retention", "Advocacy"]
PREFERRED_WRITING_STYLES = [
    "Persuasive",
    "Conversational",
    "Informative",
    "Storytelling",
    "Educational",
    "Authoritative",
    "Humorous",
    "Inspirational",
]
LANGUAGE_STYLE_CONSTRAINTS = [
    "Avoid passive voice",
    "No idioms",
    "Avoid jargon",
    "Short sentences",
    "Simple vocabulary",
    "Avoid clichés",
    "Gender-neutral language",
    "Inclusive language",
]


def max_tokens_for(model: str) -> int:
    return MAX_TOKENS_PER_MODEL.get(model, DEFAULT_MAX_TOKENS)


def provider_for(model: str) -> Optional[str]:
    for name, provider in PROVIDERS.items():
        if model in provider["models"]:
            return name
    return None


def structure_label(value: str) -> str:
    for option in OUTPUT_STRUCTURE_OPTIONS:
        if option["value"] == value:
            return option["label"]
    return value


__all__ = [
    "DEFAULT_MODEL",
    "LANGUAGES",
    "LANGUAGE_STYLE_CONSTRAINTS",
    "MAX_TOKENS_PER_MODEL",
    "MODELS",
    "OUTPUTS_DIR",
    "OUTPUT_STRUCTURE_OPTIONS",
    "PAGE_TYPES",
    "PREFERRED_WRITING_STYLES",
    "PROVIDERS",
    "READER_FUNNEL_STAGES",
    "SECTION_TYPES",
    "TONES",
    "USAGE_DB",
    "WORD_COUNTS",
    "max_tokens_for",
    "provider_for",
    "structure_label",
]
