from __future__ import annotations

"""Generate marketing copy from a saved form (plus optional source files) from the command line."""

import argparse
import json
from pathlib import Path
from typing import Iterable, List, Optional
from uuid import uuid4

import requests
from loguru import logger
from openai import OpenAI

from config import OUTPUTS_DIR, SLACK_WEBHOOK_URL, USAGE_DB
from export import export_form_state, import_form_state, save_copy_outputs, slugify
from geo import calculate_geo_score
from ingest import load_source
from llm import Progress, chat_completion, parse_json, report, resolve_client
from models import Content, CopyResult, FormState, OutputStructureElement
from prompts import build_payload, print_payload
from refinement import revise_content_for_word_count
from scoring import generate_content_scores
from seo import faq_schema_from_content, generate_faq_schema_from_text, generate_seo_metadata
from usage import UsageLedger
from variants import generate_alternative_copy, generate_humanized_copy
from voices import restyle_copy_with_persona
from wordcount import (
    calculate_target_word_count,
    extract_word_count,
    flatten_content,
    needs_word_count_revision,
    word_count_accuracy,
)

EXPORT_FORMATS = ("md", "html", "docx", "json")


def distribute_section_word_counts(form: FormState, target: int) -> FormState:
    """Split the target evenly across sections when none carries its own count."""
    if not form.output_structure or any(element.word_count for element in form.output_structure):
        return form
    per_section = target // len(form.output_structure)
    structure = [
        OutputStructureElement(value=element.value, label=element.label, word_count=per_section)
        for element in form.output_structure
    ]
    logger.info(
        "Auto-distributed word count: {} words per section across {} sections",
        per_section,
        len(structure),
    )
    return form.model_copy(update={"output_structure": structure})


def generate_copy(
    form: FormState,
    *,
    client: OpenAI | None = None,
    usage: UsageLedger | None = None,
    progress: Progress = None,
) -> CopyResult:
    """Generate new or improved copy and run the optional post-processing steps."""
    form = form.model_copy(update={"session_id": form.session_id or str(uuid4())})
    target_info = calculate_target_word_count(form)
    target = target_info.target
    client = resolve_client(client, form.model)

    report(progress, f"Initializing copy generation with {form.model}...")
    distributed = distribute_section_word_counts(form, target)
    if distributed is not form:
        report(progress, f"Auto-distributed {target} words across {len(form.output_structure)} sections")
        form = distributed

    payload = build_payload(form, target_info)
    use_json = bool(form.output_structure)
    action = "new" if form.tab == "create" else "improved"
    report(progress, f"Generating {action} copy with target of {target} words...")

    try:
        completion = chat_completion(
            client,
            model=form.model,
            system=payload["system"],
            user=payload["user"],
            temperature=0.5 if target <= 150 else 0.7,
            json_mode=use_json,
            operation=f"generate_{form.tab}_copy",
            usage=usage,
            session_id=form.session_id,
            brief_description=form.brief_description or f"Generate {form.tab} copy",
        )
        if not completion.text:
            raise RuntimeError("No content in response")
    except Exception as exc:
        logger.error("Error generating copy: {}", exc)
        report(progress, f"Error generating copy: {exc}")
        raise

    copy = completion.text
    if use_json:
        try:
            copy = parse_json(completion.text)
        except ValueError as exc:
            logger.warning("Failed to parse JSON response, using plain text: {}", exc)

    words = extract_word_count(copy)
    report(progress, f"Initial copy generated with {words} words (target: {target})")

    if form.prioritize_word_count or form.adhere_to_little_word_count:
        if needs_word_count_revision(words, target_info, form):
            report(progress, f"Content has {words} words against a target of {target}. Revising...")
            revision_form = form.model_copy(
                update={"prioritize_word_count": True, "force_elaborations_examples": True}
            )
            copy = revise_content_for_word_count(
                copy, target_info, revision_form, client=client, usage=usage, progress=progress
            )
            words = extract_word_count(copy)
        else:
            report(progress, f"Content meets word count requirements: {words} words")

    result = CopyResult(
        improved_copy=copy,
        prompt_used=payload["user"],
        session_id=form.session_id,
        word_count_accuracy=word_count_accuracy(words, target),
    )

    if form.generate_seo_metadata:
        report(progress, "Generating SEO metadata...")
        try:
            result.seo_metadata = generate_seo_metadata(
                copy, form, client=client, usage=usage, progress=progress
            )
        except Exception as exc:
            logger.error("Error generating SEO metadata: {}", exc)
            report(progress, "Error generating SEO metadata, continuing...")

    if form.wants_faq_json:
        report(progress, "Generating FAQ Schema from content...")
        try:
            result.faq_schema = faq_schema_from_content(copy)
        except Exception as exc:
            logger.error("Error building FAQ schema from content: {}", exc)
        if result.faq_schema is None:
            try:
                text = copy if isinstance(copy, str) else json.dumps(copy, ensure_ascii=False)
                result.faq_schema = generate_faq_schema_from_text(
                    text, form, client=client, usage=usage, progress=progress
                )
            except Exception as exc:
                logger.error("Error generating FAQ schema: {}", exc)
                report(progress, "Error generating FAQ schema, continuing...")

    if form.generate_geo_score:
        report(progress, "Calculating GEO score...")
        try:
            result.geo_score = calculate_geo_score(copy, form, client=client, usage=usage, progress=progress)
        except Exception as exc:
            logger.error("Error calculating GEO score: {}", exc)
            report(progress, "Error calculating GEO score, continuing...")

    if form.generate_scores:
        report(progress, "Scoring generated copy...")
        result.content_scores = generate_content_scores(
            copy,
            "Generated copy",
            form.model,
            target_word_count=target,
            client=client,
            usage=usage,
            session_id=form.session_id,
            progress=progress,
        )

    return result


def _draft_preview(content: Content, limit: int) -> str:
    text = " ".join(flatten_content(content).split())
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + "…"


def request_approval(
    label: str,
    content: Content,
    *,
    auto_approve: bool,
    preview_chars: int,
) -> bool:
    """Preview a copy draft on the terminal and ask whether to save it."""
    if auto_approve:
        return True
    print(f"\n{label} draft: {extract_word_count(content)} words")
    print(f"  {_draft_preview(content, preview_chars)}\n")
    while True:
        choice = input(f"Save the {label} draft? [y/N]: ").strip().lower()
        if choice in {"y", "yes"}:
            return True
        if choice in {"", "n", "no"}:
            return False
        print("Answer 'y' to save this draft or 'n' to skip it.")


def notify_slack(
    webhook_url: Optional[str],
    *,
    label: str,
    content: Content,
    preview_chars: int,
) -> None:
    if not webhook_url:
        return
    words = extract_word_count(content)
    payload = {"text": f"*{label.title()} draft ready* ({words} words)\n>{_draft_preview(content, preview_chars)}"}
    try:
        response = requests.post(webhook_url, json=payload, timeout=10)
        response.raise_for_status()
    except requests.RequestException as exc:
        logger.warning("Slack notification for the {} draft failed: {}", label, exc)


def load_form(args: argparse.Namespace) -> FormState:
    form = import_form_state(args.form_file) if args.form_file else FormState()
    updates = {}
    if args.brief_file:
        updates.update(tab="create", business_description=load_source(args.brief_file))
    if args.original_file:
        updates.update(tab="improve", original_copy=load_source(args.original_file))
    if args.model:
        updates["model"] = args.model
    return form.model_copy(update=updates) if updates else form


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--form-file", type=Path, help="Form state JSON exported earlier")
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--brief-file",
        type=Path,
        help="Business description to create copy from (.md, .txt, .docx or .pdf)",
    )
    source.add_argument(
        "--original-file",
        type=Path,
        help="Existing copy to improve (.md, .txt, .docx or .pdf)",
    )
    parser.add_argument("--model", help="Override the model stored in the form")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=OUTPUTS_DIR,
        help="Directory for generated files (default: outputs/)",
    )
    parser.add_argument(
        "--export",
        nargs="+",
        choices=EXPORT_FORMATS,
        default=["md"],
        help="Formats to save the approved copy in (default: md)",
    )
    parser.add_argument("--alternative", action="store_true", help="Also generate an alternative version")
    parser.add_argument("--humanize", action="store_true", help="Also generate a humanized version")
    parser.add_argument("--persona", help="Restyle the copy in this voice (see voices.VOICE_STYLES)")
    parser.add_argument(
        "--usage-db",
        type=Path,
        default=USAGE_DB,
        help="SQLite token usage ledger (default outputs/usage.db)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print prompts without calling the model.",
    )
    parser.add_argument(
        "--auto-approve",
        action="store_true",
        help="Skip interactive approval and save all drafts automatically.",
    )
    parser.add_argument(
        "--preview-chars",
        type=int,
        default=2000,
        help="Number of characters to show during approval previews (default: 2000)",
    )
    parser.add_argument(
        "--slack-webhook-url",
        help="Slack incoming webhook URL (falls back to SLACK_WEBHOOK_URL env)",
    )
    return parser.parse_args(list(argv) if argv is not None else None)


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)
    form = load_form(args)

    if args.dry_run:
        print_payload(form.tab, build_payload(form))
        return

    client = resolve_client(None, form.model)
    usage = UsageLedger(args.usage_db)
    slack_webhook = args.slack_webhook_url or SLACK_WEBHOOK_URL

    result = generate_copy(form, client=client, usage=usage, progress=print)
    form = form.model_copy(update={"session_id": result.session_id})

    def as_draft(variant) -> CopyResult:
        return CopyResult(
            improved_copy=variant.content,
            seo_metadata=getattr(variant, "seo_metadata", None),
            geo_score=variant.geo_score,
            faq_schema=variant.faq_schema,
            session_id=result.session_id,
        )

    drafts: List[tuple[str, CopyResult]] = [("copy", result)]
    if args.alternative:
        variant = generate_alternative_copy(
            form, result.improved_copy, client=client, usage=usage, progress=print
        )
        drafts.append(("alternative", as_draft(variant)))
    if args.humanize:
        variant = generate_humanized_copy(
            result.improved_copy, form, client=client, usage=usage, progress=print
        )
        drafts.append(("humanized", as_draft(variant)))
    if args.persona:
        restyled = restyle_copy_with_persona(
            result.improved_copy,
            args.persona,
            form.model,
            form.language,
            form=form,
            client=client,
            usage=usage,
            progress=print,
        )
        drafts.append((slugify(args.persona), as_draft(restyled)))

    for label, draft in drafts:
        if slack_webhook:
            notify_slack(slack_webhook, label=label, content=draft.improved_copy, preview_chars=args.preview_chars)
        if not request_approval(
            label,
            draft.improved_copy,
            auto_approve=args.auto_approve,
            preview_chars=args.preview_chars,
        ):
            print(f"{label} draft not saved.")
            continue
        save_copy_outputs(draft, form, args.output_dir, stem=label, formats=args.export)

    export_form_state(form, args.output_dir / "form_state.json")
    for row in usage.summary(session_id=result.session_id):
        print(f"{row['operation_type']} ({row['model']}): {row['tokens_used']} tokens, ${row['cost_usd']:.4f}")


if __name__ == "__main__":
    main()


__all__ = [
    "distribute_section_word_counts",
    "generate_copy",
    "main",
    "notify_slack",
    "parse_args",
    "request_approval",
]
