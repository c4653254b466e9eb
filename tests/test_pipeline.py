from __future__ import annotations

import json

import pytest
import requests

import pipeline
from models import OutputStructureElement
from pipeline import distribute_section_word_counts, generate_copy, notify_slack, request_approval


def words(count: int) -> str:
    return " ".join(["clay"] * count)


def test_distribute_splits_target_across_sections(form):
    structured = form.model_copy(
        update={"output_structure": [OutputStructureElement(value="header"), OutputStructureElement(value="cta")]}
    )
    result = distribute_section_word_counts(structured, 150)
    assert [element.word_count for element in result.output_structure] == [75, 75]


def test_distribute_leaves_explicit_counts_alone(form):
    structured = form.model_copy(
        update={"output_structure": [OutputStructureElement(value="header", word_count=30)]}
    )
    assert distribute_section_word_counts(structured, 150) is structured


def test_generate_plain_copy(fake_client, form, ledger):
    client = fake_client(words(150))
    messages = []

    result = generate_copy(form, client=client, usage=ledger, progress=messages.append)

    assert result.improved_copy == words(150)
    assert result.word_count_accuracy == 100
    assert result.session_id
    assert "Clayworks Mugs" in result.prompt_used
    assert client.requests[0]["temperature"] == 0.5
    assert "response_format" not in client.requests[0]
    assert messages[0] == "Initializing copy generation with gpt-4o..."
    assert ledger.summary(session_id=result.session_id)[0]["operation_type"] == "generate_create_copy"


def test_generate_revises_when_word_count_is_prioritised(fake_client, form):
    strict = form.model_copy(update={"prioritize_word_count": True})
    client = fake_client(words(60), words(150))

    result = generate_copy(strict, client=client)

    assert result.improved_copy == words(150)
    assert len(client.requests) == 2
    assert client.requests[1]["temperature"] == 0.5
    assert "Current word count: 60 words" in client.user_prompt(1)


def test_generate_runs_every_requested_extra(fake_client, form):
    copy = {
        "headline": "Mug questions",
        "sections": [
            {"title": "Are the mugs dishwasher safe?", "content": "Yes, every glaze is food safe and dishwasher safe."}
        ],
    }
    seo = {"urlSlugs": ["handmade-mugs"], "metaDescriptions": ["Handmade mugs from Portland"]}
    geo = {"overall": 72, "breakdown": [{"criterion": "Authority Signals", "score": 6}], "suggestions": ["Add stats"]}
    scores = {"overall": 88, "clarity": "Clear", "persuasiveness": "Strong", "toneMatch": "Fits", "engagement": "Good"}
    full = form.model_copy(
        update={
            "output_structure": [OutputStructureElement(value="faqJson", label="FAQ (JSON)")],
            "generate_seo_metadata": True,
            "generate_geo_score": True,
            "generate_scores": True,
        }
    )
    client = fake_client(copy, seo, geo, scores)

    result = generate_copy(full, client=client)

    assert result.improved_copy == copy
    assert result.seo_metadata.url_slugs == ["handmade-mugs"]
    assert result.faq_schema["mainEntity"][0]["name"] == "Are the mugs dishwasher safe?"
    assert result.geo_score.overall == 72
    assert result.content_scores.overall == 88
    assert client.requests[0]["response_format"] == {"type": "json_object"}
    assert len(client.requests) == 4


def test_malformed_faq_reply_keeps_generated_copy(fake_client, form):
    reply = {"@type": "FAQPage", "mainEntity": [{"name": "What is it?", "acceptedAnswer": "A mug."}]}
    fallback = {
        "@type": "FAQPage",
        "mainEntity": [{"@type": "Question", "name": "What is it?", "acceptedAnswer": {"text": "A mug."}}],
    }
    faq = form.model_copy(
        update={"output_structure": [OutputStructureElement(value="faqJson", label="FAQ (JSON)")]}
    )
    client = fake_client(reply, fallback)

    result = generate_copy(faq, client=client)

    assert result.improved_copy == reply
    assert result.faq_schema == fallback
    assert len(client.requests) == 2


def test_generate_raises_on_empty_reply(fake_client, form):
    with pytest.raises(RuntimeError, match="No content in response"):
        generate_copy(form, client=fake_client(""))


def test_request_approval_reprompts_until_answered(monkeypatch, capsys):
    answers = iter(["maybe", "y"])
    monkeypatch.setattr("builtins.input", lambda _prompt: next(answers))

    assert request_approval("copy", "Handmade mugs for slow mornings", auto_approve=False, preview_chars=8)
    out = capsys.readouterr().out
    assert "copy draft: 5 words" in out
    assert "Handmade…" in out
    assert "Answer 'y' to save this draft or 'n' to skip it." in out


def test_request_approval_declines_on_empty_answer(monkeypatch):
    monkeypatch.setattr("builtins.input", lambda _prompt: "")
    structured = {"headline": "Mugs", "sections": [{"title": "Why", "content": "Warm coffee"}]}

    assert not request_approval("alternative", structured, auto_approve=False, preview_chars=100)


def test_notify_slack_posts_preview(mocker):
    post = mocker.patch("pipeline.requests.post")

    notify_slack("https://hooks.example/abc", label="copy", content=words(20), preview_chars=9)

    payload = post.call_args.kwargs["json"]
    assert payload["text"] == "*Copy draft ready* (20 words)\n>clay clay…"


def test_notify_slack_failure_is_a_warning(mocker, caplog):
    mocker.patch("pipeline.requests.post", side_effect=requests.ConnectionError("down"))

    notify_slack("https://hooks.example/abc", label="copy", content="text", preview_chars=10)

    assert "Slack notification for the copy draft failed" in caplog.text


def test_main_dry_run_prints_prompts_for_brief(tmp_path, capsys):
    brief = tmp_path / "brief.md"
    brief.write_text("Handmade ceramic mugs for slow mornings.", encoding="utf-8")

    pipeline.main(["--brief-file", str(brief), "--dry-run"])

    out = capsys.readouterr().out
    assert "## CREATE prompt" in out
    assert "Handmade ceramic mugs for slow mornings." in out


def test_main_saves_approved_drafts(fake_client, form, tmp_path, mocker, monkeypatch, capsys):
    form_file = tmp_path / "form.json"
    form_file.write_text(json.dumps({"formState": form.model_dump(mode="json", by_alias=True)}), encoding="utf-8")
    client = fake_client(words(150))
    mocker.patch("pipeline.resolve_client", return_value=client)
    monkeypatch.setattr(pipeline, "SLACK_WEBHOOK_URL", None)
    out_dir = tmp_path / "out"

    pipeline.main(
        [
            "--form-file",
            str(form_file),
            "--output-dir",
            str(out_dir),
            "--usage-db",
            str(tmp_path / "usage.db"),
            "--export",
            "md",
            "json",
            "--auto-approve",
        ]
    )

    assert len(list(out_dir.glob("copy_*.md"))) == 1
    saved = json.loads(next(out_dir.glob("copy_*.json")).read_text(encoding="utf-8"))
    assert saved["improvedCopy"] == words(150)
    assert (out_dir / "form_state.json").exists()
    assert "generate_create_copy (gpt-4o): 42 tokens" in capsys.readouterr().out
