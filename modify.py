from __future__ import annotations

"""Apply a free-form edit instruction ("make it punchier") to generated copy."""

from textwrap import dedent

from loguru import logger
from openai import OpenAI

from llm import Progress, chat_completion, parse_json, report, resolve_client
from models import Content, FormState
from prompts import NO_SEO_METADATA
from usage import UsageLedger
from wordcount import calculate_target_word_count, extract_word_count, flatten_content

MODIFIED_JSON_EXAMPLE = dedent(
    """
    {
      "headline": "Modified headline here",
      "sections": [
        {
          "title": "Section title",
          "content": "Modified section content"
        }
      ],
      "wordCountAccuracy": 85
    }
    """
).strip()


def build_modify_system_prompt(form: FormState, structured: bool) -> str:
    target = calculate_target_word_count(form).target
    parts = [
        "You are an expert copywriter who excels at modifying marketing content based on specific user instructions.",
        "Your task is to modify the provided marketing copy according to the user's instructions while maintaining "
        "the overall quality and effectiveness.\n"
        f"Keep the content in {form.language} language with a {form.tone} tone unless the instructions specify otherwise.",
    ]
    if target:
        parts.append(
            f"The original content was targeted for approximately {target} words. Maintain a similar length "
            "unless the instruction specifically asks to make it shorter or longer."
        )
    if structured:
        parts.append(
            "You must return your response as a JSON object with the same structure as the original content "
            "(headline and sections)."
        )
    else:
        parts.append("Provide your response as plain text with appropriate formatting.")
    parts.append(NO_SEO_METADATA)
    return "\n\n".join(parts)


def build_modify_user_prompt(content: Content, instruction: str, form: FormState, structured: bool) -> str:
    parts = [
        f'Please modify the following content according to this instruction: "{instruction}"',
        f'Original content:\n"""\n{flatten_content(content)}\n"""',
        f"Modification instruction: {instruction}",
        "Apply the requested changes while maintaining the quality and effectiveness of the marketing copy. "
        "Keep the same general structure and format unless the instruction asks you to change it.",
    ]
    context = [
        f"Target audience: {form.target_audience}" if form.target_audience else "",
        f"Key message to maintain: {form.key_message}" if form.key_message else "",
        f"Call to action: {form.call_to_action}" if form.call_to_action else "",
    ]
    if any(context):
        parts.append("\n".join(line for line in context if line))
    if structured:
        parts.append(f"Structure your response in this JSON format:\n{MODIFIED_JSON_EXAMPLE}")
    return "\n\n".join(parts)


def modify_content(
    content: Content,
    instruction: str,
    form: FormState,
    *,
    client: OpenAI | None = None,
    usage: UsageLedger | None = None,
    progress: Progress = None,
) -> Content:
    """Return ``content`` rewritten per ``instruction``; structured input stays structured when the reply parses."""
    if not instruction.strip():
        raise ValueError("A modification instruction is required")
    structured = isinstance(content, dict)
    client = resolve_client(client, form.model)
    report(progress, f'Modifying content: "{instruction}"...')

    try:
        completion = chat_completion(
            client,
            model=form.model,
            system=build_modify_system_prompt(form, structured),
            user=build_modify_user_prompt(content, instruction, form, structured),
            temperature=0.7,
            json_mode=structured,
            operation="modify_content",
            usage=usage,
            session_id=form.session_id,
            brief_description=f"Modify: {instruction[:50]}",
        )
        if not completion.text:
            raise RuntimeError("No content in response")
    except Exception as exc:
        logger.error("Error modifying content: {}", exc)
        report(progress, f"Error modifying content: {exc}")
        raise

    modified: Content = completion.text
    if structured:
        try:
            modified = parse_json(completion.text)
        except ValueError as exc:
            logger.warning("Modified content is not valid JSON, returning text: {}", exc)

    report(progress, f"Content modified successfully ({extract_word_count(modified)} words)")
    return modified


__all__ = ["build_modify_system_prompt", "build_modify_user_prompt", "modify_content"]
