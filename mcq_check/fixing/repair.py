"""Deterministic repair of question records that fail validation.

``repair_question`` never touches question or option text beyond
de-duplicating option contents; it only restructures options so the
record can satisfy the output schema. Every change is logged as a
``fixed`` Issue on the caller's list. The result is a candidate and must
still be re-validated with ``validate_output``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from mcq_check.report import Issue
from mcq_check.validation.validator import MIN_OPTIONS

logger = logging.getLogger(__name__)


def _is_int_id(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _irreparable(issues: list[Issue], reason: str, **details: Any) -> None:
    issues.append(Issue.error(f"Question could not be repaired: {reason}", **details))
    return None


def _resolve_options(raw_options: Any, issues: list[Issue]) -> list[Any] | None:
    """Decode the options field into a list, or log why it cannot be."""
    if isinstance(raw_options, str):
        try:
            raw_options = json.loads(raw_options)
        except json.JSONDecodeError as exc:
            return _irreparable(
                issues, f"options string is not valid JSON ({exc.msg})",
                field="options",
            )
    if not isinstance(raw_options, list):
        return _irreparable(
            issues, "options is not a list",
            field="options",
        )
    return raw_options


def repair_question(raw: Any, issues: list[Issue]) -> dict[str, Any] | None:
    """Attempt to turn a failing record into a schema-compliant one.

    Steps, in order: carry id and text through; decode options; drop
    non-object entries; reassign duplicate or invalid ids; suffix
    duplicate contents; renumber orders 0..n-1; enforce exactly one
    correct answer; require at least two surviving options.

    Args:
        raw: The original input record.
        issues: The question's issue log; repairs are appended in order.

    Returns:
        An output-shaped candidate dict, or None if the record is
        irreparable.
    """
    if not isinstance(raw, Mapping):
        return _irreparable(issues, "record is not an object")

    question_id = raw.get("question_id") or raw.get("id")
    text = raw.get("specification") or raw.get("question") or None

    options = _resolve_options(raw.get("options"), issues)
    if options is None:
        return None

    # New ids start above every integer id present anywhere in the list,
    # so a reassigned id can never collide with a later original one.
    next_free_id = max(
        (opt.get("id") for opt in options
         if isinstance(opt, Mapping) and _is_int_id(opt.get("id"))),
        default=0,
    ) + 1

    fixed_options: list[dict[str, Any]] = []
    seen_ids: set[int] = set()
    seen_content: set[str] = set()
    correct_count = 0

    for index, option in enumerate(options):
        if not isinstance(option, Mapping):
            issues.append(Issue.fixed(
                "Removed option entry that is not an object",
                field=f"options[{index}]",
                original_value=option,
            ))
            continue

        position = len(fixed_options)

        # Ids
        original_id = option.get("id")
        option_id = original_id
        if not _is_int_id(original_id) or original_id in seen_ids:
            option_id = next_free_id
            next_free_id += 1
            message = (
                "Fixed duplicate option ID"
                if _is_int_id(original_id)
                else "Replaced missing or invalid option ID"
            )
            issues.append(Issue.fixed(
                message,
                field=f"options[{index}].id",
                original_value=original_id,
                fixed_value=option_id,
            ))
        seen_ids.add(option_id)

        # Contents
        original_content = option.get("content")
        content = original_content if isinstance(original_content, str) else ""
        if content.strip() and content in seen_content:
            content = f"{content} (Option {position + 1})"
            issues.append(Issue.fixed(
                "Fixed duplicate option content",
                field=f"options[{index}].content",
                original_value=original_content,
                fixed_value=content,
            ))
        seen_content.add(content)

        correct = bool(option.get("correct"))
        if correct:
            correct_count += 1

        fixed_options.append({
            "id": option_id,
            "content": content,
            "correct": correct,
            "order": position,
        })

    _fix_correct_answers(fixed_options, correct_count, issues)

    if len(fixed_options) < MIN_OPTIONS:
        return _irreparable(
            issues,
            f"only {len(fixed_options)} usable option(s), need {MIN_OPTIONS}",
            field="options",
        )

    logger.debug(
        "Repaired question %s: %d of %d options kept",
        question_id, len(fixed_options), len(options),
    )
    return {
        "id": question_id,
        "question": text,
        "options": fixed_options,
    }


def _fix_correct_answers(
    options: list[dict[str, Any]],
    correct_count: int,
    issues: list[Issue],
) -> None:
    """Leave exactly one correct option, preferring the first marked one."""
    if not options:
        return

    if correct_count == 0:
        options[0]["correct"] = True
        issues.append(Issue.fixed(
            "No correct answer found, marked first option as correct",
            field="options[0].correct",
            original_value=False,
            fixed_value=True,
        ))
        return

    if correct_count > 1:
        kept_first = False
        for position, option in enumerate(options):
            if not option["correct"]:
                continue
            if not kept_first:
                kept_first = True
                continue
            option["correct"] = False
            issues.append(Issue.fixed(
                "Multiple correct answers found, kept only the first one",
                field=f"options[{position}].correct",
                original_value=True,
                fixed_value=False,
            ))
