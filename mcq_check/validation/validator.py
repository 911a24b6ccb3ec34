"""Schema validation that collects every violation in one pass.

Two stages:
1. Shape: pydantic validates types and required fields (all field errors
   are gathered by pydantic itself).
2. Business rules: on shape success, every rule below runs against the
   output-shaped record and each failure becomes its own error ``Issue``.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from mcq_check.latex.checker import latex_balance_errors
from mcq_check.report import Issue
from mcq_check.validation.schema import InputQuestion, OutputQuestion

logger = logging.getLogger(__name__)

MIN_OPTIONS = 2


@dataclass(frozen=True)
class SchemaResult:
    """Either a validated record or a non-empty list of violations."""

    value: OutputQuestion | None = None
    violations: tuple[Issue, ...] = ()

    def __post_init__(self) -> None:
        if (self.value is None) == (not self.violations):
            raise ValueError("SchemaResult needs exactly one of value or violations")

    @property
    def ok(self) -> bool:
        return self.value is not None

    @classmethod
    def success(cls, value: OutputQuestion) -> SchemaResult:
        return cls(value=value)

    @classmethod
    def failure(cls, violations: list[Issue]) -> SchemaResult:
        return cls(violations=tuple(violations))


# -----------------------------------------------------------------------------
# Shape errors
# -----------------------------------------------------------------------------


def _shape_violations(exc: ValidationError) -> list[Issue]:
    """Convert pydantic errors to error issues with dotted field paths."""
    issues: list[Issue] = []
    for err in exc.errors(include_url=False):
        details: dict[str, Any] = {}
        path = ".".join(str(loc) for loc in err["loc"])
        if path:
            details["field"] = path
        # Missing fields would echo the whole record back; skip the input.
        if err["type"] != "missing" and "input" in err:
            details["original_value"] = err["input"]
        issues.append(Issue.error(err["msg"], **details))
    return issues


# -----------------------------------------------------------------------------
# Business rules
# -----------------------------------------------------------------------------


def check_option_count(question: OutputQuestion) -> list[Issue]:
    if len(question.options) >= MIN_OPTIONS:
        return []
    return [Issue.error(
        f"Question must have at least {MIN_OPTIONS} options",
        field="options",
        original_value=len(question.options),
    )]


def check_single_correct(question: OutputQuestion) -> list[Issue]:
    correct = sum(1 for opt in question.options if opt.correct)
    if correct == 1:
        return []
    return [Issue.error(
        "Question must have exactly one correct answer",
        field="options",
        original_value=correct,
    )]


def check_unique_ids(question: OutputQuestion) -> list[Issue]:
    counts = Counter(opt.id for opt in question.options)
    duplicates = sorted(opt_id for opt_id, n in counts.items() if n > 1)
    if not duplicates:
        return []
    return [Issue.error(
        "All option IDs must be unique",
        field="options",
        original_value=duplicates,
    )]


def check_order_sequence(question: OutputQuestion) -> list[Issue]:
    orders = sorted(opt.order for opt in question.options)
    if orders == list(range(len(orders))):
        return []
    return [Issue.error(
        "Option orders must be sequential starting from 0",
        field="options",
        original_value=orders,
    )]


def check_latex_balance(question: OutputQuestion) -> list[Issue]:
    issues = [
        Issue.error(msg, field="question", original_value=question.question)
        for msg in latex_balance_errors(question.question)
    ]
    for index, opt in enumerate(question.options):
        issues.extend(
            Issue.error(
                msg,
                field=f"options.{index}.content",
                original_value=opt.content,
            )
            for msg in latex_balance_errors(opt.content)
        )
    return issues


BUSINESS_RULES: tuple[Callable[[OutputQuestion], list[Issue]], ...] = (
    check_option_count,
    check_single_correct,
    check_unique_ids,
    check_order_sequence,
    check_latex_balance,
)


# -----------------------------------------------------------------------------
# Public API
# -----------------------------------------------------------------------------


def validate_output(candidate: Any) -> SchemaResult:
    """Validate an output-shaped record against shape and business rules."""
    try:
        question = OutputQuestion.model_validate(candidate)
    except ValidationError as exc:
        return SchemaResult.failure(_shape_violations(exc))

    violations = [issue for rule in BUSINESS_RULES for issue in rule(question)]
    if violations:
        return SchemaResult.failure(violations)
    return SchemaResult.success(question)


def validate_question(raw: Any) -> SchemaResult:
    """Validate a raw input record and transform it to output shape.

    Args:
        raw: One record from the input batch (any JSON value).

    Returns:
        SchemaResult with the validated ``OutputQuestion`` or every
        violation found.
    """
    try:
        parsed = InputQuestion.model_validate(raw)
    except ValidationError as exc:
        violations = _shape_violations(exc)
        logger.debug("Shape validation failed with %d violation(s)", len(violations))
        return SchemaResult.failure(violations)

    return validate_output(parsed.to_output())
