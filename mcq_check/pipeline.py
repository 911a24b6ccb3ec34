"""Per-record classification and batch orchestration.

Each record goes through:
  1. Schema validation (``validate_question``).
  2. On failure, deterministic repair (``repair_question``) and
     re-validation of the candidate (``validate_output``).
  3. Classification as passed, repaired or removed.

Records share no mutable state, so they can be classified in a thread
pool. Outcomes are merged into the report in input order once every
record has been classified.

Usage::

    from mcq_check.pipeline import CheckContext, run_batch

    result = run_batch(records, CheckContext())
    print(result.report.summary())
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any

from mcq_check.config import CheckSettings, get_settings
from mcq_check.fixing.repair import repair_question
from mcq_check.latex.checker import LatexIssueType
from mcq_check.latex.typesetter import Typesetter, TypesetEngine, validate_latex
from mcq_check.report import (
    Disposition,
    Issue,
    QuestionReport,
    ReportBuilder,
    ValidationReport,
)
from mcq_check.validation.schema import OutputQuestion
from mcq_check.validation.validator import validate_output, validate_question

logger = logging.getLogger(__name__)

UNKNOWN_QUESTION_ID = "unknown"


@dataclass
class CheckContext:
    """Execution context shared by every record in a run.

    Attributes:
        settings: Run settings.
        engine: Typesetting engine for deep LaTeX checks; None disables them.
    """

    settings: CheckSettings = field(default_factory=get_settings)
    engine: Typesetter | None = None

    @classmethod
    def from_settings(cls, settings: CheckSettings) -> CheckContext:
        """Build a context, creating an engine only when deep checks are on."""
        engine = TypesetEngine() if settings.deep_latex else None
        return cls(settings=settings, engine=engine)


@dataclass
class QuestionOutcome:
    """Classification of one input record."""

    position: int
    report: QuestionReport
    record: dict[str, Any] | None = None

    @property
    def disposition(self) -> Disposition:
        return self.report.disposition


@dataclass
class BatchResult:
    """Accepted records (input order) and the finalized report."""

    valid_questions: list[dict[str, Any]]
    report: ValidationReport


# -----------------------------------------------------------------------------
# Single record
# -----------------------------------------------------------------------------


def question_key(raw: Any) -> str:
    """Identifier used for a record in the report."""
    if isinstance(raw, Mapping):
        key = raw.get("question_id") or raw.get("id")
        if key:
            return str(key)
    return UNKNOWN_QUESTION_ID


def classify_question(
    raw: Any,
    context: CheckContext | None = None,
    position: int = 0,
) -> QuestionOutcome:
    """Validate, repair if needed, and classify one record.

    Never raises: unexpected errors remove the record and are logged on
    its report.
    """
    context = context or CheckContext()
    question_id = question_key(raw)
    issues: list[Issue] = []

    try:
        disposition, accepted = _validate_or_repair(raw, issues)
    except Exception as exc:
        logger.error("Unexpected error for question %s: %s", question_id, exc)
        issues.append(Issue.error(f"Unexpected error during validation: {exc}"))
        disposition, accepted = Disposition.REMOVED, None

    if accepted is not None and context.engine is not None:
        issues.extend(_deep_latex_issues(accepted, context.engine))

    logger.debug("Question %s: %s", question_id, disposition.value)
    return QuestionOutcome(
        position=position,
        report=QuestionReport(
            question_id=question_id,
            disposition=disposition,
            issues=issues,
        ),
        record=accepted.model_dump() if accepted is not None else None,
    )


def _validate_or_repair(
    raw: Any,
    issues: list[Issue],
) -> tuple[Disposition, OutputQuestion | None]:
    result = validate_question(raw)
    if result.ok:
        return Disposition.PASSED, result.value

    issues.extend(result.violations)

    candidate = repair_question(raw, issues)
    if candidate is None:
        return Disposition.REMOVED, None

    revalidated = validate_output(candidate)
    if revalidated.ok:
        return Disposition.REPAIRED, revalidated.value

    issues.extend(revalidated.violations)
    issues.append(Issue.error("Question could not be fixed automatically"))
    return Disposition.REMOVED, None


def _deep_latex_issues(question: OutputQuestion, engine: Typesetter) -> list[Issue]:
    """Typeset the question text and option contents (advisory only)."""
    targets: list[tuple[str, str | None]] = [("question", question.question)]
    targets.extend(
        (f"options.{index}.content", opt.content)
        for index, opt in enumerate(question.options)
    )

    issues: list[Issue] = []
    for field_path, text in targets:
        for latex_issue in validate_latex(text, engine=engine).issues:
            details: dict[str, Any] = {"field": field_path}
            if latex_issue.snippet is not None:
                details["original_value"] = latex_issue.snippet
            if latex_issue.type is LatexIssueType.ERROR:
                issues.append(Issue.error(latex_issue.message, **details))
            elif latex_issue.type is LatexIssueType.WARNING:
                issues.append(Issue.warning(latex_issue.message, **details))
    return issues


# -----------------------------------------------------------------------------
# Batch
# -----------------------------------------------------------------------------


def run_batch(
    records: list[Any],
    context: CheckContext | None = None,
    *,
    max_workers: int | None = None,
) -> BatchResult:
    """Classify every record and build the batch report.

    Args:
        records: Raw question records (the parsed input JSON array).
        context: Execution context; defaults to settings from the environment.
        max_workers: Overrides ``settings.max_workers`` (1 = sequential).

    Returns:
        BatchResult with accepted records in input order.

    Raises:
        ValueError: If records is not a list.
    """
    if not isinstance(records, list):
        msg = f"Expected a list of question records, got {type(records).__name__}"
        raise ValueError(msg)

    context = context or CheckContext()
    workers = max_workers or context.settings.max_workers
    logger.info(
        "Validating %d questions (workers=%d, deep_latex=%s)",
        len(records), workers, context.engine is not None,
    )

    if workers <= 1 or len(records) <= 1:
        outcomes = [
            classify_question(raw, context, position)
            for position, raw in enumerate(records)
        ]
    else:
        outcomes = _classify_parallel(records, context, workers)

    builder = ReportBuilder()
    valid_questions: list[dict[str, Any]] = []
    for outcome in sorted(outcomes, key=lambda o: o.position):
        builder.add(outcome.report, outcome.position)
        if outcome.record is not None:
            valid_questions.append(outcome.record)

    report = builder.finalize()
    logger.info(
        "Validation complete: %d total, %d fixed, %d removed",
        report.total_questions, report.fixed_questions, report.removed_questions,
    )
    return BatchResult(valid_questions=valid_questions, report=report)


def _classify_parallel(
    records: list[Any],
    context: CheckContext,
    workers: int,
) -> list[QuestionOutcome]:
    """Classify records in a thread pool; order is restored by the caller."""
    outcomes: list[QuestionOutcome] = []
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [
            pool.submit(classify_question, raw, context, position)
            for position, raw in enumerate(records)
        ]
        for future in as_completed(futures):
            outcomes.append(future.result())
    return outcomes
