"""mcq-check: schema validation and deterministic repair of MCQ batches.

Usage::

    from mcq_check import CheckContext, run_batch

    result = run_batch(records, CheckContext())
    cleaned = result.valid_questions
    report = result.report.to_dict()
"""

from mcq_check.pipeline import (
    BatchResult,
    CheckContext,
    QuestionOutcome,
    classify_question,
    run_batch,
)
from mcq_check.report import (
    Disposition,
    Issue,
    IssueType,
    QuestionReport,
    ReportBuilder,
    ValidationReport,
)

__all__ = [
    "BatchResult",
    "CheckContext",
    "Disposition",
    "Issue",
    "IssueType",
    "QuestionOutcome",
    "QuestionReport",
    "ReportBuilder",
    "ValidationReport",
    "classify_question",
    "run_batch",
]
