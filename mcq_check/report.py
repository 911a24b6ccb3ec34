"""Audit report models and the batch report accumulator.

An ``Issue`` is immutable once logged. Each input record produces exactly
one ``QuestionReport`` whose ``Disposition`` is decided by the outcome
classifier; ``ReportBuilder`` collects them into the final
``ValidationReport``.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Issues
# -----------------------------------------------------------------------------


class IssueType(str, Enum):
    """Severity / kind of a logged issue."""

    ERROR = "error"
    WARNING = "warning"
    FIXED = "fixed"


class Issue(BaseModel):
    """A single violation, warning or repair logged for a question.

    Optional details are serialized only when supplied, so an explicit
    ``original_value=None`` is kept while an omitted one is not.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: IssueType
    message: str
    field: str | None = None
    original_value: Any = Field(default=None, alias="originalValue")
    fixed_value: Any = Field(default=None, alias="fixedValue")

    @classmethod
    def error(cls, message: str, **details: Any) -> Issue:
        return cls(type=IssueType.ERROR, message=message, **details)

    @classmethod
    def warning(cls, message: str, **details: Any) -> Issue:
        return cls(type=IssueType.WARNING, message=message, **details)

    @classmethod
    def fixed(cls, message: str, **details: Any) -> Issue:
        return cls(type=IssueType.FIXED, message=message, **details)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the report wire format (camelCase keys)."""
        return self.model_dump(by_alias=True, exclude_unset=True, mode="json")


# -----------------------------------------------------------------------------
# Per-question report
# -----------------------------------------------------------------------------


class Disposition(str, Enum):
    """Terminal classification of a record."""

    PASSED = "passed"
    REPAIRED = "repaired"
    REMOVED = "removed"


@dataclass
class QuestionReport:
    """Issues and final disposition for one input record."""

    question_id: str
    disposition: Disposition
    issues: list[Issue] = field(default_factory=list)

    @property
    def validated_directly(self) -> bool:
        return self.disposition is Disposition.PASSED

    @property
    def repaired(self) -> bool:
        return self.disposition is Disposition.REPAIRED

    @property
    def was_fixed(self) -> bool:
        """True when the record ended up in the accepted output."""
        return self.validated_directly or self.repaired

    @property
    def was_removed(self) -> bool:
        return self.disposition is Disposition.REMOVED

    def to_dict(self) -> dict[str, Any]:
        return {
            "questionId": self.question_id,
            "issues": [issue.to_dict() for issue in self.issues],
            "wasFixed": self.was_fixed,
            "wasRemoved": self.was_removed,
        }


# -----------------------------------------------------------------------------
# Batch report
# -----------------------------------------------------------------------------


@dataclass
class ValidationReport:
    """Aggregate report for a whole batch."""

    total_questions: int = 0
    passed_questions: int = 0
    repaired_questions: int = 0
    removed_questions: int = 0
    questions: dict[str, QuestionReport] = field(default_factory=dict)

    @property
    def fixed_questions(self) -> int:
        """Records accepted into the output, with or without repair."""
        return self.passed_questions + self.repaired_questions

    def summary(self) -> str:
        lines = [
            f"Total questions:    {self.total_questions}",
            f"Passed as-is:       {self.passed_questions}",
            f"Repaired:           {self.repaired_questions}",
            f"Removed questions:  {self.removed_questions}",
        ]
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalQuestions": self.total_questions,
            "fixedQuestions": self.fixed_questions,
            "removedQuestions": self.removed_questions,
            "questions": {
                key: report.to_dict() for key, report in self.questions.items()
            },
        }


class ReportBuilder:
    """Thread-safe accumulator of per-question reports.

    Entries are keyed by question id. When two records share an id, the
    later one is keyed ``"{id}#{position}"`` so neither entry is lost.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, QuestionReport] = {}
        self._counts: dict[Disposition, int] = {d: 0 for d in Disposition}
        self._finalized = False

    def add(self, report: QuestionReport, position: int | None = None) -> str:
        """Record one finalized question report.

        Args:
            report: The question's report with its terminal disposition.
            position: Input position, used to disambiguate duplicate ids.

        Returns:
            The key the report was stored under.

        Raises:
            RuntimeError: If the builder was already finalized.
        """
        with self._lock:
            if self._finalized:
                raise RuntimeError("Cannot add to a finalized report")

            key = report.question_id
            if key in self._entries:
                suffix = position if position is not None else len(self._entries)
                key = f"{report.question_id}#{suffix}"
                while key in self._entries:
                    key = f"{key}#"
                logger.warning(
                    "Duplicate question id %s; storing report under %s",
                    report.question_id, key,
                )

            self._entries[key] = report
            self._counts[report.disposition] += 1
            return key

    def finalize(self) -> ValidationReport:
        """Freeze the accumulator and return the batch report.

        Raises:
            RuntimeError: If called more than once.
        """
        with self._lock:
            if self._finalized:
                raise RuntimeError("Report already finalized")
            self._finalized = True

            return ValidationReport(
                total_questions=len(self._entries),
                passed_questions=self._counts[Disposition.PASSED],
                repaired_questions=self._counts[Disposition.REPAIRED],
                removed_questions=self._counts[Disposition.REMOVED],
                questions=dict(self._entries),
            )
