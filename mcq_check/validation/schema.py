"""Pydantic models for MCQ records.

The input model accepts the raw batch shape (``question_id`` /
``specification`` / options as a list or a JSON string) and also the
output field names, so a cleaned dataset validates again unchanged.
Business rules that span several options (cardinality, single correct
answer, id uniqueness, order permutation, LaTeX balance) are not encoded
here; they live in ``mcq_check.validation.validator`` so that every
failing rule is reported, not just the first.
"""

from __future__ import annotations

import json
import re
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    field_validator,
)

UUID_PATTERN = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$",
)


def _check_uuid(value: str) -> str:
    if not UUID_PATTERN.match(value):
        msg = f"Invalid uuid: '{value}'"
        raise ValueError(msg)
    return value


def _check_content(value: str) -> str:
    if not value:
        raise ValueError("Option content cannot be empty")
    return value


# -----------------------------------------------------------------------------
# Input shape
# -----------------------------------------------------------------------------


class InputOption(BaseModel):
    """One answer choice as supplied in the raw batch."""

    id: StrictInt
    content: StrictStr
    correct: StrictBool
    order: StrictInt = Field(..., ge=0)
    markscheme: StrictStr | None = None

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        return _check_content(v)


class InputQuestion(BaseModel):
    """A raw question record."""

    question_id: StrictStr = Field(
        ...,
        validation_alias=AliasChoices("question_id", "id"),
    )
    specification: StrictStr | None = Field(
        ...,
        validation_alias=AliasChoices("specification", "question"),
        description="Question text; may embed LaTeX",
    )
    options: list[InputOption]

    @field_validator("question_id")
    @classmethod
    def validate_question_id(cls, v: str) -> str:
        return _check_uuid(v)

    @field_validator("options", mode="before")
    @classmethod
    def parse_options_string(cls, v: Any) -> Any:
        """Decode options supplied as a JSON-encoded string."""
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError as exc:
                msg = f"Options string is not valid JSON: {exc.msg}"
                raise ValueError(msg) from exc
        return v

    def to_output(self) -> dict[str, Any]:
        """Transform to the output record shape."""
        return {
            "id": self.question_id,
            "question": self.specification,
            "options": [
                option.model_dump(exclude={"markscheme"})
                for option in self.options
            ],
        }


# -----------------------------------------------------------------------------
# Output shape
# -----------------------------------------------------------------------------


class OutputOption(BaseModel):
    """An answer choice in the cleaned dataset."""

    id: StrictInt
    content: StrictStr
    correct: StrictBool
    order: StrictInt = Field(..., ge=0)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        return _check_content(v)


class OutputQuestion(BaseModel):
    """A question in the cleaned dataset."""

    id: StrictStr
    question: StrictStr | None
    options: list[OutputOption]

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        return _check_uuid(v)
