"""Record schema and exhaustive validation."""

from mcq_check.validation.schema import (
    InputOption,
    InputQuestion,
    OutputOption,
    OutputQuestion,
)
from mcq_check.validation.validator import (
    BUSINESS_RULES,
    SchemaResult,
    validate_output,
    validate_question,
)

__all__ = [
    "BUSINESS_RULES",
    "InputOption",
    "InputQuestion",
    "OutputOption",
    "OutputQuestion",
    "SchemaResult",
    "validate_output",
    "validate_question",
]
