"""LaTeX syntax checks, extraction and deep validation."""

from mcq_check.latex.checker import (
    KNOWN_COMMANDS,
    LatexIssue,
    LatexIssueType,
    check_basic_syntax,
    clean_latex,
    extract_latex_expressions,
    has_latex,
    has_latex_issues,
    latex_balance_errors,
)
from mcq_check.latex.typesetter import (
    LatexValidationResult,
    Typesetter,
    TypesetEngine,
    render_latex,
    validate_latex,
    validate_with_engine,
)

__all__ = [
    "KNOWN_COMMANDS",
    "LatexIssue",
    "LatexIssueType",
    "LatexValidationResult",
    "TypesetEngine",
    "Typesetter",
    "check_basic_syntax",
    "clean_latex",
    "extract_latex_expressions",
    "has_latex",
    "has_latex_issues",
    "latex_balance_errors",
    "render_latex",
    "validate_latex",
    "validate_with_engine",
]
