"""Lightweight structural checks for LaTeX embedded in question text.

These checks are independent of math semantics: they look at delimiter and
brace balance, unknown commands and empty ``\\frac`` / ``\\sqrt`` arguments.
Deeper validation goes through the typesetting engine (see
``mcq_check.latex.typesetter``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


class LatexIssueType(str, Enum):
    """Severity of a LaTeX issue."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class LatexIssue:
    """A single problem found in a LaTeX-bearing string."""

    type: LatexIssueType
    message: str
    snippet: str | None = None
    position: int | None = None


# -----------------------------------------------------------------------------
# Patterns
# -----------------------------------------------------------------------------

_HAS_LATEX_PATTERN = re.compile(r"\$|\\([a-zA-Z]+|\{|\})")
_COMMAND_PATTERN = re.compile(r"\\[a-zA-Z]+")
_DISPLAY_MATH_PATTERN = re.compile(r"\$\$([^$]+)\$\$")
_INLINE_MATH_PATTERN = re.compile(r"\$([^$]+)\$")
_BARE_COMMAND_PATTERN = re.compile(r"\\[a-zA-Z]+\{[^}]*\}")
_FRACTION_PATTERN = re.compile(r"\\frac\s*\{([^}]*)\}\s*\{([^}]*)\}")
_SQRT_PATTERN = re.compile(r"\\sqrt\s*\{([^}]*)\}")
_EMPTY_COMMAND_PATTERN = re.compile(r"\\[a-zA-Z]+\{\s*\}")

# Common commands accepted without a warning.
KNOWN_COMMANDS = frozenset({
    # Greek, lower case
    "\\alpha", "\\beta", "\\gamma", "\\delta", "\\epsilon", "\\zeta",
    "\\eta", "\\theta", "\\iota", "\\kappa", "\\lambda", "\\mu", "\\nu",
    "\\xi", "\\pi", "\\rho", "\\sigma", "\\tau", "\\upsilon", "\\phi",
    "\\chi", "\\psi", "\\omega",
    # Greek, upper case
    "\\Alpha", "\\Beta", "\\Gamma", "\\Delta", "\\Epsilon", "\\Zeta",
    "\\Eta", "\\Theta", "\\Iota", "\\Kappa", "\\Lambda", "\\Mu", "\\Nu",
    "\\Xi", "\\Pi", "\\Rho", "\\Sigma", "\\Tau", "\\Upsilon", "\\Phi",
    "\\Chi", "\\Psi", "\\Omega",
    # Operators and functions
    "\\frac", "\\sqrt", "\\sum", "\\int", "\\prod", "\\lim", "\\inf",
    "\\sup", "\\sin", "\\cos", "\\tan", "\\log", "\\ln", "\\exp", "\\abs",
    "\\norm",
    # Delimiter sizing
    "\\left", "\\right", "\\big", "\\Big", "\\bigg", "\\Bigg",
    # Fonts and text
    "\\text", "\\mathrm", "\\mathbf", "\\mathit", "\\mathcal", "\\mathbb",
    # Accents
    "\\vec", "\\hat", "\\bar", "\\tilde", "\\dot", "\\ddot",
    # Relations and symbols
    "\\leq", "\\geq", "\\neq", "\\approx", "\\equiv", "\\propto",
    "\\infty", "\\partial", "\\nabla", "\\forall", "\\exists", "\\in",
    "\\notin",
})


# -----------------------------------------------------------------------------
# Detection
# -----------------------------------------------------------------------------


def has_latex(text: str | None) -> bool:
    """Return True if text contains a ``$``, a ``\\command`` or an escaped brace."""
    return bool(text) and bool(_HAS_LATEX_PATTERN.search(text))


def latex_balance_errors(text: str | None) -> list[str]:
    """Return the blocking delimiter errors for a string.

    Only unmatched ``$`` delimiters and unequal ``{``/``}`` counts are
    reported; this is the subset enforced on accepted records.
    """
    if not text:
        return []

    errors: list[str] = []
    if text.count("$") % 2 != 0:
        errors.append("LaTeX syntax error: unmatched dollar signs ($)")

    open_braces = text.count("{")
    close_braces = text.count("}")
    if open_braces != close_braces:
        errors.append(
            f"LaTeX syntax error: unmatched braces "
            f"({open_braces} opening vs {close_braces} closing)",
        )
    return errors


def check_basic_syntax(text: str) -> list[LatexIssue]:
    """Scan a string for structural LaTeX problems.

    Args:
        text: Free text that may embed LaTeX.

    Returns:
        Issues in scan order: delimiters, braces, unknown commands
        (warnings), then empty fraction / root arguments.
    """
    issues: list[LatexIssue] = []

    if text.count("$") % 2 != 0:
        issues.append(LatexIssue(
            type=LatexIssueType.ERROR,
            message="Unmatched dollar signs ($) found",
            snippet=text,
        ))

    open_braces = text.count("{")
    close_braces = text.count("}")
    if open_braces != close_braces:
        issues.append(LatexIssue(
            type=LatexIssueType.ERROR,
            message=(
                f"Unmatched braces: {open_braces} opening vs "
                f"{close_braces} closing"
            ),
            snippet=text,
        ))

    for match in _COMMAND_PATTERN.finditer(text):
        command = match.group(0)
        if command not in KNOWN_COMMANDS:
            issues.append(LatexIssue(
                type=LatexIssueType.WARNING,
                message=f"Unknown LaTeX command: {command}",
                snippet=command,
                position=match.start(),
            ))

    for match in _FRACTION_PATTERN.finditer(text):
        numerator, denominator = match.group(1), match.group(2)
        if not numerator.strip() or not denominator.strip():
            issues.append(LatexIssue(
                type=LatexIssueType.ERROR,
                message="Empty fraction found",
                snippet=match.group(0),
                position=match.start(),
            ))

    for match in _SQRT_PATTERN.finditer(text):
        if not match.group(1).strip():
            issues.append(LatexIssue(
                type=LatexIssueType.ERROR,
                message="Empty square root found",
                snippet=match.group(0),
                position=match.start(),
            ))

    return issues


def has_latex_issues(text: str | None) -> bool:
    """Quick check for the most common blocking problems.

    True when delimiters or braces are unbalanced, or when any command
    is given an empty argument (e.g. ``\\frac{}{2}``).
    """
    if not text:
        return False
    return bool(latex_balance_errors(text)) or bool(
        _EMPTY_COMMAND_PATTERN.search(text)
    )


# -----------------------------------------------------------------------------
# Extraction and cleanup
# -----------------------------------------------------------------------------


def extract_latex_expressions(text: str) -> list[str]:
    """Pull candidate math substrings for deeper validation.

    Display blocks (``$$...$$``) come first, then inline ``$...$`` found
    outside display blocks, then bare ``\\command{...}`` tokens found
    outside any math. Delimiters are kept on the returned strings.
    """
    expressions: list[str] = []

    expressions.extend(m.group(0) for m in _DISPLAY_MATH_PATTERN.finditer(text))
    without_display = _DISPLAY_MATH_PATTERN.sub(" ", text)

    expressions.extend(
        m.group(0) for m in _INLINE_MATH_PATTERN.finditer(without_display)
    )
    without_math = _INLINE_MATH_PATTERN.sub(" ", without_display)

    expressions.extend(
        m.group(0) for m in _BARE_COMMAND_PATTERN.finditer(without_math)
    )
    return expressions


def strip_math_delimiters(expression: str) -> tuple[str, bool]:
    """Return ``(body, is_display)`` for an extracted expression."""
    if len(expression) >= 4 and expression.startswith("$$") and expression.endswith("$$"):
        return expression[2:-2], True
    if len(expression) >= 2 and expression.startswith("$") and expression.endswith("$"):
        return expression[1:-1], False
    return expression, False


def clean_latex(text: str | None) -> str | None:
    """Normalize whitespace in LaTeX markup.

    Removes spaces around ``$`` delimiters and after backslashes, and
    tightens ``\\frac {a} {b}`` to ``\\frac{a}{b}``.
    """
    if not text:
        return text

    cleaned = re.sub(r"\s*\$\s*", "$", text)
    cleaned = re.sub(r"\\\s+(?=[a-zA-Z])", "\\\\", cleaned)
    cleaned = re.sub(r"\\frac\s*\{", r"\\frac{", cleaned)
    cleaned = re.sub(r"\}\s+\{", "}{", cleaned)
    return cleaned
