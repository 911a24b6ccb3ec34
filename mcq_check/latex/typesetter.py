"""Best-effort deep LaTeX validation through matplotlib's mathtext engine.

The engine is an explicit handle (``TypesetEngine``) rather than module
state: callers create one and pass it along, usually inside a
``CheckContext``. It initializes itself lazily, at most once, and
serializes calls into matplotlib, whose mathtext parser is shared state.

Usage::

    from mcq_check.latex import TypesetEngine, validate_latex

    engine = TypesetEngine()
    result = validate_latex(r"Solve $\\frac{x}{2} = 1$", engine=engine)
    if not result.is_valid:
        for issue in result.issues:
            print(issue.type.value, issue.message)
"""

from __future__ import annotations

import io
import logging
import re
import threading
from dataclasses import dataclass, field
from typing import Any, Protocol

from mcq_check.latex.checker import (
    LatexIssue,
    LatexIssueType,
    check_basic_syntax,
    extract_latex_expressions,
    has_latex,
    strip_math_delimiters,
)

logger = logging.getLogger(__name__)


class Typesetter(Protocol):
    """Narrow contract for a deep validator: raise if markup cannot be typeset."""

    def typeset(self, expression: str) -> None: ...


@dataclass
class LatexValidationResult:
    """Outcome of validating one string."""

    is_valid: bool
    has_latex: bool
    issues: list[LatexIssue] = field(default_factory=list)


# -----------------------------------------------------------------------------
# matplotlib-backed engine
# -----------------------------------------------------------------------------


class TypesetEngine:
    """Once-initialized handle around matplotlib mathtext."""

    def __init__(self, fontsize: float = 12.0, dpi: int = 72) -> None:
        self._fontsize = fontsize
        self._dpi = dpi
        self._init_lock = threading.Lock()
        self._render_lock = threading.Lock()
        self._parser: Any = None
        self._font_props: Any = None
        self.init_count = 0

    @property
    def initialized(self) -> bool:
        return self._parser is not None

    def ensure_initialized(self) -> None:
        """Import matplotlib and build the parser, once per engine."""
        if self._parser is not None:
            return
        with self._init_lock:
            if self._parser is not None:
                return

            import matplotlib
            matplotlib.use("Agg")  # non-interactive backend
            from matplotlib.font_manager import FontProperties
            from matplotlib.mathtext import MathTextParser

            self._font_props = FontProperties(size=self._fontsize)
            self._parser = MathTextParser("path")
            self.init_count += 1
            logger.debug("mathtext engine initialized")

    def typeset(self, expression: str) -> None:
        """Typeset an expression, raising ``ValueError`` if it is invalid.

        Accepts the expression with or without ``$``/``$$`` delimiters.
        """
        self.ensure_initialized()
        body, _ = strip_math_delimiters(expression)
        with self._render_lock:
            self._parser.parse(f"${body}$", dpi=self._dpi, prop=self._font_props)

    def render_svg(self, expression: str) -> str:
        """Render an expression to a bare ``<svg>`` element.

        The XML prolog, doctype, comments and ``<metadata>`` block that
        matplotlib writes are dropped, and element ids are hashed with a
        fixed salt, so the same expression always renders to the same
        markup and the result can be embedded in text.
        """
        self.ensure_initialized()
        import matplotlib
        from matplotlib.mathtext import math_to_image

        body, _ = strip_math_delimiters(expression)
        buffer = io.BytesIO()
        with self._render_lock, matplotlib.rc_context({"svg.hashsalt": _SVG_HASH_SALT}):
            math_to_image(
                f"${body}$", buffer, prop=self._font_props, dpi=self._dpi,
                format="svg",
            )
        return _svg_element(buffer.getvalue().decode("utf-8"))


_SVG_HASH_SALT = "mcq-check"
_SVG_METADATA_PATTERN = re.compile(r"<metadata>.*?</metadata>\s*", re.DOTALL)
_XML_COMMENT_PATTERN = re.compile(r"<!--.*?-->\s*", re.DOTALL)


def _svg_element(document: str) -> str:
    """Cut a standalone SVG document down to its ``<svg>`` element."""
    start = document.find("<svg")
    if start == -1:
        raise ValueError("Renderer produced no <svg> element")
    element = _SVG_METADATA_PATTERN.sub("", document[start:])
    element = _XML_COMMENT_PATTERN.sub("", element)
    return element.strip()


# -----------------------------------------------------------------------------
# Validation and rendering
# -----------------------------------------------------------------------------


def validate_with_engine(engine: Typesetter, expression: str) -> list[LatexIssue]:
    """Typeset one expression; any failure becomes a single error issue."""
    try:
        engine.typeset(expression)
    except Exception as exc:
        logger.debug("Typesetting failed for %r: %s", expression[:60], exc)
        return [LatexIssue(
            type=LatexIssueType.ERROR,
            message=f"Typesetting error: {exc}",
            snippet=expression,
        )]
    return []


def validate_latex(
    text: str | None,
    engine: Typesetter | None = None,
) -> LatexValidationResult:
    """Validate a LaTeX-bearing string.

    Args:
        text: Free text that may embed LaTeX.
        engine: Optional deep validator; when given, every extracted
            expression is typeset and failures are reported as errors.

    Returns:
        LatexValidationResult; ``is_valid`` is False when any error-level
        issue was found. Warnings never invalidate.
    """
    if not has_latex(text):
        return LatexValidationResult(is_valid=True, has_latex=False)

    issues = check_basic_syntax(text)

    if engine is not None:
        for expression in extract_latex_expressions(text):
            issues.extend(validate_with_engine(engine, expression))

    is_valid = not any(i.type is LatexIssueType.ERROR for i in issues)
    return LatexValidationResult(is_valid=is_valid, has_latex=True, issues=issues)


# Display first in the alternation so "$$x$$" is not read as two inline blocks.
_MATH_RENDER_PATTERN = re.compile(r"\$\$([^$]+)\$\$|\$([^$]+)\$")


def render_latex(text: str | None, engine: TypesetEngine) -> str | None:
    """Replace display and inline math in text with rendered SVG.

    Expressions that fail to render are left as written. If the engine
    cannot be initialized at all, the original text is returned.
    """
    if not text or not has_latex(text):
        return text

    try:
        engine.ensure_initialized()
    except Exception as exc:
        logger.warning("LaTeX rendering unavailable: %s", exc)
        return text

    def _replace(match: re.Match[str]) -> str:
        body = match.group(1) if match.group(1) is not None else match.group(2)
        try:
            return engine.render_svg(body)
        except Exception as exc:
            logger.debug("Keeping unrenderable math %r: %s", match.group(0), exc)
            return match.group(0)

    return _MATH_RENDER_PATTERN.sub(_replace, text)
