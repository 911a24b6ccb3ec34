"""CLI entry point for MCQ validation and repair.

Usage:
    mcq-check --input questions.json --output clean.json --report report.json

    # Sequential, with deep LaTeX checks through mathtext
    python -m mcq_check.scripts.run_check \
        --input questions.json --output clean.json --report report.json \
        --workers 1 --deep-latex
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from mcq_check.config import get_settings
from mcq_check.pipeline import BatchResult, CheckContext, run_batch
from mcq_check.utils.data_loader import (
    dump_json,
    load_question_batch,
    write_text_files,
)
from mcq_check.utils.logging_config import setup_logging


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    args = _parse_args(argv)

    settings = get_settings()
    overrides: dict[str, object] = {}
    if args.workers is not None:
        overrides["max_workers"] = args.workers
    if args.deep_latex:
        overrides["deep_latex"] = True
    if overrides:
        settings = settings.model_copy(update=overrides)

    setup_logging(verbose=args.verbose, level=settings.log_level)

    try:
        print("Starting MCQ validation and fixing...")
        print(f"Loading questions from: {args.input}")
        records = load_question_batch(args.input)

        result = run_batch(records, CheckContext.from_settings(settings))

        # Serialize both documents before writing either file.
        output_text = dump_json(result.valid_questions, indent=settings.json_indent)
        report_text = dump_json(result.report.to_dict(), indent=settings.json_indent)
        write_text_files([(output_text, args.output), (report_text, args.report)])
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    _print_summary(result, args.output, args.report)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="mcq-check",
        description="Validate and repair a batch of multiple-choice questions.",
    )
    parser.add_argument(
        "--input", type=Path, required=True,
        help="Input JSON array of question records",
    )
    parser.add_argument(
        "--output", type=Path, required=True,
        help="Where to write the cleaned question dataset",
    )
    parser.add_argument(
        "--report", type=Path, required=True,
        help="Where to write the validation report",
    )
    parser.add_argument(
        "--workers", type=_positive_int, default=None,
        help="Worker threads (default: MCQ_CHECK_MAX_WORKERS or 4)",
    )
    parser.add_argument(
        "--deep-latex", action="store_true",
        help="Typeset LaTeX of accepted questions and report problems",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args(argv)


def _positive_int(raw: str) -> int:
    value = int(raw)
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {value}")
    return value


def _print_summary(result: BatchResult, output: Path, report_path: Path) -> None:
    """Print the run summary.

    Args:
        result: The finished batch.
        output: Path of the cleaned dataset.
        report_path: Path of the report.
    """
    report = result.report

    print(f"\n{'=' * 60}")
    print("Validation complete!")
    print(f"{'=' * 60}")
    print(f"Total questions:   {report.total_questions}")
    print(f"Fixed questions:   {report.fixed_questions}")
    print(f"  passed as-is:    {report.passed_questions}")
    print(f"  repaired:        {report.repaired_questions}")
    print(f"Removed questions: {report.removed_questions}")
    print(f"Valid questions:   {len(result.valid_questions)}")
    print(f"\nOutput written to: {output}")
    print(f"Report written to: {report_path}")
    print(f"{'=' * 60}\n")


if __name__ == "__main__":
    main()
