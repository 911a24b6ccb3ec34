"""Shared utilities package for mcq-check."""

from mcq_check.utils.data_loader import (
    dump_json,
    load_json_file,
    load_question_batch,
    write_text_files,
)
from mcq_check.utils.logging_config import setup_logging

__all__ = [
    # Data loading utilities
    "load_json_file",
    "load_question_batch",
    "dump_json",
    "write_text_files",
    # Logging utilities
    "setup_logging",
]
