"""JSON loading and serialization helpers for question batches."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def load_json_file(path: Path | str) -> Any:
    """Load a JSON file with UTF-8 encoding.

    Args:
        path: Path to the JSON file.

    Returns:
        The parsed JSON content.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        json.JSONDecodeError: If the file contains invalid JSON.
    """
    path = Path(path)
    with path.open(encoding="utf-8") as f:
        return json.load(f)


def load_question_batch(path: Path | str) -> list[Any]:
    """Load a batch of raw question records.

    Raises:
        ValueError: If the top-level JSON value is not an array.
    """
    data = load_json_file(path)
    if not isinstance(data, list):
        msg = f"Expected a JSON array of questions in {path}, got {type(data).__name__}"
        raise ValueError(msg)
    return data


def dump_json(data: Any, ensure_ascii: bool = False, indent: int = 2) -> str:
    """Serialize data with the project's JSON formatting."""
    return json.dumps(data, ensure_ascii=ensure_ascii, indent=indent)


def write_text_files(documents: list[tuple[str, Path | str]]) -> None:
    """Write several already-serialized documents, all or nothing.

    Each document is staged as a hidden sibling file and only moved into
    place once every document has been staged. On failure the staged files
    and any already-moved targets are removed before the error propagates.
    """
    staged: list[tuple[Path, Path]] = []
    placed: list[Path] = []
    try:
        for text, target in documents:
            target = Path(target)
            target.parent.mkdir(parents=True, exist_ok=True)
            temp = target.with_name(f".{target.name}.tmp")
            staged.append((temp, target))
            temp.write_text(text, encoding="utf-8")
        for temp, target in staged:
            temp.replace(target)
            placed.append(target)
    except BaseException:
        for temp, _ in staged:
            temp.unlink(missing_ok=True)
        for target in placed:
            target.unlink(missing_ok=True)
        raise
