"""Filesystem helpers for importing and exporting dog records as JSON."""
from __future__ import annotations
from pathlib import Path
import json
import tempfile
import os
from typing import Any, Optional

from .errors import ValidationError


def ensure_dir(path: Path) -> None:
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)


def atomic_write_text(path: Path, text: str, encoding: str = "utf-8") -> None:
    """Write text to path atomically using a temp file in the same dir."""
    path = Path(path)
    ensure_dir(path.parent)
    fd, tmp = tempfile.mkstemp(dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding=encoding) as f:
            f.write(text)
        os.replace(tmp, str(path))
    finally:
        if Path(tmp).exists():
            Path(tmp).unlink()


def json_load(path: Path, default: Optional[Any] = None) -> Any:
    """Parsed JSON from `path`, or `default` when the file does not exist.

    Malformed content raises ValidationError naming the file.
    """
    p = Path(path)
    if not p.exists():
        return default
    try:
        with p.open("r", encoding="utf-8") as f:
            return json.load(f)
    except ValueError as exc:
        raise ValidationError(f"{p} is not valid JSON: {exc}", field="file") from exc


def json_save(path: Path, obj: Any) -> None:
    text = json.dumps(obj, ensure_ascii=False, indent=2)
    atomic_write_text(Path(path), text)
