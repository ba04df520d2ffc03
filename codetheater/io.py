"""
codetheater.io - Atomic JSON and text writes for the state directory.

The commit cache, the session stores and screenplay exports all go
through here, so an interrupted run never leaves a half-written file.
"""

from __future__ import annotations

import json
import tempfile
from pathlib import Path
from typing import IO, Any, Callable


def read_json(path: Path) -> Any:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def _atomic_write(path: Path, write: Callable[[IO[str]], None]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=path.parent,
        delete=False,
        suffix=".tmp",
    ) as tmp:
        tmp_path = Path(tmp.name)
        try:
            write(tmp)
        except Exception:
            tmp_path.unlink(missing_ok=True)
            raise
    tmp_path.replace(path)


def write_json(path: Path, data: dict[str, Any], indent: int = 2) -> None:
    """Write ``data`` as pretty JSON; datetimes and paths fall back to str()."""
    _atomic_write(path, lambda f: json.dump(data, f, indent=indent, ensure_ascii=False, default=str))


def write_text(path: Path, content: str) -> None:
    _atomic_write(path, lambda f: f.write(content))
