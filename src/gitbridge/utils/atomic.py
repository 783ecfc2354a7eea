"""Atomic file writes for small state files.

Credential and key files must never be left half-written: a torn write would
lose every stored credential at once. Writes go to a temporary file in the
same directory and are renamed over the target by the atomicwrites library.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from atomicwrites import atomic_write  # type: ignore[import-untyped]

__all__ = ["atomic_write_json"]

#: Owner read/write only
PRIVATE_FILE_MODE: int = 0o600


def atomic_write_json(
    path: Path | str,
    data: Any,
    *,
    private: bool = True,
    mkdir: bool = True,
) -> None:
    """Serialize *data* as JSON and write it to *path* atomically.

    Args:
        path: Destination file path.
        data: JSON-serializable value.
        private: Restrict the file to its owner (mode 600) after writing.
        mkdir: Create parent directories if they don't exist.

    Raises:
        OSError: If the write or rename fails; the previous file is untouched.
        TypeError: If *data* is not JSON-serializable.
    """
    file_path = Path(path)
    if mkdir:
        file_path.parent.mkdir(parents=True, exist_ok=True)

    content = json.dumps(data, indent=2, sort_keys=True)
    with atomic_write(str(file_path), mode="w", encoding="utf-8", overwrite=True) as f:
        f.write(content)

    if private:
        os.chmod(file_path, PRIVATE_FILE_MODE)
