"""Shared utilities.

- POSIX path helpers for sandbox paths (paths.py)
- Atomic JSON persistence for credential files (atomic.py)
"""

from __future__ import annotations

from gitbridge.utils import paths
from gitbridge.utils.atomic import atomic_write_json

__all__ = ["atomic_write_json", "paths"]
