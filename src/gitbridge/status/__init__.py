"""File status taxonomy derived from the engine's status matrix."""

from __future__ import annotations

from gitbridge.status.classifier import (
    GitFileStatus,
    StatusRow,
    classify,
    has_unstaged_changes,
    is_deleted,
    is_modified_since_commit,
    is_unchanged_in_next_commit,
    summarize,
)

__all__ = [
    "GitFileStatus",
    "StatusRow",
    "classify",
    "has_unstaged_changes",
    "is_deleted",
    "is_modified_since_commit",
    "is_unchanged_in_next_commit",
    "summarize",
]
