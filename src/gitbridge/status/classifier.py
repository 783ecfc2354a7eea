"""Classify status-matrix rows into named file states.

The engine reports each file as a ``(path, head, worktree, stage)`` row:

- head: 0 absent from the last commit, 1 present
- worktree: 0 absent, 1 identical to HEAD, 2 different from HEAD
- stage: 0 absent from the index, 1 identical to HEAD,
  2 identical to the worktree, 3 different from the worktree

Only fourteen combinations can occur. Anything else means the engine's
contract changed, and :func:`classify` raises instead of guessing.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import Literal

from gitbridge.exceptions import StatusClassificationError

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

HeadStatus = Literal[0, 1]
WorktreeStatus = Literal[0, 1, 2]
StageStatus = Literal[0, 1, 2, 3]

StatusRow = tuple[str, HeadStatus, WorktreeStatus, StageStatus]


class GitFileStatus(str, Enum):
    """Closed set of file states.

    Attributes:
        short_code: Porcelain-style code shown next to the path in the UI.
    """

    ABSENT = "ABSENT"
    UNTRACKED = "UNTRACKED"
    ADDED = "ADDED"
    ADDED_MODIFIED = "ADDED_MODIFIED"
    ADDED_DELETED = "ADDED_DELETED"
    UNMODIFIED = "UNMODIFIED"
    MODIFIED_UNSTAGED = "MODIFIED_UNSTAGED"
    MODIFIED_STAGED = "MODIFIED_STAGED"
    MODIFIED_STAGED_UNSTAGED = "MODIFIED_STAGED_UNSTAGED"
    DELETED_UNSTAGED = "DELETED_UNSTAGED"
    DELETED_STAGED = "DELETED_STAGED"
    DELETED_MODIFIED = "DELETED_MODIFIED"
    DELETED_WITH_UNTRACKED = "DELETED_WITH_UNTRACKED"
    MODIFIED_THEN_DELETED = "MODIFIED_THEN_DELETED"

    @property
    def short_code(self) -> str:
        return _SHORT_CODES[self]


_STATUS_BY_KEY: dict[str, GitFileStatus] = {
    "000": GitFileStatus.ABSENT,
    "020": GitFileStatus.UNTRACKED,
    "022": GitFileStatus.ADDED,
    "023": GitFileStatus.ADDED_MODIFIED,
    "003": GitFileStatus.ADDED_DELETED,
    "111": GitFileStatus.UNMODIFIED,
    "121": GitFileStatus.MODIFIED_UNSTAGED,
    "122": GitFileStatus.MODIFIED_STAGED,
    "123": GitFileStatus.MODIFIED_STAGED_UNSTAGED,
    "101": GitFileStatus.DELETED_UNSTAGED,
    "100": GitFileStatus.DELETED_STAGED,
    "120": GitFileStatus.DELETED_MODIFIED,
    "110": GitFileStatus.DELETED_WITH_UNTRACKED,
    "103": GitFileStatus.MODIFIED_THEN_DELETED,
}

_SHORT_CODES: dict[GitFileStatus, str] = {
    GitFileStatus.ABSENT: "",
    GitFileStatus.UNTRACKED: "??",
    GitFileStatus.ADDED: "A",
    GitFileStatus.ADDED_MODIFIED: "AM",
    GitFileStatus.ADDED_DELETED: "AD",
    GitFileStatus.UNMODIFIED: "",
    GitFileStatus.MODIFIED_UNSTAGED: "M",
    GitFileStatus.MODIFIED_STAGED: "M",
    GitFileStatus.MODIFIED_STAGED_UNSTAGED: "MM",
    GitFileStatus.DELETED_UNSTAGED: "D",
    GitFileStatus.DELETED_STAGED: "D",
    GitFileStatus.DELETED_MODIFIED: "D + ??",
    GitFileStatus.DELETED_WITH_UNTRACKED: "D + ??",
    GitFileStatus.MODIFIED_THEN_DELETED: "MD",
}


def classify(row: StatusRow) -> GitFileStatus:
    """Map a status-matrix row to its :class:`GitFileStatus`.

    Args:
        row: ``(path, head, worktree, stage)`` as produced by the engine.

    Returns:
        The status for the row's flags.

    Raises:
        StatusClassificationError: If the flags are not one of the known
            combinations.

    Example:
        >>> classify(("README.md", 1, 2, 1))
        <GitFileStatus.MODIFIED_UNSTAGED: 'MODIFIED_UNSTAGED'>
    """
    _, head, worktree, stage = row
    key = f"{head}{worktree}{stage}"
    try:
        return _STATUS_BY_KEY[key]
    except KeyError:
        raise StatusClassificationError(key) from None


def is_deleted(row: StatusRow) -> bool:
    """True when the file is missing from the worktree."""
    return row[2] == 0


def has_unstaged_changes(row: StatusRow) -> bool:
    """True when the worktree and the index disagree."""
    return row[2] != row[3]


def is_modified_since_commit(row: StatusRow) -> bool:
    """True when the worktree differs from the last commit."""
    return row[1] != row[2]


def is_unchanged_in_next_commit(row: StatusRow) -> bool:
    """True when the index matches the last commit."""
    return row[1] == row[3]


def summarize(rows: Iterable[StatusRow]) -> dict[GitFileStatus, list[str]]:
    """Group paths by status, preserving row order within each group.

    Raises:
        StatusClassificationError: If any row has an unknown combination.
    """
    groups: dict[GitFileStatus, list[str]] = {}
    for row in rows:
        groups.setdefault(classify(row), []).append(row[0])
    return groups
