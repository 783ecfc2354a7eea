"""Tests for gitbridge.status.classifier."""

from __future__ import annotations

import itertools

import pytest

from gitbridge.exceptions import StatusClassificationError
from gitbridge.status import (
    GitFileStatus,
    classify,
    has_unstaged_changes,
    is_deleted,
    is_modified_since_commit,
    is_unchanged_in_next_commit,
    summarize,
)

KNOWN = {
    (0, 0, 0): GitFileStatus.ABSENT,
    (0, 2, 0): GitFileStatus.UNTRACKED,
    (0, 2, 2): GitFileStatus.ADDED,
    (0, 2, 3): GitFileStatus.ADDED_MODIFIED,
    (0, 0, 3): GitFileStatus.ADDED_DELETED,
    (1, 1, 1): GitFileStatus.UNMODIFIED,
    (1, 2, 1): GitFileStatus.MODIFIED_UNSTAGED,
    (1, 2, 2): GitFileStatus.MODIFIED_STAGED,
    (1, 2, 3): GitFileStatus.MODIFIED_STAGED_UNSTAGED,
    (1, 0, 1): GitFileStatus.DELETED_UNSTAGED,
    (1, 0, 0): GitFileStatus.DELETED_STAGED,
    (1, 2, 0): GitFileStatus.DELETED_MODIFIED,
    (1, 1, 0): GitFileStatus.DELETED_WITH_UNTRACKED,
    (1, 0, 3): GitFileStatus.MODIFIED_THEN_DELETED,
}


class TestClassify:
    """Tests for classify."""

    @pytest.mark.parametrize(("flags", "expected"), list(KNOWN.items()))
    def test_known_combinations(
        self, flags: tuple[int, int, int], expected: GitFileStatus
    ) -> None:
        assert classify(("file.txt", *flags)) is expected

    def test_table_covers_every_status(self) -> None:
        assert set(KNOWN.values()) == set(GitFileStatus)

    def test_every_other_combination_raises(self) -> None:
        unknown = [
            flags
            for flags in itertools.product(range(2), range(3), range(4))
            if flags not in KNOWN
        ]
        assert len(unknown) == 24 - 14

        for flags in unknown:
            with pytest.raises(StatusClassificationError) as exc_info:
                classify(("file.txt", *flags))
            assert exc_info.value.key == "".join(str(f) for f in flags)

    def test_error_message(self) -> None:
        with pytest.raises(StatusClassificationError, match="Invalid status combination: 112"):
            classify(("file.txt", 1, 1, 2))


class TestShortCode:
    """Tests for GitFileStatus.short_code."""

    def test_codes(self) -> None:
        assert GitFileStatus.UNTRACKED.short_code == "??"
        assert GitFileStatus.ADDED_MODIFIED.short_code == "AM"
        assert GitFileStatus.UNMODIFIED.short_code == ""
        assert GitFileStatus.MODIFIED_THEN_DELETED.short_code == "MD"


class TestPredicates:
    """Tests for the row predicates."""

    def test_is_deleted(self) -> None:
        assert is_deleted(("a", 1, 0, 1))
        assert not is_deleted(("a", 1, 1, 1))

    def test_has_unstaged_changes(self) -> None:
        assert has_unstaged_changes(("a", 1, 2, 1))
        assert not has_unstaged_changes(("a", 1, 2, 2))

    def test_is_modified_since_commit(self) -> None:
        assert is_modified_since_commit(("a", 1, 2, 1))
        assert not is_modified_since_commit(("a", 1, 1, 1))

    def test_is_unchanged_in_next_commit(self) -> None:
        assert is_unchanged_in_next_commit(("a", 1, 2, 1))
        assert not is_unchanged_in_next_commit(("a", 1, 2, 2))


class TestSummarize:
    """Tests for summarize."""

    def test_groups_paths_by_status(self) -> None:
        rows = [
            ("a.txt", 1, 2, 1),
            ("b.txt", 0, 2, 0),
            ("c.txt", 1, 2, 1),
        ]

        summary = summarize(rows)

        assert summary == {
            GitFileStatus.MODIFIED_UNSTAGED: ["a.txt", "c.txt"],
            GitFileStatus.UNTRACKED: ["b.txt"],
        }
