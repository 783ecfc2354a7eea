"""Sync orchestration over the embedded version-control engine."""

from __future__ import annotations

from gitbridge.sync.engine import (
    AuthCallback,
    AuthDecision,
    AuthResultCallback,
    CommitAuthor,
    GitEngine,
)
from gitbridge.sync.meta import GitMeta, GitMetaStore, MemoryGitMetaStore
from gitbridge.sync.operations import PushToRepo, check_credentials, handle_git_push
from gitbridge.sync.orchestrator import (
    CloneResult,
    CredentialPrompt,
    StoreFactory,
    SyncOrchestrator,
)

__all__ = [
    "AuthCallback",
    "AuthDecision",
    "AuthResultCallback",
    "CloneResult",
    "CommitAuthor",
    "CredentialPrompt",
    "GitEngine",
    "GitMeta",
    "GitMetaStore",
    "MemoryGitMetaStore",
    "PushToRepo",
    "StoreFactory",
    "SyncOrchestrator",
    "check_credentials",
    "handle_git_push",
]
