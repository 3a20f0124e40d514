"""Manifest module - pins module revisions for each build version."""

from .github_client import GitHubAuthError, GitHubClient, GitHubClientError
from .handler import (
    ManifestClientError,
    ManifestError,
    ManifestLoadHandler,
    ManifestResponse,
    ManifestServerError,
)
from .models import BranchHead, Manifest, ManifestModule, TaskRef
from .retry import RetryConfig, RetryExhausted, retry_with_backoff
from .store import ManifestStore

__all__ = [
    "GitHubAuthError",
    "GitHubClient",
    "GitHubClientError",
    "ManifestClientError",
    "ManifestError",
    "ManifestLoadHandler",
    "ManifestResponse",
    "ManifestServerError",
    "BranchHead",
    "Manifest",
    "ManifestModule",
    "TaskRef",
    "RetryConfig",
    "RetryExhausted",
    "retry_with_backoff",
    "ManifestStore",
]
