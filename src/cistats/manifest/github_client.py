"""GitHub API client used to pin module revisions."""

import logging
from typing import Optional
from urllib.parse import quote

import requests

from ..config import DEFAULT_GITHUB_API_URL, DEFAULT_GITHUB_TIMEOUT
from .models import BranchHead
from .retry import RetryConfig, RetryExhausted, retry_with_backoff

__all__ = [
    "GitHubClient",
    "GitHubClientError",
    "GitHubAuthError",
]

logger = logging.getLogger(__name__)


class GitHubClientError(Exception):
    """GitHub client error."""

    pass


class GitHubAuthError(GitHubClientError):
    """Authentication error."""

    pass


class _TransientError(Exception):
    """Internal: Marks an error as transient/retryable."""

    pass


class GitHubClient:
    """Thin client over the GitHub REST API.

    Handles:
    - Session management
    - OAuth token headers
    - Retry with exponential backoff for connection errors, timeouts and 5xx
    """

    DEFAULT_RETRY_CONFIG = RetryConfig()

    USER_AGENT = "CI-Stats-Sync/0.3"

    def __init__(
        self,
        api_url: str = DEFAULT_GITHUB_API_URL,
        timeout: int = DEFAULT_GITHUB_TIMEOUT,
        retry_config: Optional[RetryConfig] = None,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the client.

        Args:
            api_url: GitHub API base URL
            timeout: Request timeout in seconds
            retry_config: Configuration for retry with exponential backoff
            session: Optional requests session (for dependency injection/testing)
        """
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.retry_config = retry_config or self.DEFAULT_RETRY_CONFIG
        self._session = session or requests.Session()
        self._owns_session = session is None

    def _get_headers(self, token: Optional[str]) -> dict:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": self.USER_AGENT,
        }
        if token:
            headers["Authorization"] = f"token {token}"
        return headers

    def _get(self, path: str, token: Optional[str]) -> dict:
        """GET a JSON document from the API.

        Raises:
            GitHubAuthError: For 401/403 responses (not retried)
            GitHubClientError: For other errors
        """
        url = f"{self.api_url}/{path.lstrip('/')}"
        headers = self._get_headers(token)

        def do_request() -> dict:
            try:
                response = self._session.get(url, headers=headers, timeout=self.timeout)
            except requests.exceptions.ConnectionError:
                raise _TransientError("Cannot connect to GitHub API")
            except requests.exceptions.Timeout:
                raise _TransientError("GitHub API request timed out")

            if response.status_code in (401, 403):
                raise GitHubAuthError(f"GitHub rejected credentials ({response.status_code})")
            if response.status_code >= 500:
                raise _TransientError(f"GitHub server error: {response.status_code}")
            if response.status_code >= 400:
                message = ""
                try:
                    message = response.json().get("message", "")
                except ValueError:
                    pass
                raise GitHubClientError(
                    f"GitHub API error ({response.status_code}): {message or response.reason}"
                )
            try:
                return response.json()
            except ValueError as e:
                raise GitHubClientError(f"Invalid JSON from GitHub: {e}") from e

        try:
            return retry_with_backoff(
                do_request,
                config=self.retry_config,
                retryable_exceptions=(_TransientError,),
            )
        except RetryExhausted as e:
            if e.last_error:
                raise GitHubClientError(str(e.last_error)) from e.last_error
            raise GitHubClientError("Request failed after retries") from e

    def get_branch_head(
        self, token: Optional[str], owner: str, repo: str, branch: str
    ) -> BranchHead:
        """Get the head commit of ``owner/repo`` on ``branch``."""
        path = f"repos/{quote(owner)}/{quote(repo)}/branches/{quote(branch, safe='')}"
        data = self._get(path, token)
        try:
            head = BranchHead.from_dict(data)
        except ValueError as e:
            raise GitHubClientError(f"Unexpected branch response for {owner}/{repo}@{branch}: {e}") from e
        logger.debug(f"Branch head {owner}/{repo}@{branch} is {head.sha}")
        return head

    def close(self) -> None:
        """Close the session if we own it."""
        if self._owns_session and self._session is not None:
            self._session.close()
            self._session = None

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
