"""GitHub OAuth token storage using the system keyring."""

import logging
from typing import Optional

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

__all__ = ["TokenStore", "TokenUnavailableError"]

logger = logging.getLogger(__name__)

SERVICE_NAME = "CI Stats Sync"
ACCOUNT_NAME = "github_oauth_token"


class TokenUnavailableError(Exception):
    """No usable GitHub token is configured."""

    pass


class TokenStore:
    """Resolves the GitHub OAuth token: explicit value first, then the keyring."""

    def __init__(self, token: Optional[str] = None, service_name: str = SERVICE_NAME):
        """Initialize the token store.

        Args:
            token: Token from configuration; overrides the keyring
            service_name: Service name for keyring entries
        """
        self._token = token
        self.service_name = service_name

    def store(self, token: str) -> bool:
        """Save a token in the keyring."""
        try:
            keyring.set_password(self.service_name, ACCOUNT_NAME, token)
            logger.info("GitHub token stored in keyring")
            return True
        except KeyringError as e:
            logger.error(f"Failed to store GitHub token: {e}")
            return False

    def get_token(self) -> str:
        """Get the GitHub OAuth token.

        Raises:
            TokenUnavailableError: If no token is configured or the keyring fails
        """
        if self._token:
            return self._token
        try:
            token = keyring.get_password(self.service_name, ACCOUNT_NAME)
        except KeyringError as e:
            raise TokenUnavailableError(f"Failed to read GitHub token from keyring: {e}") from e
        if not token:
            raise TokenUnavailableError("No GitHub OAuth token configured")
        return token

    def delete(self) -> bool:
        """Remove the token from the keyring (True if gone)."""
        try:
            keyring.delete_password(self.service_name, ACCOUNT_NAME)
            return True
        except PasswordDeleteError:
            return True
        except KeyringError as e:
            logger.error(f"Failed to delete GitHub token: {e}")
            return False
