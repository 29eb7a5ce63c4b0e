"""Authentication module for loading the Notion integration token.

This module handles loading the Notion integration token from environment
variables using python-dotenv. It validates that the token is present and
raises InvalidCredentialsError if it is missing.
"""

import os
from typing import NamedTuple

from dotenv import load_dotenv

from .errors import InvalidCredentialsError

DEFAULT_BASE_URL = "https://api.notion.com/v1"


class Credentials(NamedTuple):
    """Notion API credentials."""
    token: str
    base_url: str


class Authenticator:
    """Loads and validates Notion credentials from environment variables.

    Credentials are loaded from a .env file using python-dotenv and are never
    cached or logged.

    Required environment variables:
        NOTION_TOKEN: Internal integration secret

    Optional environment variables:
        NOTION_BASE_URL: API base URL (default: https://api.notion.com/v1)

    Raises:
        InvalidCredentialsError: If the token is missing

    Example:
        >>> auth = Authenticator()
        >>> creds = auth.get_credentials()
        >>> print(f"Connecting to {creds.base_url}")
    """

    def __init__(self, base_url: str = ""):
        """Initialize the authenticator by loading environment variables from .env file.

        Args:
            base_url: Base URL override (takes precedence over NOTION_BASE_URL)
        """
        load_dotenv()
        self._base_url = base_url

    def get_credentials(self) -> Credentials:
        """Get Notion credentials from environment variables.

        Returns:
            Credentials: A named tuple containing token and base_url

        Raises:
            InvalidCredentialsError: If NOTION_TOKEN is missing
        """
        token = os.getenv('NOTION_TOKEN')
        base_url = self._base_url or os.getenv('NOTION_BASE_URL') or DEFAULT_BASE_URL

        if not token or not token.strip():
            raise InvalidCredentialsError(
                endpoint=base_url,
                reason="NOTION_TOKEN is not set"
            )

        return Credentials(token=token.strip(), base_url=base_url.rstrip('/'))
