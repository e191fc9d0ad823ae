"""Token generation utilities."""

import secrets
import string
from typing import Optional


class TokenGenerator:
    """Generate random tokens for short links."""

    # Base62 characters (alphanumeric, case-sensitive)
    BASE62_CHARS = string.ascii_letters + string.digits  # a-zA-Z0-9

    def __init__(self, default_length: int = 6):
        """Initialize token generator.

        Args:
            default_length: Default length for generated tokens
        """
        if default_length < 1:
            raise ValueError("Token length must be at least 1")
        self.default_length = default_length

    def generate(self, length: Optional[int] = None) -> str:
        """Generate a cryptographically random token.

        Each byte drawn from the OS random source is reduced modulo 62.
        The resulting bias is acceptable since tokens are identifiers,
        not secrets.

        Args:
            length: Length of the token (uses default if not specified)

        Returns:
            Random alphanumeric token
        """
        length = self.default_length if length is None else length
        if length < 1:
            raise ValueError("Token length must be at least 1")

        base = len(self.BASE62_CHARS)
        data = secrets.token_bytes(length)
        return ''.join(self.BASE62_CHARS[byte % base] for byte in data)

    @staticmethod
    def is_valid_format(token: str) -> bool:
        """Check if token has valid format (alphanumeric).

        Args:
            token: Token to validate

        Returns:
            True if valid format
        """
        return bool(token) and all(c in TokenGenerator.BASE62_CHARS for c in token)
