"""Base exception for envmap."""

from typing import Dict, Optional


class EnvMapError(Exception):
    """Base exception for all envmap errors.

    ``details`` holds the structured context (path, key, reason) and ``hint``
    a one-line remediation the CLI prints under the error.
    """

    hint: Optional[str] = None

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, str]] = None,
        hint: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if hint is not None:
            self.hint = hint

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message
