"""Base error definitions for mtsfv packages."""

from typing import Any, Dict


class MTSFVError(Exception):
    """Base exception for all mtsfv errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context


class ChecksumError(MTSFVError):
    """Checksum could not be computed for an input."""
    pass
