"""
Package-level exception hierarchy for sqlregress.

All exceptions inherit from SQLRegressError, enabling:
- Catching all sqlregress errors with a single except clause
- Context fields for debugging (source, config_key)
- Structured serialization via to_dict() for JSON error output

Hierarchy:
    SQLRegressError
    ├── ParseError          – Malformed or oversized EXPLAIN input
    └── ConfigurationError  – Invalid configuration values or files

Comparators, detectors and analyzers never raise for findings. A plan
regression or a result diff is data, not an exception.
"""

from __future__ import annotations

from typing import Any


class SQLRegressError(Exception):
    """
    Base exception for all sqlregress errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON error output."""
        return {
            "error_type": type(self).__name__,
            "message": self.message,
        }


class ParseError(SQLRegressError):
    """
    EXPLAIN input cannot be interpreted as a plan tree.

    Raised when the input is not valid EXPLAIN JSON, is too large, too
    deeply nested, or has no identifiable root plan node.

    Attributes:
        detail: Technical details for debugging (optional).
        source: Where the error occurred (e.g., "validation", "json_decode").
    """

    def __init__(
        self,
        message: str,
        *,
        detail: str | None = None,
        source: str = "unknown",
    ) -> None:
        self.detail = detail
        self.source = source
        super().__init__(message)

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message}\n\nDetails: {self.detail}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["detail"] = self.detail
        result["source"] = self.source
        return result


class ConfigurationError(SQLRegressError):
    """
    Invalid configuration.

    Attributes:
        config_key: The configuration key that caused the error (if known).
    """

    def __init__(self, message: str, config_key: str | None = None) -> None:
        self.config_key = config_key
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["config_key"] = self.config_key
        return result
