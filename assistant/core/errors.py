from __future__ import annotations

from typing import Any, Dict, Optional


class AssistantError(Exception):
    """Base error carrying the `{error, details?}` envelope returned to clients."""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(AssistantError):
    """Client-supplied conversation is structurally invalid."""

    status_code = 400


class ProviderError(AssistantError):
    """The generation backend failed or returned no usable text."""

    status_code = 500


class ConfigurationError(RuntimeError):
    """Fatal startup misconfiguration (e.g. missing provider credential)."""
