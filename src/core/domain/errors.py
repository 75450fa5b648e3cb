"""Errors raised by the unassign action.

Every error carries a human readable message and, when the failure came from
an HTTP exchange, the numeric status code. The invoking framework reads
`status_code` to decide between retrying (429/502/503/504) and giving up.
"""

from __future__ import annotations

from typing import Any


class ActionError(Exception):
    """Base class for every failure the action reports."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def to_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {"message": self.message}
        if self.status_code is not None:
            record["statusCode"] = self.status_code
        return record


class ValidationError(ActionError):
    """Missing or malformed input parameter. Never retried."""


class ConfigurationError(ActionError):
    """No base address could be resolved. Never retried."""


class AuthenticationError(ActionError):
    """No usable credential scheme, or the credential exchange failed."""


class APIError(ActionError):
    """Non-success response from the Okta API."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: Any = None,
    ) -> None:
        super().__init__(message, status_code=status_code)
        self.body = body
