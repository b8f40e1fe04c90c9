"""
Exception types for the commercetools API client.

The client itself reports authentication, HTTP and model activation
failures through :class:`~commercetools_api_client.response.Response`
values.  These exceptions are raised only when a caller opts in by
calling :meth:`Response.raise_for_status`, and allow callers to
distinguish between the failure classes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from .response import ErrorMessage


class CommercetoolsError(Exception):
    """Base exception for all commercetools client errors."""


class CommercetoolsAuthError(CommercetoolsError):
    """Raised when no access token could be obtained for a request."""


class CommercetoolsAPIError(CommercetoolsError):
    """Raised when the API answered with a non-success status code."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        reason_phrase: Optional[str] = None,
        errors: Optional[List["ErrorMessage"]] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.reason_phrase = reason_phrase
        self.errors = list(errors or [])


class ModelActivationError(CommercetoolsError):
    """Raised when a successful response could not be mapped onto the requested type."""
