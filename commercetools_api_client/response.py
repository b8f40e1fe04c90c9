"""
Result containers returned by every :class:`~commercetools_api_client.Client` call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, List, Optional, TypeVar

from .exceptions import CommercetoolsAPIError, CommercetoolsAuthError, ModelActivationError

T = TypeVar("T")

NO_TOKEN_CODE = "no_token"


@dataclass(frozen=True)
class ErrorMessage:
    """A single entry of an API error envelope."""

    code: Optional[str]
    message: Optional[str]


@dataclass
class Response(Generic[T]):
    """Outcome of one API call.

    A response is successful when the server answered with a 2xx status.
    A successful response whose ``result`` is ``None`` means the body
    could not be mapped onto the requested type and should be treated
    as an error by the caller.
    """

    success: bool = False
    status_code: int = 0
    reason_phrase: Optional[str] = None
    result: Optional[T] = None
    errors: List[ErrorMessage] = field(default_factory=list)

    @classmethod
    def no_token(cls) -> "Response[T]":
        return cls(
            success=False,
            errors=[ErrorMessage(NO_TOKEN_CODE, "Could not retrieve token")],
        )

    def raise_for_status(self) -> T:
        """Return ``result``, raising if the call did not produce one.

        Raises
        ------
        CommercetoolsAuthError
            If no access token could be obtained for the call.
        CommercetoolsAPIError
            If the server answered with a non-success status.
        ModelActivationError
            If the call succeeded but the body could not be mapped onto
            the requested type.
        """
        if not self.success:
            if any(error.code == NO_TOKEN_CODE for error in self.errors):
                raise CommercetoolsAuthError("Could not retrieve token")
            details = "; ".join(f"{e.code}: {e.message}" for e in self.errors)
            raise CommercetoolsAPIError(
                f"{self.status_code} {self.reason_phrase or ''}".strip()
                + (f" ({details})" if details else ""),
                status_code=self.status_code,
                reason_phrase=self.reason_phrase,
                errors=self.errors,
            )
        if self.result is None:
            raise ModelActivationError(
                f"Response with status {self.status_code} could not be mapped onto a model"
            )
        return self.result
