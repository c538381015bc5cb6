"""Exception hierarchy for the consent flow.

Every failure the flow can produce is a ConsentError.  The subclass says
where it came from, which decides how it is routed:

  RequestValidationError: the incoming parameters are wrong.  Always shown
                          inline; there is no trustworthy redirect target.
  ServiceError:           the authorization server answered with an error.
  NetworkError:           the authorization server could not be reached.
"""

from __future__ import annotations


class ConsentError(Exception):
    """Base exception for all consent flow failures."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class RequestValidationError(ConsentError):
    """Raised when authorization request parameters are invalid.

    Carries every violation, in validation order.
    """

    def __init__(self, messages: tuple[str, ...] | list[str]) -> None:
        self.messages = tuple(messages)
        super().__init__("; ".join(self.messages) or "Invalid OAuth parameters")


class ServiceError(ConsentError):
    """Raised when the authorization server returns a non-success response."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code

    def __repr__(self) -> str:
        return (
            f"ServiceError({self.message!r}, status_code={self.status_code!r}, "
            f"error_code={self.error_code!r})"
        )


class NetworkError(ConsentError):
    """Raised when no response was received from the authorization server."""

    pass
