from __future__ import annotations

from typing import Optional


class QuickTripError(Exception):
    def __init__(self, message: str, status_code: int = 500) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class ExternalServiceError(QuickTripError):
    def __init__(self, message: str, status_code: int = 503) -> None:
        super().__init__(message, status_code=status_code)


class IndexUnavailableError(ExternalServiceError):
    """The point-of-interest index could not produce a usable answer.

    ``status`` is the provider's HTTP status, or ``None`` when the request
    never got a response or the body could not be parsed.
    """

    def __init__(self, message: str, status: Optional[int] = None, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class RoutingUnavailableError(ExternalServiceError):
    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status
