from typing import Any, Optional

from fastapi import status


class CoachError(Exception):
    """Base error for the coaching chat and its proxy boundary.

    Carries the HTTP status the proxy answers with and the ``details`` object
    relayed in the ``{"error": ..., "details": ...}`` envelope.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        *,
        details: Optional[Any] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {'error': self.message}
        if self.details is not None:
            payload['details'] = self.details
        return payload


class AuthError(CoachError):
    status_code = status.HTTP_401_UNAUTHORIZED


class UpstreamError(CoachError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ChatValidationError(CoachError):
    status_code = status.HTTP_400_BAD_REQUEST
