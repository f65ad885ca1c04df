from typing import Any, Optional

NETWORK_ERROR_MESSAGE = (
    "Network error: unable to reach the server. Please check your connection."
)


class ApiError(Exception):
    """Base class for every failure surfaced by ApiClient."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ApiResponseError(ApiError):
    """The server answered with a non-2xx status."""

    def __init__(self, status: int, message: str, payload: Any = None):
        super().__init__(message)
        self.status = status
        self.payload = payload


class SessionExpiredError(ApiResponseError):
    """401 from any endpoint; the session has already been cleared."""

    def __init__(self, message: str = "Session expired", payload: Any = None):
        super().__init__(401, message, payload)


class ApiNetworkError(ApiError):
    """The request went out but no response came back."""

    def __init__(self, message: str = NETWORK_ERROR_MESSAGE, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause


class ApiRequestError(ApiError):
    """The request could not be built or sent (bad URL, bad arguments...)."""
