"""Failures reported by the restaurant API client."""


class RestaurantApiError(Exception):
    """Base class for every failure of a remote restaurant operation."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NetworkFailure(RestaurantApiError):
    """The request never produced a response (no connectivity, timeout)."""


class ServerError(RestaurantApiError):
    """The server answered with a non-2xx status or flagged an error."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class EmptyBody(RestaurantApiError):
    """The server answered 2xx without a usable payload."""
