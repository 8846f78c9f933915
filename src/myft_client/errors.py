"""Client error taxonomy and the not-found recovery helper."""

from collections.abc import Awaitable
from typing import TypeVar

T = TypeVar("T")
D = TypeVar("D")

GENERIC_ERROR_MESSAGE = "An error has occurred while processing your request."


class ClientError(Exception):
    """Base class for myFT client errors, and the generic aggregated batch failure."""

    def __init__(self, message: str = GENERIC_ERROR_MESSAGE, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class TransportError(ClientError):
    """Network failure or non-2xx response that is not a 404."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        method: str | None = None,
        url: str | None = None,
    ):
        self.method = method
        self.url = url
        super().__init__(message, status_code=status_code)


class NotFoundError(ClientError):
    """The requested node or relationship does not exist."""

    def __init__(self, message: str = "Not found", method: str | None = None, url: str | None = None):
        self.method = method
        self.url = url
        super().__init__(message, status_code=404)


class ShapeError(ClientError):
    """A response did not have the shape the caller relies on."""


async def recover_not_found(awaitable: Awaitable[T], default: D) -> T | D:
    """Await ``awaitable``, returning ``default`` if it raises NotFoundError."""
    try:
        return await awaitable
    except NotFoundError:
        return default
