"""
HTTP transport for the myFT API.

Sends RequestDescriptors with httpx, retrying transient failures with
tenacity, then classifies the outcome:

    2xx              -> httpx.Response
    404              -> NotFoundError (never retried)
    5xx              -> retried, then TransportError(status_code)
    other non-2xx    -> TransportError(status_code)
    network failure  -> retried, then TransportError(status_code=None)
"""

import logging
from typing import Any

import httpx
from tenacity import AsyncRetrying, before_sleep_log, retry_if_exception, stop_after_attempt, wait_exponential

from ..config import HttpSettings
from ..errors import NotFoundError, ShapeError, TransportError
from .request import RequestDescriptor

logger = logging.getLogger(__name__)


def is_retryable_error(exception: BaseException) -> bool:
    """
    Determine if a failed send is worth retrying.

    Network errors and 5xx responses are transient. 4xx responses are the
    caller's fault and a retry would fail the same way.
    """
    if isinstance(exception, httpx.TransportError):
        return True
    if isinstance(exception, TransportError):
        return exception.status_code is not None and 500 <= exception.status_code < 600
    return False


class HttpTransport:
    """
    Async HTTP transport with a retry policy.

    Owns its httpx.AsyncClient unless one is passed in, in which case the
    caller is responsible for closing it.
    """

    def __init__(self, settings: HttpSettings, client: httpx.AsyncClient | None = None):
        self.settings = settings
        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient(timeout=settings.timeout)

    async def execute(self, request: RequestDescriptor) -> httpx.Response:
        """Send ``request``, retrying transient failures, and return the 2xx response."""
        retrying = AsyncRetrying(
            retry=retry_if_exception(is_retryable_error),
            stop=stop_after_attempt(self.settings.max_attempts),
            wait=wait_exponential(multiplier=self.settings.backoff_multiplier, max=self.settings.backoff_max),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    response = await self._send(request)
        except httpx.TransportError as e:
            raise TransportError(
                f"{request.method} {request.url} failed: {type(e).__name__}: {e}",
                method=request.method,
                url=request.url,
            ) from e

        return response

    async def _send(self, request: RequestDescriptor) -> httpx.Response:
        response = await self._client.request(
            request.method,
            request.url,
            params=request.params,
            headers=request.headers,
            content=request.content,
        )

        if response.is_success:
            return response

        if response.status_code == 404:
            raise NotFoundError(f"{request.method} {request.url} returned 404", method=request.method, url=request.url)

        raise TransportError(
            f"{request.method} {request.url} returned {response.status_code}",
            status_code=response.status_code,
            method=request.method,
            url=request.url,
        )

    async def close(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            try:
                await self._client.aclose()
                logger.info("HttpTransport client closed")
            except Exception as e:
                logger.warning(f"Error closing HttpTransport client: {e}")


def parse_json(response: httpx.Response, context: str | None = None) -> Any:
    """
    Decode a JSON response body.

    Returns None for an empty body. Raises ShapeError if the body is not JSON.
    """
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as e:
        where = f" ({context})" if context else ""
        raise ShapeError(f"Response body is not valid JSON{where}") from e
