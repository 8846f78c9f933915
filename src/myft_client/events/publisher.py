"""
Downstream event publishing.

Follow changes made on a user's behalf are announced to downstream
consumers (e.g. the email digest pipeline) as JSON records pushed onto a
Redis list:

    LPUSH {stream_key} {"uuid": <subject id>, "event": "subscribe",
                        "data": [<concept>, ...], "ts": <unix time>}

Consumers BRPOP from the other end, so records are read in emit order.
Publishing failures propagate to the caller.
"""

import json
import logging
import time
from typing import Any, Protocol

from redis.asyncio import ConnectionPool, Redis

logger = logging.getLogger(__name__)


class EventPublisher(Protocol):
    async def emit(self, subject_id: str, event_kind: str, payload: list[dict[str, Any]]) -> None: ...

    async def close(self) -> None: ...


class EventStreamPublisher:
    """
    Redis-backed publisher for follow events.

    Call ``initialize()`` before ``emit()``; ``close()`` releases the pool.
    """

    def __init__(
        self,
        url: str = "redis://localhost:6379",
        stream_key: str = "myft:events",
        max_connections: int = 10,
    ):
        """
        Args:
            url: Redis connection URL
            stream_key: Redis list key events are pushed to
            max_connections: Maximum Redis connections in pool
        """
        self.url = url
        self.stream_key = stream_key
        self.max_connections = max_connections

        self._pool: ConnectionPool | None = None
        self._redis: Redis | None = None
        self._stats = {"emitted": 0}

    async def initialize(self) -> None:
        """Create the connection pool and check the server is reachable."""
        if self._redis is not None:
            return

        self._pool = ConnectionPool.from_url(
            self.url,
            max_connections=self.max_connections,
            decode_responses=True,
        )
        self._redis = Redis(connection_pool=self._pool)

        try:
            await self._redis.ping()
        except Exception as e:
            logger.error(f"EventStreamPublisher initialization failed: {e}")
            await self.close()
            raise

        logger.info(f"EventStreamPublisher initialized: {self.url} (key={self.stream_key})")

    async def emit(self, subject_id: str, event_kind: str, payload: list[dict[str, Any]]) -> None:
        """Push one event record for ``subject_id``."""
        if self._redis is None:
            raise RuntimeError("EventStreamPublisher not initialized. Call initialize() first.")

        record = {"uuid": subject_id, "event": event_kind, "data": payload, "ts": time.time()}
        await self._redis.lpush(self.stream_key, json.dumps(record))
        self._stats["emitted"] += 1
        logger.debug(f"Emitted {event_kind} for {subject_id} ({len(payload)} item(s))")

    async def close(self) -> None:
        """Close the connection pool."""
        if self._redis is not None:
            try:
                await self._redis.aclose()
            except Exception as e:
                logger.warning(f"Error closing EventStreamPublisher client: {e}")
            finally:
                self._redis = None
        if self._pool is not None:
            try:
                await self._pool.aclose()
                logger.info("EventStreamPublisher connection pool closed")
            except Exception as e:
                logger.warning(f"Error closing EventStreamPublisher pool: {e}")
            finally:
                self._pool = None

    def get_stats(self) -> dict[str, Any]:
        return {"stream_key": self.stream_key, "connected": self._redis is not None, **self._stats}


class NullEventPublisher:
    """Publisher used when the event channel is disabled: logs and drops."""

    async def emit(self, subject_id: str, event_kind: str, payload: list[dict[str, Any]]) -> None:
        logger.debug(f"Event channel disabled, dropping {event_kind} for {subject_id}")

    async def close(self) -> None:
        return None
