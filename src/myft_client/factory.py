"""
Factory for creating the client and sync service from configuration.

Builds HttpTransport + MyFTClient from Settings, and for the sync service
also the event publisher: Redis when MYFT_EVENTS_ENABLED=true, otherwise a
null publisher that drops events.
"""

import logging

from .config import Settings
from .config import settings as default_settings
from .events import EventPublisher, EventStreamPublisher, NullEventPublisher
from .graph.client import MyFTClient
from .graph.transport import HttpTransport
from .services.sync_service import SyncService

logger = logging.getLogger(__name__)


def create_client(config: Settings | None = None) -> MyFTClient:
    """Create a MyFTClient with its own HTTP transport."""
    config = config or default_settings

    client = MyFTClient(
        settings=config.myft,
        attribution=config.attribution,
        transport=HttpTransport(config.http),
    )

    logger.info(
        f"MyFTClient created: {config.myft.api_url} "
        f"(batch={config.myft.batch_user_count}x{config.myft.batch_user_concurrency}, "
        f"env={config.myft.environment})"
    )
    return client


async def create_event_publisher(config: Settings | None = None) -> EventPublisher:
    """Create and initialize the event publisher if the channel is enabled."""
    config = config or default_settings
    events = config.events

    if not events.enabled:
        logger.info("Event channel disabled (MYFT_EVENTS_ENABLED=false)")
        return NullEventPublisher()

    publisher = EventStreamPublisher(
        url=events.redis_url,
        stream_key=events.stream_key,
        max_connections=events.max_connections,
    )
    await publisher.initialize()
    return publisher


async def create_sync_service(config: Settings | None = None) -> SyncService:
    """Create a SyncService wired to a fresh client and publisher."""
    config = config or default_settings
    client = create_client(config)
    try:
        publisher = await create_event_publisher(config)
    except Exception:
        await client.close()
        raise
    return SyncService(client, publisher)
