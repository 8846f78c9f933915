"""
myFT relationship client.

Async client for the myFT relationship graph (users, groups, licences and
concepts joined by member/followed/preference relationships), plus the
group-to-user follow synchronisation workflow.
"""

from .errors import ClientError, NotFoundError, ShapeError, TransportError, recover_not_found
from .factory import create_client, create_sync_service
from .graph import MyFTClient
from .models import MutationOptions, RelationshipProperties, SyncResult
from .services import SyncService

__version__ = "1.0.0"

__all__ = [
    "ClientError",
    "MutationOptions",
    "MyFTClient",
    "NotFoundError",
    "RelationshipProperties",
    "ShapeError",
    "SyncResult",
    "SyncService",
    "TransportError",
    "create_client",
    "create_sync_service",
    "recover_not_found",
]
