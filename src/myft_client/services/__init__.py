from .sync_service import SyncService

__all__ = ["SyncService"]
