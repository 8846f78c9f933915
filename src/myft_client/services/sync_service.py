"""
Follow synchronisation between a group and one of its users.

When a user joins a group, they should follow every concept the group
follows. ``sync_user_followers`` reconciles the two, strictly in sequence:

    fetch group concepts ──(none)──────────────▶ ignored: noGroupConceptsToFollow
          │
    fetch user concepts
          │
    diff by uuid ─────────(nothing new)────────▶ ignored: noNewConceptsToFollow
          │
    add follows (asMemberOf = group)
          │
    ensure email-digest preference exists
          │
    emit "subscribe" event ────────────────────▶ completed

A missing group/user follow list or a missing digest preference is an empty
state, not an error. Any other failure aborts the sync and propagates;
follows already added stay added.
"""

import logging
from typing import Any

from ..errors import ShapeError, recover_not_found
from ..events import EventPublisher
from ..graph.client import MyFTClient
from ..graph.schema import REL_PROP_KEY
from ..models.results import SyncResult

logger = logging.getLogger(__name__)

SUBSCRIBE_EVENT = "subscribe"

_MISSING = object()


def _require_list(value: Any, what: str) -> list[dict[str, Any]]:
    if isinstance(value, list):
        return value
    msg = f"{what} is not an array"
    logger.error(f"sync_user_followers: {msg} ({type(value).__name__})")
    raise ShapeError(msg)


def _strip_rel(concepts: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Copies of ``concepts`` without relationship properties."""
    return [{k: v for k, v in concept.items() if k != REL_PROP_KEY} for concept in concepts]


class SyncService:
    """Reconciles a user's follows with a group's follows."""

    def __init__(self, client: MyFTClient, publisher: EventPublisher):
        self.client = client
        self.publisher = publisher

    async def close(self) -> None:
        """Close the client, then the publisher, even if the first close fails."""
        try:
            await self.client.close()
        finally:
            await self.publisher.close()

    async def __aenter__(self) -> "SyncService":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def sync_user_followers(self, group_id: str, user_id: str) -> SyncResult:
        """
        Make ``user_id`` follow every concept ``group_id`` follows.

        Returns:
            SyncResult with status ``synchronisationIgnored`` (and a reason)
            or ``synchronisationCompleted`` (and the concepts added).

        Raises:
            ShapeError: If a follow list is not a list.
            ClientError: Any non-not-found failure from the API or event channel.
        """
        group_concepts = _require_list(
            await recover_not_found(self.client.get_concepts_followed_by_group(group_id), []),
            "Group groupConcepts",
        )
        if not group_concepts:
            logger.debug(f"sync_user_followers: group {group_id} follows nothing (user {user_id})")
            return SyncResult.ignored(user_id, group_id, "noGroupConceptsToFollow")

        logger.debug(f"sync_user_followers: group {group_id} follows {len(group_concepts)} concept(s)")

        user_concepts = _require_list(
            await recover_not_found(self.client.get_concepts_followed_by_user(user_id), []),
            "User conceptsResp",
        )
        followed_ids = {concept.get("uuid") for concept in user_concepts}
        logger.debug(f"sync_user_followers: user {user_id} follows {len(followed_ids)} concept(s)")

        new_concepts = [concept for concept in group_concepts if concept.get("uuid") not in followed_ids]
        if not new_concepts:
            logger.debug(f"sync_user_followers: nothing new for user {user_id} from group {group_id}")
            return SyncResult.ignored(user_id, group_id, "noNewConceptsToFollow")

        logger.debug(f"sync_user_followers: {len(new_concepts)} new concept(s) for user {user_id}")
        await self.client.add_concepts_followed_by_user(
            user_id, new_concepts, self.client.followed_properties(as_member_of=group_id)
        )

        await self._ensure_digest_preference(user_id)

        logger.debug(f"sync_user_followers: emitting {SUBSCRIBE_EVENT} for user {user_id}")
        await self.publisher.emit(user_id, SUBSCRIBE_EVENT, _strip_rel(new_concepts))

        return SyncResult.completed(user_id, group_id, new_concepts)

    async def _ensure_digest_preference(self, user_id: str) -> None:
        """Create the default digest preference if the user has none."""
        existing = await recover_not_found(self.client.get_email_digest_preference(user_id), _MISSING)
        if existing is _MISSING:
            logger.debug(f"sync_user_followers: creating email-digest preference for user {user_id}")
            await self.client.set_email_digest_preference(user_id, self.client.digest_properties())
