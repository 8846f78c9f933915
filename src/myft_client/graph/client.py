"""
myFT relationship client.

Public vocabulary over the myFT v3 relationship API. Every operation has a
fixed (node, relationship, related node) triple baked in and is composed
from the request builder plus one of three execution strategies:

- single request: node lookups, membership add/remove, unfollows
- pagination aggregator: "list everything related to X" reads
- batch mutation engine: follows and digest preferences, which apply the
  same subjects to many node ids

Reads raise NotFoundError when the node/edge does not exist and return an
empty list when it exists with nothing related to it.
"""

import json
import logging
from collections.abc import Sequence
from typing import Any

from ..config import AttributionSettings, HttpSettings, MyFTSettings
from ..models.options import MutationOptions, RelationshipProperties, RelPropInput, rel_prop_payload
from .batch import batch_mutate
from .pagination import fetch_all
from .request import RelationshipRequestBuilder
from .schema import (
    DEFAULT_DIGEST_TIMEZONE,
    DEFAULT_DIGEST_TYPE,
    EMAIL_DIGEST_ID,
    PREFERRED_SEGMENT,
    REL_PROP_KEY,
    NodeKind,
    RelationshipKind,
)
from .transport import HttpTransport, parse_json

logger = logging.getLogger(__name__)

IdInput = str | Sequence[str]


def _subject_records(ids: IdInput, rel_prop: dict[str, Any] | None) -> dict[str, Any] | list[dict[str, Any]]:
    """``{"uuid": id, "_rel": props}`` per id; a single id stays a single record."""

    def record(uuid: str) -> dict[str, Any]:
        item: dict[str, Any] = {"uuid": uuid}
        if rel_prop is not None:
            item[REL_PROP_KEY] = rel_prop
        return item

    if isinstance(ids, str):
        return record(ids)
    return [record(uuid) for uuid in ids]


def _concept_records(concepts: Sequence[str | dict[str, Any]]) -> list[dict[str, Any]]:
    """Accept concept ids or concept records; always return records."""
    return [{"uuid": c} if isinstance(c, str) else c for c in concepts]


class MyFTClient:
    """
    Async client for the myFT relationship graph.

    Args:
        settings: API location, paging/batching limits, default mutation flags
        attribution: Tool/admin ids recorded on created relationships
        transport: HTTP transport used for every request; one is created
            from default HttpSettings when omitted
    """

    def __init__(
        self,
        settings: MyFTSettings,
        attribution: AttributionSettings,
        transport: HttpTransport | None = None,
    ):
        self.settings = settings
        self.attribution = attribution
        self.transport = transport if transport is not None else HttpTransport(HttpSettings())
        self.builder = RelationshipRequestBuilder(settings)

    async def close(self) -> None:
        await self.transport.close()

    async def __aenter__(self) -> "MyFTClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # ── Relationship properties ─────────────────────────────────────────

    def relationship_properties(self) -> RelationshipProperties:
        """Attribution recorded on every relationship this client creates."""
        return RelationshipProperties(by_tool=self.attribution.tool_id, by_user=self.attribution.tool_admin_id)

    def followed_properties(self, as_member_of: str | None = None) -> RelationshipProperties:
        """Properties for a follow edge, optionally tagged with the group it came from."""
        return self.relationship_properties().model_copy(update={"as_member_of": as_member_of})

    def digest_properties(self) -> RelationshipProperties:
        """Default email-digest preference: daily, London time."""
        return self.relationship_properties().model_copy(
            update={"type": DEFAULT_DIGEST_TYPE, "timezone": DEFAULT_DIGEST_TIMEZONE}
        )

    # ── Internals ───────────────────────────────────────────────────────

    def _params(self, options: MutationOptions | None) -> dict[str, bool]:
        return (options or MutationOptions()).to_params(self.settings)

    async def _request(
        self,
        method: str,
        node: str,
        node_id: str | None = None,
        relationship: str | None = None,
        related_node: str | None = None,
        related_id: str | None = None,
        data: Any = None,
        params: dict[str, Any] | None = None,
        operation: str | None = None,
    ) -> Any:
        request = self.builder.relationship(method, node, node_id, relationship, related_node, related_id, data, params)
        return parse_json(await self.transport.execute(request), operation)

    async def _add_remove_relationships(
        self,
        method: str,
        node: str,
        node_id: str,
        relationship: str,
        related_node: str,
        related_ids: IdInput,
        rel_prop: RelPropInput = None,
        options: MutationOptions | None = None,
        parse: bool = True,
    ) -> Any:
        """Single request adding/removing ``related_ids`` on one node."""
        operation = f"{method} {node}/{node_id}/{relationship}/{related_node}"
        props = rel_prop_payload(rel_prop)
        params = self._params(options)
        logger.debug(
            f"{operation}: ids={json.dumps(related_ids if isinstance(related_ids, str) else list(related_ids))} "
            f"rel_prop={json.dumps(props)} options={json.dumps(params)}"
        )

        request = self.builder.relationship(
            method,
            node,
            node_id,
            relationship,
            related_node,
            data=_subject_records(related_ids, props),
            params=params,
        )
        response = await self.transport.execute(request)
        result = parse_json(response, operation) if parse else None

        logger.debug(f"{operation}: success")
        return result

    async def _batch(
        self,
        method: str,
        node: str,
        node_ids: IdInput,
        relationship: str,
        related_node: str,
        payloads: Sequence[dict[str, Any]],
        rel_prop: RelPropInput = None,
        options: MutationOptions | None = None,
    ) -> list[Any]:
        return await batch_mutate(
            self.transport,
            self.builder,
            method,
            node,
            node_ids,
            relationship,
            related_node,
            payloads,
            rel_prop=rel_prop_payload(rel_prop),
            params=self._params(options),
            batch_size=self.settings.batch_user_count,
            concurrency=self.settings.batch_user_concurrency,
        )

    async def _fetch_all(self, node: str, node_id: str, relationship: str, related_node: str) -> list[Any]:
        return await fetch_all(
            self.transport,
            self.builder,
            node,
            node_id,
            relationship,
            related_node,
            page_size=self.settings.page_size,
        )

    async def _scoped_get(
        self,
        node_id: str,
        related_node: str,
        related_id: str,
        relationship: str,
        related_type: str,
    ) -> Any:
        operation = f"GET license/{node_id}/{related_node}/{related_id}/{relationship}/{related_type}"
        logger.debug(f"{operation}: start")
        request = self.builder.scoped(
            "GET", NodeKind.LICENCE, node_id, related_node, related_id, relationship, related_type
        )
        result = parse_json(await self.transport.execute(request), operation)
        logger.debug(f"{operation}: success")
        return result

    # ── Licence nodes ───────────────────────────────────────────────────

    async def add_licence(self, uuid: str) -> Any:
        """Create a licence node."""
        logger.debug(f"add_licence: {uuid}")
        return await self._request("POST", NodeKind.LICENCE, data={"uuid": uuid}, operation=f"add_licence {uuid}")

    async def get_licence(self, uuid: str) -> Any:
        """
        Get a licence node.

        Raises:
            NotFoundError: If the licence does not exist.
        """
        logger.debug(f"get_licence: {uuid}")
        return await self._request("GET", NodeKind.LICENCE, uuid, operation=f"get_licence {uuid}")

    async def update_licence(self, uuid: str, data: dict[str, Any]) -> Any:
        """Replace the attributes of a licence node."""
        logger.debug(f"update_licence: {uuid} data={json.dumps(data)}")
        return await self._request("PUT", NodeKind.LICENCE, uuid, data=data, operation=f"update_licence {uuid}")

    # ── Membership ──────────────────────────────────────────────────────

    async def add_users_to_licence(
        self,
        licence_id: str,
        user_ids: IdInput,
        rel_prop: RelPropInput = None,
        options: MutationOptions | None = None,
    ) -> Any:
        """Add one or more users as members of a licence."""
        return await self._add_remove_relationships(
            "POST", NodeKind.LICENCE, licence_id, RelationshipKind.MEMBER, NodeKind.USER, user_ids, rel_prop, options
        )

    async def remove_users_from_licence(
        self, licence_id: str, user_ids: IdInput, options: MutationOptions | None = None
    ) -> None:
        """Remove one or more users from a licence."""
        await self._add_remove_relationships(
            "DELETE",
            NodeKind.LICENCE,
            licence_id,
            RelationshipKind.MEMBER,
            NodeKind.USER,
            user_ids,
            options=options,
            parse=False,
        )

    async def add_users_to_group(
        self,
        group_id: str,
        user_ids: IdInput,
        rel_prop: RelPropInput = None,
        options: MutationOptions | None = None,
    ) -> Any:
        """Add one or more users as members of a group."""
        return await self._add_remove_relationships(
            "POST", NodeKind.GROUP, group_id, RelationshipKind.MEMBER, NodeKind.USER, user_ids, rel_prop, options
        )

    async def remove_users_from_group(
        self, group_id: str, user_ids: IdInput, options: MutationOptions | None = None
    ) -> None:
        """Remove one or more users from a group."""
        await self._add_remove_relationships(
            "DELETE",
            NodeKind.GROUP,
            group_id,
            RelationshipKind.MEMBER,
            NodeKind.USER,
            user_ids,
            options=options,
            parse=False,
        )

    async def add_groups_to_licence(
        self,
        licence_id: str,
        group_ids: IdInput,
        rel_prop: RelPropInput = None,
        options: MutationOptions | None = None,
    ) -> Any:
        """Add one or more groups to a licence."""
        return await self._add_remove_relationships(
            "POST", NodeKind.LICENCE, licence_id, RelationshipKind.MEMBER, NodeKind.GROUP, group_ids, rel_prop, options
        )

    async def remove_groups_from_licence(
        self, licence_id: str, group_ids: IdInput, options: MutationOptions | None = None
    ) -> None:
        """Remove one or more groups from a licence."""
        await self._add_remove_relationships(
            "DELETE",
            NodeKind.LICENCE,
            licence_id,
            RelationshipKind.MEMBER,
            NodeKind.GROUP,
            group_ids,
            options=options,
            parse=False,
        )

    async def get_user_from_licence(self, licence_id: str, user_id: str) -> Any:
        """Get a user's membership of a licence. NotFoundError if not a member."""
        return await self._get_member(NodeKind.LICENCE, licence_id, NodeKind.USER, user_id)

    async def get_user_from_group(self, group_id: str, user_id: str) -> Any:
        """Get a user's membership of a group. NotFoundError if not a member."""
        return await self._get_member(NodeKind.GROUP, group_id, NodeKind.USER, user_id)

    async def get_group_from_licence(self, licence_id: str, group_id: str) -> Any:
        """Get a group's membership of a licence. NotFoundError if not a member."""
        return await self._get_member(NodeKind.LICENCE, licence_id, NodeKind.GROUP, group_id)

    async def _get_member(self, node: str, node_id: str, member_kind: str, member_id: str) -> Any:
        operation = f"get_member {node}/{node_id}/{member_kind}/{member_id}"
        logger.debug(f"{operation}: start")
        result = await self._request(
            "GET", node, node_id, RelationshipKind.MEMBER, member_kind, member_id, operation=operation
        )
        logger.debug(f"{operation}: success")
        return result

    async def get_users_for_licence(self, licence_id: str) -> list[Any]:
        """All users that are members of a licence."""
        return await self._fetch_all(NodeKind.LICENCE, licence_id, RelationshipKind.MEMBER, NodeKind.USER)

    async def get_users_for_group(self, group_id: str) -> list[Any]:
        """All users that are members of a group."""
        return await self._fetch_all(NodeKind.GROUP, group_id, RelationshipKind.MEMBER, NodeKind.USER)

    async def get_groups_for_licence(self, licence_id: str) -> list[Any]:
        """All groups belonging to a licence."""
        return await self._fetch_all(NodeKind.LICENCE, licence_id, RelationshipKind.MEMBER, NodeKind.GROUP)

    # ── Follows ─────────────────────────────────────────────────────────

    async def get_concepts_followed_by_user(self, user_id: str) -> list[Any]:
        """All concepts a user follows."""
        return await self._fetch_all(NodeKind.USER, user_id, RelationshipKind.FOLLOWED, NodeKind.CONCEPT)

    async def get_concepts_followed_by_group(self, group_id: str) -> list[Any]:
        """All concepts a group follows."""
        return await self._fetch_all(NodeKind.GROUP, group_id, RelationshipKind.FOLLOWED, NodeKind.CONCEPT)

    async def add_concepts_followed_by_user(
        self,
        user_ids: IdInput,
        concepts: Sequence[str | dict[str, Any]],
        rel_prop: RelPropInput = None,
        options: MutationOptions | None = None,
    ) -> list[Any]:
        """
        Make one or more users follow the given concepts.

        Args:
            user_ids: A user id or a list of user ids (batched)
            concepts: Concept ids or concept records (``{"uuid": ...}``)
            rel_prop: Properties for each follow edge, e.g. ``followed_properties()``
            options: Event/purge overrides

        Returns:
            Per-chunk outcomes; see ``batch_mutate``.
        """
        return await self._batch(
            "POST",
            NodeKind.USER,
            user_ids,
            RelationshipKind.FOLLOWED,
            NodeKind.CONCEPT,
            _concept_records(concepts),
            rel_prop,
            options,
        )

    async def add_concepts_followed_by_group(
        self,
        group_ids: IdInput,
        concepts: Sequence[str | dict[str, Any]],
        rel_prop: RelPropInput = None,
        options: MutationOptions | None = None,
    ) -> list[Any]:
        """Make one or more groups follow the given concepts."""
        return await self._batch(
            "POST",
            NodeKind.GROUP,
            group_ids,
            RelationshipKind.FOLLOWED,
            NodeKind.CONCEPT,
            _concept_records(concepts),
            rel_prop,
            options,
        )

    async def remove_concepts_followed_by_user(
        self, user_id: str, concept_ids: IdInput, options: MutationOptions | None = None
    ) -> None:
        """Unfollow one or more concepts for a user."""
        await self._add_remove_relationships(
            "DELETE",
            NodeKind.USER,
            user_id,
            RelationshipKind.FOLLOWED,
            NodeKind.CONCEPT,
            concept_ids,
            options=options,
            parse=False,
        )

    async def remove_concepts_followed_by_group(
        self, group_id: str, concept_ids: IdInput, options: MutationOptions | None = None
    ) -> None:
        """Unfollow one or more concepts for a group."""
        await self._add_remove_relationships(
            "DELETE",
            NodeKind.GROUP,
            group_id,
            RelationshipKind.FOLLOWED,
            NodeKind.CONCEPT,
            concept_ids,
            options=options,
            parse=False,
        )

    async def get_users_following_concept(self, licence_id: str, concept_id: str) -> Any:
        """Users within a licence that follow a concept."""
        return await self._scoped_get(
            licence_id, NodeKind.CONCEPT, concept_id, RelationshipKind.FOLLOWED, NodeKind.USER
        )

    async def get_groups_following_concept(self, licence_id: str, concept_id: str) -> Any:
        """Groups within a licence that follow a concept."""
        return await self._scoped_get(
            licence_id, NodeKind.CONCEPT, concept_id, RelationshipKind.FOLLOWED, NodeKind.GROUP
        )

    # ── Email digest preference ─────────────────────────────────────────

    async def get_email_digest_preference(self, user_id: str) -> Any:
        """
        Get a user's email-digest preference.

        Raises:
            NotFoundError: If the user has no digest preference.
        """
        operation = f"get_email_digest_preference {user_id}"
        logger.debug(f"{operation}: start")
        result = await self._request(
            "GET",
            NodeKind.USER,
            user_id,
            PREFERRED_SEGMENT,
            RelationshipKind.PREFERENCE,
            EMAIL_DIGEST_ID,
            operation=operation,
        )
        logger.debug(f"{operation}: success")
        return result

    async def set_email_digest_preference(
        self,
        user_ids: IdInput,
        preference: RelPropInput,
        options: MutationOptions | None = None,
    ) -> list[Any]:
        """
        Set the email-digest preference for one or more users.

        ``preference`` should carry at least ``type`` and ``timezone``,
        e.g. ``digest_properties()``.
        """
        return await self._batch(
            "POST",
            NodeKind.USER,
            user_ids,
            PREFERRED_SEGMENT,
            RelationshipKind.PREFERENCE,
            [{"uuid": EMAIL_DIGEST_ID}],
            preference,
            options,
        )

    async def get_users_with_email_digest_preference(self, licence_id: str) -> Any:
        """Users within a licence that have an email-digest preference."""
        return await self._scoped_get(
            licence_id, RelationshipKind.PREFERENCE, EMAIL_DIGEST_ID, PREFERRED_SEGMENT, NodeKind.USER
        )
