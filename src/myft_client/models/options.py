"""Typed option bags for relationship mutations.

``RelationshipProperties`` is the property bag attached to a relationship
(the ``_rel`` record on the wire). ``MutationOptions`` carries the per-call
overrides for event suppression and cache purging; unset fields fall back to
the configured defaults.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..config import MyFTSettings


class RelationshipProperties(BaseModel):
    """Properties stored on a relationship edge.

    Known fields have names; anything else passes through untouched.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    by_tool: str | None = Field(default=None, alias="byTool")
    by_user: str | None = Field(default=None, alias="byUser")
    as_member_of: str | None = Field(default=None, alias="asMemberOf")
    type: str | None = None
    timezone: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class MutationOptions(BaseModel):
    """Per-call overrides for mutation side effects."""

    model_config = ConfigDict(frozen=True)

    no_event: bool | None = None
    wait_for_purge: bool | None = None

    def to_params(self, defaults: MyFTSettings) -> dict[str, bool]:
        """Render as query parameters, filling gaps from ``defaults``."""
        return {
            "noEvent": defaults.no_event if self.no_event is None else self.no_event,
            "waitForPurge": defaults.wait_for_purge_add if self.wait_for_purge is None else self.wait_for_purge,
        }


RelPropInput = RelationshipProperties | dict[str, Any] | None


def rel_prop_payload(rel_prop: RelPropInput) -> dict[str, Any] | None:
    """Normalise a property bag to its wire dict, or None when absent."""
    if rel_prop is None:
        return None
    if isinstance(rel_prop, RelationshipProperties):
        return rel_prop.to_payload()
    return dict(rel_prop)
