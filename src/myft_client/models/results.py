"""Result models returned by the synchronisation workflow."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

SyncStatus = Literal["synchronisationCompleted", "synchronisationIgnored"]
SyncIgnoredReason = Literal["noGroupConceptsToFollow", "noNewConceptsToFollow"]


class SyncResult(BaseModel):
    """Outcome of syncing one user's follows against one group's follows.

    ``reason`` is set only when the sync was ignored;
    ``new_concepts_to_follow`` only when it completed.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    uuid: str
    group: str
    status: SyncStatus
    reason: SyncIgnoredReason | None = None
    new_concepts_to_follow: list[dict[str, Any]] | None = Field(default=None, alias="newConceptsToFollow")

    @classmethod
    def ignored(cls, user_id: str, group_id: str, reason: SyncIgnoredReason) -> SyncResult:
        return cls(uuid=user_id, group=group_id, status="synchronisationIgnored", reason=reason)

    @classmethod
    def completed(cls, user_id: str, group_id: str, new_concepts: list[dict[str, Any]]) -> SyncResult:
        return cls(
            uuid=user_id,
            group=group_id,
            status="synchronisationCompleted",
            new_concepts_to_follow=new_concepts,
        )

    def to_response(self) -> dict[str, Any]:
        """Wire shape: ``{"user": {...}}`` with camelCase keys."""
        return {"user": self.model_dump(by_alias=True, exclude_none=True)}
