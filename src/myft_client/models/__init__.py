"""Typed models for relationship options and workflow results."""

from .options import MutationOptions, RelationshipProperties, rel_prop_payload
from .results import SyncResult

__all__ = ["MutationOptions", "RelationshipProperties", "SyncResult", "rel_prop_payload"]
