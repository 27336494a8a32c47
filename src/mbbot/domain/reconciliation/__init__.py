"""Relationship reconciliation: minimal edits between stored and desired state."""

from __future__ import annotations

from .apply import apply_field_updates
from .diff import EntityRef, FieldUpdateSet, diff, entity_slots, plan_creation

__all__ = [
    "EntityRef",
    "FieldUpdateSet",
    "apply_field_updates",
    "diff",
    "entity_slots",
    "plan_creation",
]
