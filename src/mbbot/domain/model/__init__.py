"""Domain model for catalog entities and their relationships."""

from __future__ import annotations

from .entity import Entity, Relationship, filter_relationships
from .enums import EditMode, EntityType, RelationshipField
from .primitives import DateRange, LinkTypeId, Mbid

__all__ = [
    "DateRange",
    "EditMode",
    "Entity",
    "EntityType",
    "LinkTypeId",
    "Mbid",
    "Relationship",
    "RelationshipField",
    "filter_relationships",
]
