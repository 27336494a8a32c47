"""Builders for entities and relationships used across tests."""

from __future__ import annotations

from mbbot.domain.model import DateRange, Entity, EntityType, Relationship

# Arbitrary date for relationships that were ended before any rule ran.
SOME_DATE = DateRange(2003, 7, 9)


def url_entity(url: str, *rels: Relationship, mbid: str = "") -> Entity:
    return Entity(id=mbid, type=EntityType.URL, name=url, relationships=rels)


def rel(target_type: EntityType | str = "", **kwargs: object) -> Relationship:
    """Return a relationship to an entity of ``target_type`` with the given overrides."""

    return Relationship(target_type=target_type, **kwargs)  # type: ignore[arg-type]
