"""Translate scraped MusicBrainz payloads into domain entities."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mbbot.domain.errors import ScrapeError
from mbbot.domain.model import DateRange, Entity, EntityType, Relationship

if TYPE_CHECKING:
    from .schema import JsonDate, JsonPageData, JsonRelationship


def _entity_type(value: str) -> EntityType | str:
    try:
        return EntityType(value)
    except ValueError:
        return value


def translate_date(payload: JsonDate | None) -> DateRange:
    if payload is None:
        return DateRange()
    return DateRange(payload.year or 0, payload.month or 0, payload.day or 0)


def translate_relationship(payload: JsonRelationship) -> Relationship:
    return Relationship(
        id=payload.id,
        link_type_id=payload.link_type_id,
        link_phrase=payload.verbose_phrase,
        begin_date=translate_date(payload.begin_date),
        end_date=translate_date(payload.end_date),
        ended=payload.ended,
        backward=payload.backward,
        target_id=payload.target.gid,
        target_name=payload.target.name,
        target_type=_entity_type(payload.target.entity_type),
    )


def translate_entity(payload: JsonPageData) -> Entity:
    source = payload.stash.source_entity
    entity_type = _entity_type(source.entity_type)
    if (
        entity_type == EntityType.URL
        and source.decoded is not None
        and source.decoded != source.name
    ):
        # No telling which of these is the canonical URL.
        raise ScrapeError(f"URLs don't match (name={source.name!r}, decoded={source.decoded!r})")
    return Entity(
        id=source.gid,
        type=entity_type,
        name=source.name,
        relationships=tuple(translate_relationship(rel) for rel in source.relationships),
    )
