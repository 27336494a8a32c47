"""Port for fetching the current state of catalog entities."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from mbbot.domain.model import Entity, EntityType, Mbid


@runtime_checkable
class EntityFetcher(Protocol):
    async def fetch_entity(self, entity_id: Mbid, entity_type: EntityType) -> Entity:
        """Return the entity with its relationships.

        Raises ``NotFoundError`` for unknown identifiers and ``TransientError`` for
        network or server failures.
        """
        ...


__all__ = ["EntityFetcher"]
