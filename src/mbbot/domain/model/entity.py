"""Catalog entities and the relationships attached to them."""

from __future__ import annotations

from dataclasses import dataclass, field

from .enums import EntityType
from .primitives import DateRange, LinkTypeId, Mbid


@dataclass(frozen=True, slots=True, kw_only=True)
class Relationship:
    """A typed, dated, directional link from an owning entity to a target entity.

    ``id`` is zero for relationships that have not been created yet. ``backward`` is set
    when the owning entity is the target of the link rather than its source.
    """

    id: int = 0
    link_type_id: LinkTypeId = 0
    link_phrase: str = ""
    begin_date: DateRange = field(default_factory=DateRange)
    end_date: DateRange = field(default_factory=DateRange)
    ended: bool = False
    backward: bool = False
    target_id: Mbid = ""
    target_name: str = ""
    target_type: EntityType | str = ""

    def describe(self, owner_name: str) -> str:
        """Describe the relationship, e.g. "[owner] has an official homepage at [target]"."""

        target = self.target_name or self.target_id
        phrase = f"{self.link_phrase}[{self.link_type_id}]"
        if self.backward:
            text = f"{target} {phrase} {owner_name}"
        else:
            text = f"{owner_name} {phrase} {target}"
        if not self.begin_date.empty():
            text += f" from {self.begin_date}"
        if self.ended:
            text += f" until {self.end_date}"
        return text


@dataclass(frozen=True, slots=True, kw_only=True)
class Entity:
    """A catalog record. For URL entities ``name`` holds the URL itself."""

    id: Mbid = ""
    type: EntityType | str = EntityType.URL
    name: str
    relationships: tuple[Relationship, ...] = ()


def filter_relationships(
    relationships: tuple[Relationship, ...] | list[Relationship],
    target_type: EntityType | str,
) -> list[Relationship]:
    """Return relationships whose target has the given entity type."""

    return [rel for rel in relationships if rel.target_type == target_type]
