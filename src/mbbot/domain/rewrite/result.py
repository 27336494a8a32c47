"""Value objects produced by rewrite rules."""

from __future__ import annotations

from dataclasses import dataclass

from mbbot.domain.model import Entity, Relationship


@dataclass(frozen=True, slots=True)
class RelationshipChange:
    """An existing relationship paired with the state a rule wants it to have."""

    original: Relationship
    desired: Relationship


@dataclass(frozen=True, slots=True, kw_only=True)
class RewriteResult:
    """Desired end state computed by one rule for one entity.

    ``new_entities`` hold entities that should be created; their relationships all have
    an id of zero.
    """

    rewritten_name: str
    updated_relationships: tuple[RelationshipChange, ...] = ()
    new_entities: tuple[Entity, ...] = ()
    edit_note: str = ""

    def is_noop(self, original_name: str) -> bool:
        return (
            self.rewritten_name == original_name
            and not self.updated_relationships
            and not self.new_entities
        )
