"""Minimal field-level deltas between stored and desired relationships.

The relationship editor accepts partial updates: any field left out of an edit request
keeps its stored value. ``diff`` therefore only reports fields whose value changes, so
unrelated data on the server is never touched.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from mbbot.domain.errors import (
    DirectionError,
    InvalidStateError,
    NoChangeError,
    UnsupportedUpdateError,
)
from mbbot.domain.model import DateRange, EditMode, EntityType, RelationshipField

if TYPE_CHECKING:
    from mbbot.domain.model import Entity, Relationship


@dataclass(frozen=True, slots=True)
class EntityRef:
    """One endpoint of a relationship as the relationship editor addresses it.

    URL entities are addressed by their URL, everything else by MBID.
    """

    type: EntityType | str
    value: str

    @property
    def key(self) -> str:
        return "url" if self.type == EntityType.URL else "gid"


@dataclass(frozen=True, slots=True, kw_only=True)
class FieldUpdateSet:
    """Changes needed to move one relationship to its desired state.

    ``None`` means "leave unchanged". ``current_link_type_id`` is the stored link type of
    an edited relationship; the server rejects edit requests without a link type, so it
    is sent even when the link type itself does not change.
    """

    mode: EditMode
    relationship_id: int = 0
    link_type_id: int | None = None
    begin_date: DateRange | None = None
    end_date: DateRange | None = None
    ended: bool | None = None
    current_link_type_id: int = 0
    entities: tuple[EntityRef, EntityRef] | None = None

    def changed_fields(self) -> frozenset[RelationshipField]:
        values = {
            RelationshipField.LINK_TYPE: self.link_type_id,
            RelationshipField.BEGIN_DATE: self.begin_date,
            RelationshipField.END_DATE: self.end_date,
            RelationshipField.ENDED: self.ended,
        }
        return frozenset(name for name, value in values.items() if value is not None)

    @property
    def wire_link_type_id(self) -> int:
        if self.link_type_id is not None:
            return self.link_type_id
        return self.current_link_type_id


def _date_change(original: DateRange | None, desired: DateRange) -> DateRange | None:
    # Clearing a stored date is not supported, so empty dates are never sent.
    if desired.empty() or desired == original:
        return None
    return desired


def _unsupported_differences(original: Relationship, desired: Relationship) -> list[str]:
    fields: list[str] = []
    if original.id != desired.id:
        fields.append("id")
    if original.backward != desired.backward:
        fields.append("backward")
    if original.target_id != desired.target_id:
        fields.append("target_id")
    if original.target_type != desired.target_type:
        fields.append("target_type")
    if original.target_name != desired.target_name:
        fields.append("target_name")
    if desired.begin_date.empty() and not original.begin_date.empty():
        fields.append("begin_date")
    if desired.end_date.empty() and not original.end_date.empty():
        fields.append("end_date")
    return fields


def diff(original: Relationship | None, desired: Relationship) -> FieldUpdateSet:
    """Return the edit that turns ``original`` into ``desired``.

    With ``original=None`` an "add" request for a new relationship is produced; the link
    type is always part of it. The display phrase is derived from the link type by the
    server and is not compared.
    """

    if original is None:
        if desired.id != 0:
            raise InvalidStateError(f"invalid relationship {desired.id} for creation")
        return FieldUpdateSet(
            mode=EditMode.ADD,
            link_type_id=desired.link_type_id,
            begin_date=_date_change(None, desired.begin_date),
            end_date=_date_change(None, desired.end_date),
            ended=True if desired.ended else None,
        )

    if original == desired:
        raise NoChangeError(f"no changes for relationship {desired.id}")

    unsupported = _unsupported_differences(original, desired)
    if unsupported:
        raise UnsupportedUpdateError(
            f"cannot change {', '.join(unsupported)} of relationship {original.id}"
        )

    update = FieldUpdateSet(
        mode=EditMode.EDIT,
        relationship_id=original.id,
        link_type_id=(
            desired.link_type_id if desired.link_type_id != original.link_type_id else None
        ),
        begin_date=_date_change(original.begin_date, desired.begin_date),
        end_date=_date_change(original.end_date, desired.end_date),
        ended=desired.ended if desired.ended != original.ended else None,
        current_link_type_id=original.link_type_id,
    )
    if not update.changed_fields():
        raise UnsupportedUpdateError(f"unsupported update for relationship {original.id}")
    return update


def entity_slots(owner: Entity, rel: Relationship) -> tuple[EntityRef, EntityRef]:
    """Order the endpoints of a new relationship owned by ``owner``.

    The relationship editor expects endpoints sorted by entity type name, e.g.
    ``[artist, url]`` and ``[recording, url]`` but ``[url, work]``. The owner is slot 0
    for forward relationships and slot 1 for backward ones.
    """

    owner_type = str(owner.type)
    target_type = str(rel.target_type)
    if (rel.backward and target_type > owner_type) or (
        not rel.backward and target_type < owner_type
    ):
        raise DirectionError(f"incorrect direction for relationship {rel.describe(owner.name)!r}")

    owner_value = owner.name if owner.type == EntityType.URL else owner.id
    owner_ref = EntityRef(type=owner.type, value=owner_value)
    target_ref = EntityRef(type=rel.target_type, value=rel.target_id)
    if rel.backward:
        return target_ref, owner_ref
    return owner_ref, target_ref


def plan_creation(owner: Entity, desired: Relationship) -> FieldUpdateSet:
    """Return an "add" request for ``desired`` including both entity slots."""

    slots = entity_slots(owner, desired)
    return replace(diff(None, desired), entities=slots)
