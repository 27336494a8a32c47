"""Apply field update sets to relationships (the inverse of ``diff``)."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from mbbot.domain.errors import InvalidStateError
from mbbot.domain.model import EditMode

if TYPE_CHECKING:
    from mbbot.domain.model import Relationship

    from .diff import FieldUpdateSet


def apply_field_updates(base: Relationship, update: FieldUpdateSet) -> Relationship:
    """Return ``base`` with the changes in ``update`` applied.

    For edits ``base`` must be the relationship the update was computed against. For
    additions ``base`` is a template carrying the endpoint fields; its id must be zero.
    """

    if update.mode is EditMode.EDIT and update.relationship_id != base.id:
        raise InvalidStateError(
            f"update for relationship {update.relationship_id} applied to {base.id}"
        )
    if update.mode is EditMode.ADD and base.id != 0:
        raise InvalidStateError(f"add request applied to existing relationship {base.id}")

    result = base
    if update.link_type_id is not None:
        result = replace(result, link_type_id=update.link_type_id)
    if update.begin_date is not None:
        result = replace(result, begin_date=update.begin_date)
    if update.end_date is not None:
        result = replace(result, end_date=update.end_date)
    if update.ended is not None:
        result = replace(result, ended=update.ended)
    return result
