"""Port for submitting edits to the catalog."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from mbbot.domain.model import Entity
    from mbbot.domain.reconciliation import FieldUpdateSet


@runtime_checkable
class EditSubmitter(Protocol):
    async def submit_field_update(
        self,
        entity: Entity,
        field: str,
        value: str,
        *,
        edit_note: str,
        make_votable: bool = False,
    ) -> int:
        """Change one field of ``entity`` and return the id of the created edit."""
        ...

    async def submit_relationship_batch(
        self,
        updates: Sequence[FieldUpdateSet],
        *,
        edit_note: str,
        make_votable: bool = False,
    ) -> list[int]:
        """Submit relationship edits together.

        Returns the ids of created relationships, with 0 for edited ones. Raises
        ``PartialBatchFailure`` when an edit fails; its ``completed`` attribute holds the
        ids reported for the edits before it.
        """
        ...

    async def cancel_edit(self, edit_id: int, *, edit_note: str = "") -> None: ...


__all__ = ["EditSubmitter"]
