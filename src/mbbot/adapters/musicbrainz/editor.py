"""Edit submission adapter for the MusicBrainz website."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from .edits import (
    build_field_update,
    build_relationship_batch,
    interpret_batch_response,
    parse_edit_id,
)
from .session import RELATIONSHIP_EDITOR_PATH

if TYPE_CHECKING:
    from collections.abc import Sequence

    from mbbot.domain.model import Entity
    from mbbot.domain.reconciliation import FieldUpdateSet

    from .session import EditorSession

log = getLogger(__name__)


class MusicBrainzEditor:
    """``EditSubmitter`` posting the website's edit forms through a session."""

    def __init__(self, session: EditorSession) -> None:
        self._session = session

    async def submit_field_update(
        self,
        entity: Entity,
        field: str,
        value: str,
        *,
        edit_note: str,
        make_votable: bool = False,
    ) -> int:
        request = build_field_update(
            entity.type,
            entity.id,
            field,
            value,
            edit_note=edit_note,
            make_votable=make_votable,
        )
        body = await self._session.post(request.path, request.fields)
        return parse_edit_id(body, self._session.edit_id_pattern)

    async def submit_relationship_batch(
        self,
        updates: Sequence[FieldUpdateSet],
        *,
        edit_note: str,
        make_votable: bool = False,
    ) -> list[int]:
        fields = build_relationship_batch(
            updates, edit_note=edit_note, make_votable=make_votable
        )
        body = await self._session.post(RELATIONSHIP_EDITOR_PATH, fields)
        return interpret_batch_response(body)

    async def cancel_edit(self, edit_id: int, *, edit_note: str = "") -> None:
        log.info("Canceling edit %s", edit_id)
        await self._session.post(f"/edit/{edit_id}/cancel", {"confirm.edit_note": edit_note})
