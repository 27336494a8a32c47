"""Form payloads for MusicBrainz edit submissions and their responses.

Relationship fields are handled by ``lib/MusicBrainz/Server/Controller/RelationshipEditor.pm``
on the server; the response to a batch is written by ``submit_edits`` in
``lib/MusicBrainz/Server/Controller/WS/js/Edit.pm``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import ValidationError

from mbbot.domain.errors import EditSubmissionError, PartialBatchFailure
from mbbot.domain.model import EditMode, EntityType

from .schema import RelationshipEditorResponse

if TYPE_CHECKING:
    from collections.abc import Sequence

    from mbbot.domain.model import DateRange
    from mbbot.domain.reconciliation import FieldUpdateSet

RELATIONSHIP_EDITOR_PREFIX = "rel-editor"
SUCCESS_RESPONSE = 1


@dataclass(frozen=True, slots=True)
class FieldUpdateRequest:
    path: str
    fields: dict[str, str]


def bool_param(value: bool) -> str:  # noqa: FBT001
    # boolean_from_json() on the server uses Perl truthiness, so "0" is false.
    return "1" if value else "0"


def _date_part(value: int) -> str:
    return str(value) if value else ""


def _date_fields(prefix: str, value: DateRange) -> dict[str, str]:
    return {
        f"{prefix}.year": _date_part(value.year),
        f"{prefix}.month": _date_part(value.month),
        f"{prefix}.day": _date_part(value.day),
    }


def build_field_update(
    entity_type: EntityType | str,
    entity_id: str,
    field: str,
    value: str,
    *,
    edit_note: str,
    make_votable: bool = False,
) -> FieldUpdateRequest:
    """Build the request changing one field of an entity via ``/<type>/<id>/edit``."""

    prefix = f"edit-{entity_type}"
    fields = {
        f"{prefix}.{field}": value,
        f"{prefix}.edit_note": edit_note,
    }
    if make_votable:
        fields[f"{prefix}.make_votable"] = "1"
    return FieldUpdateRequest(path=f"/{entity_type}/{entity_id}/edit", fields=fields)


def build_url_edit(
    entity_id: str, url: str, *, edit_note: str, make_votable: bool = False
) -> FieldUpdateRequest:
    return build_field_update(
        EntityType.URL, entity_id, "url", url, edit_note=edit_note, make_votable=make_votable
    )


def relationship_fields(index: int, update: FieldUpdateSet) -> dict[str, str]:
    """Render one relationship's changes under ``rel-editor.rels.<index>.``."""

    pre = f"{RELATIONSHIP_EDITOR_PREFIX}.rels.{index}."
    fields: dict[str, str] = {pre + "action": str(update.mode)}
    if update.mode is EditMode.EDIT:
        fields[pre + "id"] = str(update.relationship_id)
    # The server returns a 400 error if "action" or "link_type" is missing.
    fields[pre + "link_type"] = str(update.wire_link_type_id)
    if update.begin_date is not None:
        fields.update(_date_fields(pre + "period.begin_date", update.begin_date))
    if update.end_date is not None:
        fields.update(_date_fields(pre + "period.end_date", update.end_date))
    if update.ended is not None:
        fields[pre + "period.ended"] = bool_param(update.ended)
    if update.entities is not None:
        for slot, ref in enumerate(update.entities):
            fields[f"{pre}entity.{slot}.{ref.key}"] = ref.value
            fields[f"{pre}entity.{slot}.type"] = str(ref.type)
    return fields


def build_relationship_batch(
    updates: Sequence[FieldUpdateSet],
    *,
    edit_note: str,
    make_votable: bool = False,
) -> dict[str, str]:
    """Build the ``/relationship-editor`` form for a batch of relationship changes."""

    if not updates:
        raise ValueError("relationship batch must contain at least one update")
    fields: dict[str, str] = {}
    for index, update in enumerate(updates):
        fields.update(relationship_fields(index, update))
    fields[f"{RELATIONSHIP_EDITOR_PREFIX}.edit_note"] = edit_note
    if make_votable:
        fields[f"{RELATIONSHIP_EDITOR_PREFIX}.make_votable"] = "1"
    return fields


def interpret_batch_response(body: str | bytes) -> list[int]:
    """Return relationship ids from a batch response (0 for edited relationships).

    Outcomes are read in order; the first unsuccessful one raises
    ``PartialBatchFailure`` listing the ids of the outcomes before it.
    """

    try:
        response = RelationshipEditorResponse.model_validate_json(body)
    except ValidationError as exc:
        raise EditSubmissionError(f"unmarshaling response: {exc}") from exc

    ids: list[int] = []
    for index, outcome in enumerate(response.edits):
        if outcome.response != SUCCESS_RESPONSE:
            raise PartialBatchFailure(
                index=index,
                edit_type=outcome.edit_type,
                response=outcome.response,
                completed=ids,
            )
        ids.append(outcome.relationship_id)
    return ids


def parse_edit_id(body: str, edit_id_pattern: re.Pattern[str]) -> int:
    """Find the id of a newly created edit in the page returned after submitting it."""

    match = edit_id_pattern.search(body)
    if match is None:
        raise EditSubmissionError("didn't find edit ID")
    return int(match.group(1))