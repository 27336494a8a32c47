"""Application service for maintaining URL entities one identifier at a time."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from mbbot.domain.errors import MBBotError, PartialBatchFailure
from mbbot.domain.model import EntityType
from mbbot.domain.reconciliation import diff, plan_creation
from mbbot.domain.rewrite import URL_RULES, rewrite

if TYPE_CHECKING:
    from collections.abc import Iterable

    from mbbot.domain.model import Entity, Mbid
    from mbbot.domain.ports import EditSubmitter, EntityFetcher
    from mbbot.domain.reconciliation import FieldUpdateSet
    from mbbot.domain.rewrite import RewriteResult, RuleTable

log = getLogger(__name__)


@dataclass(slots=True)
class ProcessResult:
    """Outcome of processing one URL identifier."""

    entity_id: Mbid
    url: str | None = None
    edit_ids: list[int] = field(default_factory=list[int])
    edited_relationships: int = 0
    created_relationship_ids: list[int] = field(default_factory=list[int])
    error: MBBotError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def changed(self) -> bool:
        return bool(self.edit_ids or self.edited_relationships or self.created_relationship_ids)


@dataclass(slots=True)
class _EditPlan:
    relationship_edits: list[FieldUpdateSet]
    creations: list[tuple[Entity, list[FieldUpdateSet]]]


def _plan_edits(entity: Entity, result: RewriteResult) -> _EditPlan:
    edits: list[FieldUpdateSet] = []
    for change in result.updated_relationships:
        log.info(
            "%s: editing relationship %s (%r)",
            entity.id,
            change.original.id,
            change.desired.describe(entity.name),
        )
        edits.append(diff(change.original, change.desired))

    creations: list[tuple[Entity, list[FieldUpdateSet]]] = []
    for new_entity in result.new_entities:
        adds: list[FieldUpdateSet] = []
        for rel in new_entity.relationships:
            log.info("%s: adding relationship (%r)", entity.id, rel.describe(new_entity.name))
            adds.append(plan_creation(new_entity, rel))
        if adds:
            creations.append((new_entity, adds))
    return _EditPlan(relationship_edits=edits, creations=creations)


async def process_url(
    entity_id: Mbid,
    *,
    catalog: EntityFetcher,
    editor: EditSubmitter,
    rules: RuleTable = URL_RULES,
    edit_note: str = "",
    make_votable: bool = False,
) -> ProcessResult:
    """Fetch one URL entity, work out its corrections and submit them.

    ``edit_note`` replaces the rule's own note when non-empty. Every relationship edit
    is reconciled before anything is submitted, so reconciliation errors leave the
    entity untouched. Failures are logged and reported in the result rather than
    raised, so callers can carry on with the next identifier.
    """

    outcome = ProcessResult(entity_id=entity_id)
    try:
        await _process(
            outcome,
            catalog=catalog,
            editor=editor,
            rules=rules,
            edit_note=edit_note,
            make_votable=make_votable,
        )
    except PartialBatchFailure as exc:
        log.error(  # noqa: TRY400
            "%s: %s; completed relationship ids: %s", entity_id, exc, exc.completed
        )
        outcome.error = exc
    except MBBotError as exc:
        log.error("%s: %s", entity_id, exc)  # noqa: TRY400
        outcome.error = exc
    return outcome


async def _process(
    outcome: ProcessResult,
    *,
    catalog: EntityFetcher,
    editor: EditSubmitter,
    rules: RuleTable,
    edit_note: str,
    make_votable: bool,
) -> None:
    entity_id = outcome.entity_id
    entity = await catalog.fetch_entity(entity_id, EntityType.URL)
    outcome.url = entity.name

    result = rewrite(entity, rules)
    if result is None:
        log.info("%s: no rewrites found for %s", entity_id, entity.name)
        return
    note = edit_note or result.edit_note
    plan = _plan_edits(entity, result)

    if result.rewritten_name and result.rewritten_name != entity.name:
        log.info("%s: rewriting %s to %s", entity_id, entity.name, result.rewritten_name)
        edit_id = await editor.submit_field_update(
            entity, "url", result.rewritten_name, edit_note=note, make_votable=make_votable
        )
        outcome.edit_ids.append(edit_id)
        log.info("%s: created edit #%s", entity_id, edit_id)

    # Old relationships stay active until their replacements exist.
    for new_entity, adds in plan.creations:
        try:
            ids = await editor.submit_relationship_batch(
                adds, edit_note=note, make_votable=make_votable
            )
        except PartialBatchFailure as exc:
            outcome.created_relationship_ids.extend(exc.completed)
            raise
        outcome.created_relationship_ids.extend(ids)
        for rel_id in ids:
            log.info("%s: added relationship %s to %s", entity_id, rel_id, new_entity.name)

    if plan.relationship_edits:
        try:
            ids = await editor.submit_relationship_batch(
                plan.relationship_edits, edit_note=note, make_votable=make_votable
            )
        except PartialBatchFailure as exc:
            outcome.edited_relationships += len(exc.completed)
            raise
        outcome.edited_relationships += len(ids)
        log.info("%s: edited %s relationship(s)", entity_id, len(ids))


async def process_urls(
    entity_ids: Iterable[Mbid],
    *,
    catalog: EntityFetcher,
    editor: EditSubmitter,
    rules: RuleTable = URL_RULES,
    edit_note: str = "",
    make_votable: bool = False,
) -> list[ProcessResult]:
    """Process identifiers strictly one after another, continuing past failures."""

    results: list[ProcessResult] = []
    for entity_id in entity_ids:
        results.append(
            await process_url(
                entity_id,
                catalog=catalog,
                editor=editor,
                rules=rules,
                edit_note=edit_note,
                make_votable=make_votable,
            )
        )
    return results
