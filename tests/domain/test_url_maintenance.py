"""Service-level checks for URL maintenance using in-memory ports."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from mbbot.domain.errors import (
    DirectionError,
    MBBotError,
    NotFoundError,
    PartialBatchFailure,
    TransientError,
)
from mbbot.domain.model import DateRange, EditMode, Entity, EntityType
from mbbot.domain.ports import EditSubmitter, EntityFetcher
from mbbot.domain.rewrite.rules import GEOCITIES_EDIT_NOTE, RECMUSIC_EDIT_NOTE, TIDAL_EDIT_NOTE
from mbbot.domain.url_maintenance import process_url, process_urls
from tests.helpers.relationships import rel, url_entity

if TYPE_CHECKING:
    from collections.abc import Sequence

    from mbbot.domain.model import Mbid
    from mbbot.domain.reconciliation import FieldUpdateSet

TIDAL_MBID = "40d2c699-f615-4f95-b212-24c344572333"
GEOCITIES_MBID = "56313079-1796-4fb8-add5-d8cf117f3ba5"
RECMUSIC_MBID = "4e135691-fdc1-4127-ab69-67095aa09c44"
DONE_MBID = "e9ce6782-29e6-4f09-82b0-0abd18061e32"
MISSING_MBID = "00000000-0000-0000-0000-000000000000"


class FakeCatalog:
    def __init__(self, entities: dict[str, Entity]) -> None:
        self._entities = entities
        self.fetched: list[str] = []

    async def fetch_entity(self, entity_id: Mbid, entity_type: EntityType) -> Entity:
        assert entity_type == EntityType.URL
        self.fetched.append(entity_id)
        try:
            return self._entities[entity_id]
        except KeyError:
            raise NotFoundError(f"/url/{entity_id}/edit not found") from None


class FakeEditor:
    def __init__(self, *, batch_failures: Sequence[MBBotError | None] = ()) -> None:
        self.field_updates: list[tuple[str, str, str, str, bool]] = []
        self.batches: list[tuple[list[FieldUpdateSet], str, bool]] = []
        self.cancelled: list[tuple[int, str]] = []
        self._batch_failures = list(batch_failures)

    async def submit_field_update(
        self,
        entity: Entity,
        field: str,
        value: str,
        *,
        edit_note: str,
        make_votable: bool = False,
    ) -> int:
        self.field_updates.append((entity.id, field, value, edit_note, make_votable))
        return 123

    async def submit_relationship_batch(
        self,
        updates: Sequence[FieldUpdateSet],
        *,
        edit_note: str,
        make_votable: bool = False,
    ) -> list[int]:
        self.batches.append((list(updates), edit_note, make_votable))
        failure = self._batch_failures.pop(0) if self._batch_failures else None
        if failure is not None:
            raise failure
        return [
            1000 + index if update.mode is EditMode.ADD else 0
            for index, update in enumerate(updates)
        ]

    async def cancel_edit(self, edit_id: int, *, edit_note: str = "") -> None:
        self.cancelled.append((edit_id, edit_note))


def _entities() -> dict[str, Entity]:
    return {
        TIDAL_MBID: url_entity("http://listen.tidal.com/artist/11069", mbid=TIDAL_MBID),
        GEOCITIES_MBID: url_entity(
            "http://www.geocities.com/user",
            rel(EntityType.ARTIST, id=123, link_type_id=3, target_id="a", backward=True),
            rel(
                EntityType.ARTIST,
                id=456,
                link_type_id=7,
                begin_date=DateRange(2000, 4, 5),
                target_id="b",
                backward=True,
            ),
            mbid=GEOCITIES_MBID,
        ),
        RECMUSIC_MBID: url_entity(
            "https://recmusic.jp/album/?id=1010526534",
            rel(EntityType.RELEASE, id=423, link_type_id=980, target_id="r", backward=True),
            mbid=RECMUSIC_MBID,
        ),
        DONE_MBID: url_entity("https://tidal.com/album/1234", mbid=DONE_MBID),
    }


def test_fakes_implement_ports() -> None:
    assert isinstance(FakeCatalog({}), EntityFetcher)
    assert isinstance(FakeEditor(), EditSubmitter)


def test_process_url_renames_canonicalized_url() -> None:
    catalog = FakeCatalog(_entities())
    editor = FakeEditor()

    result = asyncio.run(process_url(TIDAL_MBID, catalog=catalog, editor=editor))

    assert result.ok
    assert result.changed
    assert result.url == "http://listen.tidal.com/artist/11069"
    assert result.edit_ids == [123]
    assert editor.field_updates == [
        (TIDAL_MBID, "url", "https://tidal.com/artist/11069", TIDAL_EDIT_NOTE, False)
    ]
    assert editor.batches == []


def test_process_url_without_rewrite_submits_nothing() -> None:
    catalog = FakeCatalog(_entities())
    editor = FakeEditor()

    result = asyncio.run(process_url(DONE_MBID, catalog=catalog, editor=editor))

    assert result.ok
    assert not result.changed
    assert editor.field_updates == []
    assert editor.batches == []


def test_process_url_ends_relationships_in_one_batch() -> None:
    editor = FakeEditor()

    result = asyncio.run(
        process_url(
            GEOCITIES_MBID,
            catalog=FakeCatalog(_entities()),
            editor=editor,
            make_votable=True,
        )
    )

    assert result.ok
    assert result.edited_relationships == 2
    ((updates, note, votable),) = editor.batches
    assert note == GEOCITIES_EDIT_NOTE
    assert votable is True
    assert [update.relationship_id for update in updates] == [123, 456]
    assert all(update.ended is True for update in updates)
    assert all(update.end_date == DateRange(2009, 10, 26) for update in updates)


def test_process_url_uses_supplied_edit_note() -> None:
    editor = FakeEditor()

    asyncio.run(
        process_url(
            TIDAL_MBID,
            catalog=FakeCatalog(_entities()),
            editor=editor,
            edit_note="custom note",
        )
    )

    assert editor.field_updates[0][3] == "custom note"


def test_process_url_migrates_to_new_url() -> None:
    editor = FakeEditor()

    result = asyncio.run(
        process_url(RECMUSIC_MBID, catalog=FakeCatalog(_entities()), editor=editor)
    )

    assert result.ok
    assert result.edited_relationships == 1
    assert result.created_relationship_ids == [1000]
    assert len(editor.batches) == 2
    add_batch, edit_batch = editor.batches
    assert edit_batch[0][0].relationship_id == 423
    assert edit_batch[1] == RECMUSIC_EDIT_NOTE
    (add,) = add_batch[0]
    assert add.mode is EditMode.ADD
    assert add.link_type_id == 980
    assert add.begin_date == DateRange(2021, 10, 1)
    assert add.entities is not None
    assert [ref.value for ref in add.entities] == [
        "r",
        "https://music.tower.jp/album/detail/1010526534",
    ]


def test_process_url_reports_missing_entity() -> None:
    editor = FakeEditor()

    result = asyncio.run(
        process_url(MISSING_MBID, catalog=FakeCatalog({}), editor=editor)
    )

    assert not result.ok
    assert isinstance(result.error, NotFoundError)
    assert editor.field_updates == []


def test_process_url_reports_partial_batch_failure() -> None:
    failure = PartialBatchFailure(index=1, edit_type=90, response=0, completed=[0])
    editor = FakeEditor(batch_failures=[failure])

    result = asyncio.run(
        process_url(GEOCITIES_MBID, catalog=FakeCatalog(_entities()), editor=editor)
    )

    assert result.error is failure
    assert result.edited_relationships == 1
    assert len(editor.batches) == 1


def test_failed_creation_leaves_old_relationships_active() -> None:
    failure = TransientError("POST /relationship-editor failed")
    editor = FakeEditor(batch_failures=[failure])

    result = asyncio.run(
        process_url(RECMUSIC_MBID, catalog=FakeCatalog(_entities()), editor=editor)
    )

    assert result.error is failure
    assert result.created_relationship_ids == []
    assert result.edited_relationships == 0
    ((updates, _, _),) = editor.batches
    assert [update.mode for update in updates] == [EditMode.ADD]


def test_rerun_after_ending_still_creates_new_url() -> None:
    # State left behind when the old relationship was ended but its replacement was not
    # created.
    entity = url_entity(
        "https://recmusic.jp/album/?id=1010526534",
        rel(
            EntityType.RELEASE,
            id=423,
            link_type_id=980,
            target_id="r",
            backward=True,
            ended=True,
            end_date=DateRange(2021, 10, 1),
        ),
        mbid=RECMUSIC_MBID,
    )
    editor = FakeEditor()

    result = asyncio.run(
        process_url(RECMUSIC_MBID, catalog=FakeCatalog({RECMUSIC_MBID: entity}), editor=editor)
    )

    assert result.ok
    assert result.created_relationship_ids == [1000]
    assert result.edited_relationships == 0
    ((updates, note, _),) = editor.batches
    assert note == RECMUSIC_EDIT_NOTE
    (add,) = updates
    assert add.mode is EditMode.ADD
    assert add.entities is not None
    assert add.entities[1].value == "https://music.tower.jp/album/detail/1010526534"


class FlakyCatalog(FakeCatalog):
    async def fetch_entity(self, entity_id: Mbid, entity_type: EntityType) -> Entity:
        if entity_id == TIDAL_MBID:
            raise TransientError("GET failed")
        return await super().fetch_entity(entity_id, entity_type)


def test_process_urls_continues_after_failures() -> None:
    catalog = FlakyCatalog(_entities())
    editor = FakeEditor()

    results = asyncio.run(
        process_urls(
            [TIDAL_MBID, GEOCITIES_MBID, DONE_MBID],
            catalog=catalog,
            editor=editor,
        )
    )

    assert [result.entity_id for result in results] == [TIDAL_MBID, GEOCITIES_MBID, DONE_MBID]
    assert [result.ok for result in results] == [False, True, True]
    assert isinstance(results[0].error, TransientError)
    assert catalog.fetched == [GEOCITIES_MBID, DONE_MBID]
    assert len(editor.batches) == 1


def test_reconciliation_errors_prevent_all_submissions() -> None:
    # A forward release relationship can't be owned by a URL, so the new URL's
    # relationship can't be planned; the ending edit must not be sent either.
    entity = url_entity(
        "https://recmusic.jp/album/?id=1010526534",
        rel(EntityType.RELEASE, id=423, link_type_id=980, target_id="r"),
        mbid=RECMUSIC_MBID,
    )
    editor = FakeEditor()

    result = asyncio.run(
        process_url(RECMUSIC_MBID, catalog=FakeCatalog({RECMUSIC_MBID: entity}), editor=editor)
    )

    assert isinstance(result.error, DirectionError)
    assert editor.batches == []
    assert editor.field_updates == []
