"""Schemas for JSON embedded in MusicBrainz edit pages and editor responses."""

from __future__ import annotations

import logging
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

log = logging.getLogger(__name__)

type MBId = str


class MusicBrainzPageModel(BaseModel):
    """Base for models read out of the page's ``$c`` object, which carries far more
    state than the bot needs."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class MusicBrainzBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)
    _logged_extra_keys: ClassVar[set[str]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.warning(
            "MusicBrainz %s: unmodeled keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )


class JsonDate(MusicBrainzPageModel):
    year: int | None = None
    month: int | None = None
    day: int | None = None


class JsonTarget(MusicBrainzPageModel):
    gid: MBId = ""
    name: str = ""
    entity_type: str = Field(default="", alias="entityType")


class JsonRelationship(MusicBrainzPageModel):
    id: int = 0
    link_type_id: int = Field(default=0, alias="linkTypeID")
    backward: bool = False
    begin_date: JsonDate | None = None
    end_date: JsonDate | None = None
    ended: bool = False
    verbose_phrase: str = Field(default="", alias="verbosePhrase")
    target: JsonTarget = Field(default_factory=JsonTarget)


class JsonSourceEntity(MusicBrainzPageModel):
    gid: MBId = ""
    entity_type: str = Field(default="", alias="entityType")
    name: str = ""
    # Only present for URL entities; the server has both "name" and "decoded".
    decoded: str | None = None
    relationships: list[JsonRelationship] = Field(default_factory=list["JsonRelationship"])


class JsonStash(MusicBrainzPageModel):
    source_entity: JsonSourceEntity


class JsonPageData(MusicBrainzPageModel):
    """Corresponds to the ``window.__MB__.$c`` object."""

    stash: JsonStash


class RelationshipEditOutcome(MusicBrainzBaseModel):
    edit_type: int
    response: int
    relationship_id: int = 0


class RelationshipEditorResponse(MusicBrainzBaseModel):
    """Body written by the relationship editor's ``submit_edits``.

    It oddly doesn't include the ids of the created edits.
    """

    edits: list[RelationshipEditOutcome] = Field(
        default_factory=list["RelationshipEditOutcome"]
    )
