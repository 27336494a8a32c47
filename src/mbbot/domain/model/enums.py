"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityType(StrEnum):
    """MusicBrainz entity type tags as used by the relationship editor.

    The tags are compared lexically when deciding which endpoint of a new
    relationship occupies entity slot 0.
    """

    AREA = "area"
    ARTIST = "artist"
    EVENT = "event"
    GENRE = "genre"
    INSTRUMENT = "instrument"
    LABEL = "label"
    PLACE = "place"
    RECORDING = "recording"
    RELEASE = "release"
    RELEASE_GROUP = "release_group"
    SERIES = "series"
    URL = "url"
    WORK = "work"


class EditMode(StrEnum):
    ADD = "add"
    EDIT = "edit"


class RelationshipField(StrEnum):
    """Fields of a relationship that the relationship editor can change."""

    LINK_TYPE = "link_type"
    BEGIN_DATE = "begin_date"
    END_DATE = "end_date"
    ENDED = "ended"
