"""Rewrite rules for URL entities.

Each rule is a small frozen dataclass holding its compiled pattern together with the
fixed parameters of its maintenance task, so rules can be inspected and tested on their
own. The order of ``URL_RULES`` matters: only the first matching rule is evaluated.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import TYPE_CHECKING, ClassVar, Protocol

from mbbot.domain.model import DateRange, Entity, EntityType, Relationship, filter_relationships

from .result import RelationshipChange, RewriteResult

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence


class RuleKind(StrEnum):
    CANONICALIZE = "canonicalize"
    RETIRE = "retire"
    RECLASSIFY = "reclassify"
    MIGRATE = "migrate"


class RewriteRule(Protocol):
    kind: ClassVar[RuleKind]
    name: str
    pattern: re.Pattern[str]
    edit_note: str

    def transform(
        self, match: re.Match[str], relationships: Sequence[Relationship]
    ) -> RewriteResult | None:
        """Compute the desired state, or return ``None`` to abort the rewrite."""
        ...


def _end(rel: Relationship, end_date: DateRange) -> Relationship:
    if rel.ended:
        return rel
    return replace(rel, ended=True, end_date=end_date)


def _changes(
    pairs: Sequence[tuple[Relationship, Relationship]],
) -> tuple[RelationshipChange, ...]:
    return tuple(
        RelationshipChange(original=orig, desired=desired)
        for orig, desired in pairs
        if orig != desired
    )


@dataclass(frozen=True, slots=True, kw_only=True)
class CanonicalizeRule:
    """Rewrite a family of equivalent URLs to one canonical form.

    ``ambiguous_path`` matches captured paths that could denote two kinds of resource.
    ``resolutions`` is tried in order: the first target type present among the
    relationships picks the path template, formatted with the named groups of
    ``ambiguous_path``. Without any matching relationship the rewrite is aborted.
    """

    kind: ClassVar[RuleKind] = RuleKind.CANONICALIZE

    name: str
    pattern: re.Pattern[str]
    edit_note: str
    canonical_prefix: str
    ambiguous_path: re.Pattern[str] | None = None
    resolutions: tuple[tuple[EntityType, str], ...] = ()

    def transform(
        self, match: re.Match[str], relationships: Sequence[Relationship]
    ) -> RewriteResult | None:
        path = match.group(1)
        if self.ambiguous_path is not None and (
            ambiguous := self.ambiguous_path.match(path)
        ):
            resolved = self._resolve(ambiguous, relationships)
            if resolved is None:
                return None
            path = resolved
        return RewriteResult(rewritten_name=self.canonical_prefix + path, edit_note=self.edit_note)

    def _resolve(
        self, ambiguous: re.Match[str], relationships: Sequence[Relationship]
    ) -> str | None:
        rels = list(relationships)
        for target_type, template in self.resolutions:
            if filter_relationships(rels, target_type):
                return template.format(**ambiguous.groupdict())
        return None


@dataclass(frozen=True, slots=True, kw_only=True)
class RetireRule:
    """Leave the URL alone but end every relationship that is still active.

    ``regional_end_dates`` overrides ``end_date`` keyed by the pattern's first group
    (e.g. a top-level domain).
    """

    kind: ClassVar[RuleKind] = RuleKind.RETIRE

    name: str
    pattern: re.Pattern[str]
    edit_note: str
    end_date: DateRange
    regional_end_dates: tuple[tuple[str, DateRange], ...] = ()

    def end_date_for(self, region: str | None) -> DateRange:
        for key, value in self.regional_end_dates:
            if key == region:
                return value
        return self.end_date

    def transform(
        self, match: re.Match[str], relationships: Sequence[Relationship]
    ) -> RewriteResult | None:
        region = match.group(1) if match.re.groups else None
        end_date = self.end_date_for(region)
        changes = _changes([(rel, _end(rel, end_date)) for rel in relationships])
        if not changes:
            return None
        return RewriteResult(
            rewritten_name=match.string,
            updated_relationships=changes,
            edit_note=self.edit_note,
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class ReclassifyRule:
    """Leave the URL alone, fix link types by target type and end active relationships."""

    kind: ClassVar[RuleKind] = RuleKind.RECLASSIFY

    name: str
    pattern: re.Pattern[str]
    edit_note: str
    end_date: DateRange
    link_types: tuple[tuple[EntityType, int], ...] = ()

    def link_type_for(self, rel: Relationship) -> int:
        for target_type, link_type_id in self.link_types:
            if rel.target_type == target_type:
                return link_type_id
        return rel.link_type_id

    def transform(
        self, match: re.Match[str], relationships: Sequence[Relationship]
    ) -> RewriteResult | None:
        pairs = [
            (rel, _end(replace(rel, link_type_id=self.link_type_for(rel)), self.end_date))
            for rel in relationships
        ]
        changes = _changes(pairs)
        if not changes:
            return None
        return RewriteResult(
            rewritten_name=match.string,
            updated_relationships=changes,
            edit_note=self.edit_note,
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class MigrateRule:
    """End relationships of a dead site and recreate them on its successor.

    ``destination`` is formatted with the pattern's named groups. ``exclusions`` lists
    ``(kind, id)`` group pairs whose pages do not exist on the destination site, so no
    new URL is created for them. Every old relationship gets a counterpart on the new
    URL, including ones that are already ended.
    """

    kind: ClassVar[RuleKind] = RuleKind.MIGRATE

    name: str
    pattern: re.Pattern[str]
    edit_note: str
    cutover: DateRange
    destination: str
    exclusions: frozenset[tuple[str, str]] = field(default_factory=frozenset)

    def transform(
        self, match: re.Match[str], relationships: Sequence[Relationship]
    ) -> RewriteResult | None:
        if not relationships:
            return None

        groups = match.groupdict()
        excluded = (groups.get("kind", ""), groups.get("id", "")) in self.exclusions
        changes = _changes([(rel, _end(rel, self.cutover)) for rel in relationships])

        new_rels: list[Relationship] = []
        if not excluded:
            new_rels = [
                replace(
                    rel,
                    id=0,
                    begin_date=self.cutover,
                    end_date=DateRange(),
                    ended=False,
                )
                for rel in relationships
            ]

        new_entities: tuple[Entity, ...] = ()
        if new_rels:
            new_entities = (
                Entity(
                    type=EntityType.URL,
                    name=self.destination.format(**groups),
                    relationships=tuple(new_rels),
                ),
            )
        return RewriteResult(
            rewritten_name=match.string,
            updated_relationships=changes,
            new_entities=new_entities,
            edit_note=self.edit_note,
        )


@dataclass(frozen=True, slots=True)
class RuleTable:
    """Ordered rule registry; the first rule whose pattern matches wins."""

    rules: tuple[RewriteRule, ...]

    def __iter__(self) -> Iterator[RewriteRule]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    def find(self, url: str) -> tuple[RewriteRule, re.Match[str]] | None:
        for rule in self.rules:
            if match := rule.pattern.search(url):
                return rule, match
        return None


TIDAL_EDIT_NOTE = "normalize Tidal streaming URLs: https://tickets.metabrainz.org/browse/MBBE-71"
GEOCITIES_EDIT_NOTE = "end GeoCities relationships: https://tickets.metabrainz.org/browse/MBBE-47"
TIDAL_STORE_EDIT_NOTE = (
    "end Tidal Store relationships: https://tickets.metabrainz.org/browse/MBBE-63"
)
RECMUSIC_EDIT_NOTE = (
    "convert RecMusic URLs to Tower Records Music: "
    "https://tickets.metabrainz.org/browse/MBBE-48, "
    "https://tickets.metabrainz.org/browse/MBBE-49"
)

GEOCITIES_END_DATE = DateRange(2009, 10, 26)  # https://en.wikipedia.org/wiki/Yahoo!_GeoCities
GEOCITIES_JAPAN_END_DATE = DateRange(2019, 3, 31)
TIDAL_STORE_END_DATE = DateRange(2022, 10, 20)
RECMUSIC_END_DATE = DateRange(2021, 10, 1)  # also the music.tower.jp start date

# Link types for "can be purchased for download at".
TIDAL_STORE_LINK_TYPES: tuple[tuple[EntityType, int], ...] = (
    (EntityType.ARTIST, 176),
    (EntityType.RELEASE, 74),
    (EntityType.RECORDING, 254),
)

# RecMusic pages whose Tower Records Music counterparts don't work.
MISSING_TOWER_RECORDS_PAGES = frozenset({("artist", "2001445271"), ("album", "1016070930")})

TIDAL_RULE = CanonicalizeRule(
    name="tidal",
    pattern=re.compile(
        r"^https?://"
        r"(?:(?:desktop\.|desktop\.stage\.|listen\.|www\.)?tidal\.com)"
        r"(?:/browse)?"
        r"(/(?:album|artist|track|video|album/\d+/track)/\d+)"
        r"(?:/|\?.*)?"
        r"$"
    ),
    edit_note=TIDAL_EDIT_NOTE,
    canonical_prefix="https://tidal.com",
    ambiguous_path=re.compile(r"^/album/(?P<album>\d+)/track/(?P<track>\d+)$"),
    resolutions=(
        (EntityType.RECORDING, "/track/{track}"),
        (EntityType.RELEASE, "/album/{album}"),
    ),
)

GEOCITIES_RULE = RetireRule(
    name="geocities",
    pattern=re.compile(r"^https?://(?:[-a-z0-9]+\.)?geocities\.(?:yahoo\.)?(com|jp|co\.jp)/.*$"),
    edit_note=GEOCITIES_EDIT_NOTE,
    end_date=GEOCITIES_END_DATE,
    regional_end_dates=(("jp", GEOCITIES_JAPAN_END_DATE), ("co.jp", GEOCITIES_JAPAN_END_DATE)),
)

TIDAL_STORE_RULE = ReclassifyRule(
    name="tidal-store",
    pattern=re.compile(r"^https?://(store\.tidal\.com|tidal\.com(/[a-zA-Z]{2})?/store)/.*$"),
    edit_note=TIDAL_STORE_EDIT_NOTE,
    end_date=TIDAL_STORE_END_DATE,
    link_types=TIDAL_STORE_LINK_TYPES,
)

RECMUSIC_RULE = MigrateRule(
    name="recmusic",
    pattern=re.compile(
        r"^https?://recmusic\.jp/(?:[a-z][a-z]/)?"  # optional country code, e.g. "sp/"
        r"(?P<kind>artist|album)/\?id=(?P<id>\d+)$"
    ),
    edit_note=RECMUSIC_EDIT_NOTE,
    cutover=RECMUSIC_END_DATE,
    destination="https://music.tower.jp/{kind}/detail/{id}",
    exclusions=MISSING_TOWER_RECORDS_PAGES,
)

URL_RULES = RuleTable(rules=(TIDAL_RULE, GEOCITIES_RULE, TIDAL_STORE_RULE, RECMUSIC_RULE))
