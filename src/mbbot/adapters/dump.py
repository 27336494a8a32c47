"""Readers for tables from the MusicBrainz PostgreSQL dumps (``mbdump/<table>``)."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

NULL_VALUE = r"\N"

# Column positions in the "url" table: id, gid, url, edits_pending, last_updated.
URL_GID_COLUMN = 1
URL_URL_COLUMN = 2


def read_table(path: Path) -> Iterator[list[str]]:
    """Yield the tab-separated rows of a dump table, with nulls as empty strings.

    Undecodable bytes are replaced rather than aborting the scan.
    """

    with path.open(encoding="utf-8", errors="replace") as handle:
        for line in handle:
            row = line.rstrip("\n").split("\t")
            yield ["" if value == NULL_VALUE else value for value in row]


def read_urls(path: Path) -> Iterator[tuple[str, str]]:
    """Yield ``(mbid, url)`` pairs from a dumped ``url`` table."""

    for row in read_table(path):
        if len(row) <= URL_URL_COLUMN:
            continue
        yield row[URL_GID_COLUMN], row[URL_URL_COLUMN]
