"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from mbbot.adapters.dump import read_urls
from mbbot.adapters.musicbrainz import EditorSession, MusicBrainzCatalog, MusicBrainzEditor
from mbbot.config import get_musicbrainz_config, read_credentials
from mbbot.domain.errors import MBBotError
from mbbot.domain.rewrite import URL_RULES
from mbbot.domain.url_maintenance import ProcessResult, process_urls

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from pathlib import Path

    from mbbot.config import Credentials, MusicBrainzConfig
    from mbbot.domain.rewrite import RuleTable

SessionFactory = Callable[["MusicBrainzConfig"], EditorSession]

log = getLogger(__name__)


def _default_session_factory(*, dry_run: bool) -> SessionFactory:
    def factory(config: MusicBrainzConfig) -> EditorSession:
        return EditorSession(config.resilience, dry_run=dry_run)

    return factory


async def _open_session(
    config: MusicBrainzConfig,
    credentials: Credentials,
    session_factory: SessionFactory,
) -> EditorSession:
    session = session_factory(config)
    log.info("Logging in to %s as %s", config.server_url, credentials.username)
    try:
        await session.login(credentials)
    except BaseException:
        await session.aclose()
        raise
    return session


def maintain_urls(
    mbids: Iterable[str],
    *,
    config: MusicBrainzConfig | None = None,
    credentials: Credentials | None = None,
    session_factory: SessionFactory | None = None,
    rules: RuleTable = URL_RULES,
    dry_run: bool = False,
    edit_note: str = "",
    make_votable: bool = False,
) -> list[ProcessResult]:
    """Log in and correct the URL entities with the given MBIDs, one at a time."""

    effective_config = config or get_musicbrainz_config()
    effective_credentials = credentials or read_credentials(effective_config.credentials_path)
    factory = session_factory or _default_session_factory(dry_run=dry_run)
    return asyncio.run(
        _maintain_urls_async(
            mbids,
            config=effective_config,
            credentials=effective_credentials,
            session_factory=factory,
            rules=rules,
            edit_note=edit_note,
            make_votable=make_votable,
        )
    )


async def _maintain_urls_async(
    mbids: Iterable[str],
    *,
    config: MusicBrainzConfig,
    credentials: Credentials,
    session_factory: SessionFactory,
    rules: RuleTable,
    edit_note: str,
    make_votable: bool,
) -> list[ProcessResult]:
    async with await _open_session(config, credentials, session_factory) as session:
        results = await process_urls(
            mbids,
            catalog=MusicBrainzCatalog(session),
            editor=MusicBrainzEditor(session),
            rules=rules,
            edit_note=edit_note,
            make_votable=make_votable,
        )

    failed = sum(1 for result in results if not result.ok)
    changed = sum(1 for result in results if result.changed)
    log.info(
        "Finished URL maintenance: processed=%s, changed=%s, failed=%s",
        len(results),
        changed,
        failed,
    )
    return results


def cancel_edits(
    edit_ids: Iterable[int],
    *,
    config: MusicBrainzConfig | None = None,
    credentials: Credentials | None = None,
    session_factory: SessionFactory | None = None,
    dry_run: bool = False,
    edit_note: str = "",
) -> list[int]:
    """Cancel the given edits, returning the ids that were cancelled successfully."""

    effective_config = config or get_musicbrainz_config()
    effective_credentials = credentials or read_credentials(effective_config.credentials_path)
    factory = session_factory or _default_session_factory(dry_run=dry_run)
    return asyncio.run(
        _cancel_edits_async(
            edit_ids,
            config=effective_config,
            credentials=effective_credentials,
            session_factory=factory,
            edit_note=edit_note,
        )
    )


async def _cancel_edits_async(
    edit_ids: Iterable[int],
    *,
    config: MusicBrainzConfig,
    credentials: Credentials,
    session_factory: SessionFactory,
    edit_note: str,
) -> list[int]:
    cancelled: list[int] = []
    async with await _open_session(config, credentials, session_factory) as session:
        editor = MusicBrainzEditor(session)
        for edit_id in edit_ids:
            try:
                await editor.cancel_edit(edit_id, edit_note=edit_note)
            except MBBotError as exc:
                log.error("Failed canceling edit %s: %s", edit_id, exc)  # noqa: TRY400
                continue
            cancelled.append(edit_id)
    return cancelled


def scan_dump(path: Path, *, rules: RuleTable = URL_RULES) -> Iterator[str]:
    """Yield MBIDs of URLs in a dumped ``url`` table that some rule matches.

    Only the URL patterns are checked; relationships aren't available in the table, so
    some of the yielded URLs may turn out to need no changes.
    """

    for mbid, url in read_urls(path):
        found = rules.find(url)
        if found is None:
            continue
        rule, _ = found
        log.debug("%s: %s matches rule %s", mbid, url, rule.name)
        yield mbid
