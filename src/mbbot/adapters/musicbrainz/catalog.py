"""Catalog adapter reading entity state from MusicBrainz edit pages."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from .scraper import extract_page_data
from .translator import translate_entity

if TYPE_CHECKING:
    from mbbot.domain.model import Entity, EntityType, Mbid

    from .session import EditorSession

log = getLogger(__name__)


class MusicBrainzCatalog:
    """``EntityFetcher`` backed by the website's entity edit pages.

    The edit page is used instead of the web service because it reports relationship
    ids, which are needed to edit relationships.
    """

    def __init__(self, session: EditorSession) -> None:
        self._session = session

    async def fetch_entity(self, entity_id: Mbid, entity_type: EntityType) -> Entity:
        page = await self._session.get(f"/{entity_type}/{entity_id}/edit")
        entity = translate_entity(extract_page_data(page))
        log.debug(
            "%s: fetched %s with %s relationship(s)",
            entity_id,
            entity.name,
            len(entity.relationships),
        )
        return entity
