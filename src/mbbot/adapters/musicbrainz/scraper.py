"""Extract the entity state embedded in MusicBrainz edit pages."""

from __future__ import annotations

import json

from pydantic import ValidationError

from mbbot.domain.errors import ScrapeError

from .schema import JsonPageData

MB_PROPERTY_MARKER = 'Object.defineProperty(window,"__MB__",'
CATALYST_CONTEXT_MARKER = ',"$c":Object.freeze('


def _seek(text: str, marker: str, start: int = 0) -> int:
    idx = text.find(marker, start)
    if idx == -1:
        raise ScrapeError(f"missing {marker!r} in page")
    return idx + len(marker)


def extract_page_data(html: str) -> JsonPageData:
    """Decode the ``$c`` object from the ``__MB__`` property defined in a script tag."""

    start = _seek(html, MB_PROPERTY_MARKER)
    start = _seek(html, CATALYST_CONTEXT_MARKER, start)
    try:
        payload, _ = json.JSONDecoder().raw_decode(html, start)
    except json.JSONDecodeError as exc:
        raise ScrapeError(f"undecodable page data: {exc}") from exc
    if not isinstance(payload, dict):
        raise ScrapeError("unexpected page data payload")
    try:
        return JsonPageData.model_validate(payload)
    except ValidationError as exc:
        raise ScrapeError(f"invalid page data: {exc}") from exc
