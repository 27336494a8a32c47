"""MusicBrainz website adapters: session, entity scraping and edit submission."""

from __future__ import annotations

from .catalog import MusicBrainzCatalog
from .editor import MusicBrainzEditor
from .session import EditorSession

__all__ = ["EditorSession", "MusicBrainzCatalog", "MusicBrainzEditor"]
