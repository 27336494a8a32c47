"""Ports the domain services use to reach the catalog and the editor."""

from __future__ import annotations

from .catalog import EntityFetcher
from .editing import EditSubmitter

__all__ = ["EditSubmitter", "EntityFetcher"]
