"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_var, optional_float_env_var
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig
from .logging import configure_logging
from .musicbrainz import (
    Credentials,
    MusicBrainzConfig,
    build_resilience_config,
    get_musicbrainz_config,
    read_credentials,
)

__all__ = [
    "ConfigurationError",
    "Credentials",
    "MissingConfigurationError",
    "MusicBrainzConfig",
    "RateLimit",
    "ResilienceConfig",
    "build_resilience_config",
    "configure_logging",
    "get_musicbrainz_config",
    "optional_env_var",
    "optional_float_env_var",
    "read_credentials",
]
