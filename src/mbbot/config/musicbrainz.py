"""MusicBrainz editor configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .env import optional_env_var, optional_float_env_var
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig

DEFAULT_MUSICBRAINZ_SERVER_URL = "https://test.musicbrainz.org"
DEFAULT_CREDENTIALS_PATH = "~/.mbbot"
# https://musicbrainz.org/doc/MusicBrainz_API/Rate_Limiting
DEFAULT_MAX_QPS = 1.0
USER_AGENT = "mbbot/0 ( https://github.com/derat/mbbot )"


@dataclass(frozen=True, slots=True)
class Credentials:
    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"


@dataclass(frozen=True, slots=True)
class MusicBrainzConfig:
    server_url: str
    credentials_path: Path
    resilience: ResilienceConfig


def build_resilience_config(
    server_url: str, *, max_qps: float = DEFAULT_MAX_QPS
) -> ResilienceConfig:
    """Return the HTTP settings for talking to ``server_url``.

    A non-positive ``max_qps`` disables rate limiting entirely.
    """

    ratelimit = RateLimit(max_calls=1, per_seconds=1.0 / max_qps) if max_qps > 0 else None
    return ResilienceConfig(
        name="musicbrainz-editor",
        base_url=server_url,
        ratelimit=ratelimit,
        default_headers={"User-Agent": USER_AGENT},
    )


def get_musicbrainz_config(
    *,
    server_url: str | None = None,
    credentials_path: str | None = None,
) -> MusicBrainzConfig:
    """Assemble editor configuration from explicit overrides and the environment."""

    effective_server = (
        server_url or optional_env_var("MBBOT_SERVER_URL", DEFAULT_MUSICBRAINZ_SERVER_URL)
    ).rstrip("/")
    effective_creds = credentials_path or optional_env_var(
        "MBBOT_CREDENTIALS", DEFAULT_CREDENTIALS_PATH
    )
    max_qps = optional_float_env_var("MBBOT_MAX_QPS", DEFAULT_MAX_QPS)

    return MusicBrainzConfig(
        server_url=effective_server,
        credentials_path=Path(effective_creds).expanduser(),
        resilience=build_resilience_config(effective_server, max_qps=max_qps),
    )


def read_credentials(path: Path) -> Credentials:
    """Read a whitespace-separated username and password from ``path``."""

    try:
        text = path.read_text()
    except FileNotFoundError as exc:
        raise MissingConfigurationError(f"Missing credentials file {path}") from exc
    except OSError as exc:
        raise ConfigurationError(f"Unable to read credentials from {path}: {exc}") from exc
    parts = text.split()
    if len(parts) != 2:  # noqa: PLR2004
        raise ConfigurationError(f"Expected 2 fields in {path}; got {len(parts)}")
    return Credentials(username=parts[0], password=parts[1])
