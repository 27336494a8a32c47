"""Authenticated session with the MusicBrainz website."""

from __future__ import annotations

import re
from logging import getLogger
from typing import TYPE_CHECKING
from urllib.parse import urlencode

import httpx

from mbbot.adapters.http_resilience import ResilientClient
from mbbot.domain.errors import EditSubmissionError, LoginError, NotFoundError, TransientError

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from types import TracebackType

    from mbbot.config.http_resilience import ResilienceConfig
    from mbbot.config.musicbrainz import Credentials

log = getLogger(__name__)

RELATIONSHIP_EDITOR_PATH = "/relationship-editor"
DRY_RUN_BATCH_RESPONSE = '{"edits":[{"edit_type":1,"response":1}]}'

# These fragile regexps extract hidden inputs from the login form.
CSRF_SESSION_KEY_RE = re.compile(
    r'<input name="csrf_session_key"\s+type="hidden"\s+value="([^"]+)"'
)
CSRF_TOKEN_RE = re.compile(r'<input name="csrf_token"\s+type="hidden"\s+value="([^"]+)"')

_HTTP_OK = 200
_HTTP_NOT_FOUND = 404
_HTTP_TOO_MANY_REQUESTS = 429
_HTTP_SERVER_ERROR = 500


def _raise_for_status(response: httpx.Response) -> None:
    status = response.status_code
    if status == _HTTP_OK:
        return
    path = response.request.url.path
    if status == _HTTP_NOT_FOUND:
        raise NotFoundError(f"{path} not found")
    message = f"got {status} for {path}: {response.text[:200]!r}"
    if status >= _HTTP_SERVER_ERROR or status == _HTTP_TOO_MANY_REQUESTS:
        raise TransientError(message)
    raise EditSubmissionError(message)


class EditorSession:
    """Cookie-authenticated, rate-limited access to the MusicBrainz website.

    With ``dry_run`` set, POST requests made after login are only logged and answered
    with canned responses that look like successful edits.
    """

    def __init__(
        self,
        config: ResilienceConfig,
        *,
        dry_run: bool = False,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        if config.base_url is None:
            raise ValueError("Missing MusicBrainz server URL in resilience configuration")
        self.server_url = config.base_url.rstrip("/")
        self.dry_run = dry_run
        self._client = (client_factory or ResilientClient)(config)
        self._logged_in = False
        self._edit_id_re = re.compile(re.escape(self.server_url) + r"/edit/(\d+)\b")

    async def __aenter__(self) -> EditorSession:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def edit_id_pattern(self) -> re.Pattern[str]:
        """Matches the id in ``<server>/edit/<id>`` links."""
        return self._edit_id_re

    async def login(self, credentials: Credentials) -> None:
        # The form's hidden CSRF inputs must be echoed back, otherwise the server
        # complains that the submitted form has expired.
        page = await self.get("/login")
        session_key = CSRF_SESSION_KEY_RE.search(page)
        if session_key is None:
            raise LoginError("didn't find csrf_session_key input")
        token = CSRF_TOKEN_RE.search(page)
        if token is None:
            raise LoginError("didn't find csrf_token input")

        body = await self._post(
            "/login",
            {
                "csrf_session_key": session_key.group(1),
                "csrf_token": token.group(1),
                "username": credentials.username,
                "password": credentials.password,
                "remember_me": "1",
            },
        )

        # The session cookie is set even for anonymous visitors, so check the page
        # for the error message and for a link to the user's profile instead.
        if "Incorrect username or password" in body:
            raise LoginError("incorrect username or password")
        if f'<a href="/user/{credentials.username}">' not in body:
            log.debug("Unexpected login response: %s", body)
            raise LoginError("missing profile link")
        self._logged_in = True
        log.info("Logged in as %s", credentials.username)

    async def get(self, path: str) -> str:
        """Return the body of the page at ``path``."""

        try:
            response = await self._client.get(path)
        except httpx.RequestError as exc:
            raise TransientError(f"GET {path} failed: {exc}") from exc
        _raise_for_status(response)
        return response.text

    async def post(self, path: str, fields: Mapping[str, str]) -> str:
        """Post URL-encoded ``fields`` to ``path`` and return the response body."""

        if self.dry_run and self._logged_in:
            body = urlencode(sorted(fields.items()))
            log.info("POST %s%s with body %r", self.server_url, path, body)
            if path == RELATIONSHIP_EDITOR_PATH:
                return DRY_RUN_BATCH_RESPONSE
            if path.endswith("/edit"):
                return f"{self.server_url}/edit/0"
            return ""
        return await self._post(path, fields)

    async def _post(self, path: str, fields: Mapping[str, str]) -> str:
        try:
            response = await self._client.post(
                path,
                data=dict(fields),
                headers={"Origin": self.server_url},
            )
        except httpx.RequestError as exc:
            raise TransientError(f"POST {path} failed: {exc}") from exc
        _raise_for_status(response)
        return response.text
