"""In-memory stand-in for the MusicBrainz website, served through ``httpx.MockTransport``."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from urllib.parse import parse_qsl

import httpx

from mbbot.adapters.http_resilience import ResilientClient
from mbbot.adapters.musicbrainz import EditorSession
from mbbot.config import Credentials, ResilienceConfig, build_resilience_config

SERVER_URL = "https://mb.test"
TEST_USER = "someuser"
TEST_PASS = "secret123"
TEST_CREDENTIALS = Credentials(username=TEST_USER, password=TEST_PASS)
TEST_SESSION = "67d6e3af345531d14024e065dda8edc762c62bfd"
TEST_CSRF_SESSION_KEY = "csrf_token:yDxVoERSSn3myMFAXK0obEZaJRjliGnPtp+Cyfz5Eek="
TEST_CSRF_TOKEN = "WX6VYHNb7TEaBTgPwLjU9jkJS4/TpJu/b6EKrIpK+n0="
SESSION_COOKIE = "musicbrainz_server_session"
SUCCESS_BATCH = '{"edits":[{"edit_type":1,"response":1}]}'

EDIT_URL_PATH_RE = re.compile(r"^/url/([^/]+)/edit$")
CANCEL_EDIT_PATH_RE = re.compile(r"^/edit/\d+/cancel$")

LOGIN_FORM_PAGE = f"""<!DOCTYPE html>
<html>
  <head><title>MusicBrainz</title></head>
  <body>
    <form action="/login" method="post">
      <input name="csrf_session_key" type="hidden" value="{TEST_CSRF_SESSION_KEY}"/>
      <input name="csrf_token" type="hidden" value="{TEST_CSRF_TOKEN}"/>
    </form>
  </body>
</html>"""

PROFILE_PAGE = f"""<!DOCTYPE html>
<html>
  <head><title>MusicBrainz</title></head>
  <body><a href="/user/{TEST_USER}">Profile</a></body>
</html>"""

BAD_LOGIN_PAGE = """<!DOCTYPE html>
<html><body><p class="error">Incorrect username or password</p></body></html>"""


def entity_page(data: dict[str, object]) -> str:
    return (
        "<!DOCTYPE html><html><head>"
        '<script>Object.defineProperty(window,"__MB__",{value:Object.freeze('
        '{"DBDefs":Object.freeze({}),"$c":Object.freeze('
        + json.dumps(data)
        + ")})})</script></head></html>"
    )


def url_page_data(mbid: str, url: str, rels: list[dict[str, object]]) -> dict[str, object]:
    return {
        "stash": {
            "source_entity": {
                "gid": mbid,
                "entityType": "url",
                "name": url,
                "decoded": url,
                "relationships": rels,
            }
        },
        "user": {"name": TEST_USER},
    }


@dataclass(slots=True)
class PostedRequest:
    path: str
    params: dict[str, str]


@dataclass
class FakeMusicBrainzServer:
    """Serves login, URL edit pages and edit submissions, recording every POST.

    ``batch_responses`` are returned for relationship editor posts in order; once they
    run out every batch is reported as a single successful edit. Paths in
    ``redirect_loops`` redirect to themselves.
    """

    mbid_urls: dict[str, str] = field(default_factory=dict[str, str])
    mbid_rels: dict[str, list[dict[str, object]]] = field(
        default_factory=dict[str, list[dict[str, object]]]
    )
    batch_responses: list[str] = field(default_factory=list[str])
    requests: list[PostedRequest] = field(default_factory=list[PostedRequest])
    methods: list[tuple[str, str]] = field(default_factory=list[tuple[str, str]])
    redirect_loops: set[str] = field(default_factory=set[str])

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.methods.append((request.method, path))
        if path == "/login":
            return self._handle_login(request)
        if f"{SESSION_COOKIE}={TEST_SESSION}" not in request.headers.get("Cookie", ""):
            return httpx.Response(403, text="missing session cookie")
        if path in self.redirect_loops:
            return httpx.Response(302, headers={"Location": str(request.url)})
        if request.method == "GET":
            return self._handle_get(path)
        if request.method == "POST":
            return self._handle_post(request)
        return httpx.Response(405)

    def client_factory(self, config: ResilienceConfig) -> ResilientClient:
        return ResilientClient(config, transport=httpx.MockTransport(self.handle))

    def session(self, *, dry_run: bool = False) -> EditorSession:
        return EditorSession(
            build_resilience_config(SERVER_URL, max_qps=0),
            dry_run=dry_run,
            client_factory=self.client_factory,
        )

    def _handle_login(self, request: httpx.Request) -> httpx.Response:
        headers = {"Set-Cookie": f"{SESSION_COOKIE}={TEST_SESSION}; Path=/"}
        if request.method == "GET":
            return httpx.Response(200, text=LOGIN_FORM_PAGE, headers=headers)
        form = _form(request)
        if (
            form.get("csrf_session_key") != TEST_CSRF_SESSION_KEY
            or form.get("csrf_token") != TEST_CSRF_TOKEN
        ):
            return httpx.Response(403, text="form expired")
        if form.get("username") != TEST_USER or form.get("password") != TEST_PASS:
            return httpx.Response(200, text=BAD_LOGIN_PAGE, headers=headers)
        return httpx.Response(200, text=PROFILE_PAGE, headers=headers)

    def _handle_get(self, path: str) -> httpx.Response:
        match = EDIT_URL_PATH_RE.match(path)
        if match is None or match.group(1) not in self.mbid_urls:
            return httpx.Response(404, text="Not Found")
        mbid = match.group(1)
        data = url_page_data(mbid, self.mbid_urls[mbid], self.mbid_rels.get(mbid, []))
        return httpx.Response(200, text=entity_page(data))

    def _handle_post(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.requests.append(PostedRequest(path=path, params=_form(request)))
        if CANCEL_EDIT_PATH_RE.match(path):
            return httpx.Response(200, text="")
        if EDIT_URL_PATH_RE.match(path):
            return httpx.Response(
                200,
                text=(
                    "<p>Thank you, your "
                    f'<a href="{SERVER_URL}/edit/123">edit</a> (#123) has been entered '
                    "into the edit queue for peer review.</p>"
                ),
            )
        if path == "/relationship-editor":
            body = self.batch_responses.pop(0) if self.batch_responses else SUCCESS_BATCH
            return httpx.Response(200, text=body)
        return httpx.Response(400, text="unexpected post")


def _form(request: httpx.Request) -> dict[str, str]:
    return dict(parse_qsl(request.content.decode(), keep_blank_values=True))
