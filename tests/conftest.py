from __future__ import annotations

import pytest

from tests.support.musicbrainz import FakeMusicBrainzServer


@pytest.fixture
def fake_server() -> FakeMusicBrainzServer:
    return FakeMusicBrainzServer()
