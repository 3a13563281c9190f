from urllib.parse import parse_qs

import httpx
import pytest

from recaptcha_v3.config import Settings


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers the form body of every request."""

    def __init__(self, handler):
        self.requests = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)

    @property
    def forms(self):
        return [
            {k: v[0] for k, v in parse_qs(r.content.decode()).items()}
            for r in self.requests
        ]


def json_transport(payload, status_code: int = 200) -> RecordingTransport:
    return RecordingTransport(lambda request: httpx.Response(status_code, json=payload))


@pytest.fixture
def human_payload():
    return {
        "success": True,
        "score": 0.9,
        "action": "login",
        "challenge_ts": "2024-01-01T00:00:00Z",
        "hostname": "example.com",
    }


@pytest.fixture
def settings():
    return Settings(
        recaptcha_site_key="site-key",
        recaptcha_secret_key="secret-key",
        recaptcha_enabled=True,
        recaptcha_min_score=0.5,
    )
