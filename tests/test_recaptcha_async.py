import httpx
import pytest

from recaptcha_v3 import DecodeError, RecaptchaV3, TransportError
from recaptcha_v3.config import Settings
from recaptcha_v3.services import recaptcha as recaptcha_service

from conftest import RecordingTransport, json_transport


async def test_averify_success(human_payload):
    transport = json_transport(human_payload)
    recaptcha = RecaptchaV3(secret_key="secret", transport=transport)

    result = await recaptcha.averify("token", remote_ip="198.51.100.1")

    assert result.success is True
    assert recaptcha.is_threshold_passed() is True
    assert transport.forms[0] == {
        "secret": "secret",
        "response": "token",
        "remoteip": "198.51.100.1",
    }


async def test_averify_transport_error():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    recaptcha = RecaptchaV3(secret_key="secret", transport=RecordingTransport(handler))

    with pytest.raises(TransportError):
        await recaptcha.averify("token")
    assert recaptcha.last_response is None


async def test_averify_decode_error():
    transport = RecordingTransport(lambda request: httpx.Response(200, content=b"{not json"))
    recaptcha = RecaptchaV3(secret_key="secret", transport=transport)

    with pytest.raises(DecodeError):
        await recaptcha.averify("token")


async def test_verify_recaptcha_skips_when_disabled(monkeypatch):
    monkeypatch.setattr(
        recaptcha_service,
        "get_settings",
        lambda: Settings(recaptcha_enabled=False, recaptcha_secret_key="secret"),
    )

    assert await recaptcha_service.verify_recaptcha("anything") is True


async def test_verify_recaptcha_skips_without_secret(monkeypatch):
    monkeypatch.setattr(
        recaptcha_service,
        "get_settings",
        lambda: Settings(recaptcha_enabled=True, recaptcha_secret_key=""),
    )

    assert await recaptcha_service.verify_recaptcha("anything") is True


@pytest.mark.parametrize(
    "payload, expected",
    [
        ({"success": True, "score": 0.9}, True),
        ({"success": True, "score": 0.2}, False),
        ({"success": False, "score": 0.9}, False),
    ],
)
async def test_verify_recaptcha_checks_success_and_score(monkeypatch, settings, payload, expected):
    transport = json_transport(payload)
    monkeypatch.setattr(recaptcha_service, "get_settings", lambda: settings)
    monkeypatch.setattr(
        RecaptchaV3,
        "from_settings",
        classmethod(lambda cls, s=None: cls(
            secret_key=s.recaptcha_secret_key,
            threshold=s.recaptcha_min_score,
            transport=transport,
        )),
    )

    assert await recaptcha_service.verify_recaptcha("token") is expected


def _unreachable(request):
    raise httpx.ConnectError("down", request=request)


@pytest.mark.parametrize(
    "handler, error",
    [
        (_unreachable, TransportError),
        (lambda request: httpx.Response(502, text="bad gateway"), TransportError),
        (lambda request: httpx.Response(200, text="not json"), DecodeError),
    ],
)
async def test_verify_recaptcha_propagates_errors(monkeypatch, settings, handler, error):
    transport = RecordingTransport(handler)
    monkeypatch.setattr(recaptcha_service, "get_settings", lambda: settings)
    monkeypatch.setattr(
        RecaptchaV3,
        "from_settings",
        classmethod(lambda cls, s=None: cls(secret_key=s.recaptcha_secret_key, transport=transport)),
    )

    with pytest.raises(error):
        await recaptcha_service.verify_recaptcha("token")
    assert len(transport.requests) == 1
