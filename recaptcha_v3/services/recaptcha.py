"""reCAPTCHA v3 verification service.

Wraps Google's siteverify endpoint. The client keeps its credentials in an
immutable `RecaptchaConfig` and remembers the last decoded response so the
accessors (`success()`, `score()`, ...) can be read after `verify()`.
"""

import json
import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from ..config import Settings, get_settings
from ..exceptions import ConfigurationError, DecodeError, TransportError
from ..schemas import RecaptchaConfig, VerificationResponse

logger = logging.getLogger(__name__)

VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"
SCRIPT_URL = "https://www.google.com/recaptcha/api.js?render="


class RecaptchaV3:
    """Server-side reCAPTCHA v3 client."""

    def __init__(
        self,
        site_key: str = "",
        secret_key: str = "",
        threshold: float = 0.5,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        # One transport serves both verify() and averify().
        if transport is not None and not (
            isinstance(transport, httpx.BaseTransport)
            and isinstance(transport, httpx.AsyncBaseTransport)
        ):
            raise ConfigurationError(
                "transport must support both sync and async requests, e.g. httpx.MockTransport"
            )
        self._config = _build_config(
            site_key=site_key,
            secret_key=secret_key,
            threshold=threshold,
            timeout=timeout,
        )
        self._transport = transport
        self._response: Optional[VerificationResponse] = None

    @classmethod
    def from_config(cls, config: RecaptchaConfig, transport=None) -> "RecaptchaV3":
        client = cls(transport=transport)
        client._config = config
        return client

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, transport=None) -> "RecaptchaV3":
        """Build a client from application settings (environment / .env)."""
        settings = settings or get_settings()
        return cls(
            site_key=settings.recaptcha_site_key,
            secret_key=settings.recaptcha_secret_key,
            threshold=settings.recaptcha_min_score,
            timeout=settings.recaptcha_timeout,
            transport=transport,
        )

    # --- Configuration ---

    @property
    def config(self) -> RecaptchaConfig:
        return self._config

    def set_site_key(self, key: str) -> None:
        self._config = self._config.model_copy(update={"site_key": key})

    def get_site_key(self) -> str:
        return self._config.site_key

    def set_secret_key(self, key: str) -> None:
        self._config = self._config.model_copy(update={"secret_key": key})

    def get_secret_key(self) -> str:
        return self._config.secret_key

    def set_threshold(self, value: float) -> None:
        # model_copy skips validation, so rebuild to keep the range check.
        self._config = _build_config(**{**self._config.model_dump(), "threshold": value})

    def get_threshold(self) -> float:
        return self._config.threshold

    def get_script_url(self) -> str:
        """URL of the api.js loader for the configured site key."""
        return SCRIPT_URL + self._config.site_key

    # --- Verification ---

    def verify(self, token: str, remote_ip: Optional[str] = None) -> VerificationResponse:
        """Verify a token against Google and store the decoded response.

        Raises ConfigurationError when no secret key is set, TransportError
        on network failures or non-2xx answers and DecodeError when the body
        is not a JSON object. The stored response is left untouched on error.
        """
        data = self._form_data(token, remote_ip)

        try:
            with httpx.Client(timeout=self._config.timeout, transport=self._transport) as client:
                response = client.post(VERIFY_URL, data=data)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(f"reCAPTCHA verify returned HTTP {e.response.status_code}")
            raise TransportError(
                f"siteverify returned HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.warning(f"reCAPTCHA verify request failed: {e}")
            raise TransportError(f"siteverify request failed: {e}") from e

        return self._store(response)

    async def averify(self, token: str, remote_ip: Optional[str] = None) -> VerificationResponse:
        """Async variant of `verify` with the same error contract."""
        data = self._form_data(token, remote_ip)

        try:
            async with httpx.AsyncClient(
                timeout=self._config.timeout, transport=self._transport
            ) as client:
                response = await client.post(VERIFY_URL, data=data)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(f"reCAPTCHA verify returned HTTP {e.response.status_code}")
            raise TransportError(
                f"siteverify returned HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.warning(f"reCAPTCHA verify request failed: {e}")
            raise TransportError(f"siteverify request failed: {e}") from e

        return self._store(response)

    def _form_data(self, token: str, remote_ip: Optional[str]) -> dict:
        if not self._config.secret_key:
            raise ConfigurationError("reCAPTCHA secret key is not configured")

        data = {"secret": self._config.secret_key, "response": token}
        if remote_ip:
            data["remoteip"] = remote_ip
        return data

    def _store(self, response: httpx.Response) -> VerificationResponse:
        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning("reCAPTCHA verify returned a non-JSON body")
            raise DecodeError("siteverify response is not valid JSON") from e

        if not isinstance(payload, dict):
            raise DecodeError(
                f"siteverify response is a JSON {type(payload).__name__}, expected an object"
            )

        try:
            result = VerificationResponse.model_validate(payload)
        except ValidationError as e:
            raise DecodeError(f"siteverify response has unexpected field types: {e}") from e

        self._response = result
        if result.success:
            logger.info(
                f"reCAPTCHA verified: score={result.score} "
                f"action={result.action!r} hostname={result.hostname!r}"
            )
        else:
            logger.warning(f"reCAPTCHA rejected token: error-codes={result.error_codes}")
        return result

    # --- Response accessors ---

    @property
    def last_response(self) -> Optional[VerificationResponse]:
        return self._response

    def success(self) -> bool:
        return self._response is not None and self._response.success is True

    def score(self) -> float:
        return self._response.score if self._response else 0.0

    def action(self) -> str:
        return self._response.action if self._response else ""

    def challenge_timestamp(self) -> str:
        return self._response.challenge_ts if self._response else ""

    challenge_ts = challenge_timestamp

    def hostname(self) -> str:
        return self._response.hostname if self._response else ""

    def error_codes(self) -> list[str]:
        return list(self._response.error_codes) if self._response else []

    def is_threshold_passed(self) -> bool:
        """Check if the last score meets the configured threshold."""
        return self.score() >= self._config.threshold


def _build_config(**values) -> RecaptchaConfig:
    try:
        return RecaptchaConfig(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid reCAPTCHA configuration: {e}") from e


async def verify_recaptcha(token: str, remote_ip: Optional[str] = None) -> bool:
    """Verify a reCAPTCHA v3 token. Returns True if valid."""
    settings = get_settings()

    if not settings.recaptcha_enabled or not settings.recaptcha_secret_key:
        return True  # Skip verification if not configured

    recaptcha = RecaptchaV3.from_settings(settings)
    await recaptcha.averify(token, remote_ip=remote_ip)
    return recaptcha.success() and recaptcha.is_threshold_passed()
