"""reCAPTCHA router - public client config and token verification.

The config endpoint gives front-ends the site key and api.js URL.
The secret key never leaves the server.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel

from ..config import Settings, get_settings
from ..exceptions import ConfigurationError, DecodeError, TransportError
from ..middleware.recaptcha import get_recaptcha_client
from ..services.recaptcha import RecaptchaV3

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/recaptcha", tags=["recaptcha"])


# Schemas
class RecaptchaConfigResponse(BaseModel):
    enabled: bool
    site_key: str
    script_url: str
    threshold: float


class VerifyTokenRequest(BaseModel):
    token: str
    expected_action: Optional[str] = None


class VerifyTokenResponse(BaseModel):
    success: bool
    score: float
    action: str
    challenge_ts: str
    hostname: str
    error_codes: list[str]
    threshold_passed: bool
    action_matched: bool


# Endpoints
@router.get("/config", response_model=RecaptchaConfigResponse)
async def get_recaptcha_config(
    settings: Annotated[Settings, Depends(get_settings)],
    recaptcha: Annotated[RecaptchaV3, Depends(get_recaptcha_client)],
):
    """Public reCAPTCHA settings for embedding the challenge script."""
    return RecaptchaConfigResponse(
        enabled=settings.recaptcha_enabled,
        site_key=recaptcha.get_site_key(),
        script_url=recaptcha.get_script_url(),
        threshold=recaptcha.get_threshold(),
    )


@router.post("/verify", response_model=VerifyTokenResponse)
async def verify_token(
    data: VerifyTokenRequest,
    request: Request,
    recaptcha: Annotated[RecaptchaV3, Depends(get_recaptcha_client)],
):
    """Verify a token and report the decoded result.

    Unlike the `require_recaptcha` dependency this never rejects a low
    score; callers decide what to do with `threshold_passed`.
    """
    remote_ip = request.client.host if request.client else None
    try:
        await recaptcha.averify(data.token, remote_ip=remote_ip)
    except ConfigurationError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="reCAPTCHA verification is not configured",
        ) from e
    except (TransportError, DecodeError) as e:
        logger.warning(f"reCAPTCHA verification failed upstream: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="reCAPTCHA verification unavailable",
        ) from e

    action_matched = data.expected_action is None or recaptcha.action() == data.expected_action

    return VerifyTokenResponse(
        success=recaptcha.success(),
        score=recaptcha.score(),
        action=recaptcha.action(),
        challenge_ts=recaptcha.challenge_timestamp(),
        hostname=recaptcha.hostname(),
        error_codes=recaptcha.error_codes(),
        threshold_passed=recaptcha.is_threshold_passed(),
        action_matched=action_matched,
    )
