"""reCAPTCHA middleware - token verification for protected routes."""

import logging
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, Request, status

from ..config import Settings, get_settings
from ..exceptions import ConfigurationError, DecodeError, TransportError
from ..schemas import VerificationResponse
from ..services.recaptcha import RecaptchaV3

logger = logging.getLogger(__name__)


def get_recaptcha_client(
    settings: Annotated[Settings, Depends(get_settings)],
) -> RecaptchaV3:
    """Build a fresh client per request so stored responses are never shared."""
    return RecaptchaV3.from_settings(settings)


async def require_recaptcha(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
    recaptcha: Annotated[RecaptchaV3, Depends(get_recaptcha_client)],
    x_recaptcha_token: Annotated[Optional[str], Header()] = None,
) -> Optional[VerificationResponse]:
    """Reject the request unless the X-Recaptcha-Token header passes verification.

    Returns the decoded response, or None when verification is disabled.
    """
    if not settings.recaptcha_enabled:
        return None

    if not x_recaptcha_token:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing reCAPTCHA token",
        )

    remote_ip = request.client.host if request.client else None
    try:
        result = await recaptcha.averify(x_recaptcha_token, remote_ip=remote_ip)
    except ConfigurationError as e:
        logger.error(f"reCAPTCHA misconfigured: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="reCAPTCHA verification is not configured",
        ) from e
    except (TransportError, DecodeError) as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="reCAPTCHA verification unavailable",
        ) from e

    if not (recaptcha.success() and recaptcha.is_threshold_passed()):
        logger.info(f"Blocked request to {request.url.path}: score={recaptcha.score()}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="reCAPTCHA verification failed",
        )

    return result
