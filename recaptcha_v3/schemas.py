"""
Pydantic models shared by the client and the HTTP layer.

`RecaptchaConfig` holds the credentials and decision threshold for one
client. `VerificationResponse` is the decoded body of a siteverify call:

- success: whether the token was valid for this site
- score: 0.0 (bot) .. 1.0 (human)
- action: action name passed to `grecaptcha.execute`
- challenge_ts: ISO timestamp of the challenge load
- hostname: site where the challenge was solved
- error-codes: optional list of error identifiers
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class RecaptchaConfig(BaseModel):
    """Credentials and tuning for a single verification client."""

    model_config = ConfigDict(frozen=True)

    site_key: str = ""
    secret_key: str = Field(default="", repr=False)
    threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    timeout: float = Field(default=10.0, gt=0.0)


class VerificationResponse(BaseModel):
    """Decoded siteverify response. Missing fields fall back to defaults."""

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    success: bool = False
    # Strict: reject bools and numeric strings instead of coercing them.
    score: float = Field(default=0.0, strict=True)
    action: str = Field(default="", strict=True)
    challenge_ts: str = Field(default="", strict=True)
    hostname: str = Field(default="", strict=True)
    error_codes: list[str] = Field(default_factory=list, alias="error-codes", strict=True)

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        # Google omits fields it has no value for; treat explicit nulls the same.
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    @field_validator("success", mode="before")
    @classmethod
    def strict_success(cls, v: Any) -> bool:
        return v is True

    def is_threshold_passed(self, threshold: float = 0.5) -> bool:
        return self.score >= threshold

    def as_dict(self) -> dict[str, Any]:
        """Return the response using the wire key names."""
        return self.model_dump(by_alias=True)
