"""Pydantic models for the remote API payloads.

The service returns loosely structured JSON.  Each model lists the fields the
bot relies on with explicit defaults, so absent, ``null`` and empty values all
fall back to the same default instead of being assumed present.  Informational
counters (points, streaks, referrals) also fall back to their default when the
server sends a value of the wrong shape, so a cosmetic oddity never turns a
successful call into a failure.

``success`` flags are kept as raw values: only a literal JSON ``true`` counts
as success, never a truthy string or number.
"""

from typing import Any, Dict

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
    model_validator,
)


class ApiModel(BaseModel):
    """Base model: camelCase aliases, unknown keys ignored, blanks dropped."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _drop_blank_values(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return {}
        return {
            key: value for key, value in data.items()
            if value is not None and value != ""
        }

    @classmethod
    def _default_on_error(
        cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo,
    ) -> Any:
        try:
            return handler(value)
        except ValidationError:
            return cls.model_fields[info.field_name].default

    @classmethod
    def from_payload(cls, data: Dict[str, Any]):
        return cls.model_validate(data or {})


class NoncePayload(ApiModel):
    nonce: str = ""

    @field_validator("nonce", mode="before")
    @classmethod
    def _only_strings(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""


class SuccessPayload(ApiModel):
    """Response of ``POST /auth/siwe``; also the success half of a check-in."""

    success: Any = None

    @property
    def succeeded(self) -> bool:
        return self.success is True


class CheckInStatus(ApiModel):
    """Response of ``GET /check-in/status``.

    ``hasCheckedInToday`` stays strict: a garbled flag is a failed status
    read, not a silent ``False``.
    """

    has_checked_in_today: bool = Field(False, alias="hasCheckedInToday")
    current_streak: int = Field(0, alias="currentStreak")
    total_points: int = Field(0, alias="totalPoints")

    @field_validator("current_streak", "total_points", mode="wrap")
    @classmethod
    def _lenient_counters(cls, value, handler, info):
        return cls._default_on_error(value, handler, info)


class CheckInResult(SuccessPayload):
    """Response of ``POST /check-in``."""

    points_granted: int = Field(0, alias="pointsGranted")

    @field_validator("points_granted", mode="wrap")
    @classmethod
    def _lenient_points(cls, value, handler, info):
        return cls._default_on_error(value, handler, info)


class AccountStats(ApiModel):
    """Response of ``GET /me/stats``."""

    total_points: int = Field(0, alias="totalPoints")
    referral_code: str = Field("N/A", alias="referralCode")
    referred_by: str = Field("N/A", alias="referredBy")
    referral_count: int = Field(0, alias="referralCount")

    @field_validator("referral_code", "referred_by", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str:
        return value if isinstance(value, str) else str(value)

    @field_validator("total_points", "referral_count", mode="wrap")
    @classmethod
    def _lenient_counters(cls, value, handler, info):
        return cls._default_on_error(value, handler, info)
