"""
Payment session settings using pydantic-settings v2 with nested env keys.

Kept apart from core.config.Settings so the session domain can be configured
(and overridden in tests) on its own, e.g. ``PAYMENT__TTL_SECONDS=120`` or
``PAYMENT__MERCHANT__BASE_PAYLOAD=...``.
"""
from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, field_validator


DEFAULT_BASE_PAYLOAD = (
    "00020101021126570011ID.DANA.WWW011893600915353041430702095304143070303UMI"
    "51440014ID.CO.QRIS.WWW0215ID10232989429970303UMI5204581353033605802ID"
    "5913Maulana store6015Kota Tangerang 610515419630467D6"
)


class MerchantSettings(BaseModel):
    name: str = "Maulana Store"
    location: str = "Kota Tangerang"
    # Static QRIS string printed at the merchant; the amount is injected per session
    base_payload: str = DEFAULT_BASE_PAYLOAD


class PaymentSessionSettings(BaseSettings):
    ttl_seconds: int = Field(default=60, gt=0)
    sweep_interval_seconds: float = Field(default=30.0, gt=0)
    max_amount: int = Field(default=10_000_000, gt=0)
    payment_method: str = "QRIS-DANA"
    session_id_prefix: str = "PAY"

    merchant: MerchantSettings = Field(default_factory=MerchantSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="PAYMENT__",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
    )

    @field_validator("session_id_prefix")
    @classmethod
    def _url_safe_prefix(cls, v: str) -> str:
        if not v or not all(ch.isalnum() or ch in "-_" for ch in v):
            raise ValueError("session_id_prefix must be non-empty and URL-safe")
        return v


payment_settings = PaymentSessionSettings()
