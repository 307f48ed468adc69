"""
Payment session DTOs (Pydantic v2) used at application boundaries.

Wire names are camelCase; Python attribute names stay snake_case.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, ConfigDict, StrictInt, field_serializer
from pydantic.alias_generators import to_camel

from domain.payment_session.entity import PaymentSession, PaymentStats


def _iso_utc(ts: datetime) -> str:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    else:
        ts = ts.astimezone(timezone.utc)
    return ts.isoformat().replace("+00:00", "Z")


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateSession(_CamelModel):
    # strict: JSON true, "100" or 100.0 must not be coerced into an amount
    amount: StrictInt


class SessionView(_CamelModel):
    id: str
    amount: int
    qr_payload: str
    status: str
    merchant_name: Optional[str] = None
    merchant_location: Optional[str] = None
    created_at: datetime
    expires_at: datetime
    expires_in: int
    paid_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    payment_method: Optional[str] = None
    # Derived on read, never stored on the session
    time_left: Optional[int] = None

    @field_serializer("created_at", "expires_at", "paid_at", "cancelled_at")
    def _serialize_ts(self, ts: Optional[datetime]) -> Optional[str]:
        return _iso_utc(ts) if ts is not None else None

    @classmethod
    def from_entity(cls, session: PaymentSession, *, time_left: Optional[int] = None) -> "SessionView":
        return cls(
            id=session.id,
            amount=session.amount,
            qr_payload=session.qr_payload,
            status=session.status.value,
            merchant_name=session.merchant_name,
            merchant_location=session.merchant_location,
            created_at=session.created_at,
            expires_at=session.expires_at,
            expires_in=session.expires_in,
            paid_at=session.paid_at,
            cancelled_at=session.cancelled_at,
            payment_method=session.payment_method,
            time_left=time_left,
        )


class StatsView(_CamelModel):
    total: int
    success: int
    expired: int
    pending: int
    total_amount: int
    active_sessions: int
    total_sessions: int

    @classmethod
    def from_stats(cls, stats: PaymentStats, *, active_sessions: int, total_sessions: int) -> "StatsView":
        return cls(
            total=stats.total,
            success=stats.success,
            expired=stats.expired,
            pending=stats.pending,
            total_amount=stats.total_amount,
            active_sessions=active_sessions,
            total_sessions=total_sessions,
        )
