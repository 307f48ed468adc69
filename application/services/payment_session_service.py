"""
Application service orchestrating payment session use-cases.

Create / get / confirm / cancel / stats on top of a SessionStore. Every
operation holds the store lock for its whole read-modify-write sequence so
request handlers and the expiry sweeper never interleave mid-transition.
"""
from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from application.dtos.payment_sessions import SessionView, StatsView
from core.logging_config import get_logger
from core.settings import PaymentSessionSettings
from domain.common.exceptions import (
    AmountValidationError,
    PaymentExpiredError,
    SessionNotFoundError,
)
from domain.payment_session.entity import PaymentSession, SessionStatus
from domain.payment_session.qris import embed_amount
from domain.payment_session.repository import SessionStore
from domain.payment_session.service import expire_session


logger = get_logger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PaymentSessionService:
    def __init__(
        self,
        store: SessionStore,
        settings: PaymentSessionSettings,
        clock: Optional[Clock] = None,
    ) -> None:
        self.store = store
        self.settings = settings
        self.clock = clock or utcnow

    def _new_session_id(self, now: datetime) -> str:
        # epoch millis + random suffix; retried on the (unlikely) collision
        millis = int(now.timestamp() * 1000)
        while True:
            session_id = f"{self.settings.session_id_prefix}-{millis}-{secrets.token_hex(5)}"
            if not self.store.exists(session_id):
                return session_id

    def _validate_amount(self, amount: object) -> int:
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise AmountValidationError(amount, self.settings.max_amount)
        if amount <= 0 or amount > self.settings.max_amount:
            raise AmountValidationError(amount, self.settings.max_amount)
        return amount

    def _require(self, session_id: str) -> PaymentSession:
        session = self.store.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    async def create_session(self, amount: int) -> SessionView:
        amount = self._validate_amount(amount)
        merchant = self.settings.merchant
        qr_payload = embed_amount(merchant.base_payload, amount)

        async with self.store.lock:
            now = self.clock()
            session = PaymentSession(
                id=self._new_session_id(now),
                amount=amount,
                qr_payload=qr_payload,
                created_at=now,
                expires_at=now + timedelta(seconds=self.settings.ttl_seconds),
                merchant_name=merchant.name,
                merchant_location=merchant.location,
            )
            self.store.add(session)
            self.store.stats.record_created()
            view = SessionView.from_entity(session)

        logger.info("payment_session_created", session_id=session.id, amount=amount)
        return view

    async def get_session(self, session_id: str) -> SessionView:
        async with self.store.lock:
            session = self._require(session_id)
            now = self.clock()
            if expire_session(session, self.store.stats, now):
                logger.info("payment_session_expired", session_id=session_id, trigger="read")
            return SessionView.from_entity(session, time_left=session.time_left(now))

    async def confirm_payment(self, session_id: str) -> SessionView:
        async with self.store.lock:
            session = self._require(session_id)
            now = self.clock()
            if session.is_past_deadline(now):
                expire_session(session, self.store.stats, now)
                logger.warning("payment_confirm_rejected", session_id=session_id, reason="expired")
                raise PaymentExpiredError(session_id)

            # mark_paid rejects anything that is no longer active
            session.mark_paid(now, self.settings.payment_method)
            self.store.stats.record_paid(session.amount)
            view = SessionView.from_entity(session)

        logger.info(
            "payment_confirmed",
            session_id=session_id,
            amount=session.amount,
            payment_method=session.payment_method,
        )
        return view

    async def cancel_session(self, session_id: str) -> SessionView:
        async with self.store.lock:
            session = self._require(session_id)
            was_active = session.mark_cancelled(self.clock())
            # only an active session holds a pending slot; keeps pending == count(active)
            if was_active:
                self.store.stats.record_cancelled()
            view = SessionView.from_entity(session)

        logger.info("payment_session_cancelled", session_id=session_id, was_active=was_active)
        return view

    async def get_stats(self) -> StatsView:
        async with self.store.lock:
            active = sum(1 for s in self.store.iter_sessions() if s.status is SessionStatus.ACTIVE)
            return StatsView.from_stats(
                self.store.stats,
                active_sessions=active,
                total_sessions=self.store.count(),
            )
