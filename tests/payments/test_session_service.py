import asyncio
import re

import pytest

from application.services.payment_session_service import PaymentSessionService
from core.settings import MerchantSettings, PaymentSessionSettings
from domain.common.exceptions import (
    AmountValidationError,
    InvalidSessionStateError,
    PaymentExpiredError,
    QrPayloadError,
    SessionNotFoundError,
)


@pytest.mark.asyncio
async def test_create_session_starts_active(service, store, clock):
    session = await service.create_session(25000)

    assert session.status == "active"
    assert session.amount == 25000
    assert "540525000" + "5802ID" in session.qr_payload
    assert session.created_at == clock.now
    assert session.expires_in == 60
    assert (session.expires_at - session.created_at).total_seconds() == 60
    assert session.paid_at is None and session.cancelled_at is None
    assert session.merchant_name == "Maulana Store"
    assert store.stats.total == 1
    assert store.stats.pending == 1


@pytest.mark.asyncio
async def test_session_ids_are_unique_and_url_safe(service):
    ids = {(await service.create_session(1000)).id for _ in range(50)}
    assert len(ids) == 50
    for session_id in ids:
        assert re.fullmatch(r"PAY-\d+-[0-9a-f]{10}", session_id)


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", [-1, 0, 10_000_001, True, 1.5, "100"])
async def test_create_rejects_invalid_amount(service, store, amount):
    with pytest.raises(AmountValidationError):
        await service.create_session(amount)
    assert store.count() == 0
    assert store.stats.total == 0


@pytest.mark.asyncio
async def test_create_accepts_max_amount(service):
    session = await service.create_session(10_000_000)
    assert session.amount == 10_000_000


@pytest.mark.asyncio
async def test_create_with_malformed_merchant_payload(store, clock):
    settings = PaymentSessionSettings(merchant=MerchantSettings(base_payload="000201010211"))
    svc = PaymentSessionService(store=store, settings=settings, clock=clock)
    with pytest.raises(QrPayloadError):
        await svc.create_session(1000)
    assert store.count() == 0
    assert store.stats.pending == 0


@pytest.mark.asyncio
async def test_get_fresh_session_reports_time_left(service, clock):
    created = await service.create_session(5000)

    fetched = await service.get_session(created.id)
    assert fetched.status == "active"
    assert fetched.time_left == 60

    clock.advance(10.5)
    fetched = await service.get_session(created.id)
    assert fetched.time_left == 49


@pytest.mark.asyncio
async def test_get_at_deadline_is_still_active(service, clock):
    created = await service.create_session(5000)
    clock.advance(60)

    fetched = await service.get_session(created.id)
    assert fetched.status == "active"
    assert fetched.time_left == 0


@pytest.mark.asyncio
async def test_get_expires_lazily_once(service, store, clock):
    created = await service.create_session(5000)
    clock.advance(61)

    first = await service.get_session(created.id)
    second = await service.get_session(created.id)

    assert first.status == second.status == "expired"
    assert first.time_left == 0
    assert store.stats.expired == 1
    assert store.stats.pending == 0


@pytest.mark.asyncio
async def test_unknown_session_is_not_found(service):
    with pytest.raises(SessionNotFoundError):
        await service.get_session("PAY-0-missing")
    with pytest.raises(SessionNotFoundError):
        await service.confirm_payment("PAY-0-missing")
    with pytest.raises(SessionNotFoundError):
        await service.cancel_session("PAY-0-missing")


@pytest.mark.asyncio
async def test_confirm_marks_paid_and_counts_once(service, store, clock):
    created = await service.create_session(15000)
    clock.advance(5)

    paid = await service.confirm_payment(created.id)
    assert paid.status == "paid"
    assert paid.paid_at == clock.now
    assert paid.payment_method == "QRIS-DANA"
    assert store.stats.success == 1
    assert store.stats.pending == 0
    assert store.stats.total_amount == 15000

    with pytest.raises(InvalidSessionStateError) as exc:
        await service.confirm_payment(created.id)
    assert exc.value.status == "paid"
    assert store.stats.success == 1
    assert store.stats.total_amount == 15000


@pytest.mark.asyncio
async def test_confirm_after_deadline_expires_session(service, store, clock):
    created = await service.create_session(15000)
    clock.advance(61)

    with pytest.raises(PaymentExpiredError) as exc:
        await service.confirm_payment(created.id)
    assert exc.value.status == "expired"
    assert (await service.get_session(created.id)).status == "expired"
    assert store.stats.expired == 1
    assert store.stats.pending == 0
    assert store.stats.success == 0

    with pytest.raises(PaymentExpiredError):
        await service.confirm_payment(created.id)
    assert store.stats.expired == 1


@pytest.mark.asyncio
async def test_confirm_cancelled_session_is_rejected(service):
    created = await service.create_session(1000)
    await service.cancel_session(created.id)

    with pytest.raises(InvalidSessionStateError) as exc:
        await service.confirm_payment(created.id)
    assert exc.value.status == "cancelled"


@pytest.mark.asyncio
async def test_paid_session_stays_paid_after_deadline(service, store, clock):
    created = await service.create_session(1000)
    await service.confirm_payment(created.id)
    clock.advance(120)

    fetched = await service.get_session(created.id)
    assert fetched.status == "paid"
    assert store.stats.expired == 0


@pytest.mark.asyncio
async def test_cancel_paid_session_fails(service):
    created = await service.create_session(1000)
    await service.confirm_payment(created.id)

    with pytest.raises(InvalidSessionStateError) as exc:
        await service.cancel_session(created.id)
    assert exc.value.status == "paid"


@pytest.mark.asyncio
async def test_cancel_is_idempotent(service, store, clock):
    target = await service.create_session(1000)
    await service.create_session(2000)
    assert store.stats.pending == 2

    cancelled = await service.cancel_session(target.id)
    assert cancelled.status == "cancelled"
    assert cancelled.cancelled_at == clock.now
    assert store.stats.pending == 1

    clock.advance(3)
    again = await service.cancel_session(target.id)
    assert again.status == "cancelled"
    assert again.cancelled_at == cancelled.cancelled_at
    assert store.stats.pending == 1


@pytest.mark.asyncio
async def test_cancel_expired_session_keeps_counters(service, store, clock):
    created = await service.create_session(1000)
    clock.advance(61)
    await service.get_session(created.id)

    cancelled = await service.cancel_session(created.id)
    assert cancelled.status == "cancelled"
    assert store.stats.expired == 1
    assert store.stats.pending == 0


@pytest.mark.asyncio
async def test_stats_pending_matches_active(service, sweeper, clock):
    ids = [(await service.create_session(1000 * (i + 1))).id for i in range(6)]
    await service.confirm_payment(ids[0])
    await service.cancel_session(ids[1])
    clock.advance(30)
    late = await service.create_session(500)
    clock.advance(31)
    await sweeper.run_once()

    stats = await service.get_stats()
    assert stats.total == 7
    assert stats.success == 1
    assert stats.expired == 4
    assert stats.total_amount == 1000
    assert stats.pending == stats.active_sessions == 1
    assert stats.total_sessions == 7
    assert (await service.get_session(late.id)).status == "active"


@pytest.mark.asyncio
async def test_stats_active_sessions_before_lazy_expiry(service, clock):
    await service.create_session(1000)
    clock.advance(61)

    stats = await service.get_stats()
    # nothing has observed the expiry yet
    assert stats.active_sessions == 1
    assert stats.pending == 1


@pytest.mark.asyncio
async def test_sweeper_and_read_race_counts_expiry_once(service, sweeper, store, clock):
    sessions = [await service.create_session(1000) for _ in range(20)]
    clock.advance(61)

    results = await asyncio.gather(
        sweeper.run_once(),
        *(service.get_session(s.id) for s in sessions),
        sweeper.run_once(),
    )

    assert all(view.status == "expired" for view in results[1:-1])
    assert store.stats.expired == 20
    assert store.stats.pending == 0


@pytest.mark.asyncio
async def test_concurrent_confirms_pay_once(service, store):
    created = await service.create_session(7000)

    results = await asyncio.gather(
        *(service.confirm_payment(created.id) for _ in range(5)),
        return_exceptions=True,
    )

    paid = [r for r in results if not isinstance(r, Exception)]
    rejected = [r for r in results if isinstance(r, InvalidSessionStateError)]
    assert len(paid) == 1
    assert len(rejected) == 4
    assert store.stats.success == 1
    assert store.stats.total_amount == 7000
