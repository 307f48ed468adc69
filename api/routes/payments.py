"""
Payment session API routes.

Thin layer over PaymentSessionService: parse input, call the use-case, wrap
the result in the unified response envelope. Domain errors are rendered by
the global exception handlers.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, status

from api.dependencies import get_payment_session_service
from application.dtos.payment_sessions import CreateSession, SessionView, StatsView
from application.services.payment_session_service import PaymentSessionService
from core.response import Response, success_response


router = APIRouter(tags=["Payments"])


@router.post(
    "/payment/create",
    summary="Create payment session",
    status_code=status.HTTP_201_CREATED,
    response_model=Response[SessionView],
    response_model_exclude_none=True,
)
async def create_payment_session(
    payload: CreateSession,
    service: PaymentSessionService = Depends(get_payment_session_service),
):
    session = await service.create_session(payload.amount)
    return success_response(data=session)


@router.get(
    "/payment/{session_id}",
    summary="Get payment session",
    response_model=Response[SessionView],
    response_model_exclude_none=True,
)
async def get_payment_session(
    session_id: str,
    service: PaymentSessionService = Depends(get_payment_session_service),
):
    session = await service.get_session(session_id)
    return success_response(data=session)


@router.post(
    "/payment/{session_id}/confirm",
    summary="Confirm payment (trusted webhook)",
    response_model=Response[SessionView],
    response_model_exclude_none=True,
)
async def confirm_payment(
    session_id: str,
    service: PaymentSessionService = Depends(get_payment_session_service),
):
    session = await service.confirm_payment(session_id)
    return success_response(data=session, message="Payment processed successfully")


@router.delete(
    "/payment/{session_id}",
    summary="Cancel payment session",
    response_model=Response[None],
    response_model_exclude_none=True,
)
async def cancel_payment_session(
    session_id: str,
    service: PaymentSessionService = Depends(get_payment_session_service),
):
    await service.cancel_session(session_id)
    return success_response(message="Payment session cancelled")


@router.get(
    "/stats",
    summary="Payment statistics",
    response_model=Response[StatsView],
    response_model_exclude_none=True,
)
async def payment_stats(service: PaymentSessionService = Depends(get_payment_session_service)):
    stats = await service.get_stats()
    return success_response(data=stats)
