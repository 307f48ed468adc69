"""
Payment session specific business codes.
"""
from __future__ import annotations

from enum import IntEnum


class PaymentCode(IntEnum):
    # Generic success
    SUCCESS = 0

    # Session errors (6xxxx)
    AMOUNT_INVALID = 60000
    SESSION_NOT_FOUND = 60001
    SESSION_INVALID_STATE = 60002
    SESSION_EXPIRED = 60003

    # Merchant payload errors (61xxx)
    QR_PAYLOAD_INVALID = 61000


__all__ = ["PaymentCode"]
