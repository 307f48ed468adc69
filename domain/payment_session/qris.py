"""
QRIS payload codec.

A merchant QRIS string is a sequence of EMV tag-length-value fields. The
static merchant payload carries no amount; a dynamic one is produced by
inserting the transaction amount field (tag 54) right before the country code
field (``5802ID``). Everything else, including the trailing CRC field, is kept
byte-for-byte.
"""
from __future__ import annotations

from domain.common.exceptions import QrPayloadError


AMOUNT_TAG = "54"
COUNTRY_CODE_ANCHOR = "5802ID"


def build_amount_field(amount: int) -> str:
    """Return the tag 54 field for ``amount``: tag, 2-digit length, value."""
    value = str(amount)
    if len(value) > 99:
        raise QrPayloadError("Amount is too long for a QRIS field", details={"amount": value})
    return f"{AMOUNT_TAG}{len(value):02d}{value}"


def embed_amount(base_payload: str, amount: int) -> str:
    """Inject ``amount`` into ``base_payload``.

    Non-positive amounts return the payload untouched. The country code anchor
    must appear exactly once, otherwise the insertion point is ambiguous and
    :class:`QrPayloadError` is raised. The CRC is not recomputed.
    """
    if amount <= 0:
        return base_payload

    occurrences = base_payload.count(COUNTRY_CODE_ANCHOR)
    if occurrences != 1:
        raise QrPayloadError(
            "Merchant payload must contain the country code field exactly once",
            details={"anchor": COUNTRY_CODE_ANCHOR, "occurrences": occurrences},
        )

    index = base_payload.index(COUNTRY_CODE_ANCHOR)
    return base_payload[:index] + build_amount_field(amount) + base_payload[index:]
