"""
支付会话领域实体 - 会话聚合根与运行统计
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
import math
from typing import Optional

from domain.common.exceptions import DomainValidationException, InvalidSessionStateError


class SessionStatus(str, Enum):
    """支付会话状态枚举"""
    ACTIVE = "active"         # 等待支付
    PAID = "paid"             # 已支付
    EXPIRED = "expired"       # 已过期
    CANCELLED = "cancelled"   # 已取消


def _ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """确保时间为 UTC 时区"""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@dataclass
class PaymentSession:
    """
    支付会话聚合根 - 一次扫码支付尝试

    业务规则：
    1. 金额必须大于0，创建后不可变
    2. 状态只能从 active 单向转换到 paid / expired / cancelled
    3. paid_at 与 cancelled_at 最多设置其一，且仅在对应转换时设置
    """

    id: str
    amount: int
    qr_payload: str
    created_at: datetime
    expires_at: datetime
    status: SessionStatus = SessionStatus.ACTIVE
    merchant_name: Optional[str] = None
    merchant_location: Optional[str] = None
    paid_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    payment_method: Optional[str] = None

    def __post_init__(self):
        if self.amount <= 0:
            raise DomainValidationException(
                f"Session amount must be greater than 0: {self.amount}",
                field="amount",
            )
        self.created_at = _ensure_utc(self.created_at)
        self.expires_at = _ensure_utc(self.expires_at)
        if self.expires_at <= self.created_at:
            raise DomainValidationException(
                "Session must expire after it is created",
                field="expires_at",
            )

    @property
    def expires_in(self) -> int:
        """会话有效期（秒）"""
        return int((self.expires_at - self.created_at).total_seconds())

    def is_past_deadline(self, now: datetime) -> bool:
        return now > self.expires_at

    def time_left(self, now: datetime) -> int:
        """剩余秒数，向下取整，最小为0"""
        remaining = (self.expires_at - now).total_seconds()
        return max(0, math.floor(remaining))

    def expire(self, now: datetime) -> bool:
        """
        超时则转为 expired

        仅 active 且已超过截止时间的会话会转换；返回是否发生了转换，
        调用方据此更新统计，保证同一会话只计数一次。
        """
        if self.status is not SessionStatus.ACTIVE or not self.is_past_deadline(now):
            return False
        self.status = SessionStatus.EXPIRED
        return True

    def mark_paid(self, now: datetime, payment_method: str) -> None:
        """业务规则：只有 active 会话可以支付成功"""
        if self.status is not SessionStatus.ACTIVE:
            raise InvalidSessionStateError(self.id, self.status.value)
        self.status = SessionStatus.PAID
        self.paid_at = now
        self.payment_method = payment_method

    def mark_cancelled(self, now: datetime) -> bool:
        """
        取消会话

        已支付的会话不可取消；已过期或已取消的会话允许重复取消（幂等），
        cancelled_at 只在第一次取消时记录。返回取消前是否处于 active。
        """
        if self.status is SessionStatus.PAID:
            raise InvalidSessionStateError(
                self.id,
                self.status.value,
                message="Cannot cancel a payment that has already succeeded",
            )
        was_active = self.status is SessionStatus.ACTIVE
        self.status = SessionStatus.CANCELLED
        if self.cancelled_at is None:
            self.cancelled_at = now
        return was_active


@dataclass
class PaymentStats:
    """
    进程内运行统计

    pending 始终等于 active 会话数，递减前均做非负保护。
    没有独立的取消计数：取消只减少 pending。
    """

    total: int = 0
    success: int = 0
    expired: int = 0
    pending: int = 0
    total_amount: int = 0

    def _release_pending(self) -> None:
        if self.pending > 0:
            self.pending -= 1

    def record_created(self) -> None:
        self.total += 1
        self.pending += 1

    def record_paid(self, amount: int) -> None:
        self.success += 1
        self.total_amount += amount
        self._release_pending()

    def record_expired(self) -> None:
        self.expired += 1
        self._release_pending()

    def record_cancelled(self) -> None:
        self._release_pending()
