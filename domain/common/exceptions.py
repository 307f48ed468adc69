"""领域层业务异常定义，供领域与基础设施使用。

核心（core）层仅负责全局映射与异常处理，尽量避免领域层反向依赖核心层。
"""
from __future__ import annotations

from typing import Optional
from shared.codes import BusinessCode
from shared.codes.payment_codes import PaymentCode


class BusinessException(Exception):
    """业务异常基类"""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "BusinessError",
        details: Optional[dict] = None,
        field: Optional[str] = None,
        status: Optional[str] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        self.field = field
        # 会话状态（仅状态类错误携带，透传给 API 响应）
        self.status = status
        super().__init__(self.message)


class DomainValidationException(BusinessException):
    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(
            code=BusinessCode.PARAM_VALIDATION_ERROR,
            message=message,
            error_type="DomainValidationError",
            details=details,
            field=field,
        )


class AmountValidationError(BusinessException):
    """支付金额不合法（<=0 或超过上限）"""

    def __init__(self, amount: object, max_amount: int):
        if isinstance(amount, int) and amount > max_amount:
            message = f"Amount must not exceed {max_amount:,}"
        else:
            message = "Amount must be greater than 0"
        super().__init__(
            code=PaymentCode.AMOUNT_INVALID,
            message=message,
            error_type="ValidationError",
            details={"amount": amount, "max_amount": max_amount},
            field="amount",
        )


class SessionNotFoundError(BusinessException):
    def __init__(self, session_id: str):
        super().__init__(
            code=PaymentCode.SESSION_NOT_FOUND,
            message="Payment session not found",
            error_type="NotFound",
            details={"session_id": session_id},
        )


class InvalidSessionStateError(BusinessException):
    """当前状态不允许该操作"""

    def __init__(self, session_id: str, status: str, message: Optional[str] = None):
        super().__init__(
            code=PaymentCode.SESSION_INVALID_STATE,
            message=message or f"Payment session is not valid (status: {status})",
            error_type="InvalidState",
            details={"session_id": session_id},
            status=status,
        )


class PaymentExpiredError(BusinessException):
    def __init__(self, session_id: str):
        super().__init__(
            code=PaymentCode.SESSION_EXPIRED,
            message="Payment time has run out",
            error_type="PaymentExpired",
            details={"session_id": session_id},
            status="expired",
        )


class QrPayloadError(BusinessException):
    """商户 QR 载荷格式错误（锚点缺失或重复等）"""

    def __init__(self, message: str, *, details: Optional[dict] = None):
        super().__init__(
            code=PaymentCode.QR_PAYLOAD_INVALID,
            message=message,
            error_type="CodecError",
            details=details,
        )
