"""
API依赖项 - 支付会话服务注入
"""
from fastapi import HTTPException, Request, status

from application.services.payment_session_service import PaymentSessionService


async def get_payment_session_service(request: Request) -> PaymentSessionService:
    """从应用状态获取会话服务（由 lifespan 创建，进程内唯一）"""
    service = getattr(request.app.state, "payment_sessions", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Payment session service is not initialized",
        )
    return service
