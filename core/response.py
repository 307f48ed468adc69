"""
统一响应格式定义

成功：{"success": true, "code": 0, "message": ..., "data": ...}
失败：{"success": false, "code": ..., "error": ..., "errorType": ..., "status": ...}
"""
from typing import Any, Optional, Generic, TypeVar
from pydantic import BaseModel, ConfigDict, field_serializer
from pydantic.alias_generators import to_camel
from datetime import datetime, timezone
from shared.codes import BusinessCode


T = TypeVar("T")


class Response(BaseModel, Generic[T]):
    """统一响应模型"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool
    code: int
    message: Optional[str] = None
    data: Optional[T] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    # 会话状态类错误时携带当前状态（如 expired / paid）
    status: Optional[str] = None
    details: Optional[dict] = None
    request_id: Optional[str] = None
    timestamp: Optional[datetime] = None

    @field_serializer("timestamp")
    def serialize_timestamp(self, timestamp: Optional[datetime]) -> Optional[str]:
        """序列化时间戳为 UTC ISO8601，统一使用 Z 结尾"""
        if timestamp is None:
            return None
        ts = timestamp
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        else:
            ts = ts.astimezone(timezone.utc)
        return ts.isoformat().replace("+00:00", "Z")

    def to_content(self) -> dict:
        """JSONResponse 使用的序列化结果（camelCase，省略空字段）"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def success_response(
    data: Any = None,
    message: Optional[str] = None,
    code: int = BusinessCode.SUCCESS
) -> Response:
    """
    创建成功响应

    Args:
        data: 返回数据
        message: 成功消息
        code: 业务状态码

    Returns:
        Response: 统一响应对象
    """
    return Response(success=True, code=code, message=message, data=data)


def error_response(
    code: int,
    message: str,
    error_type: str = "BusinessError",
    status: Optional[str] = None,
    details: Optional[dict] = None,
    request_id: Optional[str] = None
) -> Response:
    """
    创建错误响应

    Args:
        code: 业务状态码
        message: 错误消息
        error_type: 错误类型
        status: 会话当前状态（可选）
        details: 错误详情
        request_id: 请求ID

    Returns:
        Response: 统一响应对象
    """
    return Response(
        success=False,
        code=code,
        error=message,
        error_type=error_type,
        status=status,
        details=details,
        request_id=request_id,
        timestamp=datetime.now(timezone.utc),
    )
