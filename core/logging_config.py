"""
Structlog 日志配置模块

structlog 与标准库 logging 共用一条处理链：uvicorn / starlette 的日志和
业务事件（payment_session_created 等）输出格式一致，并都带上服务名与环境。
"""
import json
import logging
from typing import Any, List, Optional

import structlog
from structlog.contextvars import merge_contextvars
from structlog.dev import ConsoleRenderer
from structlog.processors import JSONRenderer, TimeStamper, add_log_level
from structlog.stdlib import ProcessorFormatter
from structlog.types import EventDict, WrappedLogger

from core.config import settings


# 由 LoggingMiddleware 统一记录请求，这些 logger 的访问日志会重复
_MUTED_LOGGERS = ("uvicorn.access",)


def add_app_context(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    """为每条日志补充服务名与运行环境（已显式传入的值不覆盖）"""
    event_dict.setdefault("service", settings.PROJECT_NAME)
    event_dict.setdefault("env", settings.ENVIRONMENT)
    return event_dict


def _json_dumps(obj: Any, default=None, **kwargs) -> str:
    # structlog 会传入 default/sort_keys 等参数；保留非 ASCII 字符（商户名等）
    return json.dumps(obj, ensure_ascii=False, default=default, **kwargs)


def get_renderer(json_output: Optional[bool] = None) -> Any:
    """DEBUG 下用彩色控制台输出，其余环境输出单行 JSON"""
    if json_output is None:
        json_output = not settings.DEBUG
    if json_output:
        return JSONRenderer(serializer=_json_dumps)
    return ConsoleRenderer(colors=True)


def resolve_level(level_name: Optional[str] = None) -> int:
    """显式级别 > LOG_LEVEL > DEBUG 开关；无法识别的名称回退到开关默认值"""
    name = level_name or settings.LOG_LEVEL
    if name:
        level = logging.getLevelName(name.upper())
        if isinstance(level, int):
            return level
    return logging.DEBUG if settings.DEBUG else logging.INFO


def shared_processors() -> List[Any]:
    """structlog 与 stdlib ProcessorFormatter 共用的预处理链"""
    return [
        merge_contextvars,
        add_log_level,
        add_app_context,
        TimeStamper(fmt="iso", utc=True),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def configure_logging(level_name: Optional[str] = None, json_output: Optional[bool] = None) -> None:
    """配置 structlog 并把根 logger 接到同一渲染器上（可重复调用）"""
    pre_chain = shared_processors()

    structlog.configure(
        processors=[*pre_chain, ProcessorFormatter.wrap_for_formatter],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[ProcessorFormatter.remove_processors_meta, get_renderer(json_output)],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(resolve_level(level_name))

    for name in _MUTED_LOGGERS:
        muted = logging.getLogger(name)
        muted.handlers.clear()
        muted.propagate = False


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    """获取 structlog logger 实例。"""
    return structlog.get_logger(name)
