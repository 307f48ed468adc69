"""
FastAPI应用主入口
"""
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import payments as payments_routes
from api.middleware import RequestIDMiddleware, LoggingMiddleware
from application.services.payment_session_service import PaymentSessionService
from core.config import settings
from core.settings import payment_settings
from core.exceptions import register_exception_handlers
from core.logging_config import get_logger, configure_logging
from infrastructure.repositories.session_store import InMemorySessionStore
from infrastructure.tasks import ExpirySweeper


# 初始化日志：在入口处显式配置，避免模块导入时的副作用
configure_logging()
logger = get_logger(__name__)

_started_monotonic = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理：创建会话存储、服务与过期清理任务"""
    store = InMemorySessionStore()
    service = PaymentSessionService(store=store, settings=payment_settings)
    sweeper = ExpirySweeper(store, interval_seconds=payment_settings.sweep_interval_seconds)

    app.state.payment_sessions = service
    app.state.expiry_sweeper = sweeper
    sweeper.start()

    logger.info(
        "application_startup",
        project=settings.PROJECT_NAME,
        version=settings.VERSION,
        environment=settings.ENVIRONMENT,
        merchant=payment_settings.merchant.name,
        session_ttl_seconds=payment_settings.ttl_seconds,
        sweep_interval_seconds=payment_settings.sweep_interval_seconds,
    )

    yield

    await sweeper.stop()
    stats = await service.get_stats()
    logger.info(
        "application_shutdown",
        final_stats=stats.model_dump(),
        total_revenue=stats.total_amount,
    )


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
    description="QRIS dynamic payment sessions backed by a static merchant QR payload",
)

# 添加中间件（注意顺序：后添加的先执行）
app.add_middleware(LoggingMiddleware)
app.add_middleware(RequestIDMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 注册全局异常处理器
register_exception_handlers(app)

# 注册路由
app.include_router(payments_routes.router, prefix="/api")


# 健康检查
@app.get("/api/health", tags=["Health"])
async def health_check():
    """健康检查端点"""
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "uptime": round(time.monotonic() - _started_monotonic, 3),
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info"
    )
