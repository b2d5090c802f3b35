"""FastAPI 애플리케이션 엔트리포인트 (로깅, 미들웨어, 라우터 등록).

FastAPI application entry point: Logging, middleware and router
registration. Run with ``uvicorn gearguard.main:app``.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gearguard.api.v1 import api_router
from gearguard.config import settings
from gearguard.middleware.axiom_logging import AxiomLoggingMiddleware
from gearguard.services.notification_service import notification_service
from gearguard.utils.exceptions import AppError

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info("%s starting", settings.APP_NAME)
    yield
    # 종료 전 진행 중인 이메일 발송 대기 (Let in-flight e-mails finish)
    await notification_service.drain()
    logger.info("%s stopped", settings.APP_NAME)


app: FastAPI = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# 접근 로깅 미들웨어: Access logging (stdlib logger + Axiom)
# CORS보다 먼저 등록하여 모든 요청을 캡처 (Registered before CORS to capture all requests)
app.add_middleware(AxiomLoggingMiddleware)

# CORS 미들웨어 (Cross-Origin Resource Sharing middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """도메인 예외를 {"detail", "code"} 형식으로 변환합니다.

    Render domain errors as {"detail": ..., "code": ...}.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": exc.code},
        headers=exc.headers,
    )


@app.get("/health")
async def health_check() -> dict[str, str]:
    """서버 상태 확인 엔드포인트.

    Health check endpoint for load balancers and monitoring.
    """
    return {"status": "ok"}


app.include_router(api_router, prefix="/api/v1")
