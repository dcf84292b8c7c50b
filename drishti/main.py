"""
Drishti 워크스페이스의 메인 진입점 파일입니다.
화면 레이어가 호출할 워크스페이스 HTTP 서버를 생성하고 설정합니다.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from drishti import __version__
from drishti.config import get_settings
from drishti.api.router import api_router
from drishti.exceptions import DrishtiError, PreconditionError, RemoteServiceError
from drishti.services import close_api_client

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    애플리케이션의 생명주기(시작과 종료)를 관리하는 함수입니다.

    시작 시 로그 레벨을 적용하고, 종료 시 외부 서비스 연결을 닫습니다.
    """
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(f"Drishti 워크스페이스가 다음 주소에서 시작됩니다: {settings.host}:{settings.port}")
    logger.info(f"외부 서비스: {settings.api_base_url}")

    yield

    await close_api_client()
    logger.info("Drishti 워크스페이스가 종료됩니다")


def error_status(exc: DrishtiError) -> int:
    """도메인 예외 → HTTP 상태 코드."""
    if isinstance(exc, PreconditionError):
        return 409
    if isinstance(exc, RemoteServiceError):
        return 502
    return 500


def create_app() -> FastAPI:
    """
    FastAPI 웹 애플리케이션을 생성하고 설정하는 함수입니다.

    주요 기능:
    1. 기본 앱 정보 설정
    2. CORS 설정 (프론트엔드와의 통신 허용)
    3. API 라우터 연결
    """
    settings = get_settings()

    app = FastAPI(
        title="Drishti 워크스페이스",
        description="제품 아이디어 → PRD → 구현 로드맵 워크스페이스",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 글로벌 예외 핸들러: 커스텀 예외를 구조화된 JSON 응답으로 변환
    @app.exception_handler(DrishtiError)
    async def drishti_error_handler(request: Request, exc: DrishtiError):
        return JSONResponse(
            status_code=error_status(exc),
            content={
                "error_code": exc.error_code,
                "message": exc.message,
                "details": exc.details,
                "timestamp": datetime.now().isoformat(),
            },
        )

    @app.exception_handler(Exception)
    async def general_error_handler(request: Request, exc: Exception):
        logger.error(f"처리되지 않은 예외: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error_code": "ERR_INTERNAL",
                "message": "내부 서버 오류가 발생했습니다",
                "details": None,
                "timestamp": datetime.now().isoformat(),
            },
        )

    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()


@app.get("/")
async def root():
    """루트 엔드포인트: 서버 기본 정보를 반환합니다."""
    return {
        "name": "Drishti 워크스페이스",
        "version": __version__,
        "description": "제품 아이디어를 PRD와 구현 로드맵으로",
        "docs": "/docs",
        "api": "/api/v1",
    }


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "drishti.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,  # 개발 모드
    )
