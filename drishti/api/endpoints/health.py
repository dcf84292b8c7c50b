"""
헬스 체크 엔드포인트입니다.
"""

from fastapi import APIRouter

from drishti.config import get_settings
from drishti.services import get_api_client

router = APIRouter()


@router.get("")
async def health_check():
    return {"status": "healthy"}


@router.get("/detail")
async def health_check_detail():
    """설정 요약도 함께 반환합니다 (토큰 값은 노출하지 않음)."""
    settings = get_settings()
    return {
        "status": "healthy",
        "config": {
            "api_base_url": settings.api_base_url,
            "authenticated": get_api_client().is_authenticated(),
            "storage_path": settings.storage_path,
            "download_path": settings.download_path,
        }
    }
