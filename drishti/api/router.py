"""
API 라우터 설정 파일입니다.
기능별 엔드포인트를 하나로 모읍니다.
"""

from fastapi import APIRouter

from drishti.api.endpoints import health, projects, workspace

api_router = APIRouter()

# 헬스 체크 (/health)
api_router.include_router(
    health.router,
    prefix="/health",
    tags=["health"]
)

# 프로젝트 관리, 로드맵, 내보내기 (/projects)
api_router.include_router(
    projects.router,
    prefix="/projects",
    tags=["projects"]
)

# 워크스페이스 화면 흐름 (/workspace)
api_router.include_router(
    workspace.router,
    prefix="/workspace",
    tags=["workspace"]
)
