"""
워크스페이스 화면 흐름 API입니다.
아이디어 입력 → PRD 생성 → 구현 계획 생성 → 체크포인트 체크 순서를 진행하며,
모든 응답은 다시 계산된 WorkspaceView입니다.
"""

from fastapi import APIRouter
from pydantic import BaseModel

from drishti.services import get_lifecycle

router = APIRouter()


class IdeaInput(BaseModel):
    """아이디어 입력 요청"""
    idea: str


@router.get("")
async def get_view() -> dict:
    return get_lifecycle().view().model_dump(mode="json")


@router.put("/idea")
async def set_idea(body: IdeaInput) -> dict:
    return get_lifecycle().set_idea(body.idea).model_dump(mode="json")


@router.post("/new")
async def new_project() -> dict:
    """선택을 해제하고 빈 워크스페이스로 돌아갑니다."""
    return get_lifecycle().new_project().model_dump(mode="json")


@router.post("/select/{project_id}")
async def select_project(project_id: str) -> dict:
    view = await get_lifecycle().select_project(project_id)
    return view.model_dump(mode="json")


@router.post("/submit")
async def submit() -> dict:
    """
    아이디어를 제출하여 PRD를 생성합니다.
    선택된 프로젝트가 없으면 새 프로젝트를 먼저 만듭니다.
    """
    view = await get_lifecycle().submit()
    return view.model_dump(mode="json")


@router.post("/plan")
async def generate_plan() -> dict:
    view = await get_lifecycle().generate_plan()
    return view.model_dump(mode="json")


@router.post("/checkpoints/{checkpoint_id}/toggle")
async def toggle_checkpoint(checkpoint_id: str) -> dict:
    return get_lifecycle().toggle_checkpoint(checkpoint_id).model_dump(mode="json")


@router.delete("/notification")
async def dismiss_notification() -> dict:
    return get_lifecycle().dismiss_notification().model_dump(mode="json")
