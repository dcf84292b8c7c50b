"""
프로젝트 관리 API입니다.
프로젝트 CRUD, AI 생성, 로드맵/체크포인트, 내보내기 파일 다운로드를 제공합니다.
"""

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse
from pydantic import BaseModel

from drishti.layers.layer1_normalization import normalize_prd
from drishti.layers.layer2_roadmap import to_roadmap
from drishti.models import Project
from drishti.services import (
    get_checkpoint_store,
    get_project_state,
    hydrate_project,
)
from drishti.services.api_client import DOWNLOADS

router = APIRouter()


class ProjectInput(BaseModel):
    """프로젝트 생성/수정 요청"""
    title: str
    idea: str


async def _load_project(project_id: str) -> Project:
    """메모리에 있으면 그대로, 없으면 서비스에서 조회합니다 (현재 선택은 바꾸지 않음)."""
    state = get_project_state()
    project = state.get_project(project_id)
    if project is None:
        project = hydrate_project(await state.api.get_project(project_id))
    return project


@router.get("")
async def list_projects(page: int = 1) -> dict:
    """프로젝트 목록 조회 (최신순)"""
    state = get_project_state()
    projects = await state.fetch_projects(page=page)
    return {
        "total": len(projects),
        "projects": [p.model_dump(mode="json") for p in projects],
    }


@router.post("")
async def create_project(body: ProjectInput) -> dict:
    project = await get_project_state().create_project(body.title, body.idea)
    return project.model_dump(mode="json")


@router.get("/{project_id}")
async def get_project(project_id: str) -> dict:
    """프로젝트를 조회하여 현재 프로젝트로 설정합니다."""
    project = await get_project_state().fetch_project(project_id)
    if project is None:
        raise HTTPException(status_code=409, detail="다른 프로젝트가 선택되어 응답을 버렸습니다")
    return project.model_dump(mode="json")


@router.put("/{project_id}")
async def update_project(project_id: str, body: ProjectInput) -> dict:
    project = await get_project_state().update_project(project_id, body.title, body.idea)
    return project.model_dump(mode="json")


@router.delete("/{project_id}")
async def delete_project(project_id: str) -> dict:
    await get_project_state().delete_project(project_id)
    return {"message": "프로젝트가 삭제되었습니다", "project_id": project_id}


@router.post("/{project_id}/generate-prd")
async def generate_prd(project_id: str) -> dict:
    project = await get_project_state().generate_prd(project_id)
    return project.model_dump(mode="json")


@router.post("/{project_id}/generate-plan")
async def generate_plan(project_id: str) -> dict:
    """구현 계획 생성. PRD가 없으면 409."""
    project = await get_project_state().generate_implementation_plan(project_id)
    return project.model_dump(mode="json")


@router.get("/{project_id}/prd")
async def get_normalized_prd(project_id: str) -> dict:
    """정규화된 PRD (모든 섹션이 기본값으로 채워진 형태)"""
    project = await _load_project(project_id)
    if not project.has_prd:
        raise HTTPException(status_code=404, detail="PRD가 아직 생성되지 않았습니다")
    return normalize_prd(project.prd.content).model_dump(mode="json")


@router.get("/{project_id}/roadmap")
async def get_roadmap(project_id: str) -> dict:
    """
    구현 로드맵과 진행률을 반환합니다.

    반환 정보:
    - roadmap: phases → stages → checkpoints
    - progress: 전체 진행률
    - phase_progress: 단계별 진행률
    - completed: 완료된 체크포인트 ID 목록
    """
    project = await _load_project(project_id)
    if not project.has_plan:
        raise HTTPException(status_code=404, detail="구현 계획이 아직 생성되지 않았습니다")

    store = get_checkpoint_store()
    roadmap = to_roadmap(project.implementation_plan.content, project.id)
    completed = store.load(project.id)

    return {
        "project_id": project.id,
        "roadmap": roadmap.model_dump(mode="json"),
        "progress": store.progress(roadmap, completed).model_dump(),
        "phase_progress": {
            phase.id: store.phase_progress(phase, completed).model_dump()
            for phase in roadmap.phases
        },
        "completed": sorted(completed & set(roadmap.checkpoint_ids())),
    }


@router.post("/{project_id}/checkpoints/{checkpoint_id}/toggle")
async def toggle_checkpoint(project_id: str, checkpoint_id: str) -> dict:
    """체크포인트 완료 여부를 뒤집고 저장된 완료 목록을 반환합니다."""
    completed = get_checkpoint_store().toggle(project_id, checkpoint_id)
    return {
        "project_id": project_id,
        "checkpoint_id": checkpoint_id,
        "completed": checkpoint_id in completed,
        "completed_checkpoints": sorted(completed),
    }


@router.get("/{project_id}/downloads/{kind}")
async def download(project_id: str, kind: str) -> FileResponse:
    """
    서버가 만든 내보내기 파일을 받아 그대로 전달합니다.

    지원 형식: prd_markdown, prd_pdf, plan_markdown, plan_pdf, complete
    """
    if kind not in DOWNLOADS:
        raise HTTPException(status_code=400, detail=f"지원하지 않는 형식입니다: {kind}")

    path = await get_project_state().download(project_id, kind)
    return FileResponse(path, filename=path.name)
