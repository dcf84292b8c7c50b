"""
워크스페이스 화면 상태 모델입니다.
생성 진행 플래그, 라이프사이클 상태, 렌더링용 뷰 모델을 정의합니다.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

from .prd import NormalizedPRD
from .project import Project, ProjectStatus
from .roadmap import Progress, Roadmap


class GenerationStatus(str, Enum):
    """프로젝트별 생성 진행 상태."""

    IDLE = "idle"              # 진행 중인 생성 없음
    GENERATING = "generating"  # 생성 호출 대기 중


class LifecycleState(str, Enum):
    """
    워크스페이스 화면 상태입니다.

    전이:
    - EMPTY → DRAFTING: 아이디어 입력
    - DRAFTING → GENERATING: 제출
    - GENERATING → PRD_READY: PRD 생성 성공
    - GENERATING → DRAFTING: 실패 (아이디어 텍스트 유지)
    - PRD_READY → GENERATING → PLAN_READY: 구현 계획 생성
    """

    EMPTY = "empty"
    DRAFTING = "drafting"
    GENERATING = "generating"
    PRD_READY = "prd_ready"
    PLAN_READY = "plan_ready"


class ProjectSummary(BaseModel):
    """사이드바/헤더용 프로젝트 요약."""

    id: str
    title: str
    status: ProjectStatus
    has_prd: bool = False
    has_plan: bool = False

    @classmethod
    def from_project(cls, project: Project) -> "ProjectSummary":
        return cls(
            id=project.id,
            title=project.title,
            status=project.status,
            has_prd=project.has_prd,
            has_plan=project.has_plan,
        )


class WorkspaceView(BaseModel):
    """
    렌더링 레이어가 읽는 화면 모델입니다.
    (현재 프로젝트, 생성 플래그, 아이디어 텍스트, 체크포인트 저장소)로부터 매번 다시 계산됩니다.
    """

    state: LifecycleState = LifecycleState.EMPTY
    project: Optional[ProjectSummary] = None
    idea: str = ""
    prd: Optional[NormalizedPRD] = None
    roadmap: Optional[Roadmap] = None
    progress: Progress = Field(default_factory=Progress)
    phase_progress: dict[str, Progress] = Field(default_factory=dict)
    completed_checkpoints: list[str] = Field(default_factory=list)
    notification: Optional[str] = None
