"""
워크스페이스 생성 라이프사이클 컨트롤러입니다.

아이디어 입력 → PRD 생성 → 구현 계획 생성 흐름을 진행하고,
렌더링 레이어가 읽을 WorkspaceView를 매번 새로 계산합니다.

상태 전이:
    EMPTY ──아이디어 입력──▶ DRAFTING ──제출──▶ GENERATING ──성공──▶ PRD_READY
                                 ▲                  │
                                 └──────실패────────┘
    PRD_READY ──계획 생성──▶ GENERATING ──성공──▶ PLAN_READY
"""

import logging
from typing import Optional

from drishti.exceptions import PreconditionError
from drishti.layers.layer1_normalization import normalize_prd
from drishti.layers.layer2_roadmap import to_roadmap
from drishti.models import LifecycleState, Project, ProjectSummary, WorkspaceView
from .checkpoint_store import CheckpointStore, get_checkpoint_store
from .project_state import ProjectStateManager, get_project_state

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 50


def derive_state(project: Optional[Project], generating: bool, idea_text: str) -> LifecycleState:
    """(현재 프로젝트, 생성 플래그, 아이디어 텍스트)로부터 화면 상태를 계산합니다."""
    if generating:
        return LifecycleState.GENERATING
    if project is not None and project.has_plan:
        return LifecycleState.PLAN_READY
    if project is not None and project.has_prd:
        return LifecycleState.PRD_READY
    if idea_text and idea_text.strip():
        return LifecycleState.DRAFTING
    return LifecycleState.EMPTY


def make_title(idea: str) -> str:
    """아이디어 앞부분으로 프로젝트 제목을 만듭니다."""
    if len(idea) > TITLE_MAX_LENGTH:
        return idea[:TITLE_MAX_LENGTH] + "..."
    return idea


class GenerationLifecycleController:
    """
    워크스페이스 화면의 흐름을 조율하는 클래스입니다.

    실패 시에는 ProjectStateManager가 알림(error)을 설정하고 예외를 다시 던지며,
    아이디어 텍스트는 그대로 남아 있으므로 view()는 이전의 안정 상태로 돌아갑니다.
    """

    def __init__(
        self,
        project_state: Optional[ProjectStateManager] = None,
        checkpoint_store: Optional[CheckpointStore] = None,
    ):
        self.projects = project_state or get_project_state()
        self.checkpoints = checkpoint_store or get_checkpoint_store()
        self.idea = ""

    # ==================== 입력 / 선택 ====================

    def set_idea(self, text: str) -> WorkspaceView:
        self.idea = text or ""
        return self.view()

    def new_project(self) -> WorkspaceView:
        """선택을 해제하고 빈 워크스페이스로 돌아갑니다."""
        self.projects.select_project(None)
        self.projects.clear_error()
        self.idea = ""
        return self.view()

    async def select_project(self, project_id: str) -> WorkspaceView:
        """프로젝트를 불러와 현재 프로젝트로 만들고 그 아이디어 텍스트를 입력란에 채웁니다."""
        project = await self.projects.fetch_project(project_id)
        if project is not None:
            self.idea = project.idea
        return self.view()

    def dismiss_notification(self) -> WorkspaceView:
        self.projects.clear_error()
        return self.view()

    # ==================== 생성 ====================

    async def submit(self) -> WorkspaceView:
        """
        아이디어를 제출하여 PRD를 생성합니다.

        - 선택된 프로젝트가 없으면 새로 만듭니다 (제목: 아이디어 앞 50자)
        - 아이디어 텍스트가 저장된 것과 다르면 먼저 저장합니다
        """
        idea = self.idea.strip()
        if not idea:
            raise PreconditionError("아이디어를 입력해야 PRD를 생성할 수 있습니다")

        current = self.projects.current_project
        if current is not None and self.projects.is_generating(current.id):
            raise PreconditionError(
                "이미 생성이 진행 중입니다",
                details={"project_id": current.id},
            )

        if current is None:
            current = await self.projects.create_project(make_title(idea), idea)
        elif idea != current.idea:
            current = await self.projects.update_project(current.id, current.title, idea)

        logger.info(f"[Lifecycle] {current.id}: PRD 생성 제출")
        await self.projects.generate_prd(current.id)
        return self.view()

    async def generate_plan(self) -> WorkspaceView:
        """현재 프로젝트의 구현 계획을 생성합니다. PRD가 없으면 PreconditionError."""
        current = self._require_current()
        if self.projects.is_generating(current.id):
            raise PreconditionError(
                "이미 생성이 진행 중입니다",
                details={"project_id": current.id},
            )

        logger.info(f"[Lifecycle] {current.id}: 구현 계획 생성 제출")
        await self.projects.generate_implementation_plan(current.id)
        return self.view()

    def toggle_checkpoint(self, checkpoint_id: str) -> WorkspaceView:
        current = self._require_current()
        self.checkpoints.toggle(current.id, checkpoint_id)
        return self.view()

    # ==================== 화면 모델 ====================

    def view(self) -> WorkspaceView:
        """현재 상태로부터 화면 모델을 새로 계산합니다. 이전 프로젝트의 값은 남지 않습니다."""
        project = self.projects.current_project
        generating = self.projects.is_generating(project.id if project else None)

        view = WorkspaceView(
            state=derive_state(project, generating, self.idea),
            idea=self.idea,
            notification=self.projects.error,
        )
        if project is None:
            return view

        view.project = ProjectSummary.from_project(project)
        if project.has_prd:
            view.prd = normalize_prd(project.prd.content)

        if project.has_plan:
            roadmap = to_roadmap(project.implementation_plan.content, project.id)
            completed = self.checkpoints.load(project.id)
            view.roadmap = roadmap
            view.progress = self.checkpoints.progress(roadmap, completed)
            view.phase_progress = {
                phase.id: self.checkpoints.phase_progress(phase, completed)
                for phase in roadmap.phases
            }
            view.completed_checkpoints = sorted(completed & set(roadmap.checkpoint_ids()))

        return view

    def _require_current(self) -> Project:
        current = self.projects.current_project
        if current is None:
            raise PreconditionError("선택된 프로젝트가 없습니다")
        return current


_lifecycle: Optional[GenerationLifecycleController] = None


def get_lifecycle() -> GenerationLifecycleController:
    """GenerationLifecycleController 싱글톤을 반환합니다."""
    global _lifecycle
    if _lifecycle is None:
        _lifecycle = GenerationLifecycleController()
    return _lifecycle
