"""
프로젝트 상태 관리자입니다.
프로젝트 목록, 현재 선택된 프로젝트, AI 생성 진행 상태의 단일 진실 공급원(single source of truth)입니다.

상태 갱신 원칙:
1. 원격 호출이 실패하면 기존 목록/현재 프로젝트는 그대로 두고 error만 설정한 뒤 예외를 다시 던집니다.
2. 생성 엔드포인트는 새 하위 리소스만 반환하므로, 생성 후에는 항상 프로젝트 전체를 다시 조회합니다.
3. 같은 프로젝트가 목록과 현재 선택 양쪽에 있으면 두 곳을 함께 갱신합니다.
4. 호출 시점의 프로젝트 ID를 기억해 두고, 응답이 도착했을 때 선택이 바뀌었으면 결과를 버립니다.
"""

import logging
from types import MappingProxyType
from typing import Mapping, Optional

from drishti.exceptions import PreconditionError, RemoteServiceError
from drishti.layers.layer1_normalization import decode_record_content
from drishti.models import GenerationStatus, Project
from .api_client import ApiClient, get_api_client

logger = logging.getLogger(__name__)


def hydrate_project(project: Project) -> Project:
    """PRD/구현 계획 content를 디코딩한 사본을 만듭니다. 디코딩할 수 없는 레코드는 없는 것으로 취급."""
    return project.model_copy(update={
        "prd": decode_record_content(project.prd),
        "implementation_plan": decode_record_content(project.implementation_plan),
    })


class ProjectStateManager:
    """
    프로젝트 목록과 현재 프로젝트, 생성 작업을 조율하는 클래스입니다.

    생성 진행 상태는 프로젝트 ID별로 관리되므로 화면은 프로젝트마다 스피너를 따로 보여줄 수 있습니다.
    같은 프로젝트에 대한 동시 생성 호출은 막지 않습니다 (호출자가 피해야 할 사용법).
    """

    def __init__(self, api_client: Optional[ApiClient] = None):
        self.api = api_client or get_api_client()
        self._projects: list[Project] = []
        self._current: Optional[Project] = None
        self._pending_selection: Optional[str] = None
        self._generation: dict[str, GenerationStatus] = {}
        self._loading = 0
        self.error: Optional[str] = None

    # ==================== 읽기 전용 상태 ====================

    @property
    def projects(self) -> list[Project]:
        """최신순 프로젝트 목록 (사본)."""
        return list(self._projects)

    @property
    def current_project(self) -> Optional[Project]:
        return self._current

    @property
    def is_loading(self) -> bool:
        return self._loading > 0

    @property
    def generation_state(self) -> Mapping[str, GenerationStatus]:
        return MappingProxyType(self._generation)

    def is_generating(self, project_id: Optional[str]) -> bool:
        if project_id is None:
            return False
        return self._generation.get(project_id) == GenerationStatus.GENERATING

    def get_project(self, project_id: str) -> Optional[Project]:
        """메모리에 있는 프로젝트를 찾습니다 (현재 프로젝트 우선)."""
        if self._current and self._current.id == project_id:
            return self._current
        return next((p for p in self._projects if p.id == project_id), None)

    # ==================== 선택 / 알림 ====================

    def select_project(self, project: Optional[Project]) -> None:
        """현재 프로젝트를 직접 지정합니다 (None이면 선택 해제)."""
        self._current = hydrate_project(project) if project else None
        self._pending_selection = project.id if project else None

    def clear_error(self) -> None:
        """알림을 닫습니다."""
        self.error = None

    # ==================== 프로젝트 CRUD ====================

    async def fetch_projects(self, page: int = 1) -> list[Project]:
        """목록을 서버 결과로 교체합니다. 실패하면 이전 목록을 유지합니다."""
        self.error = None
        self._loading += 1
        try:
            result = await self.api.list_projects(page=page)
        except RemoteServiceError as e:
            self._fail(e, "Failed to fetch projects")
            raise
        finally:
            self._loading -= 1

        self._projects = [hydrate_project(p) for p in result.projects]
        logger.info(f"[ProjectState] 프로젝트 {len(self._projects)}개 로드")
        return self.projects

    async def fetch_project(self, project_id: str) -> Optional[Project]:
        """
        프로젝트 하나를 조회하여 현재 프로젝트로 설정합니다.
        응답 도착 전에 다른 프로젝트가 선택되었으면 결과를 버리고 None을 반환합니다.
        """
        self.error = None
        self._pending_selection = project_id
        self._loading += 1
        try:
            project = await self.api.get_project(project_id)
        except RemoteServiceError as e:
            self._fail(e, "Failed to fetch project")
            raise
        finally:
            self._loading -= 1

        if self._pending_selection != project_id:
            logger.info(f"[ProjectState] {project_id}: 선택이 바뀌어 오래된 응답을 버립니다")
            return None

        project = hydrate_project(project)
        self._current = project
        self._replace_in_list(project)
        return project

    async def create_project(self, title: str, idea: str) -> Project:
        """프로젝트를 만들어 목록 맨 앞에 넣고 현재 프로젝트로 설정합니다."""
        self.error = None
        self._loading += 1
        try:
            project = await self.api.create_project(title, idea)
        except RemoteServiceError as e:
            self._fail(e, "Failed to create project")
            raise
        finally:
            self._loading -= 1

        project = hydrate_project(project)
        self._projects.insert(0, project)
        self._current = project
        self._pending_selection = project.id
        logger.info(f"[ProjectState] 프로젝트 생성: {project.id} ({project.title})")
        return project

    async def update_project(self, project_id: str, title: str, idea: str) -> Project:
        """수정 내용을 저장하고 목록/현재 프로젝트 양쪽에 반영합니다."""
        self.error = None
        self._loading += 1
        try:
            project = await self.api.update_project(project_id, title, idea)
        except RemoteServiceError as e:
            self._fail(e, "Failed to update project")
            raise
        finally:
            self._loading -= 1

        project = hydrate_project(project)
        self._merge(project)
        return project

    async def delete_project(self, project_id: str) -> None:
        """서버와 목록에서 삭제합니다. 현재 프로젝트였다면 선택을 해제합니다."""
        self.error = None
        self._loading += 1
        try:
            await self.api.delete_project(project_id)
        except RemoteServiceError as e:
            self._fail(e, "Failed to delete project")
            raise
        finally:
            self._loading -= 1

        self._projects = [p for p in self._projects if p.id != project_id]
        if self._current and self._current.id == project_id:
            self._current = None
            self._pending_selection = None
        self._generation.pop(project_id, None)
        logger.info(f"[ProjectState] 프로젝트 삭제: {project_id}")

    # ==================== AI 생성 ====================

    async def generate_prd(self, project_id: str) -> Project:
        """PRD를 생성한 뒤 프로젝트 전체를 다시 조회해 반영합니다."""
        return await self._generate(
            project_id,
            self.api.generate_prd,
            "PRD",
            "Failed to generate PRD",
        )

    async def generate_implementation_plan(self, project_id: str) -> Project:
        """
        구현 계획을 생성합니다. 대상 프로젝트에 PRD가 있어야 합니다.

        Raises:
            PreconditionError: PRD가 없을 때 (네트워크 호출 없음)
        """
        project = self.get_project(project_id)
        if project is None or not project.has_prd:
            raise PreconditionError(
                "PRD가 있어야 구현 계획을 생성할 수 있습니다",
                details={"project_id": project_id},
            )

        return await self._generate(
            project_id,
            self.api.generate_implementation_plan,
            "구현 계획",
            "Failed to generate implementation plan",
        )

    # ==================== 내보내기 ====================

    async def download(self, project_id: str, kind: str):
        """서버가 만든 내보내기 파일을 저장하고 경로를 반환합니다."""
        self.error = None
        try:
            return await self.api.download(project_id, kind)
        except RemoteServiceError as e:
            self._fail(e, "Failed to download file")
            raise

    async def download_prd_markdown(self, project_id: str):
        return await self.download(project_id, "prd_markdown")

    async def download_prd_pdf(self, project_id: str):
        return await self.download(project_id, "prd_pdf")

    async def download_plan_markdown(self, project_id: str):
        return await self.download(project_id, "plan_markdown")

    async def download_plan_pdf(self, project_id: str):
        return await self.download(project_id, "plan_pdf")

    async def download_complete_project(self, project_id: str):
        return await self.download(project_id, "complete")

    # ==================== 내부 도우미 함수들 ====================

    async def _generate(self, project_id: str, call, label: str, fallback: str) -> Project:
        self.error = None
        self._generation[project_id] = GenerationStatus.GENERATING
        logger.info(f"[ProjectState] {project_id}: {label} 생성 시작")
        try:
            ack = await call(project_id)
            logger.info(f"[ProjectState] {project_id}: {label} 생성 확인 (v{ack.version})")
            # 생성 응답은 하위 리소스뿐이므로 권위 있는 상태를 다시 조회
            project = hydrate_project(await self.api.get_project(project_id))
        except RemoteServiceError as e:
            self._fail(e, fallback)
            raise
        finally:
            # 생성 중 삭제된 프로젝트는 항목을 다시 만들지 않음
            if project_id in self._generation:
                self._generation[project_id] = GenerationStatus.IDLE

        self._merge(project)
        logger.info(f"[ProjectState] {project_id}: {label} 반영 완료 (status={project.status.value})")
        return project

    def _merge(self, project: Project) -> None:
        self._replace_in_list(project)
        if self._current and self._current.id == project.id:
            self._current = project

    def _replace_in_list(self, project: Project) -> None:
        self._projects = [project if p.id == project.id else p for p in self._projects]

    def _fail(self, error: RemoteServiceError, fallback: str) -> None:
        self.error = error.message or fallback
        logger.error(f"[ProjectState] {fallback}: {error.message}")


_project_state: Optional[ProjectStateManager] = None


def get_project_state() -> ProjectStateManager:
    """ProjectStateManager 싱글톤을 반환합니다."""
    global _project_state
    if _project_state is None:
        _project_state = ProjectStateManager()
    return _project_state
