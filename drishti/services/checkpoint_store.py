"""
체크포인트 완료 상태 저장소입니다.
서버와 무관하게 프로젝트별 완료된 체크포인트 ID 집합을 로컬에 영구 저장합니다.

저장 형식:
- 키: checkpoints_<projectId>
- 값: 체크포인트 ID 문자열의 JSON 배열
"""

import json
import logging
from typing import Iterable, Optional

from drishti.models import Phase, Progress, Roadmap
from .local_store import LocalStore, get_local_store

logger = logging.getLogger(__name__)

KEY_PREFIX = "checkpoints_"


def storage_key(project_id: str) -> str:
    return f"{KEY_PREFIX}{project_id}"


def _progress_for(checkpoint_ids: Iterable[str], completed: set[str]) -> Progress:
    distinct = set(checkpoint_ids)
    total = len(distinct)
    done = len(distinct & completed)
    percent = (done / total) * 100 if total else 0.0
    return Progress(completed=done, total=total, percent=percent)


def progress(roadmap: Roadmap, completed: set[str]) -> Progress:
    """로드맵 전체 진행률. 로드맵에 없는 ID는 세지 않습니다."""
    return _progress_for(roadmap.checkpoint_ids(), completed)


def phase_progress(phase: Phase, completed: set[str]) -> Progress:
    """단계 하나의 진행률."""
    return _progress_for(phase.checkpoint_ids(), completed)


class CheckpointStore:
    """프로젝트별 체크포인트 완료 집합을 관리하는 클래스입니다."""

    def __init__(self, store: Optional[LocalStore] = None):
        self.store = store or get_local_store()

    def load(self, project_id: str) -> set[str]:
        """
        저장된 완료 집합을 읽습니다.
        저장된 값이 없거나 손상되었으면 빈 집합을 반환합니다 (에러 아님).
        """
        raw = self.store.get_item(storage_key(project_id))
        if raw is None:
            return set()

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"[Checkpoint] {project_id}: 손상된 완료 데이터, 빈 집합으로 처리")
            return set()

        if not isinstance(data, list):
            logger.warning(f"[Checkpoint] {project_id}: 배열이 아닌 완료 데이터, 빈 집합으로 처리")
            return set()

        return {item for item in data if isinstance(item, str)}

    def toggle(self, project_id: str, checkpoint_id: str) -> set[str]:
        """
        체크포인트 완료 여부를 뒤집고 즉시 저장합니다.
        반환값이 새로운 권위 있는 상태입니다.
        """
        completed = self.load(project_id)
        if checkpoint_id in completed:
            completed.discard(checkpoint_id)
        else:
            completed.add(checkpoint_id)

        self.store.set_item(storage_key(project_id), json.dumps(sorted(completed)))
        logger.debug(f"[Checkpoint] {project_id}: {checkpoint_id} 토글 → {len(completed)}개 완료")
        return completed

    def progress(self, roadmap: Roadmap, completed: set[str]) -> Progress:
        return progress(roadmap, completed)

    def phase_progress(self, phase: Phase, completed: set[str]) -> Progress:
        return phase_progress(phase, completed)


_checkpoint_store: Optional[CheckpointStore] = None


def get_checkpoint_store() -> CheckpointStore:
    """CheckpointStore 싱글톤을 반환합니다."""
    global _checkpoint_store
    if _checkpoint_store is None:
        _checkpoint_store = CheckpointStore()
    return _checkpoint_store
