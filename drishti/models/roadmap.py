"""
로드맵(Roadmap) 데이터 모델입니다.
구현 계획을 phases → stages → checkpoints 트리로 표현합니다.
서버에 저장되지 않고 구현 계획 콘텐츠로부터 매번 유도됩니다.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class PlanShape(str, Enum):
    """구현 계획 콘텐츠의 형태 (태그드 유니온의 태그)."""

    PHASES = "phases"                          # 이미 로드맵 구조
    DEVELOPMENT_PHASES = "development_phases"  # 단계별 작업 목록 (구버전)
    UNRECOGNIZED = "unrecognized"              # 알 수 없는 형태


class Checkpoint(BaseModel):
    """사용자가 완료/미완료로 토글할 수 있는 최소 작업 단위."""

    id: str = Field(..., description="프로젝트 ID로 네임스페이스된 전역 고유 ID")
    title: str
    description: str = ""
    code: Optional[str] = None     # 코드/의존성 메모
    testing: Optional[str] = None  # 테스트/예상 공수 메모


class Stage(BaseModel):
    """단계(Phase) 안의 세부 스테이지."""

    id: str
    title: str
    checkpoints: list[Checkpoint] = Field(default_factory=list)


class Phase(BaseModel):
    """로드맵 최상위 단계."""

    id: str
    title: str
    description: str = ""
    stages: list[Stage] = Field(default_factory=list)

    def checkpoint_ids(self) -> list[str]:
        """이 단계에 속한 체크포인트 ID 목록 (원본 순서)."""
        return [c.id for stage in self.stages for c in stage.checkpoints]


class Roadmap(BaseModel):
    """정규화된 로드맵. phases가 비어 있으면 'no roadmap parsed' 상태로 그립니다."""

    phases: list[Phase] = Field(default_factory=list)
    shape: PlanShape = PlanShape.UNRECOGNIZED

    @property
    def is_empty(self) -> bool:
        return not self.phases

    def checkpoint_ids(self) -> list[str]:
        return [cid for phase in self.phases for cid in phase.checkpoint_ids()]


class Progress(BaseModel):
    """체크포인트 진행률. total이 0이면 percent는 0입니다."""

    completed: int = 0
    total: int = 0
    percent: float = Field(default=0.0, ge=0.0, le=100.0)
