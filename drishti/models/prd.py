"""
정규화된 PRD (제품 요구사항 정의서) 데이터 모델입니다.
렌더링 레이어가 None 검사 없이 바로 그릴 수 있도록 모든 필드가 기본값을 가집니다.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


NOT_SPECIFIED = "Not specified"
NO_OVERVIEW = "No overview available"
NO_DESCRIPTION = "No description available"
UNTITLED_FEATURE = "Untitled feature"
RISK_NOT_SPECIFIED = "Risk not specified"


class FeaturePriority(str, Enum):
    """기능 우선순위입니다."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TargetAudience(BaseModel):
    """대상 사용자 (주/보조)."""

    primary: str = NOT_SPECIFIED
    secondary: str = NOT_SPECIFIED


class Feature(BaseModel):
    """핵심 기능 항목. 우선순위를 알 수 없으면 priority는 None입니다."""

    name: str = UNTITLED_FEATURE
    description: str = NO_DESCRIPTION
    priority: Optional[FeaturePriority] = None


class FeaturesByPriority(BaseModel):
    """우선순위별 기능 묶음. 우선순위가 없는 기능은 어느 묶음에도 들어가지 않습니다."""

    high: list[Feature] = Field(default_factory=list)
    medium: list[Feature] = Field(default_factory=list)
    low: list[Feature] = Field(default_factory=list)


class TimelineEntry(BaseModel):
    """프로젝트 일정의 한 단계."""

    phase: str = NOT_SPECIFIED
    duration: str = NOT_SPECIFIED
    deliverables: list[str] = Field(default_factory=list)


class RiskItem(BaseModel):
    """위험 요소와 완화 전략."""

    risk: str = RISK_NOT_SPECIFIED
    mitigation: str = ""


class NormalizedPRD(BaseModel):
    """
    렌더링 안전한 PRD입니다.

    available_sections는 실제 내용이 있는 섹션 ID 목록이며
    (overview, objectives, audience, features, technical, timeline, metrics, risks 순서)
    섹션 내비게이션을 그릴 때 사용합니다.
    """

    overview: str = NO_OVERVIEW
    objectives: list[str] = Field(default_factory=list)
    target_audience: TargetAudience = Field(default_factory=TargetAudience)
    features: list[Feature] = Field(default_factory=list)
    features_by_priority: FeaturesByPriority = Field(default_factory=FeaturesByPriority)
    technical_requirements: list[str] = Field(default_factory=list)
    timeline: list[TimelineEntry] = Field(default_factory=list)
    success_metrics: list[str] = Field(default_factory=list)
    risks: list[RiskItem] = Field(default_factory=list)
    available_sections: list[str] = Field(default_factory=list)
