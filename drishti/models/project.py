"""
프로젝트(Project) 데이터 모델입니다.
외부 REST 서비스가 주고받는 프로젝트 리소스의 구조를 정의합니다.

서비스는 camelCase 필드명(`_id`, `implementationPlan`, `createdAt` 등)을 사용하므로
alias로 매핑하고, 파이썬 이름으로도 생성할 수 있도록 populate_by_name을 켭니다.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field


class ProjectStatus(str, Enum):
    """
    프로젝트 진행 상태입니다.
    PRD/계획이 생성될수록 앞으로만 진행합니다 (되돌아가는 전이는 없음).
    """

    DRAFT = "draft"                    # 아이디어만 있음
    PRD_GENERATED = "prd_generated"    # PRD 생성 완료
    PLAN_GENERATED = "plan_generated"  # 구현 계획 생성 완료
    COMPLETED = "completed"            # 완료


class ContentRecord(BaseModel):
    """
    AI가 생성한 하위 리소스(PRD 또는 구현 계획)입니다.
    content는 이미 구조화된 객체이거나 JSON 문자열일 수 있습니다.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    version: int = 1
    content: Any = None
    generated_at: Optional[datetime] = Field(default=None, alias="generatedAt")


class Project(BaseModel):
    """사용자 한 명이 소유하는 프로젝트입니다. 소유권 검사는 외부 서비스가 담당합니다."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., alias="_id", description="불투명 프로젝트 ID")
    title: str = ""
    idea: str = ""
    status: ProjectStatus = ProjectStatus.DRAFT
    owner: Optional[str] = None
    prd: Optional[ContentRecord] = None
    implementation_plan: Optional[ContentRecord] = Field(default=None, alias="implementationPlan")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    @property
    def has_prd(self) -> bool:
        return self.prd is not None

    @property
    def has_plan(self) -> bool:
        return self.implementation_plan is not None


class Pagination(BaseModel):
    """목록 조회 페이지 정보."""

    current: int = 1
    pages: int = 1
    total: int = 0


class ProjectsPage(BaseModel):
    """GET /projects 응답."""

    projects: list[Project] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination)


class GenerationAck(BaseModel):
    """
    생성 엔드포인트의 응답입니다.
    새 하위 리소스만 담고 있으므로 상태 갱신에는 쓰지 않고,
    권위 있는 프로젝트 상태는 항상 이후의 GET으로 얻습니다.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    message: str = ""
    version: Optional[int] = None
    generated_at: Optional[datetime] = Field(default=None, alias="generatedAt")
