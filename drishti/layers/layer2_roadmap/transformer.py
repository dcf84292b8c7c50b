"""Roadmap transformer for Layer 2.

Layer 2: 로드맵 변환
두 가지 역사적 구현 계획 형태를 하나의 phases → stages → checkpoints 트리로 맞춥니다.

지원 형태:
```json
// 1) phases: 이미 로드맵 구조
{"phases": [{"id": "p1", "title": "...", "description": "...",
             "stages": [{"id": "s1", "title": "...",
                         "checkpoints": [{"id": "c1", "title": "...", "description": "...",
                                          "code": "...", "testing": "..."}]}]}]}

// 2) developmentPhases: 단계별 작업 목록
{"developmentPhases": [{"phase": "Setup", "duration": "1 week",
                        "tasks": [{"task": "Init repo", "description": "...",
                                   "dependencies": ["..."], "estimatedHours": 4}]}]}
```

ID 규칙:
- 모든 ID는 프로젝트 ID로 네임스페이스 (서로 다른 프로젝트의 "checkpoint 1" 충돌 방지)
- 원본 배열 순서를 그대로 유지 (정렬/재배치 없음)
"""

import logging
from typing import Any

from drishti.exceptions import ContentDecodeError, TransformUnrecognizedShapeError
from drishti.layers.layer1_normalization import parse_content
from drishti.models import Checkpoint, Phase, PlanShape, Roadmap, Stage

logger = logging.getLogger(__name__)

DEVELOPMENT_STAGE_TITLE = "Development Tasks"


def detect_plan_shape(content: Any) -> PlanShape:
    """어떤 키가 존재하는지 보고 구현 계획 형태를 판별합니다."""
    if not isinstance(content, dict):
        return PlanShape.UNRECOGNIZED
    if isinstance(content.get("phases"), list):
        return PlanShape.PHASES
    if isinstance(content.get("developmentPhases"), list):
        return PlanShape.DEVELOPMENT_PHASES
    return PlanShape.UNRECOGNIZED


def build_roadmap(content: Any, project_id: str) -> Roadmap:
    """
    형태별 매퍼로 디스패치합니다.

    Raises:
        TransformUnrecognizedShapeError: 알려진 형태가 아닐 때
    """
    shape = detect_plan_shape(content)

    if shape == PlanShape.PHASES:
        phases = _map_phases(content["phases"], project_id)
    elif shape == PlanShape.DEVELOPMENT_PHASES:
        phases = _map_development_phases(content["developmentPhases"], project_id)
    else:
        keys = sorted(content.keys()) if isinstance(content, dict) else []
        raise TransformUnrecognizedShapeError(
            "구현 계획 형태를 인식할 수 없습니다",
            details={"project_id": project_id, "keys": keys},
        )

    return Roadmap(phases=phases, shape=shape)


def to_roadmap(content: Any, project_id: str) -> Roadmap:
    """
    구현 계획 콘텐츠를 로드맵으로 변환합니다. 절대 예외를 발생시키지 않습니다.
    인식할 수 없거나 디코딩할 수 없는 콘텐츠는 빈 로드맵이 됩니다.
    """
    try:
        return build_roadmap(parse_content(content), project_id)
    except (ContentDecodeError, TransformUnrecognizedShapeError) as e:
        logger.warning(f"[Roadmap] {project_id}: 빈 로드맵으로 대체 ({e.error_code}: {e.message})")
        return Roadmap(phases=[], shape=PlanShape.UNRECOGNIZED)


def namespace_id(project_id: str, raw_id: str) -> str:
    """프로젝트 ID를 접두사로 붙입니다. 이미 붙어 있으면 그대로 둡니다."""
    prefix = f"{project_id}-"
    if raw_id.startswith(prefix):
        return raw_id
    return prefix + raw_id


# ==================== phases 형태 ====================

def _map_phases(raw_phases: list, project_id: str) -> list[Phase]:
    phases = []
    for i, raw_phase in enumerate(raw_phases, 1):
        data = raw_phase if isinstance(raw_phase, dict) else {}
        local_phase_id = _raw_id(data.get("id"), f"phase-{i}")

        stages = []
        for j, raw_stage in enumerate(_list(data.get("stages")), 1):
            stage_data = raw_stage if isinstance(raw_stage, dict) else {}
            local_stage_id = _raw_id(stage_data.get("id"), f"phase-{i}-stage-{j}")

            checkpoints = []
            for k, raw_checkpoint in enumerate(_list(stage_data.get("checkpoints")), 1):
                cp = raw_checkpoint if isinstance(raw_checkpoint, dict) else {}
                local_cp_id = _raw_id(cp.get("id"), f"phase-{i}-stage-{j}-checkpoint-{k}")
                checkpoints.append(Checkpoint(
                    id=namespace_id(project_id, local_cp_id),
                    title=_str(cp.get("title")) or f"Checkpoint {k}",
                    description=_str(cp.get("description")),
                    code=_str(cp.get("code")) or None,
                    testing=_str(cp.get("testing")) or None,
                ))

            stages.append(Stage(
                id=namespace_id(project_id, local_stage_id),
                title=_str(stage_data.get("title")) or f"Stage {j}",
                checkpoints=checkpoints,
            ))

        phases.append(Phase(
            id=namespace_id(project_id, local_phase_id),
            title=_str(data.get("title")) or f"Phase {i}",
            description=_str(data.get("description")),
            stages=stages,
        ))
    return phases


# ==================== developmentPhases 형태 ====================

def _map_development_phases(raw_phases: list, project_id: str) -> list[Phase]:
    phases = []
    for i, raw_phase in enumerate(raw_phases, 1):
        data = raw_phase if isinstance(raw_phase, dict) else {}
        phase_id = f"{project_id}-phase-{i}"
        duration = _str(data.get("duration"))

        checkpoints = []
        for k, raw_task in enumerate(_list(data.get("tasks")), 1):
            if isinstance(raw_task, str):
                raw_task = {"task": raw_task}
            task = raw_task if isinstance(raw_task, dict) else {}
            checkpoints.append(Checkpoint(
                id=f"{phase_id}-checkpoint-{k}",
                title=_str(task.get("task")) or f"Task {k}",
                description=_str(task.get("description")),
                code=_dependencies_note(task.get("dependencies")),
                testing=_estimate_note(task.get("estimatedHours")),
            ))

        phases.append(Phase(
            id=phase_id,
            title=_str(data.get("phase")) or f"Phase {i}",
            description=f"Duration: {duration}" if duration else "",
            stages=[Stage(
                id=f"{phase_id}-stage-1",
                title=DEVELOPMENT_STAGE_TITLE,
                checkpoints=checkpoints,
            )],
        ))
    return phases


def _dependencies_note(value: Any):
    """의존성이 있을 때만 "Dependencies: a, b"."""
    if isinstance(value, str):
        value = [value]
    names = [_str(dep) for dep in _list(value)]
    names = [name for name in names if name]
    if not names:
        return None
    return "Dependencies: " + ", ".join(names)


def _estimate_note(value: Any):
    """예상 공수가 있을 때만 "Estimated: N"."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    if not text:
        return None
    return f"Estimated: {text}"


# ==================== 내부 도우미 함수들 ====================

def _list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _str(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _raw_id(value: Any, fallback: str) -> str:
    return _str(value) or fallback
