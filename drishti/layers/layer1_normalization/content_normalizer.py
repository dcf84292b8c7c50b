"""Content normalizer for Layer 1.

Layer 1: 콘텐츠 정규화
AI 서비스가 돌려준 느슨한 JSON(PRD / 구현 계획)을 렌더링 안전한 구조로 변환합니다.

처리 원칙:
- 문자열 콘텐츠는 JSON으로 디코딩 (서비스가 과거에 두 형태를 모두 반환함)
- 디코딩 자체가 실패한 경우에만 ContentDecodeError 발생
- 구조가 틀린 필드(목록 자리에 문자열 등)는 예외 없이 기본값/빈 값으로 강등
- 렌더링 레이어에 None이 도달하지 않도록 모든 선택 필드에 기본값 적용
"""

import json
import logging
from typing import Any, Optional

from drishti.exceptions import ContentDecodeError
from drishti.models import (
    ContentRecord,
    Feature,
    FeaturePriority,
    FeaturesByPriority,
    NormalizedPRD,
    RiskItem,
    TargetAudience,
    TimelineEntry,
)
from drishti.models.prd import (
    NO_DESCRIPTION,
    NO_OVERVIEW,
    NOT_SPECIFIED,
    RISK_NOT_SPECIFIED,
    UNTITLED_FEATURE,
)
from .risk_rules import synthesize_mitigation

logger = logging.getLogger(__name__)


def parse_content(raw: Any) -> Any:
    """
    콘텐츠 값을 객체로 변환합니다.

    - 문자열: JSON 디코딩 (실패 시 ContentDecodeError)
    - None: 빈 객체
    - 그 외: 그대로 반환

    Raises:
        ContentDecodeError: 문자열이 유효한 JSON이 아닐 때
    """
    if raw is None:
        return {}

    if isinstance(raw, (str, bytes)):
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"[Normalizer] 콘텐츠 JSON 디코딩 실패: {e}")
            raise ContentDecodeError(
                "콘텐츠를 JSON으로 디코딩할 수 없습니다",
                details={"error": str(e), "preview": str(raw)[:200]},
            )

    return raw


def decode_record_content(record: Optional[ContentRecord]) -> Optional[ContentRecord]:
    """
    레코드의 content를 디코딩한 사본을 반환합니다.
    디코딩에 실패하면 레코드가 없는 것으로 취급하여 None을 반환합니다.
    """
    if record is None:
        return None

    try:
        content = parse_content(record.content)
    except ContentDecodeError:
        logger.warning(f"[Normalizer] 레코드 v{record.version} 콘텐츠를 버립니다 (디코딩 실패)")
        return None

    return record.model_copy(update={"content": content})


# ==================== PRD 정규화 ====================

def normalize_prd(parsed: Any) -> NormalizedPRD:
    """
    디코딩된 PRD 콘텐츠를 NormalizedPRD로 변환합니다.
    어떤 구조가 들어와도 예외를 발생시키지 않습니다.
    """
    data = parsed if isinstance(parsed, dict) else {}

    overview = _text(data.get("overview"), NO_OVERVIEW)
    objectives = _text_list(data.get("objectives"))
    technical_requirements = _text_list(data.get("technicalRequirements"))
    success_metrics = _text_list(data.get("successMetrics"))
    target_audience = _normalize_audience(data.get("targetAudience"))
    features = [
        _normalize_feature(entry)
        for entry in _list(data.get("features"))
        if isinstance(entry, dict)
    ]
    timeline = [
        _normalize_timeline_entry(entry)
        for entry in _list(data.get("timeline"))
        if isinstance(entry, dict)
    ]
    risks = [normalize_risk(entry) for entry in _list(data.get("risks"))]

    # 실제 내용이 있는 섹션만 내비게이션에 노출
    section_flags = [
        ("overview", overview != NO_OVERVIEW),
        ("objectives", bool(objectives)),
        ("audience", target_audience.primary != NOT_SPECIFIED
            or target_audience.secondary != NOT_SPECIFIED),
        ("features", bool(features)),
        ("technical", bool(technical_requirements)),
        ("timeline", bool(timeline)),
        ("metrics", bool(success_metrics)),
        ("risks", bool(risks)),
    ]

    return NormalizedPRD(
        overview=overview,
        objectives=objectives,
        target_audience=target_audience,
        features=features,
        features_by_priority=group_features_by_priority(features),
        technical_requirements=technical_requirements,
        timeline=timeline,
        success_metrics=success_metrics,
        risks=risks,
        available_sections=[name for name, present in section_flags if present],
    )


def classify_priority(value: Any) -> Optional[FeaturePriority]:
    """우선순위 문자열을 대소문자 구분 없이 분류. 알 수 없으면 None."""
    if not isinstance(value, str):
        return None
    try:
        return FeaturePriority(value.strip().lower())
    except ValueError:
        return None


def group_features_by_priority(features: list[Feature]) -> FeaturesByPriority:
    """기능을 high/medium/low 묶음으로 나눕니다. 우선순위 없는 기능은 제외."""
    groups = FeaturesByPriority()
    for feature in features:
        if feature.priority is None:
            continue
        getattr(groups, feature.priority.value).append(feature)
    return groups


def normalize_risk(entry: Any) -> RiskItem:
    """
    위험 항목을 {risk, mitigation}으로 정규화합니다.

    입력 형태:
    - 문자열: 위험 문구
    - 객체: {"risk": ..., "mitigation": ...} (mitigation 선택)

    완화 전략이 없으면 키워드 규칙표로 합성합니다.
    """
    if isinstance(entry, str):
        risk_text = entry.strip() or RISK_NOT_SPECIFIED
        mitigation = ""
    elif isinstance(entry, dict):
        risk_text = _text(entry.get("risk"), RISK_NOT_SPECIFIED)
        mitigation = _text(entry.get("mitigation"), "")
    else:
        risk_text = RISK_NOT_SPECIFIED
        mitigation = ""

    if not mitigation:
        mitigation = synthesize_mitigation(risk_text)

    return RiskItem(risk=risk_text, mitigation=mitigation)


# ==================== 내부 도우미 함수들 ====================

def _normalize_audience(value: Any) -> TargetAudience:
    data = value if isinstance(value, dict) else {}
    return TargetAudience(
        primary=_text(data.get("primary"), NOT_SPECIFIED),
        secondary=_text(data.get("secondary"), NOT_SPECIFIED),
    )


def _normalize_feature(entry: dict) -> Feature:
    return Feature(
        name=_text(entry.get("name"), UNTITLED_FEATURE),
        description=_text(entry.get("description"), NO_DESCRIPTION),
        priority=classify_priority(entry.get("priority")),
    )


def _normalize_timeline_entry(entry: dict) -> TimelineEntry:
    return TimelineEntry(
        phase=_text(entry.get("phase"), NOT_SPECIFIED),
        duration=_text(entry.get("duration"), NOT_SPECIFIED),
        deliverables=_text_list(entry.get("deliverables")),
    )


def _list(value: Any) -> list:
    """목록이 아니면 빈 목록."""
    return value if isinstance(value, list) else []


def _text(value: Any, default: str) -> str:
    """비어 있지 않은 문자열이면 그대로, 숫자는 문자열로, 나머지는 기본값."""
    if isinstance(value, str):
        return value if value.strip() else default
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return default


def _text_list(value: Any) -> list[str]:
    """텍스트 목록으로 정리. 텍스트로 바꿀 수 없는 항목은 버립니다."""
    items = []
    for item in _list(value):
        text = _text(item, "")
        if text:
            items.append(text)
    return items
