"""위험 완화 전략 키워드 규칙표.

완화 전략이 비어 있는 위험 항목에 대해 위험 문구의 키워드로 전략을 합성합니다.
위에서부터 순서대로 평가하고 처음 일치한 규칙을 사용합니다 (대소문자 무시, 부분 문자열 일치).
"""

SCHEDULE_MITIGATION = (
    "Implement agile methodology with regular sprint reviews and buffer time for critical paths. "
    "Monitor progress daily and adjust resources proactively."
)
COST_MITIGATION = (
    "Establish detailed cost tracking system, implement phased spending approach, "
    "and maintain contingency fund of 15-20% for unforeseen expenses."
)
SCOPE_MITIGATION = (
    "Define clear scope boundaries, implement formal change request process, "
    "and conduct regular stakeholder alignment meetings."
)
TECHNICAL_MITIGATION = (
    "Conduct proof of concept early, maintain technical documentation, ensure team training, "
    "and establish technical review checkpoints."
)
STAFFING_MITIGATION = (
    "Cross-train team members, document key processes, maintain backup resources, "
    "and implement knowledge sharing sessions."
)
QA_MITIGATION = (
    "Implement comprehensive testing strategy, conduct regular code reviews, "
    "establish quality metrics, and allocate dedicated QA time."
)
DEFAULT_MITIGATION = (
    "Develop comprehensive risk response plan, assign risk owners, implement regular monitoring, "
    "and establish escalation procedures for early intervention."
)

# (키워드 목록, 완화 전략). 순서가 곧 우선순위
MITIGATION_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("timeline", "delay"), SCHEDULE_MITIGATION),
    (("budget", "cost"), COST_MITIGATION),
    (("scope", "requirement"), SCOPE_MITIGATION),
    (("technical", "technology"), TECHNICAL_MITIGATION),
    (("resource", "team"), STAFFING_MITIGATION),
    (("quality", "bug"), QA_MITIGATION),
)


def synthesize_mitigation(risk_text: str) -> str:
    """위험 문구에 맞는 완화 전략을 반환합니다. 일치하는 규칙이 없으면 기본 전략."""
    lowered = (risk_text or "").lower()
    for keywords, mitigation in MITIGATION_RULES:
        if any(keyword in lowered for keyword in keywords):
            return mitigation
    return DEFAULT_MITIGATION
