"""Layer 1: Content normalization."""

from .content_normalizer import (
    parse_content,
    decode_record_content,
    normalize_prd,
    normalize_risk,
    classify_priority,
    group_features_by_priority,
)
from .risk_rules import MITIGATION_RULES, DEFAULT_MITIGATION, synthesize_mitigation

__all__ = [
    "parse_content",
    "decode_record_content",
    "normalize_prd",
    "normalize_risk",
    "classify_priority",
    "group_features_by_priority",
    "MITIGATION_RULES",
    "DEFAULT_MITIGATION",
    "synthesize_mitigation",
]
