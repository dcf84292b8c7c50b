"""Layer 2: Implementation plan to roadmap transformation."""

from .transformer import (
    detect_plan_shape,
    build_roadmap,
    to_roadmap,
    namespace_id,
)

__all__ = [
    "detect_plan_shape",
    "build_roadmap",
    "to_roadmap",
    "namespace_id",
]
