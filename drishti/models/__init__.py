"""Data models for the Drishti workspace."""

from .project import (
    ProjectStatus,
    ContentRecord,
    Project,
    Pagination,
    ProjectsPage,
    GenerationAck,
)
from .prd import (
    FeaturePriority,
    TargetAudience,
    Feature,
    FeaturesByPriority,
    TimelineEntry,
    RiskItem,
    NormalizedPRD,
)
from .roadmap import (
    PlanShape,
    Checkpoint,
    Stage,
    Phase,
    Roadmap,
    Progress,
)
from .workspace import (
    GenerationStatus,
    LifecycleState,
    ProjectSummary,
    WorkspaceView,
)

__all__ = [
    # Project models
    "ProjectStatus",
    "ContentRecord",
    "Project",
    "Pagination",
    "ProjectsPage",
    "GenerationAck",
    # PRD models
    "FeaturePriority",
    "TargetAudience",
    "Feature",
    "FeaturesByPriority",
    "TimelineEntry",
    "RiskItem",
    "NormalizedPRD",
    # Roadmap models
    "PlanShape",
    "Checkpoint",
    "Stage",
    "Phase",
    "Roadmap",
    "Progress",
    # Workspace models
    "GenerationStatus",
    "LifecycleState",
    "ProjectSummary",
    "WorkspaceView",
]
