"""API endpoints package."""

from . import health
from . import projects
from . import workspace

__all__ = ["health", "projects", "workspace"]
