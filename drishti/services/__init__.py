"""Services for the Drishti workspace."""

from .api_client import ApiClient, get_api_client, close_api_client
from .local_store import LocalStore, get_local_store
from .checkpoint_store import CheckpointStore, get_checkpoint_store
from .project_state import ProjectStateManager, get_project_state, hydrate_project
from .lifecycle import GenerationLifecycleController, get_lifecycle, derive_state

__all__ = [
    "ApiClient",
    "get_api_client",
    "close_api_client",
    "LocalStore",
    "get_local_store",
    "CheckpointStore",
    "get_checkpoint_store",
    "ProjectStateManager",
    "get_project_state",
    "hydrate_project",
    "GenerationLifecycleController",
    "get_lifecycle",
    "derive_state",
]
