"""Multi-city research workspaces on a 12-column grid."""

from .models import Workspace, WorkspaceWidget
from .store import DEFAULT_WORKSPACE_WIDGET, WorkspaceStore

__all__ = ["DEFAULT_WORKSPACE_WIDGET", "Workspace", "WorkspaceStore", "WorkspaceWidget"]
