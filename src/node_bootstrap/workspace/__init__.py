"""Workspace exports."""

from .workspace_layout import MANAGED_FILENAMES, WorkspaceError, WorkspaceLayout, prepare_workspace

__all__ = ["MANAGED_FILENAMES", "WorkspaceError", "WorkspaceLayout", "prepare_workspace"]
