"""Blame-related exceptions: git access, per-file blame failures, workspace calls."""

from pathlib import Path
from typing import Optional

from .base import BlamekitError


class BlameError(BlamekitError):
    """Raised when git cannot blame a single file at the reference commit.

    Always non-fatal for a batch: the executor logs it and moves on to the
    next file.
    """

    def __init__(self, file_name: str, commit: str, reason: str):
        super().__init__(
            f"Cannot blame {file_name}",
            details={"file": file_name, "commit": commit, "reason": reason},
        )
        self.file_name = file_name
        self.commit = commit
        self.reason = reason


class RepositoryAccessError(BlamekitError):
    """Raised when the git executable or the working copy cannot be reached."""

    def __init__(self, path: Path, reason: str):
        super().__init__(
            f"Cannot access repository: {path}",
            details={"path": str(path), "reason": reason},
        )
        self.path = path
        self.reason = reason


class WorkspaceError(BlamekitError):
    """Raised when a call dispatched to a workspace fails to complete."""

    def __init__(self, reason: str, path: Optional[Path] = None):
        details = {"reason": reason}
        if path is not None:
            details["path"] = str(path)
        super().__init__("Workspace call failed", details=details)
        self.reason = reason
        self.path = path
