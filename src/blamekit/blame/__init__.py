"""Finding attribution: group by file, blame once per file, apply per line."""

from .applier import apply_blames
from .blamer import Blamer, GitBlamer, NullBlamer, create_blamer
from .cancellation import CancellationToken
from .executor import BlameExecutor, ExecutionOutcome
from .extractor import extract_conflicting_files
from .workspace import LocalWorkspace, PendingCall, Workspace

__all__ = [
    "Blamer",
    "GitBlamer",
    "NullBlamer",
    "create_blamer",
    "BlameExecutor",
    "ExecutionOutcome",
    "CancellationToken",
    "extract_conflicting_files",
    "apply_blames",
    "Workspace",
    "LocalWorkspace",
    "PendingCall",
]
