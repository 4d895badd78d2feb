"""Exception hierarchy for blamekit."""

from .base import BlamekitError
from .blame import BlameError, RepositoryAccessError, WorkspaceError
from .config import ConfigurationError, InvalidConfigError

__all__ = [
    "BlamekitError",
    "BlameError",
    "RepositoryAccessError",
    "WorkspaceError",
    "ConfigurationError",
    "InvalidConfigError",
]
