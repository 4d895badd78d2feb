"""Git access: commit resolution and porcelain blame."""

from .porcelain import parse_porcelain
from .repository import GitRepository

__all__ = ["GitRepository", "parse_porcelain"]
