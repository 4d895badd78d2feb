"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional

from rich.console import Console

from ..config import BlameConfig, load_config

console = Console()


def resolve_config(
    config: Optional[Path] = None,
    commit: Optional[str] = None,
    workers: Optional[int] = None,
    verbose: bool = False,
    quiet: bool = False,
) -> BlameConfig:
    """Build config from CLI options."""
    overrides = {}
    if commit is not None:
        overrides["reference_commit"] = commit
    if workers is not None:
        overrides["workers"] = workers
    if verbose:
        overrides["verbose"] = True
    if quiet:
        overrides["quiet"] = True
    return load_config(config_file=config, **overrides)
