"""Configuration loading and management for blamekit.

Configuration sources are merged in priority order:
    1. Defaults (defined in BlameConfig)
    2. Global config (~/.blamekit.toml)
    3. Project config (./blamekit.toml)
    4. Explicit config file
    5. Environment variables (BLAMEKIT_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(workers=4)
    >>> config.workers
    4
    >>> config.commit_env_var
    'GIT_COMMIT'
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Mapping, Optional, get_type_hints

from .exceptions import BlamekitError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]


@dataclass(frozen=True)
class BlameConfig:
    """Configuration for one attribution run.

    Attributes:
        Reference commit:
            commit_env_var: Environment variable naming the reference commit.
                A blank or missing value means HEAD.
            reference_commit: Explicit reference commit, wins over the
                environment variable when set.

        Git integration:
            git_executable: Name or path of the git binary
            git_timeout_seconds: Timeout for a single git invocation

        Performance tuning:
            workers: Files blamed concurrently (1 = sequential)

        Output control:
            verbosity: Logging verbosity level
    """

    # Reference commit
    commit_env_var: str = "GIT_COMMIT"
    reference_commit: Optional[str] = None

    # Git integration
    git_executable: str = "git"
    git_timeout_seconds: int = 60

    # Performance tuning
    workers: int = 1

    # Output control
    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.commit_env_var.strip():
            raise InvalidConfigError("commit_env_var", self.commit_env_var, "must not be blank")
        if not self.git_executable.strip():
            raise InvalidConfigError("git_executable", self.git_executable, "must not be blank")
        if self.git_timeout_seconds < 1:
            raise InvalidConfigError(
                "git_timeout_seconds", self.git_timeout_seconds, "must be at least 1"
            )
        if self.workers < 1:
            raise InvalidConfigError("workers", self.workers, "must be at least 1")
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise InvalidConfigError(
                "verbosity", self.verbosity, "must be one of quiet, normal, verbose"
            )

    def explicit_commit(self, environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
        """Return the reference commit requested by config or environment.

        ``None`` means no override was given and HEAD should be used.
        """
        if self.reference_commit and self.reference_commit.strip():
            return self.reference_commit.strip()
        env = os.environ if environ is None else environ
        value = env.get(self.commit_env_var, "")
        return value.strip() or None


def load_config(config_file: Optional[Path] = None, **overrides) -> BlameConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags). ``None``
            values are ignored so unset CLI options keep lower layers.

    Returns:
        Validated BlameConfig instance

    Raises:
        BlamekitError: If a config file is invalid or missing, or a value
            fails validation
    """
    merged: dict = {}

    global_config = Path.home() / ".blamekit.toml"
    if global_config.exists():
        try:
            merged.update(_load_toml_file(global_config))
        except Exception as e:
            raise BlamekitError(f"Invalid global config '{global_config}': {e}")

    project_config = Path.cwd() / "blamekit.toml"
    if project_config.exists():
        try:
            merged.update(_load_toml_file(project_config))
        except Exception as e:
            raise BlamekitError(f"Invalid project config '{project_config}': {e}")

    if config_file is not None:
        if not config_file.exists():
            raise BlamekitError(f"Config file not found: {config_file}")
        try:
            merged.update(_load_toml_file(config_file))
        except Exception as e:
            raise BlamekitError(f"Invalid config file '{config_file}': {e}")

    merged.update(_load_env_vars())

    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return BlameConfig(**merged)
    except TypeError as e:
        raise BlamekitError(f"Invalid configuration: {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from BLAMEKIT_* environment variables.

    Supported environment variables:
        BLAMEKIT_COMMIT_ENV_VAR: str
        BLAMEKIT_REFERENCE_COMMIT: str
        BLAMEKIT_GIT_EXECUTABLE: str
        BLAMEKIT_GIT_TIMEOUT_SECONDS: int
        BLAMEKIT_WORKERS: int
        BLAMEKIT_VERBOSITY: quiet/normal/verbose
    """
    type_hints = get_type_hints(BlameConfig)

    result: dict[str, Any] = {}

    for field_name in BlameConfig.__dataclass_fields__:
        env_key = f"BLAMEKIT_{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
            if parsed is not None:
                result[field_name] = parsed
        except ValueError as e:
            raise BlamekitError(f"Invalid {env_key}: {e}")

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type."""
    origin = getattr(type_hint, "__origin__", None)

    # Optional[X] is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    if type_hint is int:
        return int(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    A ``[blamekit]`` table is used when present, otherwise the top level.
    """
    try:
        import tomllib
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise BlamekitError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        data = tomllib.load(f)
    section = data.get("blamekit")
    return dict(section) if isinstance(section, dict) else data
