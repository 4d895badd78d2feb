"""Read-only access to a git working copy via subprocess."""

import subprocess
from pathlib import Path
from typing import List, Optional

from ..exceptions import BlameError, RepositoryAccessError
from ..logging_config import get_logger
from ..models import BlameResult
from .porcelain import parse_porcelain

logger = get_logger(__name__)


class GitRepository:
    """Resolve commits and blame files in one working copy.

    Every call shells out to ``git -C <path>``; nothing is written to the
    repository.
    """

    def __init__(self, path, git_executable: str = "git", timeout_seconds: int = 60):
        self.path = Path(path).resolve()
        self.git_executable = git_executable
        self.timeout_seconds = timeout_seconds
        self._toplevel: Optional[Path] = None

    def __repr__(self) -> str:
        return f"GitRepository({str(self.path)!r})"

    def is_git_repo(self) -> bool:
        try:
            result = self._run(["rev-parse", "--git-dir"], timeout=5)
            return result.returncode == 0
        except RepositoryAccessError:
            return False

    @property
    def toplevel(self) -> Path:
        """Root of the working tree containing ``path``."""
        if self._toplevel is None:
            result = self._run(["rev-parse", "--show-toplevel"])
            if result.returncode != 0:
                raise RepositoryAccessError(self.path, result.stderr.strip() or "not a git repository")
            self._toplevel = Path(result.stdout.strip()).resolve()
        return self._toplevel

    def resolve_commit(self, ref: str) -> Optional[str]:
        """Resolve ``ref`` to a full commit id, or None when it does not exist.

        Raises:
            RepositoryAccessError: git could not be run at all
        """
        result = self._run(["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"])
        if result.returncode != 0:
            logger.debug("git rev-parse %s failed: %s", ref, result.stderr.strip())
            return None
        sha = result.stdout.strip()
        return sha or None

    def blame(self, file_name: str, commit: str) -> Optional[BlameResult]:
        """Blame ``file_name`` as of ``commit``.

        Returns None when git produced no output.

        Raises:
            BlameError: git rejected the file (unknown path, outside the
                working tree, timeout)
            RepositoryAccessError: git could not be run at all
        """
        relative = self.relativize(file_name, commit)
        try:
            result = self._run(["blame", "--porcelain", commit, "--", relative])
        except RepositoryAccessError as e:
            if isinstance(e.__cause__, subprocess.TimeoutExpired):
                raise BlameError(file_name, commit, e.reason) from e
            raise
        if result.returncode != 0:
            raise BlameError(file_name, commit, result.stderr.strip() or f"exit code {result.returncode}")
        if not result.stdout.strip():
            return None
        return parse_porcelain(result.stdout, file_name=file_name, commit=commit)

    def relativize(self, file_name: str, commit: str = "") -> str:
        """Return ``file_name`` as git should see it from ``path``.

        Absolute paths are made relative to ``path`` so findings reported
        with workspace-absolute names can be blamed.
        """
        candidate = Path(file_name)
        if not candidate.is_absolute():
            return candidate.as_posix()
        try:
            return candidate.resolve().relative_to(self.path).as_posix()
        except ValueError:
            pass
        try:
            return candidate.resolve().relative_to(self.toplevel).as_posix()
        except ValueError:
            raise BlameError(file_name, commit, f"outside the working copy {self.path}")

    def _run(self, args: List[str], timeout: Optional[int] = None) -> subprocess.CompletedProcess:
        cmd = [self.git_executable, "-C", str(self.path), *args]
        try:
            return subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout or self.timeout_seconds,
            )
        except subprocess.TimeoutExpired as e:
            raise RepositoryAccessError(self.path, f"git {args[0]} timed out after {e.timeout}s") from e
        except OSError as e:
            raise RepositoryAccessError(self.path, f"cannot run {self.git_executable}: {e}") from e
