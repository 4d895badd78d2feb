"""Assign git authors and commits to findings.

Findings are grouped by file, each file is blamed once against a single
reference commit inside the workspace holding the checkout, and the results
are copied back onto every finding. Attribution is best effort: failures are
logged and never raised to the caller.

Example:
    >>> with create_blamer("/path/to/checkout") as blamer:
    ...     summary = blamer.blame(findings)
    >>> findings[0].author_name
    'Ada'
"""

from __future__ import annotations

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Collection, Mapping, Optional, Protocol

from ..config import BlameConfig
from ..exceptions import BlamekitError
from ..git import GitRepository
from ..logging_config import get_logger
from ..models import AttributionSummary, BlameResult, Finding
from .applier import apply_blames
from .cancellation import CancellationToken
from .executor import BlameExecutor
from .extractor import extract_conflicting_files
from .workspace import (
    LocalWorkspace,
    Workspace,
    decode_requests,
    encode_requests,
    requests_from_dict,
    requests_to_dict,
)


class Repository(Protocol):
    def resolve_commit(self, ref: str) -> Optional[str]: ...

    def blame(self, file_name: str, commit: str) -> Optional[BlameResult]: ...


RepositoryFactory = Callable[[Path], Repository]


def git_repository_factory(config: BlameConfig) -> RepositoryFactory:
    def factory(path: Path) -> Repository:
        return GitRepository(
            path,
            git_executable=config.git_executable,
            timeout_seconds=config.git_timeout_seconds,
        )

    return factory


class ResolveReferenceCommit:
    """Workspace-side call: resolve the requested ref (or HEAD) to a commit id."""

    def __init__(self, repository_factory: RepositoryFactory):
        self.repository_factory = repository_factory

    def __call__(self, path: Path, payload: str) -> str:
        ref = json.loads(payload).get("ref") or "HEAD"
        commit = self.repository_factory(path).resolve_commit(ref)
        return json.dumps({"ref": ref, "commit": commit})


class BlameFiles:
    """Workspace-side call: blame every requested file at the reference commit.

    The cancellation token is shared memory and only observed when the
    workspace runs in the same process as the caller.
    """

    def __init__(
        self,
        repository_factory: RepositoryFactory,
        reference_commit: str,
        logger: logging.Logger,
        workers: int = 1,
        cancellation: Optional[CancellationToken] = None,
    ):
        self.repository_factory = repository_factory
        self.reference_commit = reference_commit
        self.logger = logger
        self.workers = workers
        self.cancellation = cancellation

    def __call__(self, path: Path, payload: str) -> str:
        requests = decode_requests(payload)
        executor = BlameExecutor(self.repository_factory(path), logger=self.logger, workers=self.workers)
        outcome = executor.execute(requests, self.reference_commit, self.cancellation)
        return json.dumps(
            {
                "requests": requests_to_dict(outcome.requests),
                "blamed_files": outcome.blamed_files,
                "failed_files": outcome.failed_files,
                "interrupted": outcome.interrupted,
            }
        )


class Blamer(ABC):
    """Assigns author and commit information to findings."""

    def __init__(
        self,
        workspace: Workspace,
        config: Optional[BlameConfig] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.workspace = workspace
        self.config = config or BlameConfig()
        self.logger = logger or get_logger(__name__)

    @abstractmethod
    def blame(
        self,
        findings: Collection[Finding],
        cancellation: Optional[CancellationToken] = None,
    ) -> AttributionSummary:
        """Fill author name, email and commit id on ``findings`` in place."""

    def close(self) -> None:
        """Release the workspace."""
        self.workspace.close()

    def __enter__(self) -> "Blamer":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class NullBlamer(Blamer):
    """Blamer for workspaces without version control: leaves findings as they are."""

    def blame(
        self,
        findings: Collection[Finding],
        cancellation: Optional[CancellationToken] = None,
    ) -> AttributionSummary:
        if findings:
            self.logger.info(
                "No git checkout found in %s, skipping author attribution for %d findings.",
                self.workspace.path,
                len(findings),
            )
        return AttributionSummary(total_findings=len(findings), aborted=True)


class GitBlamer(Blamer):
    """Assigns git blames to findings, one blame per distinct file.

    Each call to ``blame`` runs with its own cancellation token, either the
    one passed in or a fresh one; ``cancel`` only affects the batch that is
    running.
    """

    def __init__(
        self,
        workspace: Workspace,
        config: Optional[BlameConfig] = None,
        logger: Optional[logging.Logger] = None,
        environ: Optional[Mapping[str, str]] = None,
        repository_factory: Optional[RepositoryFactory] = None,
    ):
        super().__init__(workspace, config, logger)
        self.environ = os.environ if environ is None else environ
        self.repository_factory = repository_factory or git_repository_factory(self.config)
        self._active: Optional[CancellationToken] = None

        self.logger.info("Using GitBlamer to create author and commit information for all findings")

    def cancel(self) -> None:
        """Stop the running batch after the file currently being blamed."""
        if self._active is not None:
            self._active.cancel()

    def blame(
        self,
        findings: Collection[Finding],
        cancellation: Optional[CancellationToken] = None,
    ) -> AttributionSummary:
        summary = AttributionSummary(total_findings=len(findings))
        if not findings:
            return summary

        self._active = cancellation or CancellationToken()
        try:
            self._compute_blames(findings, summary, self._active)
        except (BlamekitError, OSError):
            summary.aborted = True
            self.logger.exception("Mapping findings to git commit IDs and authors failed")
        finally:
            self._active = None
        return summary

    def _compute_blames(
        self,
        findings: Collection[Finding],
        summary: AttributionSummary,
        cancellation: CancellationToken,
    ) -> None:
        reference_commit = self.resolve_reference_commit()
        if reference_commit is None:
            summary.aborted = True
            return
        summary.reference_commit = reference_commit

        requests = extract_conflicting_files(findings)

        call = BlameFiles(
            self.repository_factory,
            reference_commit,
            logger=self.logger,
            workers=self.config.workers,
            cancellation=cancellation,
        )
        pending = self.workspace.dispatch(call, encode_requests(requests))
        result = json.loads(pending.collect())

        blamed = requests_from_dict(result["requests"])
        summary.blamed_files = result["blamed_files"]
        summary.failed_files = result["failed_files"]
        summary.interrupted = result["interrupted"]
        if summary.interrupted:
            self.logger.warning(
                "Blame was interrupted, findings in %d unprocessed files stay unattributed.",
                len(requests) - len(summary.blamed_files) - len(summary.failed_files),
            )

        summary.attributed_findings = apply_blames(findings, blamed)
        self.logger.debug(
            "Attributed %d of %d findings at %s",
            summary.attributed_findings,
            summary.total_findings,
            reference_commit,
        )

    def resolve_reference_commit(self) -> Optional[str]:
        """Resolve the configured commit, or HEAD when none is given."""
        explicit = self.config.explicit_commit(self.environ)
        if explicit is None:
            self.logger.info("No %s environment variable found, using HEAD.", self.config.commit_env_var)

        payload = json.dumps({"ref": explicit})
        answer = json.loads(self.workspace.act(ResolveReferenceCommit(self.repository_factory), payload))
        commit = answer["commit"]
        if commit is None:
            self.logger.error("Could not retrieve %s commit, aborting.", answer["ref"])
        return commit


def create_blamer(
    workspace_path,
    config: Optional[BlameConfig] = None,
    logger: Optional[logging.Logger] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Blamer:
    """Pick GitBlamer for a git checkout and NullBlamer for anything else."""
    config = config or BlameConfig()
    workspace = LocalWorkspace(workspace_path)
    repository = GitRepository(
        workspace.path,
        git_executable=config.git_executable,
        timeout_seconds=config.git_timeout_seconds,
    )
    if repository.is_git_repo():
        return GitBlamer(workspace, config=config, logger=logger, environ=environ)
    return NullBlamer(workspace, config=config, logger=logger)
