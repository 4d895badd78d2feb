"""Run one blame per file and fill in the requested lines."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol

from ..exceptions import BlameError
from ..logging_config import get_logger
from ..models import BlameRequest, BlameResult
from .cancellation import CancellationToken

# Returned by parallel tasks that observed cancellation before starting
_SKIPPED = object()


class BlameSource(Protocol):
    """Anything that can blame a file at a commit (GitRepository in practice)."""

    def blame(self, file_name: str, commit: str) -> Optional[BlameResult]: ...


@dataclass
class ExecutionOutcome:
    """Populated requests plus what happened while producing them."""

    requests: Dict[str, BlameRequest]
    blamed_files: List[str] = field(default_factory=list)
    failed_files: List[str] = field(default_factory=list)
    interrupted: bool = False


class BlameExecutor:
    """Blame every requested file against one reference commit.

    Failures are isolated per file and per line: a file git cannot blame is
    logged and skipped, a line without author or commit is logged and left
    unset, a line beyond the blamed content is skipped silently. The only
    early exit is the cancellation token, checked after each file.
    """

    def __init__(
        self,
        repository: BlameSource,
        logger: Optional[logging.Logger] = None,
        workers: int = 1,
    ):
        self.repository = repository
        self.logger = logger or get_logger(__name__)
        self.workers = max(1, workers)

    def execute(
        self,
        requests: Dict[str, BlameRequest],
        reference_commit: str,
        cancellation: Optional[CancellationToken] = None,
    ) -> ExecutionOutcome:
        token = cancellation or CancellationToken()
        if self.workers > 1 and len(requests) > 1:
            return self._execute_parallel(requests, reference_commit, token)

        outcome = ExecutionOutcome(requests=requests)
        for file_name, request in requests.items():
            result = self._load_blame(request, reference_commit)
            self._record(outcome, file_name, request, result)
            if token.is_cancelled:
                outcome.interrupted = True
                break
        return outcome

    def _execute_parallel(
        self,
        requests: Dict[str, BlameRequest],
        reference_commit: str,
        token: CancellationToken,
    ) -> ExecutionOutcome:
        outcome = ExecutionOutcome(requests=requests)

        def task(request: BlameRequest):
            if token.is_cancelled:
                return _SKIPPED
            return self._load_blame(request, reference_commit)

        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            pending: List[tuple[str, Future]] = [
                (file_name, pool.submit(task, request)) for file_name, request in requests.items()
            ]
            for index, (file_name, future) in enumerate(pending):
                result = future.result()
                if result is not _SKIPPED:
                    self._record(outcome, file_name, requests[file_name], result)
                if token.is_cancelled:
                    for _, remaining in pending[index + 1 :]:
                        remaining.cancel()
                    outcome.interrupted = True
                    break
        return outcome

    def _load_blame(self, request: BlameRequest, reference_commit: str) -> Optional[BlameResult]:
        file_name = request.file_name
        try:
            result = self.repository.blame(file_name, reference_commit)
        except BlameError as e:
            self.logger.warning(
                "Error running git blame on %s with revision %s: %s",
                file_name,
                reference_commit,
                e.reason,
            )
            return None
        if result is None or len(result) == 0:
            self.logger.warning("No blame results for file: %s", file_name)
            return None
        return result

    def _record(
        self,
        outcome: ExecutionOutcome,
        file_name: str,
        request: BlameRequest,
        result: Optional[BlameResult],
    ) -> None:
        if result is None:
            outcome.failed_files.append(file_name)
            return
        self.fill_request(request, result)
        outcome.blamed_files.append(file_name)

    def fill_request(self, request: BlameRequest, result: BlameResult) -> BlameRequest:
        """Copy author and commit for each requested line out of ``result``."""
        file_name = request.file_name
        for line in request:
            index = line - 1  # first line is index 0
            if index < 0 or index >= len(result):
                continue

            who = result.source_author(index)
            if who is None:
                self.logger.info("No author information found for line %d in file %s.", line, file_name)
            else:
                name, email = who
                request.set_name(line, name)
                request.set_email(line, email)

            commit_id = result.source_commit(index)
            if commit_id is None:
                self.logger.info("No commit ID found for line %d in file %s.", line, file_name)
            else:
                request.set_commit(line, commit_id)
        return request
