"""Execution boundary between the caller and the machine holding the checkout.

A call crosses the boundary in two explicit phases: ``dispatch`` hands a
callable and a serialized payload to the workspace and returns at once,
``collect`` blocks for the serialized answer. Only strings cross, so the
request map is encoded before dispatch and decoded after collect, and the
same contract holds whether the workspace runs in process or elsewhere.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path
from typing import Callable, Dict, Optional

from ..exceptions import BlamekitError, WorkspaceError
from ..models import BlameRequest

# Runs on the workspace side: (checkout path, payload) -> serialized result
WorkspaceCallable = Callable[[Path, str], str]


def requests_to_dict(requests: Dict[str, BlameRequest]) -> Dict[str, dict]:
    return {name: request.to_dict() for name, request in requests.items()}


def requests_from_dict(data: Dict[str, dict]) -> Dict[str, BlameRequest]:
    return {name: BlameRequest.from_dict(entry) for name, entry in data.items()}


def encode_requests(requests: Dict[str, BlameRequest]) -> str:
    return json.dumps(requests_to_dict(requests))


def decode_requests(payload: str) -> Dict[str, BlameRequest]:
    return requests_from_dict(json.loads(payload))


class PendingCall:
    """Handle on a dispatched call; ``collect`` returns its serialized result."""

    def __init__(self, future: Future, path: Path):
        self._future = future
        self.path = path

    def done(self) -> bool:
        return self._future.done()

    def collect(self, timeout: Optional[float] = None) -> str:
        """Block until the call finishes.

        Raises:
            BlamekitError: raised by the callable, passed through unchanged
            WorkspaceError: any other failure, including a timeout
        """
        try:
            return self._future.result(timeout=timeout)
        except BlamekitError:
            raise
        except FutureTimeoutError as e:
            raise WorkspaceError(f"no result after {timeout}s", self.path) from e
        except Exception as e:
            raise WorkspaceError(f"{type(e).__name__}: {e}", self.path) from e


class Workspace(ABC):
    """A location holding a checkout that callables can be run against."""

    def __init__(self, path):
        self.path = Path(path)

    @abstractmethod
    def dispatch(self, fn: WorkspaceCallable, payload: str) -> PendingCall:
        """Start ``fn(path, payload)`` on the workspace side."""

    def act(self, fn: WorkspaceCallable, payload: str, timeout: Optional[float] = None) -> str:
        """Dispatch and collect in one step."""
        return self.dispatch(fn, payload).collect(timeout=timeout)

    def close(self) -> None:
        pass

    def __enter__(self) -> "Workspace":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class LocalWorkspace(Workspace):
    """Workspace on this machine, run on a single background thread."""

    def __init__(self, path):
        super().__init__(path)
        self._pool: Optional[ThreadPoolExecutor] = None

    def __repr__(self) -> str:
        return f"LocalWorkspace({str(self.path)!r})"

    def dispatch(self, fn: WorkspaceCallable, payload: str) -> PendingCall:
        if not self.path.is_dir():
            raise WorkspaceError("workspace directory does not exist", self.path)
        if self._pool is None:
            self._pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="blamekit-workspace")
        return PendingCall(self._pool.submit(fn, self.path, payload), self.path)

    def close(self) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=True)
            self._pool = None
