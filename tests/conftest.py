"""Shared test fixtures for blamekit tests."""

import logging
import os
import shutil
import subprocess

import pytest

from blamekit.exceptions import BlameError
from blamekit.models import BlameLine, BlameResult, Finding

HEAD_SHA = "a" * 40

GIT_AVAILABLE = shutil.which("git") is not None


@pytest.fixture(autouse=True)
def restore_blamekit_logger():
    """Undo handlers and levels the CLI installs on the ``blamekit`` logger."""
    logger = logging.getLogger("blamekit")
    handlers, level = list(logger.handlers), logger.level
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)


class FakeRepository:
    """In-memory stand-in for GitRepository that records every blame call.

    ``files`` maps file name to the blamed lines; names in ``failing`` raise
    BlameError, names in ``empty`` blame to no lines, anything else is
    unknown to history and raises BlameError as git would.
    """

    def __init__(self, files=None, refs=None, failing=(), empty=(), on_blame=None):
        self.files = files or {}
        self.refs = {"HEAD": HEAD_SHA} if refs is None else refs
        self.failing = set(failing)
        self.empty = set(empty)
        self.on_blame = on_blame
        self.blame_calls = []
        self.resolve_calls = []

    def resolve_commit(self, ref):
        self.resolve_calls.append(ref)
        return self.refs.get(ref)

    def blame(self, file_name, commit):
        self.blame_calls.append((file_name, commit))
        if self.on_blame is not None:
            self.on_blame(file_name)
        if file_name in self.failing:
            raise BlameError(file_name, commit, "fatal: bad object")
        if file_name in self.empty:
            return BlameResult(file_name=file_name, commit=commit, lines=[])
        if file_name not in self.files:
            raise BlameError(file_name, commit, f"fatal: no such path '{file_name}' in {commit}")
        return BlameResult(file_name=file_name, commit=commit, lines=list(self.files[file_name]))

    def called_files(self):
        return [name for name, _ in self.blame_calls]


def blame_lines(count, name="Ada", email="ada@x.test", commit="abc123"):
    """``count`` identical blame lines."""
    return [BlameLine(author_name=name, author_email=email, commit_id=commit) for _ in range(count)]


@pytest.fixture
def fake_repository():
    """Factory for FakeRepository instances."""
    return FakeRepository


@pytest.fixture
def make_finding():
    def _make(file_name, line, finding_type="unused-variable"):
        return Finding(file_name=file_name, primary_line_number=line, finding_type=finding_type)

    return _make


# ---------------------------------------------------------------------------
# Real git checkout
# ---------------------------------------------------------------------------


def _git(repo, *args, author=None):
    env = dict(os.environ)
    if author is not None:
        name, email = author
        env.update(
            GIT_AUTHOR_NAME=name,
            GIT_AUTHOR_EMAIL=email,
            GIT_COMMITTER_NAME=name,
            GIT_COMMITTER_EMAIL=email,
        )
    result = subprocess.run(
        ["git", "-C", str(repo), "-c", "commit.gpgsign=false", *args],
        capture_output=True,
        text=True,
        env=env,
        check=True,
    )
    return result.stdout.strip()


@pytest.fixture
def git_repo(tmp_path):
    """A checkout with two commits.

    Ada writes ``src/App.txt`` (12 lines) and ``lib.txt`` (5 lines); Bob then
    rewrites line 3 of ``lib.txt``. Returns ``(path, {"ada": sha, "bob": sha})``.
    """
    if not GIT_AVAILABLE:
        pytest.skip("git not found")

    repo = tmp_path / "checkout"
    repo.mkdir()
    _git(repo, "init", "-q")

    (repo / "src").mkdir()
    (repo / "src" / "App.txt").write_text("".join(f"app line {i}\n" for i in range(1, 13)))
    (repo / "lib.txt").write_text("".join(f"lib line {i}\n" for i in range(1, 6)))
    _git(repo, "add", ".")
    _git(repo, "commit", "-q", "-m", "initial", author=("Ada", "ada@x.test"))
    ada = _git(repo, "rev-parse", "HEAD")

    lines = (repo / "lib.txt").read_text().splitlines()
    lines[2] = "lib line 3, rewritten"
    (repo / "lib.txt").write_text("\n".join(lines) + "\n")
    _git(repo, "commit", "-q", "-am", "rewrite line 3", author=("Bob", "bob@x.test"))
    bob = _git(repo, "rev-parse", "HEAD")

    return repo, {"ada": ada, "bob": bob}


@pytest.fixture
def make_lines():
    """Factory for lists of identical BlameLine entries."""
    return blame_lines


@pytest.fixture
def head_sha():
    return HEAD_SHA
