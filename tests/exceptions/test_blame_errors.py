"""Tests for the blamekit exception hierarchy."""

from pathlib import Path

from blamekit.exceptions import (
    BlameError,
    BlamekitError,
    ConfigurationError,
    InvalidConfigError,
    RepositoryAccessError,
    WorkspaceError,
)


class TestExceptionHierarchy:
    """All errors share one base so callers can catch them together."""

    def test_all_derive_from_base(self):
        for exc in (
            BlameError("a.py", "abc", "bad object"),
            RepositoryAccessError(Path("/repo"), "git missing"),
            WorkspaceError("boom"),
            InvalidConfigError("workers", 0, "must be at least 1"),
        ):
            assert isinstance(exc, BlamekitError)

    def test_invalid_config_is_configuration_error(self):
        assert issubclass(InvalidConfigError, ConfigurationError)


class TestMessages:
    def test_blame_error_details(self):
        err = BlameError("src/a.py", "abc123", "no such path")
        assert err.file_name == "src/a.py"
        assert err.reason == "no such path"
        assert str(err) == "Cannot blame src/a.py (file=src/a.py, commit=abc123, reason=no such path)"

    def test_repository_access_error(self):
        err = RepositoryAccessError(Path("/repo"), "timed out")
        assert "Cannot access repository: /repo" in str(err)
        assert err.details["reason"] == "timed out"

    def test_workspace_error_without_path(self):
        err = WorkspaceError("lost connection")
        assert str(err) == "Workspace call failed (reason=lost connection)"
        assert err.path is None

    def test_base_error_without_details(self):
        assert str(BlamekitError("plain")) == "plain"
