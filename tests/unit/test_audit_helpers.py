"""Tests for audit helpers module."""

import subprocess
from unittest.mock import Mock, patch

import pytest

from bibmerge.audit.helpers import (
    TRACKED_DEPENDENCIES,
    collect_environment,
    generate_run_id,
    get_dependency_versions,
    get_git_sha,
    get_package_version,
)
from bibmerge.utils import calculate_string_sha256, get_iso_timestamp


@pytest.mark.unit
def test_generate_run_id_format_and_uniqueness() -> None:
    """Test run ID has correct format and successive calls are unique."""
    rid1 = generate_run_id()
    rid2 = generate_run_id()

    # Format: ISO8601__hex8
    parts = rid1.split("__")
    assert len(parts) == 2
    assert parts[0].endswith("Z")
    assert len(parts[1]) == 8

    assert rid1 != rid2


@pytest.mark.unit
def test_iso_timestamp_is_utc() -> None:
    """Test timestamps use the Z suffix."""
    assert get_iso_timestamp().endswith("Z")


@pytest.mark.unit
def test_string_sha256_prefixed() -> None:
    """Test string hashes carry the sha256: prefix."""
    digest = calculate_string_sha256("bibmerge")
    assert digest.startswith("sha256:")
    assert len(digest) == len("sha256:") + 64


@pytest.mark.unit
def test_get_git_sha_success() -> None:
    """Test git SHA is truncated to 7 chars on success."""
    mock_result = Mock(stdout="abcdef1234567890\n")

    with patch("subprocess.run", return_value=mock_result):
        assert get_git_sha() == "abcdef1"


@pytest.mark.unit
@pytest.mark.parametrize(
    "side_effect",
    [subprocess.SubprocessError, FileNotFoundError, subprocess.TimeoutExpired("git", 5)],
)
def test_get_git_sha_returns_none_on_failure(side_effect: type | Exception) -> None:
    """Test git SHA returns None for all failure modes."""
    with patch("subprocess.run", side_effect=side_effect):
        assert get_git_sha() is None


@pytest.mark.unit
def test_collect_environment() -> None:
    """Test environment info names interpreter, platform and dependencies."""
    env = collect_environment()

    assert "." in env.python_version
    assert "-" in env.platform
    # Package version is either semver or "unknown" when not installed
    assert env.package_version == "unknown" or "." in env.package_version
    assert set(env.dependencies) == set(TRACKED_DEPENDENCIES)
    assert env.package_version == get_package_version()


@pytest.mark.unit
def test_get_dependency_versions() -> None:
    """Test known packages return versions, unknown return 'unknown'."""
    versions = get_dependency_versions(["pytest", "nonexistent_xyz_pkg"])

    assert "." in versions["pytest"]
    assert versions["nonexistent_xyz_pkg"] == "unknown"
