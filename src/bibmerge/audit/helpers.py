"""Helper utilities for audit logging.

Audit-specific utility functions: run ID generation and environment,
git and package information.

For timestamp and hashing utilities, see bibmerge.utils.
"""

import importlib.metadata
import platform
import secrets
import subprocess
import sys
from datetime import UTC, datetime

from bibmerge.audit.models import EnvironmentInfo

__all__ = [
    "generate_run_id",
    "get_git_sha",
    "get_package_version",
    "get_dependency_versions",
    "collect_environment",
]

# Distributions recorded in every manifest
TRACKED_DEPENDENCIES: tuple[str, ...] = ("click", "jsonschema")


def generate_run_id() -> str:
    """Generate unique run identifier.

    Returns
    -------
    str
        Run ID in format: ISO8601_timestamp__random_suffix.
    """
    timestamp = datetime.now(UTC).isoformat().replace("+00:00", "Z")
    suffix = secrets.token_hex(4)
    return f"{timestamp}__{suffix}"


def get_git_sha() -> str | None:
    """Get current Git commit SHA if in repository.

    Returns
    -------
    str | None
        Short Git SHA (7 chars) or None if unavailable.
    """
    try:
        result = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            capture_output=True,
            text=True,
            check=True,
            timeout=5,
        )
    except (subprocess.SubprocessError, FileNotFoundError):
        return None
    sha = result.stdout.strip()
    return sha[:7] if sha else None


def get_package_version() -> str:
    """Get bibmerge package version, or "unknown" when not installed."""
    try:
        return importlib.metadata.version("bibmerge")
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


def get_dependency_versions(packages: tuple[str, ...] | list[str]) -> dict[str, str]:
    """Get versions of specified packages.

    Parameters
    ----------
    packages : tuple[str, ...] | list[str]
        Distribution names to query.

    Returns
    -------
    dict[str, str]
        Mapping of package name to version ("unknown" if not installed).
    """
    versions: dict[str, str] = {}
    for package in packages:
        try:
            versions[package] = importlib.metadata.version(package)
        except importlib.metadata.PackageNotFoundError:
            versions[package] = "unknown"
    return versions


def collect_environment() -> EnvironmentInfo:
    """Describe the interpreter, platform and key dependencies."""
    return EnvironmentInfo(
        python_version=sys.version.split()[0],
        platform=f"{platform.system()}-{platform.release()}-{platform.machine()}",
        package_version=get_package_version(),
        dependencies=get_dependency_versions(TRACKED_DEPENDENCIES),
    )
