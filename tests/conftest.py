"""Pytest configuration and fixtures for test suite."""

import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

# Add src directory to path for imports
SRC_PATH = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(SRC_PATH))

from bibmerge.models import RawResult  # noqa: E402


@pytest.fixture
def make_result() -> Callable[..., RawResult]:
    """Factory for raw results with minimal boilerplate.

    ``source_local_id`` defaults to a counter so that results built in one
    test never collide on their key.
    """
    counter = {"n": 0}

    def _factory(
        source_id: str = "crossref",
        source_local_id: str | None = None,
        *,
        title: str = "",
        authors: tuple[str, ...] | list[str] = (),
        year: int | None = None,
        venue: str | None = None,
        abstract: str | None = None,
        external_url: str | None = None,
        pdf_url: str | None = None,
        **identifiers: Any,
    ) -> RawResult:
        counter["n"] += 1
        return RawResult(
            source_id=source_id,
            source_local_id=source_local_id or f"{source_id}-{counter['n']}",
            title=title,
            authors=tuple(authors),
            year=year,
            venue=venue,
            abstract=abstract,
            external_url=external_url,
            pdf_url=pdf_url,
            identifiers=identifiers,
        )

    return _factory


def token_title(tokens: range | list[int], prefix: str = "term") -> str:
    """Build a title whose comparable tokens are exactly ``prefix{i}``."""
    return " ".join(f"{prefix}{i}" for i in tokens)


@pytest.fixture
def titled() -> Callable[..., str]:
    """Expose ``token_title`` to tests."""
    return token_title
