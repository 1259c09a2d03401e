"""Tests for the search source registry and concurrent gathering."""

import json
import threading
from pathlib import Path

import pytest

from bibmerge.audit import AuditLogger
from bibmerge.models import RawResult
from bibmerge.sources import SearchSource, SourceRegistry, gather_batches


class FakeSource:
    """In-memory source returning canned results."""

    def __init__(self, source_id: str, titles: list[str]) -> None:
        self.source_id = source_id
        self.titles = titles
        self.queries: list[str] = []

    def search(self, query: str) -> list[RawResult]:
        self.queries.append(query)
        return [
            RawResult(self.source_id, f"{self.source_id}-{i}", title)
            for i, title in enumerate(self.titles)
        ]

    def fetch_full_record(self, result: RawResult) -> RawResult:
        return result


class FailingSource(FakeSource):
    """Source whose search always raises."""

    def search(self, query: str) -> list[RawResult]:
        raise ConnectionError("service unavailable")


class BlockingSource(FakeSource):
    """Source that blocks until released."""

    def __init__(self, source_id: str, release: threading.Event) -> None:
        super().__init__(source_id, ["late"])
        self.release = release

    def search(self, query: str) -> list[RawResult]:
        self.release.wait(timeout=10)
        return super().search(query)


class BadResultSource(FakeSource):
    """Source returning plain dicts instead of RawResult."""

    def search(self, query: str) -> list:
        return [{"source_id": self.source_id, "title": "oops"}]


def _read_events(path: Path) -> list[dict]:
    with path.open() as f:
        return [json.loads(line) for line in f if line.strip()]


# ============================================================================
# Registry
# ============================================================================


@pytest.mark.unit
def test_fake_source_satisfies_protocol() -> None:
    """Test structural typing accepts any object with the source interface."""
    assert isinstance(FakeSource("crossref", []), SearchSource)
    assert not isinstance(object(), SearchSource)


@pytest.mark.unit
def test_registry_keeps_registration_order() -> None:
    """Test sources iterate in the order they were registered."""
    registry = SourceRegistry([FakeSource("arxiv", []), FakeSource("crossref", [])])
    registry.register(FakeSource("ads", []))

    assert registry.source_ids == ("arxiv", "crossref", "ads")
    assert [s.source_id for s in registry] == ["arxiv", "crossref", "ads"]
    assert len(registry) == 3
    assert "ads" in registry
    assert "pubmed" not in registry


@pytest.mark.unit
def test_registry_get() -> None:
    """Test lookup by id, with KeyError for unknown ids."""
    source = FakeSource("crossref", [])
    registry = SourceRegistry([source])

    assert registry.get("crossref") is source
    with pytest.raises(KeyError, match="Unknown source"):
        registry.get("pubmed")


@pytest.mark.unit
def test_registry_rejects_duplicates_and_non_sources() -> None:
    """Test duplicate ids and objects without the interface are rejected."""
    registry = SourceRegistry([FakeSource("crossref", [])])

    with pytest.raises(ValueError, match="already registered"):
        registry.register(FakeSource("crossref", []))
    with pytest.raises(TypeError):
        registry.register("crossref")


# ============================================================================
# Gathering
# ============================================================================


@pytest.mark.unit
def test_gather_returns_batches_in_source_order() -> None:
    """Test batches follow source order, not completion order."""
    sources = [FakeSource("arxiv", ["a1", "a2"]), FakeSource("crossref", ["c1"])]

    batches = gather_batches(sources, "dark matter")

    assert [[r.title for r in batch] for batch in batches] == [["a1", "a2"], ["c1"]]
    assert all(s.queries == ["dark matter"] for s in sources)


@pytest.mark.unit
def test_gather_accepts_registry() -> None:
    """Test a registry can be passed as the source sequence."""
    registry = SourceRegistry([FakeSource("ads", ["x"])])
    assert len(gather_batches(registry, "q")) == 1


@pytest.mark.unit
def test_gather_no_sources() -> None:
    """Test no sources produce no batches."""
    assert gather_batches([], "q") == []


@pytest.mark.unit
def test_gather_omits_failed_source(tmp_path: Path) -> None:
    """Test a raising source is omitted and logged without failing the run."""
    log_path = tmp_path / "events.jsonl"
    sources = [FailingSource("pubmed", []), FakeSource("crossref", ["c1"])]

    with AuditLogger(run_id="r", log_path=log_path) as logger:
        batches = gather_batches(sources, "q", logger=logger)

    assert [[r.source_id for r in b] for b in batches] == [["crossref"]]

    (event,) = _read_events(log_path)
    assert event["event"] == "source_failed"
    assert event["level"] == "WARN"
    assert event["source_id"] == "pubmed"
    assert event["data"]["exception_class"] == "ConnectionError"
    assert event["data"]["message"] == "service unavailable"


@pytest.mark.unit
def test_gather_rejects_non_raw_results(tmp_path: Path) -> None:
    """Test a source returning the wrong type is treated as failed."""
    log_path = tmp_path / "events.jsonl"

    with AuditLogger(run_id="r", log_path=log_path) as logger:
        batches = gather_batches([BadResultSource("ads", [])], "q", logger=logger)

    assert batches == []
    (event,) = _read_events(log_path)
    assert event["data"]["exception_class"] == "TypeError"


@pytest.mark.unit
def test_gather_omits_source_past_deadline(tmp_path: Path) -> None:
    """Test a source still running at the deadline is omitted and logged."""
    log_path = tmp_path / "events.jsonl"
    release = threading.Event()
    sources = [BlockingSource("semanticscholar", release), FakeSource("crossref", ["c1"])]

    try:
        with AuditLogger(run_id="r", log_path=log_path) as logger:
            batches = gather_batches(sources, "q", timeout=0.2, logger=logger)
    finally:
        release.set()

    assert [[r.title for r in b] for b in batches] == [["c1"]]

    (event,) = _read_events(log_path)
    assert event["event"] == "source_timeout"
    assert event["source_id"] == "semanticscholar"
    assert event["data"]["timeout_seconds"] == 0.2


@pytest.mark.unit
def test_gather_without_logger_still_omits_failures() -> None:
    """Test failures are omitted when no logger is given."""
    batches = gather_batches([FailingSource("pubmed", [])], "q")
    assert batches == []
