"""Tests for the two-tier equivalence test."""

import pytest

from bibmerge.decision import EquivalenceTester, MatchMethod, ReasonCode
from bibmerge.engine import DedupConfig


@pytest.fixture
def tester() -> EquivalenceTester:
    """Tester with default thresholds."""
    return EquivalenceTester()


# ============================================================================
# Identifier tier
# ============================================================================


@pytest.mark.unit
def test_shared_doi_matches_regardless_of_metadata(make_result, tester) -> None:
    """Test a shared DOI matches even when everything else disagrees."""
    a = make_result("crossref", title="Alpha", authors=["Navarro, J."], year=1990, doi="10.1/X")
    b = make_result("pubmed", title="Omega", authors=["Freedman, W."], year=2020, doi="10.1/x")

    assert tester.same(a, b)
    result = tester.explain(a, b)
    assert result.matched
    assert result.method == MatchMethod.IDENTIFIER
    assert result.reason == ReasonCode.SHARED_IDENTIFIER
    assert result.shared_identifiers == (("doi", "10.1/x"),)
    assert result.score == 1.0


@pytest.mark.unit
def test_arxiv_version_suffix_matches(make_result, tester) -> None:
    """Test arXiv ids differing only in version are the same identifier."""
    a = make_result("arxiv", arxiv="2401.12345")
    b = make_result("ads", arxiv="arXiv:2401.12345v2")
    assert tester.same(a, b)


@pytest.mark.unit
def test_same_value_different_kind_does_not_match(make_result, tester) -> None:
    """Test identifiers only match within the same kind."""
    a = make_result("ads", bibcode="12345")
    b = make_result("pubmed", pmid="12345")
    assert not tester.same(a, b)


@pytest.mark.unit
def test_identifier_match_ignores_fuzzy_switch(make_result) -> None:
    """Test disabling fuzzy matching keeps identifier matches."""
    tester = EquivalenceTester(use_fuzzy_matching=False)
    a = make_result("crossref", title="Dark Matter Halos", authors=["Navarro"], doi="10.1/a")
    b = make_result("arxiv", title="Dark Matter Halos", authors=["Navarro"])
    c = make_result("ads", doi="10.1/A")

    assert not tester.same(a, b)
    assert tester.explain(a, b).reason == ReasonCode.FUZZY_DISABLED
    assert tester.same(a, c)


# ============================================================================
# Fuzzy tier
# ============================================================================


@pytest.mark.unit
def test_fuzzy_match_on_title_author_year(make_result, tester) -> None:
    """Test equal titles, surnames and years match without identifiers."""
    a = make_result("crossref", title="Dark Matter Halos", authors=["Navarro, Julio"], year=2024)
    b = make_result(
        "arxiv", title="Dark matter halos (preprint)", authors=["Julio Navarro"], year=2024
    )

    assert tester.same(a, b)
    result = tester.explain(a, b)
    assert result.method == MatchMethod.FUZZY
    assert result.reason == ReasonCode.FUZZY_MATCH
    assert result.score == 1.0


@pytest.mark.unit
def test_threshold_is_inclusive(make_result, tester, titled) -> None:
    """Test similarity exactly at the threshold matches and just below does not."""
    at = make_result(title=titled(range(18)), authors=["Navarro"], year=2020)
    at_peer = make_result(title=titled([*range(17), 90, 91]), authors=["Navarro"], year=2020)
    below = make_result(title=titled(range(23)), authors=["Navarro"], year=2020)
    below_peer = make_result(title=titled([*range(21), 90, 91]), authors=["Navarro"], year=2020)

    assert tester.same(at, at_peer)
    assert not tester.same(below, below_peer)
    assert tester.explain(below, below_peer).reason == ReasonCode.TITLE_BELOW_THRESHOLD


@pytest.mark.unit
@pytest.mark.parametrize(("year_b", "expected"), [(2020, True), (2021, True), (2022, False)])
def test_year_tolerance(make_result, tester, year_b: int, expected: bool) -> None:
    """Test a year difference of 1 matches and 2 does not."""
    a = make_result(title="Dark Matter Halos", authors=["Navarro"], year=2020)
    b = make_result(title="Dark Matter Halos", authors=["Navarro"], year=year_b)
    assert tester.same(a, b) is expected


@pytest.mark.unit
def test_missing_year_does_not_disqualify(make_result, tester) -> None:
    """Test a missing year on either side leaves the year criterion satisfied."""
    a = make_result(title="Dark Matter Halos", authors=["Navarro"], year=None)
    b = make_result(title="Dark Matter Halos", authors=["Navarro"], year=1999)
    assert tester.same(a, b)


@pytest.mark.unit
def test_different_surnames_never_fuzzy_match(make_result, tester, titled) -> None:
    """Test author equality is mandatory even at similarity 0.9."""
    a = make_result(title=titled(range(10)), authors=["Navarro, J."], year=2020)
    b = make_result(title=titled(range(9)), authors=["Freedman, W."], year=2020)

    assert tester.explain(a, b).score == pytest.approx(0.9)
    assert not tester.same(a, b)
    assert tester.explain(a, b).reason == ReasonCode.AUTHOR_MISMATCH


@pytest.mark.unit
def test_pdf_in_title_counts_against_similarity(make_result, tester) -> None:
    """Test a title about a probability density function is not a PDF copy."""
    a = make_result(
        "crossref", title="The PDF of dark matter halo masses", authors=["Navarro, J."], year=2020
    )
    b = make_result("arxiv", title="Dark matter halo masses", authors=["Julio Navarro"], year=2020)

    result = tester.explain(a, b)
    assert result.score == pytest.approx(0.8)
    assert result.reason == ReasonCode.TITLE_BELOW_THRESHOLD
    assert not tester.same(a, b)


@pytest.mark.unit
def test_missing_author_never_fuzzy_matches(make_result, tester) -> None:
    """Test records without a first author only match by identifier."""
    a = make_result(title="Dark Matter Halos", authors=[], year=2020)
    b = make_result(title="Dark Matter Halos", authors=[], year=2020)

    assert not tester.same(a, b)
    assert tester.explain(a, b).reason == ReasonCode.AUTHOR_MISSING


@pytest.mark.unit
def test_empty_titles_do_not_match(make_result, tester) -> None:
    """Test two empty titles without shared identifiers are not equivalent."""
    a = make_result("crossref", title="", authors=["Navarro"], year=2020)
    b = make_result("arxiv", title="", authors=["Navarro"], year=2020)

    assert not tester.same(a, b)
    assert tester.explain(a, b).reason == ReasonCode.TITLE_MISSING


@pytest.mark.unit
def test_empty_titles_do_not_match_at_zero_threshold(make_result) -> None:
    """Test a zero threshold still requires comparable titles."""
    tester = EquivalenceTester(title_threshold=0.0)
    a = make_result(title="", authors=["Navarro"], year=2020)
    b = make_result(title="The", authors=["Navarro"], year=2020)
    c = make_result(title="Unrelated Words", authors=["Navarro"], year=2020)
    d = make_result(title="Something Else", authors=["Navarro"], year=2020)

    assert not tester.same(a, b)
    assert tester.same(c, d)


# ============================================================================
# Properties
# ============================================================================


@pytest.mark.unit
def test_same_is_symmetric(make_result, tester) -> None:
    """Test same(a, b) == same(b, a) over a mixed set of records."""
    records = [
        make_result("crossref", title="Dark Matter Halos", authors=["Navarro"], year=2020),
        make_result("arxiv", title="Dark matter halos", authors=["J. Navarro"], year=2021),
        make_result("ads", title="Dark Matter Halos", authors=["Freedman"], year=2020),
        make_result("pubmed", title="", authors=["Navarro"], year=2020, doi="10.1/a"),
        make_result("dblp", title="Other", authors=["Navarro"], year=None, doi="10.1/A"),
    ]
    for a in records:
        for b in records:
            assert tester.same(a, b) == tester.same(b, a)
            assert tester.explain(a, b).matched == tester.same(a, b)


@pytest.mark.unit
def test_from_config(make_result) -> None:
    """Test testers built from a config use its thresholds."""
    tester = EquivalenceTester.from_config(
        DedupConfig(title_threshold=0.5, year_tolerance=3, use_fuzzy_matching=True)
    )
    assert tester.title_threshold == 0.5
    assert tester.year_tolerance == 3

    a = make_result(title="Dark Matter Halos", authors=["Navarro"], year=2020)
    b = make_result(title="Dark Matter Halos", authors=["Navarro"], year=2023)
    assert tester.same(a, b)


@pytest.mark.unit
def test_match_result_to_dict(make_result, tester) -> None:
    """Test decisions serialize with per-field comparisons."""
    a = make_result(title="Dark Matter Halos", authors=["Navarro"], year=2020, doi="10.1/a")
    b = make_result(title="Dark Matter", authors=["Navarro"], year=2020, doi="10.1/b")

    data = tester.explain(a, b).to_dict()

    assert data["matched"] is False
    assert data["method"] == "none"
    assert data["reason"] == "title_below_threshold"
    assert data["comparison"]["identifiers"]["level"] == "both_present_mismatch"
    assert data["comparison"]["title"]["sim"] == pytest.approx(2 / 3)
    assert set(data["comparison"]) == {"identifiers", "title", "first_author", "year"}
