"""Tests for incremental clustering and cluster assessment."""

import itertools
import random

import pytest

from bibmerge.clustering import (
    Cluster,
    ClusterIndex,
    ClusterMethod,
    ConflictType,
    UnionFind,
    assess_cluster,
    check_cluster_consistency,
    identifier_groups,
)
from bibmerge.decision import EquivalenceTester

# ============================================================================
# UnionFind
# ============================================================================


@pytest.mark.unit
def test_union_find_components() -> None:
    """Test unions produce connected components in first-seen order."""
    uf = UnionFind()
    for x in "abcde":
        uf.make_set(x)
    uf.union("a", "b")
    uf.union("d", "c")
    uf.union("b", "d")

    components = uf.get_components()

    assert [sorted(c) for c in components] == [["a", "b", "c", "d"], ["e"]]
    assert uf.find("c") == uf.find("a")


# ============================================================================
# ClusterIndex basics
# ============================================================================


@pytest.mark.unit
def test_insert_creates_and_grows_clusters(make_result) -> None:
    """Test matching records join one cluster and others get their own."""
    index = ClusterIndex()
    a = make_result("crossref", doi="10.1/a")
    b = make_result("arxiv", doi="10.1/A")
    c = make_result("ads", doi="10.1/c")

    cluster_a = index.insert(a)
    cluster_b = index.insert(b)
    index.insert(c)

    assert cluster_a is cluster_b
    assert cluster_b.members == [0, 1]
    assert len(index) == 2
    assert index.record_count == 3
    assert index.cluster_of(c).keys == (c.key,)


@pytest.mark.unit
def test_clusters_ordered_by_first_member(make_result) -> None:
    """Test live clusters are returned in order of their earliest member."""
    index = ClusterIndex()
    records = [
        make_result(doi="10.1/x"),
        make_result(doi="10.1/y"),
        make_result(doi="10.1/x"),
        make_result(doi="10.1/z"),
    ]
    index.extend(records)

    assert [cluster.first_seq for cluster in index.clusters()] == [0, 1, 3]


@pytest.mark.unit
def test_bridge_record_unions_into_lowest_cluster(make_result) -> None:
    """Test a record matching two clusters merges them into the lower id."""
    index = ClusterIndex()
    a = make_result("crossref", doi="10.1/a")
    b = make_result("arxiv", arxiv="2401.00001")
    bridge = make_result("ads", doi="10.1/a", arxiv="2401.00001v2")

    index.extend([a, b, bridge])

    assert len(index) == 1
    cluster = index.cluster_of(b)
    assert cluster.cluster_id == 0
    assert cluster.members == [0, 1, 2]
    assert cluster.identifiers == {("doi", "10.1/a"), ("arxiv", "2401.00001")}
    assert index.unions == 1


@pytest.mark.unit
def test_identifier_transitivity(make_result) -> None:
    """Test DOI A-B and arXiv B-C links put A, B and C in one cluster."""
    a = make_result("crossref", doi="10.1/a")
    b = make_result("ads", doi="10.1/a", arxiv="2401.00001")
    c = make_result("arxiv", arxiv="2401.00001v3")

    for order in itertools.permutations([a, b, c]):
        index = ClusterIndex()
        index.extend(order)
        assert len(index) == 1


@pytest.mark.unit
def test_fuzzy_transitivity(make_result, titled) -> None:
    """Test chained fuzzy links join records that do not match directly."""
    a = make_result(title=titled(range(20)), authors=["Navarro"], year=2020)
    b = make_result(title=titled(range(1, 21)), authors=["Navarro"], year=2020)
    c = make_result(title=titled(range(2, 22)), authors=["Navarro"], year=2020)

    tester = EquivalenceTester()
    assert not tester.same(a, c)

    for order in itertools.permutations([a, b, c]):
        index = ClusterIndex(tester)
        index.extend(order)
        assert len(index) == 1


@pytest.mark.unit
def test_insert_rejects_duplicate_key(make_result) -> None:
    """Test one (source_id, source_local_id) can be inserted only once."""
    index = ClusterIndex()
    index.insert(make_result("crossref", "10.1/a", title="A"))

    with pytest.raises(ValueError, match="Duplicate"):
        index.insert(make_result("crossref", "10.1/a", title="B"))


@pytest.mark.unit
def test_insert_rejects_non_raw_result() -> None:
    """Test inserting something other than a RawResult fails fast."""
    with pytest.raises(TypeError):
        ClusterIndex().insert({"source_id": "crossref"})  # type: ignore[arg-type]


@pytest.mark.unit
def test_cluster_of_unknown_record(make_result) -> None:
    """Test looking up a record never inserted raises KeyError."""
    with pytest.raises(KeyError):
        ClusterIndex().cluster_of(make_result())


@pytest.mark.unit
def test_fuzzy_disabled_only_links_identifiers(make_result) -> None:
    """Test a tester without fuzzy matching performs no fuzzy comparisons."""
    index = ClusterIndex(EquivalenceTester(use_fuzzy_matching=False))
    index.extend(
        [
            make_result(title="Dark Matter Halos", authors=["Navarro"], year=2020),
            make_result(title="Dark Matter Halos", authors=["Navarro"], year=2020),
        ]
    )

    assert len(index) == 2
    assert index.comparisons == 0


@pytest.mark.unit
def test_stats(make_result) -> None:
    """Test index statistics expose counters for audit logging."""
    index = ClusterIndex()
    index.extend(
        [
            make_result(title="Dark Matter Halos", authors=["Navarro"], year=2020),
            make_result(title="Dark Matter Halos", authors=["Navarro"], year=2020),
        ]
    )

    stats = index.stats()
    assert stats["records"] == 2
    assert stats["clusters"] == 1
    assert stats["comparisons"] == 1
    assert set(stats["indexes"]) == {"identifier_exact", "year_first_author"}


# ============================================================================
# Order independence
# ============================================================================


def _mixed_records(make_result, titled) -> list:
    return [
        make_result(
            "crossref",
            title="Dark Matter Halos",
            authors=["Navarro, J."],
            year=2024,
            doi="10.1000/x",
        ),
        make_result(
            "arxiv",
            title="Dark matter halos (preprint)",
            authors=["Julio Navarro"],
            year=2024,
            arxiv="2401.00001",
        ),
        make_result("ads", title="", authors=["Navarro"], arxiv="2401.00001v2"),
        make_result("pubmed", title="Cepheid Distances", authors=["Freedman, W."], year=2001),
        make_result("semanticscholar", title=titled(range(20)), authors=["Riess"], year=2019),
        make_result("crossref", title=titled(range(1, 21)), authors=["Riess"], year=2020),
        make_result("arxiv", title=titled(range(2, 22)), authors=["Riess"], year=2020),
    ]


@pytest.mark.unit
@pytest.mark.slow
def test_partition_is_order_independent(make_result, titled) -> None:
    """Test every insertion order of a mixed batch yields the same partition."""
    records = _mixed_records(make_result, titled)
    reference = ClusterIndex()
    reference.extend(records)
    expected = reference.partition()

    for order in itertools.permutations(records):
        index = ClusterIndex()
        index.extend(order)
        assert index.partition() == expected

    assert len(expected) == 3


def _random_records(rng: random.Random, make_result, titled, count: int = 16) -> list:
    records = []
    for i in range(count):
        identifiers = {}
        if rng.random() < 0.2:
            identifiers["doi"] = rng.choice(["10.1/A", "10.1/b"])
        records.append(
            make_result(
                rng.choice(["arxiv", "crossref", "ads", "pubmed"]),
                f"r{i}",
                title=titled(sorted(rng.sample(range(8), rng.choice([0, 6, 7, 8])))),
                authors=rng.choice([[], ["Navarro, J."], ["Julio Navarro"], ["Freedman, W."]]),
                year=rng.choice([None, 2019, 2020, 2021]),
                **identifiers,
            )
        )
    return records


@pytest.mark.unit
@pytest.mark.parametrize("seed", range(10))
def test_partition_matches_connected_components(make_result, titled, seed: int) -> None:
    """Test shuffled inserts always yield the components of the pairwise test."""
    rng = random.Random(seed)
    records = _random_records(rng, make_result, titled)
    tester = EquivalenceTester()

    uf = UnionFind()
    for record in records:
        uf.make_set(record.key)
    for a, b in itertools.combinations(records, 2):
        if tester.same(a, b):
            uf.union(a.key, b.key)
    expected = frozenset(frozenset(component) for component in uf.get_components())

    for _ in range(5):
        order = records[:]
        rng.shuffle(order)
        index = ClusterIndex(tester)
        index.extend(order)
        assert index.partition() == expected


@pytest.mark.unit
def test_partition_shape(make_result, titled) -> None:
    """Test the mixed batch clusters as expected."""
    records = _mixed_records(make_result, titled)
    index = ClusterIndex()
    index.extend(records)

    sizes = sorted(len(cluster) for cluster in index.clusters())
    assert sizes == [1, 3, 3]


# ============================================================================
# Assessment and consistency
# ============================================================================


@pytest.mark.unit
def test_identifier_groups(make_result) -> None:
    """Test identifier-connected members are grouped."""
    records = [
        make_result(doi="10.1/a"),
        make_result(doi="10.1/a", arxiv="1"),
        make_result(title="x"),
        make_result(arxiv="1"),
    ]
    assert identifier_groups(records) == [[0, 1, 3], [2]]


@pytest.mark.unit
def test_assess_cluster_methods(make_result) -> None:
    """Test single, identifier and fuzzy support classification."""
    single = assess_cluster([make_result()])
    assert (single.method, single.confidence) == (ClusterMethod.SINGLE, 1.0)

    linked = assess_cluster([make_result(doi="10.1/a"), make_result(doi="10.1/a")])
    assert (linked.method, linked.confidence) == (ClusterMethod.IDENTIFIER, 1.0)

    fuzzy = assess_cluster(
        [
            make_result(title="Dark Matter Halos Revisited", doi="10.1/a"),
            make_result(title="Dark Matter Halos", doi="10.1/a"),
            make_result(title="Dark Matter Halos Revisited Again"),
        ]
    )
    assert fuzzy.method == ClusterMethod.FUZZY
    assert fuzzy.identifier_groups == 2
    assert fuzzy.confidence == 0.8


@pytest.mark.unit
def test_check_cluster_consistency(make_result) -> None:
    """Test conflicting identifiers and year spreads are reported."""
    records = [
        make_result(doi="10.1/a", year=2000),
        make_result(doi="10.1/b", pmid="1", year=2003),
        make_result(pmid="1"),
    ]
    consistency = check_cluster_consistency(records, year_tolerance=1)

    assert consistency.conflicts == (
        ConflictType.DOI_CONFLICT.value,
        ConflictType.YEAR_SPREAD.value,
    )
    assert consistency.notes == ()


@pytest.mark.unit
def test_check_cluster_consistency_clean(make_result) -> None:
    """Test a consistent cluster reports nothing."""
    records = [make_result(doi="10.1/a", year=2000), make_result(doi="10.1/a", year=2001)]
    assert check_cluster_consistency(records, year_tolerance=1).to_dict() == {
        "conflicts": [],
        "notes": [],
    }


@pytest.mark.unit
def test_cluster_absorb_keeps_sequence_order(make_result) -> None:
    """Test absorbing interleaves members by insertion sequence."""
    low = Cluster(cluster_id=0)
    high = Cluster(cluster_id=3)
    records = [make_result(doi=f"10.1/{i}") for i in range(4)]
    low.add(0, records[0])
    high.add(1, records[1])
    low.add(2, records[2])
    high.add(3, records[3])

    low.absorb(high)

    assert low.members == [0, 1, 2, 3]
    assert low.records == records
    assert low.to_dict()["size"] == 4
