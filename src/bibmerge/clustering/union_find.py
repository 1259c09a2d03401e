"""Union-Find (Disjoint Set Union) data structure for clustering."""

from collections.abc import Hashable


class UnionFind:
    """Union-Find data structure with path compression and union by rank.

    Implements the classic DSU algorithm for efficiently finding connected
    components in a graph.

    Attributes
    ----------
    parent : dict[Hashable, Hashable]
        Parent pointers for each element.
    rank : dict[Hashable, int]
        Rank (approximate tree height) for each root.
    """

    def __init__(self) -> None:
        """Initialize empty Union-Find structure."""
        self.parent: dict[Hashable, Hashable] = {}
        self.rank: dict[Hashable, int] = {}

    def make_set(self, x: Hashable) -> None:
        """Create a new set containing element x.

        Parameters
        ----------
        x : Hashable
            Element to add.
        """
        if x not in self.parent:
            self.parent[x] = x
            self.rank[x] = 0

    def find(self, x: Hashable) -> Hashable:
        """Find root of set containing x with path compression.

        Parameters
        ----------
        x : Hashable
            Element to find.

        Returns
        -------
        Hashable
            Root of set containing x.
        """
        if x not in self.parent:
            self.make_set(x)

        root = x
        while self.parent[root] != root:
            root = self.parent[root]

        while self.parent[x] != root:
            self.parent[x], x = root, self.parent[x]

        return root

    def union(self, x: Hashable, y: Hashable) -> None:
        """Union sets containing x and y using union by rank.

        Parameters
        ----------
        x : Hashable
            First element.
        y : Hashable
            Second element.
        """
        root_x = self.find(x)
        root_y = self.find(y)

        if root_x == root_y:
            return

        if self.rank[root_x] < self.rank[root_y]:
            self.parent[root_x] = root_y
        elif self.rank[root_x] > self.rank[root_y]:
            self.parent[root_y] = root_x
        else:
            self.parent[root_y] = root_x
            self.rank[root_x] += 1

    def get_components(self) -> list[list[Hashable]]:
        """Get all connected components.

        Returns
        -------
        list[list[Hashable]]
            List of components in first-seen order, each listing its
            elements in insertion order.
        """
        components_dict: dict[Hashable, list[Hashable]] = {}

        for element in self.parent:
            root = self.find(element)
            components_dict.setdefault(root, []).append(element)

        return list(components_dict.values())
