"""Union-Find (Disjoint Set Union) tracker for spanning-tree components."""


class ComponentTracker:
    """Union-Find over point indices with path compression and union by rank.

    Every point starts in its own component. Merges are irreversible, so
    the partition only ever gets coarser and ``component_count`` only
    ever decreases.

    Attributes
    ----------
    parent : list[int]
        Parent pointer for each point.
    rank : list[int]
        Rank (approximate tree height) for each root.
    """

    def __init__(self, size: int) -> None:
        """Initialize ``size`` singleton components.

        Parameters
        ----------
        size : int
            Number of points tracked.
        """
        self.parent: list[int] = list(range(size))
        self.rank: list[int] = [0] * size
        self._count = size

    def __len__(self) -> int:
        return len(self.parent)

    def find(self, x: int) -> int:
        """Find the representative of the component containing x.

        Parameters
        ----------
        x : int
            Point index.

        Returns
        -------
        int
            Representative point index of x's component.
        """
        root = x
        while self.parent[root] != root:
            root = self.parent[root]

        while self.parent[x] != root:
            self.parent[x], x = root, self.parent[x]

        return root

    def union(self, x: int, y: int) -> bool:
        """Merge the components containing x and y using union by rank.

        Parameters
        ----------
        x : int
            First point index.
        y : int
            Second point index.

        Returns
        -------
        bool
            True if two distinct components were merged, False if x and y
            were already connected.
        """
        root_x = self.find(x)
        root_y = self.find(y)

        if root_x == root_y:
            return False

        if self.rank[root_x] < self.rank[root_y]:
            self.parent[root_x] = root_y
        elif self.rank[root_x] > self.rank[root_y]:
            self.parent[root_y] = root_x
        else:
            self.parent[root_y] = root_x
            self.rank[root_x] += 1

        self._count -= 1
        return True

    def connected(self, x: int, y: int) -> bool:
        """Return True if x and y are in the same component."""
        return self.find(x) == self.find(y)

    def component_count(self) -> int:
        """Number of distinct components."""
        return self._count

    def get_components(self) -> list[list[int]]:
        """Get all components.

        Returns
        -------
        list[list[int]]
            Components in order of their smallest member, each listing its
            points in ascending order.
        """
        components_dict: dict[int, list[int]] = {}

        for element in range(len(self.parent)):
            components_dict.setdefault(self.find(element), []).append(element)

        return list(components_dict.values())
