"""Incremental topological ordering (Pearce & Kelly, 2006).

Keeps a valid topological order of a growing DAG. When a new edge x → y
already agrees with the order (ord[x] < ord[y]) it is inserted in O(1).
Otherwise only the vertices whose positions lie between ord[y] and ord[x]
are searched and reordered, which is much cheaper than a full
reachability search on large, sparse causal networks.

Reference: D. J. Pearce and P. H. J. Kelly, "A dynamic topological sort
algorithm for directed acyclic graphs", ACM J. Exp. Algorithmics 11 (2006).
"""

from typing import Hashable, Iterable, Optional


class IncrementalTopoOrder:
    """A DAG that rejects edges which would close a cycle.

    Args:
        vertices: Initial vertices, placed in the given order.
    """

    def __init__(self, vertices: Optional[Iterable[Hashable]] = None):
        self._ord: dict = {}
        self._succ: dict = {}
        self._pred: dict = {}
        for v in vertices or ():
            self.add_vertex(v)

    def __len__(self) -> int:
        return len(self._ord)

    def __contains__(self, v) -> bool:
        return v in self._ord

    def add_vertex(self, v: Hashable) -> None:
        """Append a vertex at the end of the current order (no-op if present)."""
        if v in self._ord:
            return
        self._ord[v] = len(self._ord)
        self._succ[v] = set()
        self._pred[v] = set()

    def has_edge(self, u, v) -> bool:
        return u in self._succ and v in self._succ[u]

    def add_edge(self, x: Hashable, y: Hashable) -> bool:
        """Insert x → y unless it would create a directed cycle.

        Unknown vertices are added first. Self-loops are rejected.

        Returns:
            True if the edge is now in the graph, False if it was rejected.
            A rejected edge leaves the graph and the order unchanged.
        """
        self.add_vertex(x)
        self.add_vertex(y)
        if x == y:
            return False
        if y in self._succ[x]:
            return True

        lb, ub = self._ord[y], self._ord[x]
        if lb < ub:
            delta_f = self._forward(y, ub, x)
            if delta_f is None:
                return False
            delta_b = self._backward(x, lb)
            self._reorder(delta_b, delta_f)

        self._succ[x].add(y)
        self._pred[y].add(x)
        return True

    def order(self) -> list:
        """Return all vertices in topological order."""
        return sorted(self._ord, key=self._ord.__getitem__)

    # ── Pearce–Kelly internals ────────────────────────────────────────────────

    def _forward(self, start, ub: int, target) -> Optional[list]:
        # Vertices reachable from start inside the affected region, or None
        # when target is among them (the new edge would close a cycle).
        seen = {start}
        stack = [start]
        while stack:
            n = stack.pop()
            for w in self._succ[n]:
                if w == target:
                    return None
                if w not in seen and self._ord[w] < ub:
                    seen.add(w)
                    stack.append(w)
        return list(seen)

    def _backward(self, start, lb: int) -> list:
        seen = {start}
        stack = [start]
        while stack:
            n = stack.pop()
            for w in self._pred[n]:
                if w not in seen and self._ord[w] > lb:
                    seen.add(w)
                    stack.append(w)
        return list(seen)

    def _reorder(self, delta_b: list, delta_f: list) -> None:
        # Everything that reaches x moves in front of everything y reaches,
        # reusing the same pool of positions.
        delta_b.sort(key=self._ord.__getitem__)
        delta_f.sort(key=self._ord.__getitem__)
        moved = delta_b + delta_f
        slots = sorted(self._ord[v] for v in moved)
        for v, pos in zip(moved, slots):
            self._ord[v] = pos
