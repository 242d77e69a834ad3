"""Target graph index: output path -> producing edge, with frontier traversal."""

from __future__ import annotations

from typing import Callable, Iterable

from ninja_to_soong.models.edge import BuildEdge


class TargetGraph:
    """Read-only index of every (implicit) output to the edge that produces it."""

    def __init__(self, edges: Iterable[BuildEdge]) -> None:
        self._edges = list(edges)
        self._producers: dict[str, BuildEdge] = {}
        for edge in self._edges:
            for output in edge.all_outputs():
                self._producers[output] = edge

    def __len__(self) -> int:
        return len(self._edges)

    def __contains__(self, path: str) -> bool:
        return path in self._producers

    @property
    def edges(self) -> list[BuildEdge]:
        return list(self._edges)

    def get(self, path: str) -> BuildEdge | None:
        return self._producers.get(path)

    def traverse_from(
        self,
        frontier: Iterable[str],
        visit: Callable[[BuildEdge], bool],
    ) -> list[BuildEdge]:
        """Walk the graph depth-first from *frontier*.

        Each edge is visited at most once: when an edge is reached all of its
        outputs are marked as seen. Paths without a producer (sources, system
        libraries) are skipped. When *visit* returns False the edge's inputs
        are not followed.

        Returns:
            The visited edges, in visiting order.
        """
        stack = list(frontier)
        seen: set[str] = set()
        visited: list[BuildEdge] = []
        while stack:
            path = stack.pop()
            if path in seen:
                continue
            seen.add(path)
            edge = self._producers.get(path)
            if edge is None:
                continue
            seen.update(edge.all_outputs())
            visited.append(edge)
            if visit(edge):
                stack.extend(edge.inputs)
                stack.extend(edge.implicit_deps)
                stack.extend(edge.order_only_deps)
        return visited
