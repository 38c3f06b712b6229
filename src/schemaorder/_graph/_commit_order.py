"""Commit order calculation over a weighted, possibly cyclic dependency graph."""

import logging
from collections.abc import Hashable, Iterator
from dataclasses import dataclass
from typing import Generic, TypeVar

from ._node import CommitOrderEdge, CommitOrderNode, NodeState

T = TypeVar("T")

logger = logging.getLogger(__name__)


class UnknownNodeError(KeyError):
    """A dependency references a node that was never registered."""


@dataclass(slots=True)
class _Frame(Generic[T]):
    """One pending visit on the traversal stack.

    A draining frame belongs to an in-progress node that lost a cycle: it only
    visits the node's unvisited targets before finalizing it.
    """

    node: CommitOrderNode[T]
    edges: Iterator[CommitOrderEdge]
    draining: bool = False


class CommitOrderCalculator(Generic[T]):
    """Topological sorting of a directed graph that may contain cycles.

    The graph is traversed depth first and the commit order is the reverse of
    the post order of that traversal. An edge ``a -> b`` places ``a`` before
    ``b`` in the result. When the traversal runs into a node that is still in
    progress and that node holds a lighter edge back to the current one, the
    lighter edge is broken: the in-progress node is finalized on the spot.

    Running time is linear in the number of nodes and edges.

    The calculator holds state for a single sort only. ``sort()`` clears the
    graph, so the same instance can be reused for an unrelated graph. It is not
    safe to share one instance between threads.

    Example:
        >>> calc = CommitOrderCalculator[str]()
        >>> calc.add_node("a", "A")
        >>> calc.add_node("b", "B")
        >>> calc.add_dependency("b", "a", 1)
        >>> calc.sort()
        ['B', 'A']

    """

    def __init__(self) -> None:
        self._nodes: dict[Hashable, CommitOrderNode[T]] = {}
        self._sorted: list[T] = []

    def has_node(self, key: Hashable) -> bool:
        """Check whether a node with the given key is registered."""
        return key in self._nodes

    def add_node(self, key: Hashable, value: T) -> None:
        """Register a node.

        Registering an existing key replaces the node, dropping its edges.

        Args:
            key: Unique key of the node.
            value: Payload returned by ``sort()``.

        """
        self._nodes[key] = CommitOrderNode(key=key, value=value)

    def add_dependency(self, from_key: Hashable, to_key: Hashable, weight: int) -> None:
        """Register an edge placing ``from_key`` before ``to_key``.

        A second edge between the same pair replaces the first. ``to_key`` may
        be registered later, as long as it exists when ``sort()`` runs.

        Args:
            from_key: Key of the node the edge starts from.
            to_key: Key of the node the edge points to.
            weight: Cycle-breaking priority of the edge.

        Raises:
            UnknownNodeError: If ``from_key`` is not registered.

        """
        try:
            node = self._nodes[from_key]
        except KeyError:
            msg = f"Cannot add dependency from unknown node {from_key!r}"
            raise UnknownNodeError(msg) from None

        node.dependencies[to_key] = CommitOrderEdge(source=from_key, target=to_key, weight=weight)

    def sort(self) -> list[T]:
        """Return all payloads in commit order and reset the calculator.

        Returns:
            Every registered payload exactly once.

        Raises:
            UnknownNodeError: If an edge points to an unregistered node. The
                calculator is reset in that case too.

        """
        try:
            self._check_targets()
            logger.debug("Sorting %d nodes", len(self._nodes))
            for node in self._nodes.values():
                if node.state is NodeState.NOT_VISITED:
                    self._visit(node)
            sorted_values = self._sorted
        finally:
            self._nodes = {}
            self._sorted = []

        sorted_values.reverse()
        return sorted_values

    def _check_targets(self) -> None:
        for node in self._nodes.values():
            for edge in node.dependencies.values():
                if edge.target not in self._nodes:
                    msg = f"Node {edge.source!r} depends on unknown node {edge.target!r}"
                    raise UnknownNodeError(msg)

    def _visit(self, start: CommitOrderNode[T]) -> None:
        start.state = NodeState.IN_PROGRESS
        stack = [_Frame(start, iter(start.dependencies.values()))]

        while stack:
            frame = stack[-1]
            edge = next(frame.edges, None)

            if edge is None:
                stack.pop()
                self._finalize(frame.node)
                continue

            adjacent = self._nodes[edge.target]

            match adjacent.state:
                case NodeState.NOT_VISITED:
                    adjacent.state = NodeState.IN_PROGRESS
                    stack.append(_Frame(adjacent, iter(adjacent.dependencies.values())))
                case NodeState.IN_PROGRESS if not frame.draining:
                    back_edge = adjacent.dependencies.get(frame.node.key)
                    if back_edge is not None and back_edge.weight < edge.weight:
                        logger.debug(
                            "Breaking cycle: %r -> %r (%d) wins over %r -> %r (%d)",
                            edge.source,
                            edge.target,
                            edge.weight,
                            back_edge.source,
                            back_edge.target,
                            back_edge.weight,
                        )
                        stack.append(_Frame(adjacent, iter(adjacent.dependencies.values()), draining=True))
                case _:
                    pass

    def _finalize(self, node: CommitOrderNode[T]) -> None:
        if node.state is NodeState.VISITED:
            return
        node.state = NodeState.VISITED
        self._sorted.append(node.value)

    def __len__(self) -> int:
        """Return the number of registered nodes."""
        return len(self._nodes)

    def __contains__(self, key: Hashable) -> bool:
        """Check if a node is registered."""
        return self.has_node(key)
