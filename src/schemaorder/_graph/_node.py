"""Node and edge records of the commit order graph."""

from collections.abc import Hashable
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Generic, TypeVar

T = TypeVar("T")


class NodeState(IntEnum):
    """Traversal colour of a node during a sort.

    The values are ordered: a node only ever moves to a higher state.
    """

    NOT_VISITED = 0
    IN_PROGRESS = 1
    VISITED = 2


@dataclass(frozen=True, slots=True)
class CommitOrderEdge:
    """A weighted dependency from ``source`` to ``target``.

    Attributes:
        source: Key of the node the edge is stored on.
        target: Key of the node the edge points to.
        weight: Cycle-breaking priority. In a two-node cycle the edge with
            the strictly lower weight is the one that gets broken.

    """

    source: Hashable
    target: Hashable
    weight: int


@dataclass(slots=True)
class CommitOrderNode(Generic[T]):
    """A vertex of the commit order graph.

    Attributes:
        key: Caller-supplied unique key.
        value: Opaque payload, returned by identity from ``sort()``.
        state: Current traversal colour.
        dependencies: Outgoing edges keyed by target, in registration order.

    """

    key: Hashable
    value: T
    state: NodeState = NodeState.NOT_VISITED
    dependencies: dict[Hashable, CommitOrderEdge] = field(default_factory=dict)
