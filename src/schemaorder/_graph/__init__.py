"""Graph module providing the commit order calculation.

This module contains:
- CommitOrderCalculator[T]: Weighted topological sort tolerating cycles
- CommitOrderNode / CommitOrderEdge: Vertex and edge records of its graph
"""

from ._commit_order import CommitOrderCalculator, UnknownNodeError
from ._node import CommitOrderEdge, CommitOrderNode, NodeState

__all__ = ["CommitOrderCalculator", "CommitOrderEdge", "CommitOrderNode", "NodeState", "UnknownNodeError"]
