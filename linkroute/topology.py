"""
Identity and connectivity primitives shared by the graph and the route table.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

NodeId = str


@dataclass
class Node:
  id: NodeId
  available: bool = True


@dataclass(frozen=True)
class Edge:
  """Directed arc; the graph always stores it next to its reverse twin."""

  source: NodeId
  target: NodeId
  cost: int

  def key(self) -> Tuple[NodeId, NodeId]:
    return (self.source, self.target)

  def reversed(self) -> "Edge":
    return Edge(source=self.target, target=self.source, cost=self.cost)


@dataclass(frozen=True)
class RouteEntry:
  path: Tuple[NodeId, ...]
  cost: int

  @property
  def source(self) -> NodeId:
    return self.path[0]

  @property
  def target(self) -> NodeId:
    return self.path[-1]
