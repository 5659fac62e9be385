"""
Typed errors raised by the graph, the route table and the configuration layer.

Nothing in the core logs or swallows these; the command layer (``cli``) is the
only place that turns them into user-facing messages.
"""

from __future__ import annotations

from typing import Optional


class LinkRouteError(Exception):
  """Base class for every error raised by the package."""


# ------------------------------------------------------------------- graph

class GraphError(LinkRouteError, ValueError):
  """Topology mutation rejected by the graph."""


class DuplicateNodeError(GraphError):

  def __init__(self, node_id: str) -> None:
    super().__init__(f"node {node_id} already exists")
    self.node_id = node_id


class DuplicateEdgeError(GraphError):

  def __init__(self, source: str, target: str) -> None:
    super().__init__(f"edge {source}->{target} already exists")
    self.source = source
    self.target = target


class NodeNotFoundError(GraphError):

  def __init__(self, node_id: str) -> None:
    super().__init__(f"node {node_id} does not exist")
    self.node_id = node_id


class EdgeNotFoundError(GraphError):

  def __init__(self, source: str, target: str) -> None:
    super().__init__(f"edge {source}->{target} does not exist")
    self.source = source
    self.target = target


class InvalidCostError(GraphError):

  def __init__(self, cost: object) -> None:
    super().__init__(f"edge cost must be a non-negative integer, got {cost!r}")
    self.cost = cost


# ----------------------------------------------------------------- routing

class RoutingError(LinkRouteError):
  """A packet could not be routed between ``source`` and ``target``."""

  def __init__(self, message: str, *, source: str, target: str) -> None:
    super().__init__(message)
    self.source = source
    self.target = target


class NoPathError(RoutingError):

  def __init__(self, source: str, target: str) -> None:
    super().__init__(f"no path from {source} to {target}", source=source, target=target)


class UnreachableSourceError(RoutingError):

  def __init__(self, source: str, target: str) -> None:
    super().__init__(
        f"cannot route packet from {source} to {target}: source unavailable",
        source=source,
        target=target,
    )


class NodeMissingError(RoutingError):

  def __init__(self, node_id: str, *, source: str, target: str) -> None:
    super().__init__(f"node {node_id} does not exist in the graph", source=source, target=target)
    self.node_id = node_id


class NoAlternativePathError(RoutingError):

  def __init__(self, failed_node: str, *, source: str, target: str) -> None:
    super().__init__(
        f"no alternative path from {source} to {target} after {failed_node}",
        source=source,
        target=target,
    )
    self.failed_node = failed_node


class StaleRouteTableError(RoutingError):

  def __init__(
      self,
      *,
      source: str,
      target: str,
      built_from: int,
      current: int,
  ) -> None:
    super().__init__(
        f"route table built from generation {built_from}, graph is at {current}",
        source=source,
        target=target,
    )
    self.built_from = built_from
    self.current = current


# ------------------------------------------------------------------ config

class ConfigError(LinkRouteError, ValueError):
  """Configuration file or mapping is malformed."""

  def __init__(self, message: str, *, path: Optional[str] = None) -> None:
    super().__init__(f"{path}: {message}" if path else message)
    self.path = path
