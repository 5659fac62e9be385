"""
Route table cache and the failure-aware delivery routine.

The table is derived from a graph snapshot by a full all-pairs pass and is
replaced wholesale on rebuild.  It is never a source of truth: lookups do not
consult live availability, while ``route_packet`` walks the cached path against
the live graph and splices a local detour around unavailable nodes.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from .errors import (
    NoAlternativePathError,
    NodeMissingError,
    NoPathError,
    UnreachableSourceError,
)
from .graph import Graph
from .topology import NodeId, RouteEntry

LOGGER = logging.getLogger(__name__)


class Router:
  """
  All-pairs route table plus the generation of the graph it was built from.
  """

  def __init__(
      self,
      routes: Optional[Dict[Tuple[NodeId, NodeId], RouteEntry]] = None,
      *,
      generation: int = -1,
  ) -> None:
    self.routes: Dict[Tuple[NodeId, NodeId], RouteEntry] = dict(routes or {})
    self.generation = generation

  @classmethod
  def from_graph(cls, graph: Graph) -> "Router":
    return cls(graph.floyd_warshall_map(), generation=graph.generation)

  def rebuild(self, graph: Graph) -> None:
    self.replace(graph.floyd_warshall_map(), generation=graph.generation)

  def replace(self, routes: Dict[Tuple[NodeId, NodeId], RouteEntry], *, generation: int) -> None:
    self.routes = dict(routes)
    self.generation = generation
    LOGGER.debug("route table replaced: %d routes, generation %d", len(self.routes), generation)

  def is_stale(self, graph: Graph) -> bool:
    return self.generation != graph.generation

  # ------------------------------------------------------------------ lookup
  def get_shortest_path(self, source: NodeId, target: NodeId) -> Optional[RouteEntry]:
    return self.routes.get((source, target))

  def get_routes(self) -> Dict[Tuple[NodeId, NodeId], RouteEntry]:
    return dict(self.routes)

  # ---------------------------------------------------------------- delivery
  def route_packet(self, source: NodeId, target: NodeId, graph: Graph) -> List[NodeId]:
    """
    Deliver along the cached ``source -> target`` path, repairing locally.

    When the node at ``index`` is unavailable the routine backs off one
    position at a time and asks :meth:`Graph.dijkstra_re_path` for a detour
    from the preceding node to ``target`` that avoids the failed node.  The
    first detour found replaces the rest of the path, and any loop it forms
    with the kept prefix is cut out.  Only the broken suffix
    is recomputed; the result is not necessarily globally optimal.
    """
    entry = self.routes.get((source, target))
    if entry is None:
      raise NoPathError(source, target)

    path = list(entry.path)
    index = 0
    while index < len(path):
      node_id = path[index]
      node = graph.get_node(node_id)
      if node is None:
        raise NodeMissingError(node_id, source=source, target=target)

      if node.available:
        index += 1
        continue

      if index == 0:
        raise UnreachableSourceError(source, target)

      back = index
      repaired = False
      while back > 0:
        previous = path[back - 1]
        detour = graph.dijkstra_re_path(previous, target, frozenset({node_id}))
        if detour is not None:
          LOGGER.debug(
              "detour around %s from %s: %s",
              node_id,
              previous,
              "->".join(detour),
          )
          path = path[:back - 1] + detour
          index = back - 1
          index = _drop_loops(path, index)
          repaired = True
          break
        back -= 1

      if not repaired:
        raise NoAlternativePathError(node_id, source=source, target=target)

    return path


def _drop_loops(path: List[NodeId], index: int) -> int:
  """
  Cut every cycle a detour introduced, the source included.

  For each node that occurs more than once, everything from its first
  occurrence up to its last one is removed in place, so consecutive hops stay
  joined.  Returns the cursor adjusted to the shortened path.
  """
  position = 0
  while position < len(path):
    node_id = path[position]
    last = len(path) - 1 - path[::-1].index(node_id)
    if last > position:
      del path[position:last]
      index = min(index, position)
    position += 1
  return index
