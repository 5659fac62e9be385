"""
Mutable network topology and the shortest-path searches that run over it.

Edges are stored directed, keyed by ``(source, target)``, and always inserted
in pairs so the graph behaves as undirected with symmetric weights.  The two
directions are independent entries: ``remove_edge`` drops exactly one of them,
``remove_link`` drops both.

Removing a node does not cascade to its edges.  Dangling edges stay in the
store and every search treats an edge with a missing endpoint as absent.
"""

from __future__ import annotations

from heapq import heappop, heappush
from typing import AbstractSet, Dict, List, Optional, Sequence, Set, Tuple

from .defaults import UNREACHABLE_COST
from .errors import (
    DuplicateEdgeError,
    DuplicateNodeError,
    EdgeNotFoundError,
    InvalidCostError,
    NodeNotFoundError,
)
from .topology import Edge, Node, NodeId, RouteEntry

PairKey = Tuple[NodeId, NodeId]


class Graph:
  """
  Vertex set plus directed arc set, with a generation counter that moves on
  every topology change so cached route tables can detect that they are stale.
  """

  def __init__(self) -> None:
    self._nodes: Dict[NodeId, Node] = {}
    self._edges: Dict[PairKey, Edge] = {}
    self.generation = 0

  # ---------------------------------------------------------------- mutation
  def add_node(self, node_id: NodeId) -> None:
    if node_id in self._nodes:
      raise DuplicateNodeError(node_id)
    self._nodes[node_id] = Node(id=node_id)
    self._bump()

  def add_edge(self, source: NodeId, target: NodeId, cost: int) -> None:
    """
    Insert ``source -> target`` and its reverse twin with the same ``cost``.

    Missing endpoints are created as available nodes; existing endpoints keep
    their current availability.
    """
    if isinstance(cost, bool) or not isinstance(cost, int) or cost < 0:
      raise InvalidCostError(cost)
    if (source, target) in self._edges:
      raise DuplicateEdgeError(source, target)

    for node_id in (source, target):
      if node_id not in self._nodes:
        self._nodes[node_id] = Node(id=node_id)

    edge = Edge(source=source, target=target, cost=cost)
    reverse = edge.reversed()
    self._edges[edge.key()] = edge
    self._edges[reverse.key()] = reverse
    self._bump()

  def remove_node(self, node_id: NodeId) -> None:
    if node_id not in self._nodes:
      raise NodeNotFoundError(node_id)
    del self._nodes[node_id]
    self._bump()

  def remove_edge(self, source: NodeId, target: NodeId) -> None:
    """
    Remove the single directed entry ``source -> target``.

    The reverse direction is left untouched and stays traversable.
    """
    if (source, target) not in self._edges:
      raise EdgeNotFoundError(source, target)
    del self._edges[(source, target)]
    self._bump()

  def remove_link(self, a: NodeId, b: NodeId) -> None:
    """
    Remove both directions between ``a`` and ``b``.
    """
    removed = False
    for key in ((a, b), (b, a)):
      if key in self._edges:
        del self._edges[key]
        removed = True
    if not removed:
      raise EdgeNotFoundError(a, b)
    self._bump()

  def set_node_availability(self, node_id: NodeId, available: bool) -> None:
    node = self._nodes.get(node_id)
    if node is None:
      raise NodeNotFoundError(node_id)
    # Availability is checked at delivery time; the generation stays put.
    node.available = bool(available)

  def _bump(self) -> None:
    self.generation += 1

  # ----------------------------------------------------------------- queries
  def has_node(self, node_id: NodeId) -> bool:
    return node_id in self._nodes

  def get_node(self, node_id: NodeId) -> Optional[Node]:
    return self._nodes.get(node_id)

  def is_node_available(self, node_id: NodeId) -> bool:
    node = self._nodes.get(node_id)
    return node is not None and node.available

  def has_edge(self, source: NodeId, target: NodeId) -> bool:
    return (source, target) in self._edges

  def get_edge(self, source: NodeId, target: NodeId) -> Optional[Edge]:
    return self._edges.get((source, target))

  def get_link(self, a: NodeId, b: NodeId) -> Optional[Edge]:
    """
    Undirected lookup: ``(a, b)`` or, failing that, ``(b, a)``.
    """
    return self._edges.get((a, b)) or self._edges.get((b, a))

  def get_neighbors(self, node_id: NodeId) -> Optional[List[NodeId]]:
    """
    Nodes joined to ``node_id`` by an edge in either direction.

    Returns ``None`` when ``node_id`` itself is not part of the graph.  The
    neighbours are not filtered for existence; callers prune dangling ends.
    """
    if node_id not in self._nodes:
      return None
    return sorted(self._undirected_neighbors().get(node_id, set()))

  def get_node_ids(self) -> List[NodeId]:
    return sorted(self._nodes)

  def edges(self) -> List[Edge]:
    return [self._edges[key] for key in sorted(self._edges)]

  def node_count(self) -> int:
    return len(self._nodes)

  def path_cost(self, path: Sequence[NodeId]) -> Optional[int]:
    """
    Sum of link costs along ``path`` using the undirected view, or ``None``
    when two consecutive hops are not joined.
    """
    total = 0
    for a, b in zip(path, path[1:]):
      link = self.get_link(a, b)
      if link is None:
        return None
      total += link.cost
    return total

  def snapshot(self) -> Dict[str, object]:
    """
    Plain-data view of the topology for rendering and the CLI.
    """
    return {
        "generation": self.generation,
        "nodes": [
            {"id": node_id, "available": self._nodes[node_id].available}
            for node_id in sorted(self._nodes)
        ],
        "edges": [
            {"source": edge.source, "target": edge.target, "cost": edge.cost}
            for edge in self.edges()
        ],
    }

  # --------------------------------------------------------- single source
  def dijkstra(self, start: NodeId) -> Dict[NodeId, int]:
    """
    Distances from ``start`` to every reachable node over directed edges.

    Availability is ignored; every existing node is traversable.
    """
    if start not in self._nodes:
      raise NodeNotFoundError(start)

    outgoing = self._outgoing()
    dist: Dict[NodeId, int] = {start: 0}
    visited: Set[NodeId] = set()
    heap: List[Tuple[int, NodeId]] = [(0, start)]

    while heap:
      cost, vertex = heappop(heap)
      if vertex in visited:
        continue
      visited.add(vertex)
      for edge in outgoing.get(vertex, ()):
        new_cost = cost + edge.cost
        if new_cost < dist.get(edge.target, float("inf")):
          dist[edge.target] = new_cost
          heappush(heap, (new_cost, edge.target))

    return dist

  def dijkstra_predecessors(self, start: NodeId, target: NodeId) -> Optional[Tuple[List[NodeId], int]]:
    """
    Cheapest ``start -> target`` path through available nodes only.

    Returns ``(path, cost)`` or ``None`` when the start is missing or
    unavailable, or the target cannot be reached.
    """
    if not self.is_node_available(start):
      return None

    outgoing = self._outgoing()
    dist: Dict[NodeId, int] = {start: 0}
    predecessors: Dict[NodeId, Optional[NodeId]] = {start: None}
    heap: List[Tuple[int, NodeId]] = [(0, start)]

    while heap:
      cost, vertex = heappop(heap)
      # Availability may have been flipped after the node was queued.
      if not self.is_node_available(vertex):
        continue
      if cost > dist.get(vertex, float("inf")):
        continue
      if vertex == target:
        return _walk_back(predecessors, target), cost

      for edge in outgoing.get(vertex, ()):
        if not self.is_node_available(edge.target):
          continue
        new_cost = cost + edge.cost
        if new_cost < dist.get(edge.target, float("inf")):
          dist[edge.target] = new_cost
          predecessors[edge.target] = vertex
          heappush(heap, (new_cost, edge.target))

    return None

  def dijkstra_re_path(
      self,
      start: NodeId,
      target: NodeId,
      exclude: AbstractSet[NodeId] = frozenset(),
  ) -> Optional[List[NodeId]]:
    """
    Repair search used when a cached path hits an unavailable node.

    Walks the undirected neighbour view, because one direction of a link may
    have been removed on its own.  Nodes in ``exclude``, unavailable nodes and
    nodes that no longer exist are never expanded nor accepted as the goal.
    Returns the path including ``start`` or ``None``.
    """
    neighbors = self._undirected_neighbors()
    dist: Dict[NodeId, int] = {start: 0}
    predecessors: Dict[NodeId, Optional[NodeId]] = {start: None}
    visited: Set[NodeId] = set()
    heap: List[Tuple[int, NodeId]] = [(0, start)]

    while heap:
      cost, vertex = heappop(heap)
      if vertex in visited:
        continue
      visited.add(vertex)

      if vertex in exclude or not self.is_node_available(vertex):
        continue
      if vertex == target:
        return _walk_back(predecessors, target)

      for neighbor in sorted(neighbors.get(vertex, ())):
        if neighbor in exclude or not self.is_node_available(neighbor):
          continue
        link = self.get_link(vertex, neighbor)
        new_cost = cost + link.cost
        if new_cost < dist.get(neighbor, float("inf")):
          dist[neighbor] = new_cost
          predecessors[neighbor] = vertex
          heappush(heap, (new_cost, neighbor))

    return None

  # --------------------------------------------------------------- all pairs
  def floyd_warshall_map(self) -> Dict[PairKey, RouteEntry]:
    """
    Cheapest path and cost for every ordered pair of distinct, connected nodes.

    Cubic in the node count: run it on topology change, not per query.
    """
    nodes = self.get_node_ids()
    dist: Dict[PairKey, int] = {}
    next_hop: Dict[PairKey, NodeId] = {}

    for i in nodes:
      for j in nodes:
        if i == j:
          dist[(i, j)] = 0
          continue
        edge = self._edges.get((i, j))
        if edge is not None:
          dist[(i, j)] = edge.cost
          next_hop[(i, j)] = j
        else:
          dist[(i, j)] = UNREACHABLE_COST

    for k in nodes:
      for i in nodes:
        ik = dist[(i, k)]
        if ik >= UNREACHABLE_COST:
          continue
        for j in nodes:
          kj = dist[(k, j)]
          if kj >= UNREACHABLE_COST:
            continue
          if ik + kj < dist[(i, j)]:
            dist[(i, j)] = ik + kj
            next_hop[(i, j)] = next_hop[(i, k)]

    routes: Dict[PairKey, RouteEntry] = {}
    for i in nodes:
      for j in nodes:
        if i == j:
          continue
        path = _follow_next_hops(i, j, next_hop, limit=len(nodes))
        if path is not None:
          routes[(i, j)] = RouteEntry(path=tuple(path), cost=dist[(i, j)])
    return routes

  def build_index_map(self) -> Dict[NodeId, int]:
    return {node_id: index for index, node_id in enumerate(self.get_node_ids())}

  def build_initial_cost_matrix(self) -> List[List[int]]:
    index_map = self.build_index_map()
    n = len(index_map)
    matrix = [[UNREACHABLE_COST] * n for _ in range(n)]
    for i in range(n):
      matrix[i][i] = 0

    for edge in self._edges.values():
      source_index = index_map.get(edge.source)
      target_index = index_map.get(edge.target)
      if source_index is None or target_index is None:
        continue  # dangling
      if source_index == target_index:
        continue
      matrix[source_index][target_index] = edge.cost
    return matrix

  def floyd_warshall(self) -> Tuple[List[List[int]], List[List[Optional[int]]]]:
    """
    Matrix form of the all-pairs computation, indexed by ``build_index_map``.

    ``predecessors[i][j]`` is the index of the node before ``j`` on the best
    ``i -> j`` path, or ``None`` when ``j`` is unreachable from ``i``.
    """
    distances = self.build_initial_cost_matrix()
    n = len(distances)
    predecessors: List[List[Optional[int]]] = [[None] * n for _ in range(n)]

    for i in range(n):
      for j in range(n):
        if i != j and distances[i][j] < UNREACHABLE_COST:
          predecessors[i][j] = i

    for k in range(n):
      for i in range(n):
        if distances[i][k] >= UNREACHABLE_COST:
          continue
        for j in range(n):
          if distances[k][j] >= UNREACHABLE_COST:
            continue
          new_distance = distances[i][k] + distances[k][j]
          if new_distance < distances[i][j]:
            distances[i][j] = new_distance
            predecessors[i][j] = predecessors[k][j]

    return distances, predecessors

  # --------------------------------------------------------------- internals
  def _outgoing(self) -> Dict[NodeId, List[Edge]]:
    index: Dict[NodeId, List[Edge]] = {}
    for key in sorted(self._edges):
      edge = self._edges[key]
      if edge.source in self._nodes and edge.target in self._nodes:
        index.setdefault(edge.source, []).append(edge)
    return index

  def _undirected_neighbors(self) -> Dict[NodeId, Set[NodeId]]:
    index: Dict[NodeId, Set[NodeId]] = {}
    for source, target in self._edges:
      index.setdefault(source, set()).add(target)
      index.setdefault(target, set()).add(source)
    return index


def _walk_back(predecessors: Dict[NodeId, Optional[NodeId]], target: NodeId) -> List[NodeId]:
  path: List[NodeId] = []
  current: Optional[NodeId] = target
  while current is not None:
    path.append(current)
    current = predecessors.get(current)
  path.reverse()
  return path


def _follow_next_hops(
    source: NodeId,
    target: NodeId,
    next_hop: Dict[PairKey, NodeId],
    *,
    limit: int,
) -> Optional[List[NodeId]]:
  if (source, target) not in next_hop:
    return None
  path = [source]
  current = source
  while current != target:
    hop = next_hop.get((current, target))
    if hop is None or len(path) > limit:
      return None
    current = hop
    path.append(current)
  return path
