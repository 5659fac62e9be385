"""
路由引擎上下文对象。

引擎显式持有拓扑（Graph）、路由表缓存（Router）与可靠性模拟器
（PacketSender），每个资源各由一把互斥锁保护，调用方通过引擎方法访问，
不存在进程级全局状态。

需要同时持有两把锁时，顺序固定为先 Graph 后 Router。
"""

from __future__ import annotations

import logging
import random
import threading
from typing import Dict, List, Optional, Tuple

from .config import EngineConfig
from .errors import StaleRouteTableError
from .graph import Graph
from .packet_sender import DeliveryStats, PacketSender, simulate
from .router import Router
from .topology import NodeId, RouteEntry

LOGGER = logging.getLogger(__name__)


class RoutingEngine:

  def __init__(
      self,
      graph: Optional[Graph] = None,
      *,
      config: Optional[EngineConfig] = None,
      sender: Optional[PacketSender] = None,
  ) -> None:
    self.config = config or EngineConfig()
    self.graph = graph if graph is not None else Graph()
    self.router = Router.from_graph(self.graph)
    self.sender = sender or PacketSender(
        max_retries=self.config.max_retries,
        rng=random.Random(self.config.seed),
    )
    self._graph_lock = threading.Lock()
    self._router_lock = threading.Lock()
    self._sender_lock = threading.Lock()

  @classmethod
  def from_config(cls, config: EngineConfig) -> "RoutingEngine":
    """
    Seed a graph from ``config`` and build the initial route table.
    """
    graph = Graph()
    for node_id in config.nodes:
      if not graph.has_node(node_id):
        graph.add_node(node_id)
    for source, target, cost in config.links:
      graph.add_edge(source, target, cost)
    for node_id in config.unavailable:
      graph.set_node_availability(node_id, False)

    engine = cls(graph, config=config)
    LOGGER.info(
        "engine ready: %d nodes, %d routes",
        graph.node_count(),
        len(engine.router.routes),
    )
    return engine

  # ---------------------------------------------------------------- topology
  def add_node(self, node_id: NodeId) -> None:
    with self._graph_lock:
      self.graph.add_node(node_id)
    LOGGER.info("node %s added", node_id)

  def add_edge(self, source: NodeId, target: NodeId, cost: int) -> None:
    """
    Add a link and, unless disabled, rebuild the route table.

    The graph lock is released before the router lock is taken, so a reader
    running in between sees the new link alongside the previous table.
    """
    with self._graph_lock:
      self.graph.add_edge(source, target, cost)
      LOGGER.info("link %s<->%s added with cost %s", source, target, cost)
      if not self.config.recompute_on_add_edge:
        return
      routes = self.graph.floyd_warshall_map()
      generation = self.graph.generation
    self._install_routes(routes, generation)

  def remove_node(self, node_id: NodeId) -> None:
    with self._graph_lock:
      self.graph.remove_node(node_id)
    LOGGER.info("node %s removed; incident edges kept", node_id)

  def remove_edge(self, source: NodeId, target: NodeId) -> None:
    with self._graph_lock:
      self.graph.remove_edge(source, target)
    LOGGER.info("edge %s->%s removed; reverse direction kept", source, target)

  def remove_link(self, a: NodeId, b: NodeId) -> None:
    with self._graph_lock:
      self.graph.remove_link(a, b)
    LOGGER.info("link %s<->%s removed", a, b)

  def set_node_availability(self, node_id: NodeId, available: bool) -> None:
    with self._graph_lock:
      self.graph.set_node_availability(node_id, available)
    LOGGER.info("node %s marked %s", node_id, "up" if available else "down")

  def recompute_routes(self) -> int:
    """
    Rebuild the route table from the current topology; returns the route count.
    """
    with self._graph_lock:
      routes = self.graph.floyd_warshall_map()
      generation = self.graph.generation
    self._install_routes(routes, generation)
    return len(routes)

  def _install_routes(self, routes: Dict[Tuple[NodeId, NodeId], RouteEntry], generation: int) -> None:
    with self._router_lock:
      if generation < self.router.generation:
        LOGGER.debug("discarding route table from generation %d", generation)
        return
      self.router.replace(routes, generation=generation)
    LOGGER.info("route table rebuilt: %d routes at generation %d", len(routes), generation)

  # ----------------------------------------------------------------- routing
  def get_shortest_path(self, source: NodeId, target: NodeId) -> Optional[RouteEntry]:
    with self._graph_lock:
      with self._router_lock:
        self._check_fresh(source, target)
        return self.router.get_shortest_path(source, target)

  def route_packet(self, source: NodeId, target: NodeId) -> List[NodeId]:
    with self._graph_lock:
      with self._router_lock:
        self._check_fresh(source, target)
        path = self.router.route_packet(source, target, self.graph)
    LOGGER.debug("packet %s->%s routed via %s", source, target, "->".join(path))
    return path

  def search(self, source: NodeId, target: NodeId) -> Optional[Tuple[List[NodeId], int]]:
    """
    Live availability-aware search, bypassing the route table.
    """
    with self._graph_lock:
      return self.graph.dijkstra_predecessors(source, target)

  def path_cost(self, path: List[NodeId]) -> Optional[int]:
    with self._graph_lock:
      return self.graph.path_cost(path)

  def is_stale(self) -> bool:
    with self._graph_lock:
      with self._router_lock:
        return self.router.is_stale(self.graph)

  def _check_fresh(self, source: NodeId, target: NodeId) -> None:
    # Caller holds both locks.
    if not self.router.is_stale(self.graph):
      return
    if self.config.strict_routes:
      raise StaleRouteTableError(
          source=source,
          target=target,
          built_from=self.router.generation,
          current=self.graph.generation,
      )
    LOGGER.warning(
        "serving %s->%s from a stale route table (generation %d, graph at %d)",
        source,
        target,
        self.router.generation,
        self.graph.generation,
    )

  # ------------------------------------------------------------------- views
  def snapshot(self) -> Dict[str, object]:
    with self._graph_lock:
      with self._router_lock:
        view = self.graph.snapshot()
        view["routes_stale"] = self.router.is_stale(self.graph)
    return view

  def route_table(self) -> List[RouteEntry]:
    with self._router_lock:
      routes = self.router.get_routes()
    return [routes[key] for key in sorted(routes)]

  def distance_matrix(self) -> Tuple[List[NodeId], List[List[int]], List[List[Optional[int]]]]:
    with self._graph_lock:
      node_ids = self.graph.get_node_ids()
      distances, predecessors = self.graph.floyd_warshall()
    return node_ids, distances, predecessors

  # ----------------------------------------------------------------- packets
  def send_packet(self) -> bool:
    with self._sender_lock:
      return self.sender.send_packet()

  def simulate_packets(self, count: int) -> DeliveryStats:
    with self._sender_lock:
      return simulate(self.sender, count)

  def packet_stats(self) -> DeliveryStats:
    with self._sender_lock:
      return self.sender.stats()
