from __future__ import annotations

import pytest

from linkroute.errors import (
    NoAlternativePathError,
    NodeMissingError,
    NoPathError,
    RoutingError,
    UnreachableSourceError,
)
from linkroute.graph import Graph
from linkroute.router import Router
from linkroute.topology import RouteEntry


def test_lookup_returns_cached_entry(diamond):
  router = Router.from_graph(diamond)
  assert router.get_shortest_path("A", "D") == RouteEntry(path=("A", "B", "C", "D"), cost=3)
  assert router.get_shortest_path("A", "A") is None
  assert router.get_shortest_path("A", "Z") is None


def test_lookup_ignores_live_availability(diamond):
  router = Router.from_graph(diamond)
  diamond.set_node_availability("C", False)
  assert router.get_shortest_path("A", "D").path == ("A", "B", "C", "D")
  assert not router.is_stale(diamond)


def test_topology_change_makes_table_stale(diamond):
  router = Router.from_graph(diamond)
  diamond.add_edge("A", "C", 1)
  assert router.is_stale(diamond)
  assert router.get_shortest_path("A", "C").cost == 2
  router.rebuild(diamond)
  assert not router.is_stale(diamond)
  assert router.get_shortest_path("A", "C").cost == 1


def test_empty_router_is_stale_for_any_graph():
  assert Router().is_stale(Graph())
  assert Router().get_routes() == {}


def test_route_packet_healthy_path_skips_repair(diamond, monkeypatch):
  router = Router.from_graph(diamond)

  def fail(*args, **kwargs):
    raise AssertionError("repair search must not run")

  monkeypatch.setattr(diamond, "dijkstra_re_path", fail)
  assert router.route_packet("A", "D", diamond) == ["A", "B", "C", "D"]


def test_route_packet_returns_a_copy(diamond):
  router = Router.from_graph(diamond)
  path = router.route_packet("A", "D", diamond)
  path.append("X")
  assert router.get_shortest_path("A", "D").path == ("A", "B", "C", "D")


def test_route_packet_repairs_around_interior_node(diamond):
  router = Router.from_graph(diamond)
  diamond.set_node_availability("C", False)
  assert router.route_packet("A", "D", diamond) == ["A", "D"]


def test_route_packet_without_alternative(chain):
  router = Router.from_graph(chain)
  chain.set_node_availability("C", False)
  with pytest.raises(NoAlternativePathError) as excinfo:
    router.route_packet("A", "D", chain)
  assert excinfo.value.failed_node == "C"
  assert excinfo.value.source == "A"
  assert excinfo.value.target == "D"


def test_route_packet_unavailable_source(diamond):
  router = Router.from_graph(diamond)
  diamond.set_node_availability("A", False)
  with pytest.raises(UnreachableSourceError):
    router.route_packet("A", "D", diamond)


def test_route_packet_unavailable_target(diamond):
  router = Router.from_graph(diamond)
  diamond.set_node_availability("D", False)
  with pytest.raises(NoAlternativePathError):
    router.route_packet("A", "D", diamond)


def test_route_packet_deleted_node(diamond):
  router = Router.from_graph(diamond)
  diamond.remove_node("C")
  with pytest.raises(NodeMissingError) as excinfo:
    router.route_packet("A", "D", diamond)
  assert excinfo.value.node_id == "C"


def test_route_packet_without_cached_route(diamond):
  diamond.add_node("Z")
  router = Router.from_graph(diamond)
  with pytest.raises(NoPathError):
    router.route_packet("A", "Z", diamond)


def test_route_packet_backs_off_to_earlier_position(make_graph):
  graph = make_graph([("A", "B", 1), ("B", "C", 1), ("C", "D", 1), ("A", "E", 5), ("E", "D", 5)])
  router = Router.from_graph(graph)
  assert router.get_shortest_path("A", "D").path == ("A", "B", "C", "D")

  # B keeps no way out once C is down, so the detour has to start at A.
  graph.remove_link("A", "B")
  graph.set_node_availability("C", False)
  assert router.route_packet("A", "D", graph) == ["A", "E", "D"]


def test_route_packet_repair_keeps_prefix(make_graph):
  graph = make_graph([
      ("S", "A", 1),
      ("A", "B", 1),
      ("B", "T", 1),
      ("A", "X", 2),
      ("X", "T", 2),
  ])
  router = Router.from_graph(graph)
  assert router.get_shortest_path("S", "T").path == ("S", "A", "B", "T")
  graph.set_node_availability("B", False)
  assert router.route_packet("S", "T", graph) == ["S", "A", "X", "T"]


def test_route_packet_survives_several_failures(make_graph):
  graph = make_graph([
      ("S", "A", 1),
      ("A", "B", 1),
      ("B", "T", 1),
      ("A", "X", 2),
      ("X", "T", 2),
      ("S", "Y", 10),
      ("Y", "T", 10),
  ])
  router = Router.from_graph(graph)
  graph.set_node_availability("B", False)
  graph.set_node_availability("X", False)
  assert router.route_packet("S", "T", graph) == ["S", "Y", "T"]


def test_route_packet_cuts_detour_back_through_source(make_graph):
  graph = make_graph([
      ("S", "A", 1),
      ("A", "B", 1),
      ("B", "T", 1),
      ("S", "Y", 2),
      ("Y", "T", 2),
  ])
  router = Router.from_graph(graph)
  assert router.get_shortest_path("S", "T").path == ("S", "A", "B", "T")
  # The detour from A runs A->S->Y->T and revisits the source.
  graph.set_node_availability("B", False)
  assert router.route_packet("S", "T", graph) == ["S", "Y", "T"]


def test_route_packet_cuts_detour_back_through_interior_node(make_graph):
  graph = make_graph([
      ("S", "A", 1),
      ("A", "B", 1),
      ("B", "C", 1),
      ("C", "T", 1),
      ("A", "Y", 1),
      ("Y", "T", 5),
  ])
  router = Router.from_graph(graph)
  graph.set_node_availability("C", False)
  path = router.route_packet("S", "T", graph)
  assert path == ["S", "A", "Y", "T"]
  assert graph.path_cost(path) == 7


def test_route_packet_properties_on_sample(sample):
  routes = Router.from_graph(sample).get_routes()
  checked = 0
  for (source, target), entry in sorted(routes.items()):
    if len(entry.path) < 3:
      continue
    failed = entry.path[1]
    sample.set_node_availability(failed, False)
    router = Router(routes, generation=sample.generation)
    try:
      path = router.route_packet(source, target, sample)
    except NoAlternativePathError:
      continue
    finally:
      sample.set_node_availability(failed, True)
    checked += 1
    assert failed not in path
    assert path[0] == source
    assert path[-1] == target
    assert len(set(path)) == len(path)
    assert sample.path_cost(path) is not None
  assert checked > 0


def test_routing_errors_share_base_class():
  assert issubclass(NoPathError, RoutingError)
  assert issubclass(NodeMissingError, RoutingError)
