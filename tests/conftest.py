from __future__ import annotations

import pytest

from linkroute.defaults import SAMPLE_LINKS
from linkroute.graph import Graph


def build_graph(links, nodes=()) -> Graph:
  graph = Graph()
  for node_id in nodes:
    graph.add_node(node_id)
  for source, target, cost in links:
    graph.add_edge(source, target, cost)
  return graph


DIAMOND = [("A", "B", 1), ("B", "C", 1), ("C", "D", 1), ("A", "D", 10)]


@pytest.fixture
def diamond() -> Graph:
  """A-B-C-D chain of unit links plus an expensive A-D shortcut."""
  return build_graph(DIAMOND)


@pytest.fixture
def chain() -> Graph:
  return build_graph([("A", "B", 1), ("B", "C", 1), ("C", "D", 1)])


@pytest.fixture
def sample() -> Graph:
  return build_graph(SAMPLE_LINKS)


@pytest.fixture
def make_graph():
  return build_graph
