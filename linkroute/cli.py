"""
Interactive shell used to drive and inspect a running routing engine.

This is the command layer: it is the only place where typed engine errors are
translated into log messages.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Deque, Iterable, List, Optional

from .display import format_matrix, format_matrix_with_labels
from .errors import LinkRouteError

LOGGER = logging.getLogger(__name__)


class CliShell:
  def __init__(self, engine: "RoutingEngine") -> None:
    self.engine = engine
    self._running = threading.Event()
    self._running.set()
    self._commands = {
        "show": self._cmd_show,
        "add": self._cmd_add,
        "remove": self._cmd_remove,
        "set": self._cmd_set,
        "path": self._cmd_path,
        "route": self._cmd_route,
        "search": self._cmd_search,
        "recompute": self._cmd_recompute,
        "send": self._cmd_send,
        "quit": self._cmd_quit,
        "exit": self._cmd_quit,
        "history": self._cmd_history,
        "help": self._cmd_help,
    }
    self._history: Deque[str] = deque(maxlen=50)

  @property
  def running(self) -> bool:
    return self._running.is_set()

  def run(self) -> None:
    while self._running.is_set():
      try:
        line = input("> ")
      except EOFError:
        break
      try:
        self.execute(line)
      except Exception:  # pragma: no cover - interactive diagnostics
        LOGGER.exception("command failed")

  def execute(self, line: str) -> bool:
    """
    Run one command line.  Returns ``False`` when the command was rejected.
    """
    line = line.strip()
    if not line:
      return True
    self._history.append(line)
    tokens = line.split()
    command = tokens[0]
    handler = self._commands.get(command)
    if handler is None:
      LOGGER.warning("unknown command: %s", command)
      return False
    try:
      return handler(tokens[1:]) is not False
    except LinkRouteError as exc:
      LOGGER.warning("%s: %s", command, exc)
      return False

  def stop(self) -> None:
    self._running.clear()

  # ----------------------------------------------------------------- commands
  def _cmd_show(self, args: Iterable[str]) -> bool:
    sub = list(args)
    if not sub:
      LOGGER.info("usage: show <graph|routes|matrix|status>")
      return False
    topic = sub[0]
    if topic == "graph":
      self._show_graph()
    elif topic == "routes":
      self._show_routes()
    elif topic == "matrix":
      self._show_matrix()
    elif topic == "status":
      self._show_status()
    else:
      LOGGER.warning("unsupported show topic: %s", topic)
      return False
    return True

  def _cmd_add(self, args: Iterable[str]) -> bool:
    sub = list(args)
    if len(sub) == 2 and sub[0] == "node":
      self.engine.add_node(sub[1])
      return True
    if len(sub) == 4 and sub[0] == "edge":
      cost = _parse_cost(sub[3])
      if cost is None:
        LOGGER.warning("cost must be a non-negative integer: %s", sub[3])
        return False
      self.engine.add_edge(sub[1], sub[2], cost)
      return True
    LOGGER.info("usage: add node <id> | add edge <source> <target> <cost>")
    return False

  def _cmd_remove(self, args: Iterable[str]) -> bool:
    sub = list(args)
    if len(sub) == 2 and sub[0] == "node":
      self.engine.remove_node(sub[1])
      return True
    if len(sub) == 3 and sub[0] == "edge":
      self.engine.remove_edge(sub[1], sub[2])
      return True
    if len(sub) == 3 and sub[0] == "link":
      self.engine.remove_link(sub[1], sub[2])
      return True
    LOGGER.info("usage: remove node <id> | remove edge <source> <target> | remove link <a> <b>")
    return False

  def _cmd_set(self, args: Iterable[str]) -> bool:
    sub = list(args)
    if len(sub) != 2 or sub[1] not in ("up", "down"):
      LOGGER.info("usage: set <id> up|down")
      return False
    self.engine.set_node_availability(sub[0], sub[1] == "up")
    return True

  def _cmd_path(self, args: Iterable[str]) -> bool:
    sub = list(args)
    if len(sub) != 2:
      LOGGER.info("usage: path <source> <target>")
      return False
    entry = self.engine.get_shortest_path(sub[0], sub[1])
    if entry is None:
      LOGGER.info("no cached path from %s to %s", sub[0], sub[1])
      return True
    LOGGER.info("%s cost %s", "->".join(entry.path), entry.cost)
    return True

  def _cmd_route(self, args: Iterable[str]) -> bool:
    sub = list(args)
    if len(sub) != 2:
      LOGGER.info("usage: route <source> <target>")
      return False
    path = self.engine.route_packet(sub[0], sub[1])
    cost = self.engine.path_cost(path)
    LOGGER.info("delivered via %s cost %s", "->".join(path), "?" if cost is None else cost)
    return True

  def _cmd_search(self, args: Iterable[str]) -> bool:
    sub = list(args)
    if len(sub) != 2:
      LOGGER.info("usage: search <source> <target>")
      return False
    result = self.engine.search(sub[0], sub[1])
    if result is None:
      LOGGER.info("no live path from %s to %s", sub[0], sub[1])
      return True
    path, cost = result
    LOGGER.info("%s cost %s", "->".join(path), cost)
    return True

  def _cmd_recompute(self, _: Iterable[str]) -> bool:
    count = self.engine.recompute_routes()
    LOGGER.info("route table holds %d routes", count)
    return True

  def _cmd_send(self, args: Iterable[str]) -> bool:
    sub = list(args)
    count = 1
    if sub:
      parsed = _parse_cost(sub[0])
      if parsed is None:
        LOGGER.info("usage: send [count]")
        return False
      count = parsed
    stats = self.engine.simulate_packets(count)
    LOGGER.info("this run: %s", stats.summary())
    LOGGER.info("lifetime: %s", self.engine.packet_stats().summary())
    return True

  def _cmd_quit(self, _: Iterable[str]) -> bool:
    LOGGER.info("exiting CLI")
    self.stop()
    return True

  def _cmd_history(self, _: Iterable[str]) -> bool:
    # The history command itself is the newest entry.
    for number, line in enumerate(list(self._history)[:-1], start=1):
      LOGGER.info("%3d  %s", number, line)
    return True

  def _cmd_help(self, _: Iterable[str]) -> bool:
    LOGGER.info(
        "commands: show graph|routes|matrix|status, add node|edge, remove node|edge|link, "
        "set <id> up|down, path|route|search <a> <b>, recompute, send [n], history, quit/exit"
    )
    return True

  # ------------------------------------------------------------------- views
  def _show_graph(self) -> None:
    snapshot = self.engine.snapshot()
    nodes = snapshot["nodes"]
    if not nodes:
      LOGGER.info("graph empty")
      return
    for node in nodes:
      LOGGER.info("node %s %s", node["id"], "up" if node["available"] else "down")
    for edge in snapshot["edges"]:
      LOGGER.info("edge %s->%s cost %s", edge["source"], edge["target"], edge["cost"])

  def _show_routes(self) -> None:
    routes = self.engine.route_table()
    if not routes:
      LOGGER.info("routing table empty")
      return
    for entry in routes:
      LOGGER.info(
          "%s -> %s via %s cost %s",
          entry.source,
          entry.target,
          "->".join(entry.path),
          entry.cost,
      )

  def _show_matrix(self) -> None:
    node_ids, distances, predecessors = self.engine.distance_matrix()
    if not node_ids:
      LOGGER.info("graph empty")
      return
    LOGGER.info("distances:")
    for line in format_matrix_with_labels(distances, node_ids):
      LOGGER.info("%s", line)
    LOGGER.info("predecessors:")
    rows: List[List[str]] = [
        [node_ids[index] if index is not None else "-" for index in row]
        for row in predecessors
    ]
    for line in format_matrix(rows):
      LOGGER.info("%s", line)

  def _show_status(self) -> None:
    snapshot = self.engine.snapshot()
    LOGGER.info(
        "generation=%s nodes=%d edges=%d stale=%s",
        snapshot["generation"],
        len(snapshot["nodes"]),
        len(snapshot["edges"]),
        snapshot["routes_stale"],
    )


def _parse_cost(text: str) -> Optional[int]:
  try:
    value = int(text)
  except ValueError:
    return None
  return value if value >= 0 else None


# Avoid circular import
from typing import TYPE_CHECKING

if TYPE_CHECKING:
  from .engine import RoutingEngine
