#!/usr/bin/env python3
"""
Entry point: load a topology, build the routing engine, run the shell.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .cli import CliShell
from .config import EngineConfig, load_config
from .engine import RoutingEngine
from .errors import LinkRouteError


def parse_args(argv: list[str]) -> argparse.Namespace:
  parser = argparse.ArgumentParser(
      description="Weighted network with cached shortest paths and failure-aware delivery.",
  )
  parser.add_argument("--config", default=None, help="Topology definition file (YAML); built-in sample when omitted")
  parser.add_argument("--log-level", default="info", choices=["trace", "debug", "info", "warning", "error"])
  parser.add_argument("--strict", action="store_true", help="Refuse lookups on a stale route table")
  parser.add_argument("--seed", type=int, default=None, help="Seed for the packet sender draws")
  return parser.parse_args(argv)


def setup_logging(level_name: str) -> None:
  level = logging.getLevelName(level_name.upper())
  if isinstance(level, str):
    level = logging.INFO

  logging.basicConfig(
      level=level,
      format="%(asctime)s %(levelname)-5s [%(threadName)s] %(name)s: %(message)s",
  )
  if level_name == "trace":
    logging.getLogger().setLevel(5)
    logging.addLevelName(5, "TRACE")


def build_config(args: argparse.Namespace) -> EngineConfig:
  config = load_config(Path(args.config)) if args.config else EngineConfig.sample()
  if args.strict:
    config.strict_routes = True
  if args.seed is not None:
    config.seed = args.seed
  return config


def main(argv: list[str]) -> int:
  args = parse_args(argv)
  setup_logging(args.log_level)

  try:
    engine = RoutingEngine.from_config(build_config(args))
  except (LinkRouteError, OSError) as exc:
    logging.error("failed to start: %s", exc)
    return 1

  cli = CliShell(engine=engine)
  logging.info("engine started, type 'help' for commands")
  try:
    cli.run()
  except KeyboardInterrupt:
    logging.warning("interrupt received, shutting down")
  finally:
    cli.stop()

  return 0


def run(argv: Optional[list[str]] = None) -> None:
  sys.exit(main(sys.argv[1:] if argv is None else argv))


if __name__ == "__main__":
  run()
