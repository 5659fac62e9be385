"""
Topology and engine settings loaded from YAML.

Layout of the file::

  defaults:
    strict_routes: false
    recompute_on_add_edge: true
    max_retries: 3
    seed: null
  nodes: [X]
  links:
    - [A, B, 100]
    - {source: B, target: C, cost: 5}
  unavailable: [C]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Optional, Tuple

import yaml

from .defaults import MAX_RETRIES, SAMPLE_LINKS
from .errors import ConfigError

Link = Tuple[str, str, int]


@dataclass
class EngineConfig:
  links: List[Link] = field(default_factory=list)
  nodes: List[str] = field(default_factory=list)
  unavailable: List[str] = field(default_factory=list)
  strict_routes: bool = False
  recompute_on_add_edge: bool = True
  max_retries: int = MAX_RETRIES
  seed: Optional[int] = None

  @classmethod
  def sample(cls) -> "EngineConfig":
    """Built-in demo topology used when no file is given."""
    return cls(links=list(SAMPLE_LINKS))


def load_config(path: Path) -> EngineConfig:
  if not path.exists():
    raise FileNotFoundError(f"config file not found: {path}")
  with path.open("r", encoding="utf-8") as stream:
    try:
      data = yaml.safe_load(stream)
    except yaml.YAMLError as exc:
      raise ConfigError(f"invalid YAML: {exc}", path=str(path)) from exc
    except UnicodeDecodeError as exc:
      raise ConfigError(f"not UTF-8 text: {exc}", path=str(path)) from exc
  if data is None:
    data = {}
  return parse_config(data, path=str(path))


def parse_config(data: Any, *, path: Optional[str] = None) -> EngineConfig:
  if not isinstance(data, Mapping):
    raise ConfigError("configuration root must be a mapping", path=path)

  defaults = data.get("defaults") or {}
  if not isinstance(defaults, Mapping):
    raise ConfigError("'defaults' must be a mapping", path=path)

  max_retries = defaults.get("max_retries", MAX_RETRIES)
  if isinstance(max_retries, bool) or not isinstance(max_retries, int) or max_retries < 0:
    raise ConfigError("'max_retries' must be a non-negative integer", path=path)
  seed = defaults.get("seed")
  if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
    raise ConfigError("'seed' must be an integer", path=path)

  return EngineConfig(
      links=[_parse_link(entry, path) for entry in _ensure_list(data, "links", path)],
      nodes=[_node_id(entry, "nodes", path) for entry in _ensure_list(data, "nodes", path)],
      unavailable=[_node_id(entry, "unavailable", path) for entry in _ensure_list(data, "unavailable", path)],
      strict_routes=_ensure_bool(defaults, "strict_routes", False, path),
      recompute_on_add_edge=_ensure_bool(defaults, "recompute_on_add_edge", True, path),
      max_retries=max_retries,
      seed=seed,
  )


# ------------------------------------------------------------------ helpers

def _ensure_list(data: Mapping, key: str, path: Optional[str]) -> List[Any]:
  value = data.get(key)
  if value is None:
    return []
  if not isinstance(value, list):
    raise ConfigError(f"'{key}' must be a list", path=path)
  return value


def _ensure_bool(data: Mapping, key: str, default: bool, path: Optional[str]) -> bool:
  value = data.get(key, default)
  if not isinstance(value, bool):
    raise ConfigError(f"'{key}' must be true or false", path=path)
  return value


def _node_id(value: Any, key: str, path: Optional[str]) -> str:
  if isinstance(value, bool) or not isinstance(value, (str, int)):
    raise ConfigError(f"'{key}' entries must be node ids", path=path)
  node_id = str(value)
  if not node_id:
    raise ConfigError(f"'{key}' entries must be non-empty", path=path)
  return node_id


def _parse_link(entry: Any, path: Optional[str]) -> Link:
  if isinstance(entry, Mapping):
    try:
      source, target, cost = entry["source"], entry["target"], entry["cost"]
    except KeyError as exc:
      raise ConfigError(f"link entry missing {exc.args[0]!r}", path=path) from exc
  elif isinstance(entry, (list, tuple)) and len(entry) == 3:
    source, target, cost = entry
  else:
    raise ConfigError("link entry must be [source, target, cost] or a mapping", path=path)

  if isinstance(cost, bool) or not isinstance(cost, int) or cost < 0:
    raise ConfigError(f"link {source}-{target} cost must be a non-negative integer", path=path)
  return (_node_id(source, "links", path), _node_id(target, "links", path), cost)
