"""
Fixed-width rendering of distance / predecessor matrices for diagnostics.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from .defaults import UNREACHABLE_COST


def format_matrix(rows: Sequence[Sequence[object]], *, placeholder: Optional[object] = None, placeholder_text: str = "-") -> List[str]:
  """
  Centre every cell in a column wide enough for the largest value.

  Cells equal to ``placeholder`` are shown as ``placeholder_text``.
  """
  def cell(value: object) -> str:
    if placeholder is not None and value == placeholder:
      return placeholder_text
    return str(value)

  texts = [[cell(value) for value in row] for row in rows]
  width = max([len(placeholder_text)] + [len(text) for row in texts for text in row])
  return [" ".join(f"{text:^{width}}" for text in row) for row in texts]


def format_matrix_with_labels(
    matrix: Sequence[Sequence[Optional[int]]],
    node_ids: Sequence[str],
    *,
    placeholder: str = "inf",
) -> List[str]:
  """
  Right-aligned matrix with node ids as row and column headers.

  ``UNREACHABLE_COST`` and ``None`` cells are printed as ``placeholder``.
  """
  def cell(value: Optional[int]) -> str:
    if value is None or value >= UNREACHABLE_COST:
      return placeholder
    return str(value)

  width = len(placeholder)
  for row in matrix:
    for value in row:
      width = max(width, len(cell(value)))
  for node_id in node_ids:
    width = max(width, len(node_id))

  lines = [" ".join([" " * width] + [f"{node_id:>{width}}" for node_id in node_ids])]
  for node_id, row in zip(node_ids, matrix):
    lines.append(" ".join([f"{node_id:>{width}}"] + [f"{cell(value):>{width}}" for value in row]))
  return lines
