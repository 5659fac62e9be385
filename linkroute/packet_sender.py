"""
Send/retry/confirm reliability model.

Independent of the graph: every send draws a uniform value in ``(0, 1]`` on a
1/100 grid and compares it with the running ratio ``confirmed / sent``.  That
ratio is reported as the error rate but is really a success ratio, so a sender
that has been doing well rejects more often.  The inversion is kept as is.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional

from .defaults import DRAW_RESOLUTION, MAX_RETRIES


@dataclass(frozen=True)
class DeliveryStats:
  sent: int
  confirmed: int

  @property
  def failed(self) -> int:
    return self.sent - self.confirmed

  @property
  def confirmation_ratio(self) -> float:
    if self.sent == 0:
      return 0.0
    return self.confirmed / self.sent

  def summary(self) -> str:
    return (
        f"sent={self.sent}, confirmed={self.confirmed}, "
        f"failed={self.failed}, ratio={self.confirmation_ratio:.2%}"
    )


class PacketSender:

  def __init__(self, *, max_retries: int = MAX_RETRIES, rng: Optional[random.Random] = None) -> None:
    if max_retries < 0:
      raise ValueError("max_retries must be >= 0")
    self.max_retries = max_retries
    self._rng = rng or random.Random()
    self.sent_packets = 0
    self.confirmed_packets = 0

  def error_rate(self) -> float:
    if self.sent_packets == 0:
      return 0.0
    return self.confirmed_packets / self.sent_packets

  def send_packet(self) -> bool:
    """
    Send one logical packet and return ``True`` once it is confirmed.
    """
    self.sent_packets += 1
    rate = self.error_rate()

    if rate > self._draw():
      for _ in range(self.max_retries):
        if rate < self._draw():
          self.confirmed_packets += 1
          return True
      return False

    self.confirmed_packets += 1
    return True

  def stats(self) -> DeliveryStats:
    return DeliveryStats(sent=self.sent_packets, confirmed=self.confirmed_packets)

  def _draw(self) -> float:
    return self._rng.randint(1, DRAW_RESOLUTION) / DRAW_RESOLUTION


def simulate(sender: PacketSender, count: int) -> DeliveryStats:
  """
  Push ``count`` packets through ``sender`` and return the counters accrued
  by this run alone.
  """
  if count < 0:
    raise ValueError("count must be >= 0")
  before = sender.stats()
  for _ in range(count):
    sender.send_packet()
  after = sender.stats()
  return DeliveryStats(sent=after.sent - before.sent, confirmed=after.confirmed - before.confirmed)
