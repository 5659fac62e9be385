from __future__ import annotations

import random

import pytest

from linkroute.packet_sender import DeliveryStats, PacketSender, simulate


class ScriptedRandom:
  """Stands in for ``random.Random`` and hands out fixed draws."""

  def __init__(self, values):
    self._values = list(values)
    self.calls = 0

  def randint(self, low, high):
    assert (low, high) == (1, 100)
    self.calls += 1
    return self._values.pop(0)


def test_fresh_sender_reports_zero_rate():
  sender = PacketSender(rng=random.Random(1))
  assert sender.error_rate() == 0.0
  assert sender.stats() == DeliveryStats(sent=0, confirmed=0)


def test_first_packet_is_always_confirmed():
  for seed in range(20):
    sender = PacketSender(rng=random.Random(seed))
    assert sender.send_packet() is True
    assert sender.stats() == DeliveryStats(sent=1, confirmed=1)
    assert sender.error_rate() == 1.0


def test_draw_below_rate_exhausts_retries():
  rng = ScriptedRandom([50, 30, 20, 40, 10])
  sender = PacketSender(rng=rng)
  assert sender.send_packet() is True
  # rate is 1/2 on the second send; 0.30 triggers retries, none of which beat 0.5.
  assert sender.send_packet() is False
  assert rng.calls == 5
  assert sender.stats() == DeliveryStats(sent=2, confirmed=1)


def test_retry_above_rate_confirms():
  rng = ScriptedRandom([50, 30, 90])
  sender = PacketSender(rng=rng)
  sender.send_packet()
  assert sender.send_packet() is True
  assert rng.calls == 3
  assert sender.stats() == DeliveryStats(sent=2, confirmed=2)


def test_draw_above_rate_confirms_without_retry():
  rng = ScriptedRandom([50, 70])
  sender = PacketSender(rng=rng)
  sender.send_packet()
  assert sender.send_packet() is True
  assert rng.calls == 2


def test_zero_retries_fails_on_first_bad_draw():
  rng = ScriptedRandom([50, 30])
  sender = PacketSender(max_retries=0, rng=rng)
  sender.send_packet()
  assert sender.send_packet() is False
  assert rng.calls == 2


def test_negative_retries_rejected():
  with pytest.raises(ValueError):
    PacketSender(max_retries=-1)


def test_counters_stay_consistent():
  sender = PacketSender(rng=random.Random(42))
  outcomes = [sender.send_packet() for _ in range(500)]
  stats = sender.stats()
  assert stats.sent == 500
  assert stats.confirmed == sum(outcomes)
  assert 0 < stats.confirmed <= stats.sent
  assert 0.0 <= sender.error_rate() <= 1.0


def test_seeded_runs_are_reproducible():
  first = PacketSender(rng=random.Random(7))
  second = PacketSender(rng=random.Random(7))
  assert [first.send_packet() for _ in range(100)] == [second.send_packet() for _ in range(100)]


def test_simulate_reports_only_its_own_run():
  sender = PacketSender(rng=random.Random(3))
  first = simulate(sender, 10)
  second = simulate(sender, 15)
  assert first.sent == 10
  assert second.sent == 15
  assert sender.stats().sent == 25
  assert sender.stats().confirmed == first.confirmed + second.confirmed


def test_simulate_zero_and_negative_counts():
  sender = PacketSender(rng=random.Random(3))
  assert simulate(sender, 0) == DeliveryStats(sent=0, confirmed=0)
  with pytest.raises(ValueError):
    simulate(sender, -1)


def test_delivery_stats_derived_values():
  stats = DeliveryStats(sent=4, confirmed=3)
  assert stats.failed == 1
  assert stats.confirmation_ratio == 0.75
  assert stats.summary() == "sent=4, confirmed=3, failed=1, ratio=75.00%"
  assert DeliveryStats(sent=0, confirmed=0).confirmation_ratio == 0.0
