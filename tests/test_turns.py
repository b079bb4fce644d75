"""Tests for turn order and round bookkeeping."""

import random

import pytest

from impostor.engine.turns import TurnOrder, derive_round, pending_round


@pytest.mark.parametrize("size", [3, 4, 7, 12])
def test_shuffled_order_is_a_permutation(size):
    for seed in range(20):
        order = TurnOrder.shuffled(size, random.Random(seed))
        assert sorted(order.order) == list(range(size))


def test_shuffle_produces_different_orders():
    orders = {TurnOrder.shuffled(4, random.Random(seed)).order for seed in range(50)}
    assert len(orders) > 1


def test_non_permutation_is_rejected():
    with pytest.raises(ValueError):
        TurnOrder((0, 0, 2))


@pytest.mark.parametrize("start", [0, 1, 3, 5, 10])
def test_every_window_visits_each_player_once(start, rng):
    order = TurnOrder.shuffled(4, rng)
    assert sorted(order.window(start)) == [0, 1, 2, 3]


def test_seat_at_cycles():
    order = TurnOrder((2, 0, 1))
    assert [order.seat_at(p) for p in range(6)] == [2, 0, 1, 2, 0, 1]


@pytest.mark.parametrize("count,expected", [
    (0, 1), (1, 1), (3, 1),
    (4, 2), (7, 2),
    (8, 3),
])
def test_round_derivation_for_four_players(count, expected):
    assert derive_round(count, 4) == expected


def test_pending_round_only_when_round_advanced():
    assert pending_round(3, 4, 1) is None
    assert pending_round(4, 4, 1) == 2
    assert pending_round(4, 4, 2) is None
