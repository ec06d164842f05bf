"""Unit tests for the weighted draw engine."""

import random
from collections import Counter

import pytest

from services.raffle import available_pool, draw, draw_uniform
from tests.conftest import make_pool


class ScriptedTickets:
    """RNG stub returning predetermined ticket numbers and recording ranges."""

    def __init__(self, *tickets):
        self.tickets = list(tickets)
        self.ranges = []

    def randint(self, a, b):
        self.ranges.append((a, b))
        return self.tickets.pop(0)

    def randrange(self, stop):
        self.ranges.append((0, stop))
        return self.tickets.pop(0)


ENGINES = pytest.mark.parametrize("engine", [draw, draw_uniform], ids=["weighted", "uniform"])


@ENGINES
def test_draw_returns_requested_count_without_duplicates(engine, sample_pool, seeded_rng):
    for count in range(1, len(sample_pool) + 1):
        winners = engine(sample_pool, count, rng=seeded_rng)
        names = [w.name for w in winners]
        assert len(names) == count
        assert len(set(names)) == count


@ENGINES
def test_excluded_names_are_never_drawn(engine, seeded_rng):
    pool = make_pool(("A", 10), ("B", 20), ("C", 30), ("D", 40), ("E", 50))
    for _ in range(200):
        winners = engine(pool, 2, {"C", "E"}, rng=seeded_rng)
        assert {w.name for w in winners}.isdisjoint({"C", "E"})


@ENGINES
def test_shortfall_returns_whole_available_pool(engine, sample_pool, seeded_rng):
    winners = engine(sample_pool, 5, excluded={"B"}, rng=seeded_rng)
    assert [w.name for w in winners] == ["A", "C"]


@ENGINES
@pytest.mark.parametrize("count", [0, -1])
def test_non_positive_count_returns_empty(engine, count, sample_pool):
    assert engine(sample_pool, count) == []


@ENGINES
def test_empty_or_fully_excluded_pool_returns_empty(engine, sample_pool):
    assert engine([], 3) == []
    assert engine(sample_pool, 2, {"A", "B", "C"}) == []


@ENGINES
def test_pool_is_not_mutated(engine, sample_pool, seeded_rng):
    snapshot = list(sample_pool)
    engine(sample_pool, 2, {"A"}, rng=seeded_rng)
    engine(sample_pool, 10, rng=seeded_rng)
    assert sample_pool == snapshot


@ENGINES
def test_foreign_exclusions_are_ignored(engine, sample_pool):
    with_foreign = engine(sample_pool, 2, {"Zed", "Yara"}, rng=random.Random(7))
    without = engine(sample_pool, 2, set(), rng=random.Random(7))
    assert with_foreign == without


@ENGINES
def test_seeded_generator_reproduces_selection(engine):
    pool = make_pool(*[(f"P{i}", i + 1) for i in range(20)])
    first = engine(pool, 5, rng=random.Random(99))
    second = engine(pool, 5, rng=random.Random(99))
    assert first == second


def test_ticket_segments_follow_pool_order(sample_pool):
    # A owns tickets 1-10, B 11-30, C 31-60
    expectations = {1: "A", 10: "A", 11: "B", 30: "B", 31: "C", 60: "C"}
    for ticket, name in expectations.items():
        assert [w.name for w in draw(sample_pool, 1, rng=ScriptedTickets(ticket))] == [name]


def test_total_is_recomputed_over_remaining_pool(sample_pool):
    rng = ScriptedTickets(31, 1)
    winners = draw(sample_pool, 2, rng=rng)

    assert [w.name for w in winners] == ["C", "A"]
    assert rng.ranges == [(1, 60), (1, 30)]


def test_equal_tickets_break_ties_by_position():
    pool = make_pool(("X", 5), ("Y", 5))
    assert draw(pool, 1, rng=ScriptedTickets(5))[0].name == "X"
    assert draw(pool, 1, rng=ScriptedTickets(6))[0].name == "Y"


def test_remaining_order_is_preserved_after_removal():
    pool = make_pool(("A", 1), ("B", 1), ("C", 1), ("D", 1))
    # Remove B, then ticket 3 of the remaining A, C, D belongs to D
    winners = draw(pool, 2, rng=ScriptedTickets(2, 3))
    assert [w.name for w in winners] == ["B", "D"]


def test_uniform_picks_by_index():
    pool = make_pool(("A", 1), ("B", 99), ("C", 1))
    rng = ScriptedTickets(2, 0)
    winners = draw_uniform(pool, 2, rng=rng)
    assert [w.name for w in winners] == ["C", "A"]
    assert rng.ranges == [(0, 3), (0, 2)]


def test_available_pool_keeps_order():
    pool = make_pool(("A", 1), ("B", 2), ("C", 3), ("D", 4))
    assert [c.name for c in available_pool(pool, ["C", "A"])] == ["B", "D"]


def test_default_generator_is_used_when_none_given(sample_pool):
    random.seed(3)
    first = draw(sample_pool, 2)
    random.seed(3)
    assert draw(sample_pool, 2) == first


@pytest.mark.statistical
def test_weighted_draw_follows_ticket_share():
    pool = make_pool(("A", 1), ("B", 99))
    rng = random.Random(2024)
    trials = 100_000
    wins = Counter(draw(pool, 1, rng=rng)[0].name for _ in range(trials))

    assert wins["B"] / trials == pytest.approx(0.99, abs=0.005)
    assert wins["A"] / trials == pytest.approx(0.01, abs=0.005)


@pytest.mark.statistical
def test_uniform_draw_ignores_tickets():
    pool = make_pool(("A", 1), ("B", 99))
    rng = random.Random(2024)
    trials = 20_000
    wins = Counter(draw_uniform(pool, 1, rng=rng)[0].name for _ in range(trials))

    assert wins["A"] / trials == pytest.approx(0.5, abs=0.03)
    assert wins["B"] / trials == pytest.approx(0.5, abs=0.03)


@pytest.mark.statistical
def test_more_tickets_means_more_inclusions(sample_pool):
    rng = random.Random(11)
    included = Counter()
    for _ in range(10_000):
        winners = draw(sample_pool, 2, rng=rng)
        assert len({w.name for w in winners}) == 2
        included.update(w.name for w in winners)

    assert included["C"] > included["B"] > included["A"]
