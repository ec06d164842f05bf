"""Ticket-weighted raffle draws without replacement.

The functions here are pure: they never mutate the pool they are given,
perform no I/O and keep no state between calls. Randomness comes from an
injectable generator so tests can seed it and assert exact selections.

Ticket counts are assumed to be positive integers. The contestant loader
enforces this; the engine does not re-check it.
"""

from __future__ import annotations

import random
from typing import Iterable, List, Optional, Protocol, Sequence

from services.contestants import Contestant


class RandomSource(Protocol):
    """Subset of :class:`random.Random` used by the draw functions."""

    def randint(self, a: int, b: int) -> int: ...

    def randrange(self, stop: int) -> int: ...


def available_pool(pool: Sequence[Contestant], excluded: Iterable[str] = ()) -> List[Contestant]:
    """Contestants of ``pool`` whose names are not in ``excluded``, in pool order."""
    excluded_names = set(excluded)
    return [c for c in pool if c.name not in excluded_names]


def _pick_weighted(remaining: List[Contestant], rng: RandomSource) -> int:
    """Index of the contestant owning a uniformly drawn ticket.

    Tickets ``1..total`` are laid out in contiguous runs following pool
    order, so equal ticket counts break ties by position.
    """
    total_tickets = sum(c.tickets for c in remaining)
    ticket = rng.randint(1, total_tickets)

    running = 0
    for index, contestant in enumerate(remaining):
        running += contestant.tickets
        if ticket <= running:
            return index
    # Unreachable while every contestant holds at least one ticket
    return len(remaining) - 1


def draw(
    pool: Sequence[Contestant],
    count: int,
    excluded: Iterable[str] = (),
    rng: Optional[RandomSource] = None,
) -> List[Contestant]:
    """Draw up to ``count`` distinct winners weighted by ticket count.

    Each pick re-normalizes over the contestants still in the running, which
    is weighted sampling without replacement.

    Args:
        pool: Ordered contestant pool; not modified
        count: Number of winners requested
        excluded: Names that may not be selected (previous winners)
        rng: Random generator; the ``random`` module when omitted

    Returns:
        Winners in selection order. When fewer than ``count`` contestants are
        eligible, all of them are returned in pool order.
    """
    rng = rng or random
    remaining = available_pool(pool, excluded)

    if count <= 0 or not remaining:
        return []
    if len(remaining) < count:
        return remaining

    winners: List[Contestant] = []
    for _ in range(count):
        # list.pop keeps the relative order of the others
        winners.append(remaining.pop(_pick_weighted(remaining, rng)))
    return winners


def draw_uniform(
    pool: Sequence[Contestant],
    count: int,
    excluded: Iterable[str] = (),
    rng: Optional[RandomSource] = None,
) -> List[Contestant]:
    """Draw up to ``count`` distinct winners ignoring ticket counts.

    Same filtering and shortfall rules as :func:`draw`; every remaining
    contestant is equally likely on each pick.
    """
    rng = rng or random
    remaining = available_pool(pool, excluded)

    if count <= 0 or not remaining:
        return []
    if len(remaining) < count:
        return remaining

    return [remaining.pop(rng.randrange(len(remaining))) for _ in range(count)]
