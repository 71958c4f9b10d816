"""Piece ordering strategies used to explore the packer's search space."""

from __future__ import annotations

import random
from typing import Callable, Sequence

from calpinage.domain.value_objects import Piece

SortKey = Callable[[Piece], float]

# Cycled by iteration number; every sort is descending.
SORT_CRITERIA: tuple[tuple[str, SortKey], ...] = (
    ("length", lambda p: p.length),
    ("width", lambda p: p.width),
    ("longest_side", lambda p: p.longest_side),
    ("area", lambda p: p.area),
)


def sort_by_area(pieces: Sequence[Piece]) -> list[Piece]:
    """Area-descending order used for the cold start."""
    return sorted(pieces, key=lambda p: p.area, reverse=True)


def shuffle(pieces: Sequence[Piece], rng: random.Random) -> list[Piece]:
    """Uniform Fisher-Yates shuffle driven by ``rng``."""
    shuffled = list(pieces)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def sort_by_criterion(pieces: Sequence[Piece], iteration: int) -> list[Piece]:
    """Stable descending sort by the criterion selected by ``iteration``."""
    _, key = SORT_CRITERIA[iteration % len(SORT_CRITERIA)]
    return sorted(pieces, key=key, reverse=True)


def perturb(
    pieces: Sequence[Piece],
    iteration: int,
    rng: random.Random,
    shuffle_probability: float = 0.6,
) -> list[Piece]:
    """Produce a new ordering of ``pieces`` for one optimizer iteration.

    Args:
        pieces: The group's pieces (not modified).
        iteration: Current optimizer iteration, selects the sort criterion.
        rng: Random source for the shuffle decision and the shuffle itself.
        shuffle_probability: Chance of shuffling instead of sorting.

    Returns:
        A new list with the perturbed order.
    """
    if rng.random() < shuffle_probability:
        return shuffle(pieces, rng)
    return sort_by_criterion(pieces, iteration)
