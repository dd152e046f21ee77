"""Coin Change Engine — greedy change breakdown over the fixed denomination set.

Invariants:
    - COIN_DENOMINATIONS is sorted descending and is the single source of truth
    - calculate_change never emits a zero-count entry
    - Any remainder below the smallest coin (5) is dropped
    - validate_coins is PURE: raises, never mutates

Design Decisions:
    - Greedy is minimal only because {100, 50, 20, 10, 5} is a canonical coin system;
      this is not a general-purpose coin-change solver
"""

from dataclasses import dataclass
from typing import Iterable

from vending.core.errors import InvalidCoinsError


COIN_DENOMINATIONS: tuple[int, ...] = (100, 50, 20, 10, 5)
ALLOWED_COINS: frozenset[int] = frozenset(COIN_DENOMINATIONS)


@dataclass(frozen=True)
class CoinChange:
    """A denomination and how many coins of it are returned."""
    coin: int
    count: int


def calculate_change(amount_in_cents: int) -> list[CoinChange]:
    """Break amount_in_cents into coins, largest denomination first."""
    if amount_in_cents < 0:
        raise ValueError(f"amount_in_cents must be >= 0, got {amount_in_cents}")

    remaining = amount_in_cents
    changes: list[CoinChange] = []
    for coin in COIN_DENOMINATIONS:
        if remaining >= coin:
            changes.append(CoinChange(coin=coin, count=remaining // coin))
            remaining %= coin
    return changes


def change_total(changes: Iterable[CoinChange]) -> int:
    """Sum of coin * count over a change breakdown."""
    return sum(c.coin * c.count for c in changes)


def validate_coins(coins: Iterable[int]) -> None:
    """Raise InvalidCoinsError if any coin is not an accepted denomination."""
    invalid = [c for c in coins if c not in ALLOWED_COINS]
    if invalid:
        raise InvalidCoinsError(invalid)
