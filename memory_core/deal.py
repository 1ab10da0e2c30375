from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence

from .card import Card, Symbol
from .errors import InvalidConfiguration

logger = logging.getLogger(__name__)

MIN_PAIRS = 2
# The integers 1..9 rendered as labels; the picker offered 2 to 9 pairs.
DEFAULT_SYMBOLS: Sequence[Symbol] = tuple(str(n) for n in range(1, 10))
MAX_PAIRS = len(DEFAULT_SYMBOLS)


def rng_from_seed(seed: Optional[int] = None) -> random.Random:
    return random.Random(seed)


def check_pair_count(pair_count: int, symbols: Sequence[Symbol] = DEFAULT_SYMBOLS) -> int:
    """Validates a requested pair count against the alphabet it will be dealt from."""
    if isinstance(pair_count, bool) or not isinstance(pair_count, int):
        raise InvalidConfiguration(f'pair count must be an integer, got {pair_count!r}')
    if pair_count < MIN_PAIRS:
        raise InvalidConfiguration(f'pair count must be at least {MIN_PAIRS}, got {pair_count}')
    if len(set(symbols)) != len(symbols):
        raise InvalidConfiguration('symbol alphabet contains duplicate labels')
    if pair_count > len(symbols):
        raise InvalidConfiguration(
            f'symbol alphabet has {len(symbols)} labels, cannot deal {pair_count} pairs'
        )
    return pair_count


def build_deck(
    pair_count: int,
    rng: Optional[random.Random] = None,
    symbols: Sequence[Symbol] = DEFAULT_SYMBOLS,
) -> List[Card]:
    """Deals 2 * pair_count face-down cards, each symbol exactly twice, in uniformly random order."""
    check_pair_count(pair_count, symbols)
    rng = rng if rng is not None else random.Random()
    chosen = list(symbols[:pair_count])
    deck: List[Symbol] = chosen + chosen
    # random.shuffle is Fisher-Yates: every permutation equally likely.
    rng.shuffle(deck)
    cards = [Card(symbol=s) for s in deck]
    logger.debug('dealt %d cards for %d pairs', len(cards), pair_count)
    return cards
