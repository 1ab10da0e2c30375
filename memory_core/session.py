from __future__ import annotations

import dataclasses
import enum
import logging
import random
import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .card import Card, Symbol
from .deal import DEFAULT_SYMBOLS, build_deck
from .errors import InvalidIndex
from .scheduler import CooperativeScheduler, Scheduler

logger = logging.getLogger(__name__)

DEFAULT_PAIRS = 4
FLIP_BACK_DELAY = 1.0  # seconds a mismatched pair stays visible


class TapResult(enum.Enum):
    IGNORED = 'ignored'    # card already face up or matched
    FIRST = 'first'        # card is now the pending selection
    MATCH = 'match'
    MISMATCH = 'mismatch'  # both face up, revert scheduled


@dataclass(frozen=True)
class ChangeEvent:
    """Pushed to listeners after every state change.

    kind is one of 'new_game', 'flip', 'match', 'won' or 'flip_back';
    indices are the positions that changed and cards is the full snapshot
    taken right after the change.
    """
    kind: str
    indices: Tuple[int, ...]
    cards: Tuple[Card, ...]


@dataclass(frozen=True)
class SessionView:
    """Cards, pending selection and pair count read under one lock acquisition."""
    cards: Tuple[Card, ...]
    pending_index: Optional[int]
    pair_count: int


Listener = Callable[[ChangeEvent], None]


class GameSession:
    """Owns the cards and the turn protocol of one memory match table.

    All state changes go through tap() and new_game(), plus the deferred
    flip-back that tap() schedules after a mismatch. Every change is pushed
    to subscribers as a ChangeEvent. State is guarded by a re-entrant lock so
    a threaded scheduler can fire flip-backs while taps are being handled.
    """

    def __init__(
        self,
        pair_count: int = DEFAULT_PAIRS,
        *,
        rng: Optional[random.Random] = None,
        scheduler: Optional[Scheduler] = None,
        flip_delay: float = FLIP_BACK_DELAY,
        symbols: Sequence[Symbol] = DEFAULT_SYMBOLS,
    ) -> None:
        self._rng = rng if rng is not None else random.Random()
        self._scheduler = scheduler if scheduler is not None else CooperativeScheduler()
        self._flip_delay = flip_delay
        self._symbols = tuple(symbols)
        self._lock = threading.RLock()
        self._listeners: List[Listener] = []
        self._cards: List[Card] = build_deck(pair_count, self._rng, self._symbols)
        self._pair_count = pair_count
        self._pending: Optional[int] = None
        self._index_by_id: Dict[str, int] = {c.id: i for i, c in enumerate(self._cards)}

    # ---------- queries ----------

    @property
    def pair_count(self) -> int:
        return self._pair_count

    @property
    def flip_delay(self) -> float:
        return self._flip_delay

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    @property
    def pending_index(self) -> Optional[int]:
        return self._pending

    @property
    def cards(self) -> Tuple[Card, ...]:
        """Read-only snapshot; mutating the returned cards does not affect the game."""
        with self._lock:
            return self._snapshot()

    def view(self) -> SessionView:
        with self._lock:
            return SessionView(self._snapshot(), self._pending, self._pair_count)

    def card(self, index: int) -> Card:
        with self._lock:
            self._check_index(index)
            return dataclasses.replace(self._cards[index])

    def settled(self, index: int) -> bool:
        """True when the card is matched, or face down and not the pending selection."""
        with self._lock:
            self._check_index(index)
            c = self._cards[index]
            return c.matched or (not c.face_up and index != self._pending)

    def is_won(self) -> bool:
        with self._lock:
            return all(c.matched for c in self._cards)

    # ---------- notifications ----------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Registers a change listener. Returns a callable that removes it again."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, events: List[ChangeEvent]) -> None:
        # Called without the lock held so listeners may query or tap.
        with self._lock:
            listeners = list(self._listeners)
        for event in events:
            for listener in listeners:
                try:
                    listener(event)
                except Exception:
                    logger.exception('listener failed on %s event', event.kind)

    # ---------- commands ----------

    def new_game(self, pair_count: Optional[int] = None) -> None:
        """Deals a fresh deck. On InvalidConfiguration the current game is left as it was."""
        with self._lock:
            event = self._deal(self._pair_count if pair_count is None else pair_count)
        self._emit([event])

    def set_pair_count(self, pair_count: int) -> bool:
        """Changing the pair count always deals a new game. Returns False if unchanged."""
        with self._lock:
            if pair_count == self._pair_count:
                return False
            event = self._deal(pair_count)
        self._emit([event])
        return True

    def _deal(self, count: int) -> ChangeEvent:
        # Caller holds the lock. The deck is built before any field is
        # assigned so a bad count changes nothing.
        cards = build_deck(count, self._rng, self._symbols)
        self._cards = cards
        self._pair_count = count
        self._pending = None
        self._index_by_id = {c.id: i for i, c in enumerate(cards)}
        logger.debug('new game with %d pairs', count)
        return ChangeEvent('new_game', tuple(range(len(cards))), self._snapshot())

    def tap(self, index: int) -> TapResult:
        events: List[ChangeEvent] = []
        with self._lock:
            self._check_index(index)
            card = self._cards[index]
            if card.face_up or card.matched:
                return TapResult.IGNORED

            card.face_up = True
            if self._pending is None:
                self._pending = index
                events.append(ChangeEvent('flip', (index,), self._snapshot()))
                result = TapResult.FIRST
            else:
                first_index = self._pending
                first = self._cards[first_index]
                # Cleared before any flip-back resolves; the next tap starts a new turn.
                self._pending = None
                pair = (first_index, index)
                if first.symbol == card.symbol:
                    first.matched = True
                    card.matched = True
                    events.append(ChangeEvent('match', pair, self._snapshot()))
                    if all(c.matched for c in self._cards):
                        events.append(ChangeEvent('won', (), events[-1].cards))
                    result = TapResult.MATCH
                else:
                    events.append(ChangeEvent('flip', (index,), self._snapshot()))
                    ids = (first.id, card.id)
                    self._scheduler.call_later(self._flip_delay, lambda: self._flip_back(ids))
                    result = TapResult.MISMATCH
        logger.debug('tap %d -> %s', index, result.value)
        self._emit(events)
        return result

    def _flip_back(self, card_ids: Tuple[str, ...]) -> None:
        changed: List[int] = []
        with self._lock:
            for card_id in card_ids:
                i = self._index_by_id.get(card_id)
                if i is None:
                    # Deck was replaced by a new game.
                    continue
                c = self._cards[i]
                if c.matched or i == self._pending or not c.face_up:
                    continue
                c.face_up = False
                changed.append(i)
            if not changed:
                return
            event = ChangeEvent('flip_back', tuple(changed), self._snapshot())
        logger.debug('flipped back %s', changed)
        self._emit([event])

    # ---------- helpers ----------

    def _check_index(self, index: int) -> None:
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(self._cards):
            raise InvalidIndex(index, len(self._cards))

    def _snapshot(self) -> Tuple[Card, ...]:
        return tuple(dataclasses.replace(c) for c in self._cards)
