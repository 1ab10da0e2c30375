from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import List, Sequence

Symbol = str


def new_card_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Card:
    """A single card on the table. Only the game session flips or matches it."""
    symbol: Symbol
    face_up: bool = False
    matched: bool = False
    id: str = field(default_factory=new_card_id)


def pretty(cards: Sequence[Card], columns: int = 4) -> str:
    """Generates a human-readable grid of the cards.

    Face-down cards show '#', face-up cards their symbol, and matched cards
    are left blank since they are out of play.
    """
    if columns < 1:
        raise ValueError('columns must be positive')
    width = max([len(str(len(cards) - 1))] + [len(c.symbol) for c in cards])
    lines: List[str] = []
    for start in range(0, len(cards), columns):
        row: List[str] = []
        for card in cards[start:start + columns]:
            if card.matched:
                cell = ''
            elif card.face_up:
                cell = card.symbol
            else:
                cell = '#'
            row.append(cell.rjust(width))
        lines.append(" ".join(row).rstrip())
    return "\n".join(lines)


def legend(count: int, columns: int = 4) -> str:
    """Index labels laid out the same way as pretty(), to help pick a card."""
    width = len(str(max(count - 1, 0)))
    lines: List[str] = []
    for start in range(0, count, columns):
        lines.append(" ".join(str(i).rjust(width) for i in range(start, min(start + columns, count))))
    return "\n".join(lines)
