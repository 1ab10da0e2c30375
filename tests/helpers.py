from typing import List, Sequence


class FixedShuffle:
    """Stands in for random.Random: shuffle() lays the deck out in a chosen order."""

    def __init__(self, *layouts: Sequence[str]) -> None:
        self._layouts: List[Sequence[str]] = list(layouts)

    def shuffle(self, deck: list) -> None:
        layout = self._layouts.pop(0) if len(self._layouts) > 1 else self._layouts[0]
        assert sorted(layout) == sorted(deck), (layout, deck)
        deck[:] = list(layout)


class ReverseShuffle:
    def shuffle(self, deck: list) -> None:
        deck.reverse()
