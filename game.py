from __future__ import annotations

# Facade module that re-exports the Memory Match core.
# The Flask app and the tests import from here; single-responsibility
# modules live under memory_core/*.

from memory_core.card import Card, Symbol, legend, pretty  # noqa: F401
from memory_core.errors import InvalidConfiguration, InvalidIndex, MemoryMatchError  # noqa: F401
from memory_core.deal import (  # noqa: F401
    DEFAULT_SYMBOLS,
    MAX_PAIRS,
    MIN_PAIRS,
    build_deck,
    check_pair_count,
    rng_from_seed,
)
from memory_core.scheduler import CooperativeScheduler, ThreadingScheduler  # noqa: F401
from memory_core.session import (  # noqa: F401
    DEFAULT_PAIRS,
    FLIP_BACK_DELAY,
    ChangeEvent,
    GameSession,
    SessionView,
    TapResult,
)
from memory_core.config import Settings, load_settings  # noqa: F401


def main() -> None:
    # CLI driver delegated to memory_core.cli
    from memory_core.cli import main as _main
    _main()


if __name__ == '__main__':
    main()
