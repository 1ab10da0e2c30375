from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from .errors import InvalidConfiguration
from .session import DEFAULT_PAIRS, FLIP_BACK_DELAY

T = TypeVar('T')


@dataclass(frozen=True)
class Settings:
    """Runtime settings, read from MEMORY_* environment variables."""
    pairs: int = DEFAULT_PAIRS
    flip_delay: float = FLIP_BACK_DELAY
    columns: int = 4
    seed: Optional[int] = None
    max_games: int = 256
    log_level: str = 'INFO'


def _env(name: str, default: T, parse: Callable[[str], T]) -> T:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return parse(raw.strip())
    except ValueError as e:
        raise InvalidConfiguration(f'{name}={raw!r}: {e}') from e


def load_settings() -> Settings:
    settings = Settings(
        pairs=_env('MEMORY_PAIRS', DEFAULT_PAIRS, int),
        flip_delay=_env('MEMORY_FLIP_DELAY', FLIP_BACK_DELAY, float),
        columns=_env('MEMORY_COLUMNS', 4, int),
        seed=_env('MEMORY_SEED', None, int),
        max_games=_env('MEMORY_MAX_GAMES', 256, int),
        log_level=_env('MEMORY_LOG_LEVEL', 'INFO', str.upper),
    )
    if settings.flip_delay < 0:
        raise InvalidConfiguration('MEMORY_FLIP_DELAY must be non-negative')
    if settings.columns < 1:
        raise InvalidConfiguration('MEMORY_COLUMNS must be positive')
    if settings.max_games < 1:
        raise InvalidConfiguration('MEMORY_MAX_GAMES must be positive')
    return settings
