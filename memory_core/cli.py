from __future__ import annotations

import argparse
import logging
from typing import Callable, List, Optional

from .card import legend, pretty
from .config import load_settings
from .deal import MAX_PAIRS, MIN_PAIRS, rng_from_seed
from .errors import InvalidConfiguration, InvalidIndex
from .scheduler import CooperativeScheduler
from .session import ChangeEvent, GameSession, TapResult

logger = logging.getLogger(__name__)

HELP = "Enter a card index to flip it, 'n' for a new game, 'p N' to play with N pairs, 'q' to quit."


def build_parser() -> argparse.ArgumentParser:
    settings = load_settings()
    parser = argparse.ArgumentParser(description='Memory Match in the terminal')
    parser.add_argument('--pairs', type=int, default=settings.pairs,
                        help=f'Number of pairs ({MIN_PAIRS}-{MAX_PAIRS})')
    parser.add_argument('--seed', type=int, default=settings.seed, help='RNG seed for the deal')
    parser.add_argument('--delay', type=float, default=settings.flip_delay,
                        help='Seconds a mismatched pair stays visible')
    parser.add_argument('--columns', type=int, default=settings.columns, help='Cards per row')
    parser.add_argument('--verbose', action='store_true', help='Log game events to stderr')
    return parser


def main(argv: Optional[List[str]] = None, input_fn: Callable[[str], str] = input) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.columns < 1:
        parser.error('--columns must be positive')
    if args.delay < 0:
        parser.error('--delay must be non-negative')
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(levelname)s %(name)s: %(message)s')

    scheduler = CooperativeScheduler()
    try:
        session = GameSession(args.pairs, rng=rng_from_seed(args.seed), scheduler=scheduler,
                              flip_delay=args.delay)
    except InvalidConfiguration as e:
        parser.error(str(e))

    def on_change(event: ChangeEvent) -> None:
        if event.kind == 'match':
            print('Match!')
        elif event.kind == 'won':
            print('You matched them all!')
        elif event.kind == 'new_game':
            print(f'New game with {len(event.cards) // 2} pairs.')

    session.subscribe(on_change)
    print(HELP)

    while True:
        # Flip-backs fire here, on the same thread that reads input.
        scheduler.run_due()
        print(pretty(session.cards, args.columns))
        print()
        try:
            text = input_fn('> ').strip().lower()
        except EOFError:
            break
        scheduler.run_due()
        if text in ('q', 'quit', 'exit'):
            break
        if text in ('n', 'new'):
            session.new_game()
            continue
        if text.startswith('p'):
            try:
                count = int(text[1:].strip())
            except ValueError:
                print('Could not parse pair count. Try again.')
                continue
            try:
                session.set_pair_count(count)
            except InvalidConfiguration as e:
                print(f'error: {e}')
            continue
        if text in ('?', 'h', 'help'):
            print(HELP)
            print(legend(len(session.cards), args.columns))
            continue
        try:
            index = int(text)
        except ValueError:
            print('Could not parse. Try again.')
            continue
        try:
            result = session.tap(index)
        except InvalidIndex as e:
            logger.info('ignored tap: %s', e)
            print(f'error: {e}')
            continue
        if result is TapResult.IGNORED:
            print('That card is already showing.')
