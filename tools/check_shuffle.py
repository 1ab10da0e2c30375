import argparse
import itertools
import math
import sys
from collections import Counter
from typing import Dict, Tuple
sys.path.append('.')
import game  # type: ignore


def expected_patterns(pairs: int) -> int:
    # Distinct symbol sequences: (2n)! / 2^n
    return math.factorial(2 * pairs) // (2 ** pairs)


def tally(pairs: int, trials: int, seed: int) -> Dict[Tuple[str, ...], int]:
    rng = game.rng_from_seed(seed)
    counts: Counter = Counter()
    for _ in range(trials):
        deck = game.build_deck(pairs, rng)
        counts[tuple(c.symbol for c in deck)] += 1
    return counts


def chi_square(counts: Dict[Tuple[str, ...], int], categories: int, trials: int) -> float:
    expected = trials / categories
    seen = sum((n - expected) ** 2 / expected for n in counts.values())
    unseen = (categories - len(counts)) * expected
    return seen + unseen


def main():
    parser = argparse.ArgumentParser(description='Chi-square check of deck shuffle uniformity')
    parser.add_argument('--pairs', type=int, default=2)
    parser.add_argument('--trials', type=int, default=60000)
    parser.add_argument('--seed', type=int, default=0)
    args = parser.parse_args()

    categories = expected_patterns(args.pairs)
    if categories > args.trials // 5:
        print(f'{categories} patterns need more than {args.trials} trials; raise --trials or lower --pairs')
        return
    counts = tally(args.pairs, args.trials, args.seed)
    stat = chi_square(counts, categories, args.trials)
    print(f'pairs={args.pairs} trials={args.trials} patterns={categories} seen={len(counts)}')
    print(f'chi2={stat:.2f} df={categories - 1}')
    # Wilson-Hilferty approximation of the upper 0.1% point
    df = categories - 1
    crit = df * (1 - 2 / (9 * df) + 3.09 * math.sqrt(2 / (9 * df))) ** 3
    print('OK' if stat <= crit else 'SUSPICIOUS', f'(0.1% critical ~ {crit:.2f})')
    for pattern, n in itertools.islice(counts.most_common(), 5):
        print(' '.join(pattern), n)


if __name__ == '__main__':
    main()
