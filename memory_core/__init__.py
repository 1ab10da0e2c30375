"""
Memory Match core Python package.

This package holds the game state machine and the pure-logic helpers it
needs, kept apart from the Flask app and the terminal player so they can be
tested on their own.
Modules:
- card.py: Card, pretty
- errors.py: InvalidConfiguration, InvalidIndex
- deal.py: build_deck (the deck builder)
- scheduler.py: CooperativeScheduler, ThreadingScheduler
- session.py: GameSession, ChangeEvent, TapResult
- config.py: Settings, load_settings
- cli.py: terminal player
"""
