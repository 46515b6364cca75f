"""
sortpuzzle Package
==================

Color sort puzzle engine: level generation, pour rules, hints, the session
ledger, a Gymnasium wrapper and an agent evaluation harness.

The engine controls:

- Level scrambling (solved layout shuffled by reverse moves)
- Pour validation and win detection
- Hint scoring
- Combo, star and reward bookkeeping

All tunable parameters are in game_config.yaml.
"""
