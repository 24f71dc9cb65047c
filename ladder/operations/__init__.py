"""
Operations Layer

Business logic operations that compose database access into multi-step,
transactional workflows. Each module owns one part of the ladder:

- PlayerOperations: registration and pairing eligibility
- MatchLedger: recording and undoing match results
- RoundLifecycle: rounds, pairings and season boundaries

Architecture:
- Database layer: engine, sessions and simple lookups
- Operations layer: validation, business rules and transactions
- Command layer: Discord integration and presentation
"""

from .match_ledger import MatchLedger
from .player_operations import PlayerOperations
from .round_lifecycle import RoundLifecycle

__all__ = ['MatchLedger', 'PlayerOperations', 'RoundLifecycle']
