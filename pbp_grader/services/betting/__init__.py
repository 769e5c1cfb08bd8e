"""
Betting services package.

This package grades wagers against a replayed game and aggregates the
graded legs of a slip.
"""

from pbp_grader.services.betting.settlement_service import SettlementContext, grade_bets
from pbp_grader.services.betting.parlay_grader import ParlaySummary, grade_parlay

__all__ = [
    "SettlementContext",
    "grade_bets",
    "ParlaySummary",
    "grade_parlay",
]
