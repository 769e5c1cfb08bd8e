"""
Services module for play-by-play replay and wager settlement.

This module organizes services into:
- nfl: play-text parsing, possession tracking, drive lookups, game loading
- betting: wager settlement, parlay aggregation, live play impact
- utils: name normalization and numeric coercion shared by both
"""
