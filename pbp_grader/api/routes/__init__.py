"""
API routes organized by sport and shared functionality.

This module organizes routes into:
- nfl: play-by-play routes (annotate, drive lookup, play parsing)
- bets: wager grading
"""
