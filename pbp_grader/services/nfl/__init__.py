"""
NFL play-by-play services.

This module contains the parsing and possession-tracking pipeline:
flatten_plays → parse_play_detail (per play) → annotate_plays.
"""
from pbp_grader.services.nfl.drive_locator import (
    find_drive_head_index_robust,
    find_series_head_index,
    find_snap_index,
)
from pbp_grader.services.nfl.game_loader import GameContext, load_game
from pbp_grader.services.nfl.pbp_flattener import flatten_plays
from pbp_grader.services.nfl.play_parser import parse_play_detail
from pbp_grader.services.nfl.possession_tracker import annotate_plays, build_starters_map

__all__ = [
    "GameContext",
    "annotate_plays",
    "build_starters_map",
    "find_drive_head_index_robust",
    "find_series_head_index",
    "find_snap_index",
    "flatten_plays",
    "load_game",
    "parse_play_detail",
]
