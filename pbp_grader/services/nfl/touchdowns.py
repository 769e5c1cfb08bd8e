"""
Touchdown detection and scorer attribution.

Scoring plays show up in two shapes:
- Narrative: "Tom Brady pass complete to Rob Gronkowski for 12 yards, touchdown"
- Scoring summary: "Rob Gronkowski 12 yard pass from Tom Brady (Stephen Gostkowski kick)"

Attribution prefers the structured parse and falls back to text patterns.
"""
import re
from typing import Any, Optional

from pbp_grader.models.pbp import ParsedPlayEvents
from pbp_grader.services.nfl.play_classifier import is_no_play
from pbp_grader.services.nfl.play_parser import parse_play_detail
from pbp_grader.services.utils.name_normalizer import clean_player_display_name

_TOUCHDOWN_RE = re.compile(r"\btouchdown\b", re.IGNORECASE)
_FIELD_GOAL_RE = re.compile(r"\bfield goal\b", re.IGNORECASE)

# "(X kick)", "(extra point ...)", "(two-point ...)", "(2 pt ...)", "(run failed)"
_PAT_OR_2PT_RE = re.compile(
    r"\((?:[^)]*\bkick\b|[^)]*\bextra point\b|[^)]*\btwo[-\s]?point\b|[^)]*\b2\s*pt\b|[^)]*\brun failed\b)\)",
    re.IGNORECASE,
)
_TD_SHAPED_RES = (
    re.compile(r"\b\d+\s+yard\s+pass\s+from\b", re.IGNORECASE),
    re.compile(r"\b\d+\s+yard\s+rush\b", re.IGNORECASE),
    re.compile(r"\b\d+\s+yard\s+(?:interception|fumble|punt|kickoff)\s+return\b", re.IGNORECASE),
)

_CAP_NAME = r"[A-Z][a-zA-Z'.\-]+(?:\s+[A-Z][a-zA-Z'.\-]+)+"
_RETURNER_NAME = rf"{_CAP_NAME}|[A-Z]\.\s?[A-Z][a-zA-Z'\-]+"

# Textual scorer fallbacks, tried in order
SCORER_PATTERNS = (
    re.compile(rf"\bto\s+({_CAP_NAME})\s+for\b"),
    re.compile(r"^\s*([^,(]+?)\s+\d+\s+yard\s+pass\s+from\b", re.IGNORECASE),
    re.compile(r"^\s*([^,(]+?)\s+\d+\s+yard\s+rush\b", re.IGNORECASE),
    re.compile(r"^\s*([^,(]+?)\s+\d+\s+yard\s+(?:interception|fumble|punt|kickoff)\s+return\b", re.IGNORECASE),
    re.compile(rf"(?i:\b(?:intercepted|recovered)\s+by)\s+({_RETURNER_NAME})"),
    re.compile(r"\btouchdown\b.*?\bby\s+([^,(]+?)(?:\s+for\b|,|\(|\.|$)", re.IGNORECASE),
    re.compile(rf"\bto\s+({_CAP_NAME})\b"),
)

# Stats that put points on the board, checked before any other TD-like stat
SCORING_STATS = ("rec_td", "rush_td")


def _detail_of(play: Any) -> str:
    if play is None:
        return ""
    if isinstance(play, str):
        return play
    detail = getattr(play, "detail", None)
    if detail is None and hasattr(play, "get"):
        detail = play.get("detail")
    return str(detail or "")


def _parsed_of(play: Any) -> Optional[ParsedPlayEvents]:
    parsed = getattr(play, "parsed", None)
    if parsed is None and isinstance(play, dict):
        parsed = play.get("parsed")
    return parsed if isinstance(parsed, ParsedPlayEvents) else None


def is_touchdown_play(play: Any) -> bool:
    """
    Decide whether a play scored a touchdown.

    True when the text says "touchdown", or when it reads like a scoring
    summary ("N yard pass from", "N yard rush", "N yard ... return") with a
    PAT or two-point parenthetical. Field goals and plays wiped out by a
    penalty never count.
    """
    detail = _detail_of(play)
    if is_no_play(detail):
        return False
    if _TOUCHDOWN_RE.search(detail):
        return True
    if _FIELD_GOAL_RE.search(detail):
        return False
    td_shaped = any(pattern.search(detail) for pattern in _TD_SHAPED_RES)
    return td_shaped and bool(_PAT_OR_2PT_RE.search(detail))


def extract_td_scorer_from_play(play: Any) -> Optional[str]:
    """
    Name of the player credited with the touchdown, or None.

    Order of preference:
    1. A scoring stat in the parse (rec_td, rush_td), then any other TD stat
       except pass_td
    2. A reception event noted as a touchdown
    3. Text patterns: "to NAME for", "NAME N yard pass from",
       "NAME N yard rush", "NAME N yard ... return", "intercepted/recovered
       by NAME", "touchdown ... by NAME",
       and finally any "to NAME"
    """
    detail = _detail_of(play)
    parsed = _parsed_of(play)

    if parsed is not None:
        for stat in SCORING_STATS:
            for event in parsed.events:
                if event.stat == stat and event.player:
                    return clean_player_display_name(event.player)
        for event in parsed.events:
            # The thrower of a touchdown pass did not score it
            if event.stat == "pass_td":
                continue
            if re.search(r"td|touchdown", event.stat, re.IGNORECASE) and event.player:
                return clean_player_display_name(event.player)
        for event in parsed.events:
            if event.stat == "rec_yds" and event.player and _TOUCHDOWN_RE.search(event.note or detail):
                return clean_player_display_name(event.player)

    for pattern in SCORER_PATTERNS:
        match = pattern.search(detail)
        if match:
            name = clean_player_display_name(match.group(1))
            if name:
                return name

    return None


def passer_of(play: Any) -> Optional[str]:
    """Quarterback who threw the ball on this play, per the parse."""
    parsed = _parsed_of(play)
    if parsed is None:
        parsed = parse_play_detail(_detail_of(play))
    return parsed.players.passer
