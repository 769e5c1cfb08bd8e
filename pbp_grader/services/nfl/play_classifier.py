"""
Possession-relevant classification of play-by-play text.

The patterns here are shared by the possession tracker and the drive
locator so both agree on what counts as a kickoff, punt or turnover.
"""
import re
from typing import Any, Optional

from pbp_grader.models.pbp import PlayEvent

SNAP_DOWNS = frozenset({"1", "2", "3", "4"})

KICKOFF_RE = re.compile(r"\bkicks off\b|\bkickoff\b", re.IGNORECASE)
PUNT_RE = re.compile(r"\bpunts?\b", re.IGNORECASE)
INTERCEPTION_RE = re.compile(r"\bintercept|\bpicked off|\binterception\b", re.IGNORECASE)
TURNOVER_ON_DOWNS_RE = re.compile(r"\bturnover on downs\b|\bon downs\b", re.IGNORECASE)
SAFETY_RE = re.compile(r"\bsafety\b", re.IGNORECASE)
TIMEOUT_RE = re.compile(r"\btimeout\b", re.IGNORECASE)
FUMBLE_ANY_RE = re.compile(r"\bfumble[sd]?\b", re.IGNORECASE)
FUMBLE_LOST_RE = re.compile(r"\bfumble[sd]?\b.*\brecovered by\b", re.IGNORECASE)
NO_PLAY_RE = re.compile(r"\bno play\b|nullified|offsetting", re.IGNORECASE)

_TD_SCORE_RE = re.compile(r"\btouchdown\b", re.IGNORECASE)
_XP_SCORE_RE = re.compile(r"\b(?:extra point|pat)\b.*\bgood\b", re.IGNORECASE)
_FG_SCORE_RE = re.compile(r"\bfield goal\b.*\bgood\b", re.IGNORECASE)


def is_snap_down(down: Any) -> bool:
    """True for downs 1-4 given as int, float or string."""
    if down is None or isinstance(down, bool):
        return False
    text = str(down).strip()
    if text in SNAP_DOWNS:
        return True
    try:
        number = float(text)
    except ValueError:
        return False
    return number.is_integer() and str(int(number)) in SNAP_DOWNS


def is_no_play(detail: Optional[str]) -> bool:
    """Penalty-nullified or offsetting plays."""
    return bool(NO_PLAY_RE.search(detail or ""))


def classify_event(detail: Optional[str], down: Any) -> PlayEvent:
    """
    Classify a play for possession tracking.

    Order matters: kickoff, punt, interception, turnover on downs, safety,
    timeout, then SNAP for any play with a down, then fumble.
    """
    text = detail or ""
    if KICKOFF_RE.search(text):
        return PlayEvent.KICKOFF
    if PUNT_RE.search(text):
        return PlayEvent.PUNT
    if INTERCEPTION_RE.search(text) or TURNOVER_ON_DOWNS_RE.search(text):
        return PlayEvent.TURNOVER
    if SAFETY_RE.search(text):
        return PlayEvent.SAFETY
    if TIMEOUT_RE.search(text):
        return PlayEvent.TIMEOUT
    if is_snap_down(down):
        return PlayEvent.SNAP
    if FUMBLE_ANY_RE.search(text):
        return PlayEvent.FUMBLE
    return PlayEvent.OTHER


def classify_score(detail: Optional[str]) -> Optional[str]:
    """Scoring kind of a play: "TD", "XP", "FG" or None."""
    text = detail or ""
    if _TD_SCORE_RE.search(text):
        return "TD"
    if _XP_SCORE_RE.search(text):
        return "XP"
    if _FG_SCORE_RE.search(text):
        return "FG"
    return None
