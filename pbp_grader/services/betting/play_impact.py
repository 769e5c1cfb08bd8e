"""
Live impact of a single play on a wager slip.

Used while replaying a game to flag each play as good or bad news for the
slip, and to advance yardage-prop progress bars.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from pbp_grader.models.pbp import AnnotatedPlay, PlayEvent, StatEvent
from pbp_grader.models.wagers import flatten_wager_fields
from pbp_grader.services.betting.settlement_service import get_final_scores
from pbp_grader.services.nfl.drive_locator import find_snap_index
from pbp_grader.services.nfl.play_classifier import classify_score, is_no_play
from pbp_grader.services.nfl.touchdowns import extract_td_scorer_from_play
from pbp_grader.services.utils.name_normalizer import name_mentioned_in, same_player_loose
from pbp_grader.services.utils.numbers import as_num

logger = logging.getLogger(__name__)

POSITIVE = "positive"
NEGATIVE = "negative"

YARDAGE_STATS = ("rush_yds", "rec_yds", "pass_yds")


@dataclass(frozen=True)
class ScoreDeltas:
    """Points each team scored on one play."""
    home_delta: float = 0
    away_delta: float = 0


@dataclass(frozen=True)
class WagerMeta:
    """The parts of a wager that live impact cares about."""
    kind: str  # moneyline, spread, total, player_td, player_yds, unknown
    market: str
    team: Optional[str] = None
    side: Optional[str] = None
    player: Optional[str] = None
    stat: Optional[str] = None


def wager_meta(raw: Any, home_code: str, away_code: str) -> WagerMeta:
    """Reduce a wager mapping to its live-impact essentials."""
    fields = flatten_wager_fields(raw)
    market = str(fields.get("market") or "").lower()
    bet_type = str(fields.get("type") or "").lower()
    selection = str(fields.get("selection") or "").strip()
    team_in = str(fields.get("team") or "").upper()
    teams = (home_code, away_code)
    team = team_in if team_in in teams else (selection.upper() if selection.upper() in teams else None)

    if market == "game":
        if bet_type in ("moneyline", "spread"):
            return WagerMeta(kind=bet_type, market=market, team=team)
        if bet_type == "total":
            side = selection.lower() if selection.lower() in ("over", "under") else None
            return WagerMeta(kind="total", market=market, side=side)
    elif market == "player":
        if bet_type == "td":
            return WagerMeta(kind="player_td", market=market, team=team, player=selection)
        if bet_type in YARDAGE_STATS:
            details = str(fields.get("details") or "").upper()
            side = {"O": "over", "U": "under"}.get(details)
            return WagerMeta(kind="player_yds", market=market, team=team, side=side, player=selection, stat=bet_type)

    return WagerMeta(kind="unknown", market=market)


def _events_of(play: Any) -> List[StatEvent]:
    parsed = getattr(play, "parsed", None)
    return list(parsed.events) if parsed is not None else []


def _detail_of(play: Any) -> str:
    if isinstance(play, AnnotatedPlay):
        return play.detail
    if isinstance(play, Mapping):
        return str(play.get("detail") or "")
    return ""


def yards_delta_for(events: Iterable[StatEvent], player: Optional[str], stat: Optional[str] = None) -> float:
    """Net yardage credited to the player on one play."""
    if not player:
        return 0
    total = 0
    for event in events:
        wanted = event.stat == stat if stat else event.stat in YARDAGE_STATS
        if wanted and same_player_loose(event.player, player):
            total += event.delta or 0
    return total


def did_player_score_td(events: Iterable[StatEvent], detail: str, player: Optional[str]) -> bool:
    """
    Parser-credited touchdown, else the scorer named in the play text.

    The text fallbacks only apply when the parse credits nobody. Plays
    wiped out by a penalty and the thrower of the ball never count.
    """
    if not player or is_no_play(detail):
        return False
    events = list(events)
    credited = False
    for event in events:
        # Throwing a touchdown pass is not scoring one
        if event.stat == "pass_td":
            continue
        if "td" in event.stat or "touchdown" in (event.note or "").lower():
            credited = True
            if same_player_loose(event.player, player):
                return True
    if credited or "touchdown" not in detail.lower():
        return False

    scorer = extract_td_scorer_from_play(detail)
    if scorer:
        return same_player_loose(scorer, player)
    if any(e.stat.startswith("pass_") and same_player_loose(e.player, player) for e in events):
        return False
    return name_mentioned_in(detail, player)


def score_deltas(prev: Any, play: Any, home_code: str, away_code: str) -> ScoreDeltas:
    """
    Points scored between two consecutive plays.

    Missing scores on either side yield zero deltas.
    """
    if prev is None or play is None:
        return ScoreDeltas()
    prev_home, prev_away = get_final_scores([prev], home_code, away_code)
    cur_home, cur_away = get_final_scores([play], home_code, away_code)
    if None in (prev_home, prev_away, cur_home, cur_away):
        return ScoreDeltas()
    return ScoreDeltas(home_delta=cur_home - prev_home, away_delta=cur_away - prev_away)


def assess_play_impact(
    play: Any,
    wagers: Sequence[Any],
    home_code: str,
    away_code: str,
    offense_on_prev_snap: Optional[str] = None,
    deltas: Optional[ScoreDeltas] = None,
    score_kind: Optional[str] = None,
    is_safety: Optional[bool] = None,
) -> Optional[str]:
    """
    Classify one play as "positive", "negative" or None for the slip.

    Checks, in order:
    1. A touchdown by a player with a TD prop → positive
    2. Net yardage for players with yardage props (over likes gains,
       under likes losses)
    3. Points with moneyline/spread wagers: positive iff one backs the
       scoring team
    4. Points with totals: positive iff any over wager
    """
    home_code, away_code = str(home_code).upper(), str(away_code).upper()
    deltas = deltas or ScoreDeltas()
    events = _events_of(play)
    detail = _detail_of(play)
    if score_kind is None:
        score_kind = classify_score(detail)
    if is_safety is None:
        is_safety = isinstance(play, AnnotatedPlay) and play.event is PlayEvent.SAFETY

    metas = [wager_meta(w, home_code, away_code) for w in wagers or []]

    scoring_team = None
    if deltas.home_delta > 0:
        scoring_team = home_code
    elif deltas.away_delta > 0:
        scoring_team = away_code
    elif is_safety:
        if offense_on_prev_snap == home_code:
            scoring_team = away_code
        elif offense_on_prev_snap == away_code:
            scoring_team = home_code
    elif score_kind:
        scoring_team = offense_on_prev_snap
    points_scored = deltas.home_delta > 0 or deltas.away_delta > 0 or bool(is_safety) or bool(score_kind)

    if score_kind == "TD" or "touchdown" in detail.lower():
        for meta in metas:
            if meta.kind == "player_td" and did_player_score_td(events, detail, meta.player):
                return POSITIVE

    saw_player_impact = False
    player_positive = False
    for meta in metas:
        if meta.kind != "player_yds":
            continue
        delta = yards_delta_for(events, meta.player, meta.stat)
        if not delta:
            continue
        saw_player_impact = True
        if (meta.side == "over" and delta > 0) or (meta.side == "under" and delta < 0):
            player_positive = True
    if saw_player_impact:
        return POSITIVE if player_positive else NEGATIVE

    team_bets = [m for m in metas if m.kind in ("moneyline", "spread")]
    if points_scored and team_bets and scoring_team:
        return POSITIVE if any(m.team == scoring_team for m in team_bets) else NEGATIVE

    totals = [m for m in metas if m.kind == "total" and m.side]
    if points_scored and totals:
        return POSITIVE if any(m.side == "over" for m in totals) else NEGATIVE

    return None


def _wager_key(raw: Any, index: int) -> str:
    fields = flatten_wager_fields(raw)
    for key in ("id", "key"):
        if fields.get(key) is not None:
            return str(fields[key])
    return f"bet-{index}"


def bet_progress(
    play: Any,
    wagers: Sequence[Any],
    progress: Optional[Mapping[str, float]] = None,
) -> Dict[str, float]:
    """
    Advance live progress of yardage props by one play.

    Args:
        play: The play just replayed
        wagers: Wager slip
        progress: Current progress keyed by wager id ("bet-<i>" without one)

    Returns:
        New progress mapping; values never drop below zero
    """
    current = dict(progress or {})
    events = _events_of(play)

    for index, raw in enumerate(wagers or []):
        key = _wager_key(raw, index)
        fields = flatten_wager_fields(raw)
        start = as_num(current.get(key))
        if start is None:
            start = as_num(fields.get("currentvalue") or fields.get("progress")) or 0
        current[key] = start

        stat = str(fields.get("type") or "").lower()
        if str(fields.get("market") or "").lower() != "player" or stat not in YARDAGE_STATS:
            continue

        gained = yards_delta_for(events, fields.get("selection"), stat)
        if gained:
            current[key] = max(0, start + gained)

    return current


def replay_impacts(
    plays: Sequence[AnnotatedPlay],
    wagers: Sequence[Any],
    home_code: str,
    away_code: str,
) -> List[Dict[str, Any]]:
    """
    Replay an annotated log against a wager slip, one entry per play.

    Each entry holds the play's impact ("positive", "negative" or None)
    and the yardage-prop progress after it. Points are read from the
    running score; the offense is the one on the latest snap at or before
    the play.
    """
    entries: List[Dict[str, Any]] = []
    progress: Dict[str, float] = {}
    prev: Optional[AnnotatedPlay] = None

    for index, play in enumerate(plays):
        snap_index = find_snap_index(plays, index, -1)
        offense = plays[snap_index].pos_team if snap_index >= 0 else None
        impact = assess_play_impact(
            play,
            wagers,
            home_code,
            away_code,
            offense_on_prev_snap=offense,
            deltas=score_deltas(prev, play, home_code, away_code),
        )
        progress = bet_progress(play, wagers, progress)
        entries.append({"impact": impact, "betProgress": progress})
        prev = play

    logger.debug(
        f"Replayed {len(entries)} plays against {len(wagers or [])} wagers: "
        f"{sum(1 for e in entries if e['impact'] == POSITIVE)} positive, "
        f"{sum(1 for e in entries if e['impact'] == NEGATIVE)} negative"
    )
    return entries
