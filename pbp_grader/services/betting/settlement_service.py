"""
Wager settlement against a replayed game.

Each wager is graded on its own from three inputs: the annotated play log,
the season stat tables and the team descriptors. Supported markets:

    player / td          first, last, or N+ touchdowns (play log)
    player / pass_yds    season yardage over/under (stat tables)
    player / rush_yds
    player / rec_yds
    game / moneyline     final score from the play log
    game / spread
    game / total

Anything else, and any wager whose fields fail validation, grades as
pending with a reason code instead of raising.
"""
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from pbp_grader.core.config import settings
from pbp_grader.models.pbp import AnnotatedPlay, TeamDescriptor
from pbp_grader.models.stats import SeasonStatTables
from pbp_grader.models.wagers import (
    BetResult,
    GradedWager,
    MoneylineWager,
    PlayerTdWager,
    PlayerYardsWager,
    SettlementReason,
    SpreadWager,
    TotalWager,
    WAGER_VARIANTS,
    flatten_wager_fields,
)
from pbp_grader.services.nfl.pbp_flattener import flatten_plays
from pbp_grader.services.nfl.touchdowns import extract_td_scorer_from_play, is_touchdown_play, passer_of
from pbp_grader.services.utils.name_normalizer import (
    canon_name,
    clean_player_display_name,
    name_mentioned_in,
    same_player_loose,
)
from pbp_grader.services.utils.numbers import Number, as_num

logger = logging.getLogger(__name__)

Play = Union[AnnotatedPlay, Mapping[str, Any]]

# Stat-table fields that may hold the player's display name
ROW_NAME_FIELDS = ("name_display", "name", "player")


@dataclass(frozen=True)
class Grade:
    """Outcome of a single grading rule."""
    result: BetResult
    reason: str
    code: SettlementReason
    actual: Union[bool, int, float, None] = None


@dataclass
class SettlementContext:
    """Everything a wager can be graded against."""
    home: TeamDescriptor
    away: TeamDescriptor
    plays: List[Play] = field(default_factory=list)
    tables: SeasonStatTables = field(default_factory=SeasonStatTables)

    @classmethod
    def from_game(cls, game: Any) -> "SettlementContext":
        """Build from a GameContext (or anything with home/away/plays/tables)."""
        return cls(
            home=TeamDescriptor.from_value(game.home),
            away=TeamDescriptor.from_value(game.away),
            plays=list(game.plays),
            tables=SeasonStatTables.from_value(game.tables),
        )

    @property
    def home_code(self) -> str:
        return self.home.code.upper()

    @property
    def away_code(self) -> str:
        return self.away.code.upper()


def _as_play_list(plays: Any) -> List[Play]:
    if isinstance(plays, Mapping):
        return flatten_plays(plays)
    return list(plays or [])


def _raw_fields(play: Play) -> Mapping[str, Any]:
    return play.raw if isinstance(play, AnnotatedPlay) else play


def _fmt(value: Any) -> str:
    """Render numbers without a trailing .0."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# ─────────────────────────────────────────────────────────────────────────────
# Touchdown props
# ─────────────────────────────────────────────────────────────────────────────

def did_play_award_td_to(play: Play, player: str) -> bool:
    """
    Decide whether a touchdown play credits the player.

    Uses the attributed scorer when one can be found. Only when nobody can
    be attributed does a touchdown play that mentions the player's last
    name count, and never for the quarterback who threw the ball.
    """
    scorer = extract_td_scorer_from_play(play)
    if scorer:
        return same_player_loose(scorer, player)

    detail = play.detail if isinstance(play, AnnotatedPlay) else str(play.get("detail") or "")
    if "touchdown" not in detail.lower():
        return False
    if same_player_loose(passer_of(play), player):
        return False
    return name_mentioned_in(detail, player)


def grade_td_bet_from_pbp(
    player: str,
    plays: Any,
    which: str = "first",
    count_needed: Number = 1,
) -> Grade:
    """
    Grade a touchdown-scorer prop from the play log.

    Args:
        player: Wager selection (any spelling)
        plays: Annotated log, flat list of raw plays, or quarter-keyed plays
        which: "first", "last", or anything else for an N+ count
        count_needed: Touchdowns required for an N+ wager
    """
    log = _as_play_list(plays)
    if not log:
        return Grade(BetResult.PENDING, "No play-by-play", SettlementReason.NO_PLAY_BY_PLAY)

    td_plays = [p for p in log if is_touchdown_play(p)]
    if not td_plays:
        return Grade(BetResult.PENDING, "No touchdowns found", SettlementReason.NO_TOUCHDOWNS_IN_LOG)

    if which in ("first", "last"):
        label = which.capitalize()
        pick = td_plays[0] if which == "first" else td_plays[-1]
        if did_play_award_td_to(pick, player):
            return Grade(BetResult.WON, f"{label} TD: {player}", SettlementReason.TD_SCORER_MATCH, True)
        return Grade(BetResult.LOST, f"{label} TD not {player}", SettlementReason.TD_SCORER_MISMATCH, False)

    scored = sum(1 for p in td_plays if did_play_award_td_to(p, player))
    result = BetResult.WON if scored >= count_needed else BetResult.LOST
    return Grade(result, f"{scored} TDs (need {_fmt(count_needed)}+)", SettlementReason.TD_COUNT, scored)


# ─────────────────────────────────────────────────────────────────────────────
# Yardage props
# ─────────────────────────────────────────────────────────────────────────────

def get_player_stat(player: str, stat: str, tables: Any) -> Optional[Number]:
    """
    Season total of `stat` for the player, or None when it is not recorded.

    Names are compared in canonical form (accents, case, punctuation and
    suffixes ignored); initials are not expanded.
    """
    rows = SeasonStatTables.from_value(tables).rows_for(stat)
    if not rows:
        return None

    key = canon_name(clean_player_display_name(player))
    if not key:
        return None

    for row in rows:
        row_name = next((row.get(f) for f in ROW_NAME_FIELDS if row.get(f)), None)
        if row_name and canon_name(clean_player_display_name(str(row_name))) == key:
            return as_num(row.get(stat))
    return None


def _compare(label: str, got: Number, line: Number, side: str, code: SettlementReason) -> Grade:
    """Over/under comparison with an exact hit as a push."""
    if got == line:
        return Grade(BetResult.PUSH, f"{label} {_fmt(got)} = {_fmt(line)}", code, got)
    over_hit = got > line
    op = ">" if over_hit else "<"
    won = over_hit if side == "over" else not over_hit
    result = BetResult.WON if won else BetResult.LOST
    return Grade(result, f"{label} {_fmt(got)} {op} {_fmt(line)}", code, got)


def _side_of(value: Any) -> Optional[str]:
    text = str(value or "").strip().upper()
    if text in ("O", "OVER"):
        return "over"
    if text in ("U", "UNDER"):
        return "under"
    return None


def grade_player_yards(player: str, stat: str, side: Any, threshold: Any, tables: Any) -> Grade:
    """Grade a season-yardage over/under prop."""
    line = as_num(threshold)
    if line is None:
        return Grade(BetResult.PENDING, "Invalid threshold", SettlementReason.INVALID_THRESHOLD)

    got = get_player_stat(player, stat, tables)
    if got is None:
        return Grade(BetResult.PENDING, f"Missing {stat} for {player}", SettlementReason.MISSING_SEASON_STAT)

    direction = _side_of(side)
    if direction is None:
        return Grade(BetResult.PENDING, "Missing O/U", SettlementReason.MISSING_SIDE, got)

    return _compare(stat, got, line, direction, SettlementReason.STAT_COMPARISON)


# ─────────────────────────────────────────────────────────────────────────────
# Game markets
# ─────────────────────────────────────────────────────────────────────────────

def get_final_scores(plays: Any, home_code: str, away_code: str) -> Tuple[Optional[Number], Optional[Number]]:
    """
    Final (home, away) score from the last play carrying both scores.

    pbp_score_hm / pbp_score_aw are preferred; otherwise fields keyed by
    the team codes (case-insensitive) are used.
    """
    home_code, away_code = str(home_code).upper(), str(away_code).upper()

    for play in reversed(_as_play_list(plays)):
        raw = _raw_fields(play)
        home = as_num(raw.get("pbp_score_hm"))
        away = as_num(raw.get("pbp_score_aw"))
        if home is not None and away is not None:
            return home, away

        keyed = {str(k).upper(): v for k, v in raw.items()}
        home = as_num(keyed.get(home_code)) if home_code else None
        away = as_num(keyed.get(away_code)) if away_code else None
        if home is not None and away is not None:
            return home, away

    return None, None


def _no_final_score() -> Grade:
    return Grade(BetResult.PENDING, "No final score in play-by-play", SettlementReason.NO_FINAL_SCORE)


def _unknown_team(team: str) -> Grade:
    return Grade(BetResult.PENDING, f"Team {team or '?'} is not in this game", SettlementReason.UNKNOWN_TEAM)


def grade_moneyline(team_code: str, plays: Any, home_code: str, away_code: str) -> Grade:
    """Straight-up winner; a tie is a push."""
    home, away = get_final_scores(plays, home_code, away_code)
    if home is None or away is None:
        return _no_final_score()

    team = str(team_code or "").upper()
    if team not in (home_code.upper(), away_code.upper()):
        return _unknown_team(team)

    score = f"{_fmt(home)}-{_fmt(away)}"
    if home == away:
        return Grade(BetResult.PUSH, f"Tied {score}", SettlementReason.FINAL_SCORE)

    won = home > away if team == home_code.upper() else away > home
    if won:
        return Grade(BetResult.WON, f"{team} won ({score})", SettlementReason.FINAL_SCORE, True)
    return Grade(BetResult.LOST, f"{team} lost ({score})", SettlementReason.FINAL_SCORE, False)


def grade_spread(team_code: str, threshold: Any, plays: Any, home_code: str, away_code: str) -> Grade:
    """
    Signed margin (team minus opponent) against the signed threshold.

    The team's margin must exceed the threshold to win; landing on it
    exactly is a push.
    """
    home, away = get_final_scores(plays, home_code, away_code)
    if home is None or away is None:
        return _no_final_score()

    team = str(team_code or "").upper()
    if team not in (home_code.upper(), away_code.upper()):
        return _unknown_team(team)

    margin = home - away if team == home_code.upper() else away - home
    line = as_num(threshold)
    if line is None:
        return Grade(BetResult.PENDING, "Invalid spread", SettlementReason.INVALID_THRESHOLD, margin)

    return _compare("Margin", margin, line, "over", SettlementReason.MARGIN_COMPARISON)


def grade_total(side: Any, threshold: Any, plays: Any, home_code: str, away_code: str) -> Grade:
    """Combined final score over/under."""
    home, away = get_final_scores(plays, home_code, away_code)
    if home is None or away is None:
        return _no_final_score()

    total = home + away
    line = as_num(threshold)
    if line is None:
        return Grade(BetResult.PENDING, "Invalid total", SettlementReason.INVALID_THRESHOLD, total)

    direction = _side_of(side)
    if direction is None:
        return Grade(BetResult.PENDING, "Missing O/U side", SettlementReason.MISSING_SIDE, total)

    return _compare("Total", total, line, direction, SettlementReason.TOTAL_COMPARISON)


# ─────────────────────────────────────────────────────────────────────────────
# Dispatch
# ─────────────────────────────────────────────────────────────────────────────

def _td_requirement(threshold: Any) -> Tuple[str, Number]:
    text = str(threshold if threshold is not None else "").strip().lower()
    if text in ("first", "last"):
        return text, 1
    need = as_num(threshold)
    if need is None or need <= 0:
        need = settings.DEFAULT_TD_COUNT
    return "any", need


def _grade_valid(wager: Any, context: SettlementContext) -> Grade:
    home_code, away_code = context.home_code, context.away_code

    if isinstance(wager, PlayerTdWager):
        which, need = _td_requirement(wager.threshold)
        return grade_td_bet_from_pbp(wager.selection, context.plays, which, need)

    if isinstance(wager, PlayerYardsWager):
        return grade_player_yards(wager.selection, wager.type, wager.details, wager.threshold, context.tables)

    if isinstance(wager, MoneylineWager):
        team = wager.team or wager.selection
        return grade_moneyline(team, context.plays, home_code, away_code)

    if isinstance(wager, SpreadWager):
        team = wager.team or wager.selection
        return grade_spread(team, wager.threshold, context.plays, home_code, away_code)

    if isinstance(wager, TotalWager):
        return grade_total(wager.selection, wager.threshold, context.plays, home_code, away_code)

    return Grade(BetResult.PENDING, f"Unsupported wager {type(wager).__name__}", SettlementReason.UNKNOWN_MARKET)


def grade_wager(raw: Any, context: SettlementContext) -> GradedWager:
    """Grade one wager mapping. Never raises on bad wager data."""
    echo: Dict[str, Any] = dict(raw) if isinstance(raw, Mapping) else {}
    fields = flatten_wager_fields(raw)
    market = str(fields.get("market") or "").strip().lower()
    bet_type = str(fields.get("type") or "").strip().lower()

    model = WAGER_VARIANTS.get((market, bet_type))
    if model is None:
        grade = Grade(
            BetResult.PENDING,
            f"Unknown market: {market or '?'}/{bet_type or '?'}",
            SettlementReason.UNKNOWN_MARKET,
        )
    else:
        try:
            wager = model.model_validate(fields)
        except ValidationError as e:
            logger.warning(f"Invalid {market}/{bet_type} wager {fields.get('id')!r}: {e.error_count()} error(s)")
            grade = Grade(BetResult.PENDING, f"Invalid wager: {e.errors()[0]['msg']}", SettlementReason.INVALID_WAGER)
        else:
            grade = _grade_valid(wager, context)

    logger.debug(
        f"Graded {market}/{bet_type} {fields.get('selection')!r}: {grade.result.value} ({grade.reason})",
        extra={"wager_id": fields.get("id"), "reason_code": grade.code.value},
    )
    return GradedWager(
        wager=echo,
        result=grade.result,
        reason=grade.reason,
        reason_code=grade.code,
        actual=grade.actual,
    )


def grade_bets(wagers: Optional[Iterable[Any]], context: Any) -> List[GradedWager]:
    """
    Grade every wager independently.

    Args:
        wagers: Wager mappings (bet-sheet shape; a nested `bet` block is merged)
        context: SettlementContext, or a GameContext from load_game()

    Returns:
        One GradedWager per wager, in input order
    """
    ctx = context if isinstance(context, SettlementContext) else SettlementContext.from_game(context)
    graded = [grade_wager(raw, ctx) for raw in (wagers or [])]

    counts = summarize_results(graded)
    logger.info(
        f"Graded {len(graded)} wagers: " + ", ".join(f"{k}={v}" for k, v in counts.items())
    )
    return graded


def summarize_results(graded: Sequence[GradedWager]) -> Dict[str, int]:
    """Count graded wagers per result."""
    counts = Counter(g.result.value for g in graded)
    return {r.value: counts.get(r.value, 0) for r in BetResult}
