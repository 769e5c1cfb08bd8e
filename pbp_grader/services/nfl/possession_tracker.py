"""
Possession tracking over a flattened play-by-play log.

annotate_plays() walks the plays in game order once and stamps each with:
- event: KICKOFF / PUNT / TURNOVER / SAFETY / TIMEOUT / SNAP / FUMBLE / OTHER
- is_snap: the play has a down (1-4)
- pos_team: the offense, changed only at snaps
- start_of_drive: the first snap of a new offense
- fumble: recovery details when the text names a recoverer
- possession_flip: this play handed the ball to the other team

Boundary plays (kickoffs, punts, turnovers, safeties, lost fumbles) only
stage a change of offense. The change is applied at the next snap, so a
punt on fourth down still belongs to the punting team's drive.
"""
import logging
import re
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Mapping, NamedTuple, Optional, Sequence

from pbp_grader.core.config import settings
from pbp_grader.models.pbp import (
    AnnotatedPlay,
    BOUNDARY_EVENTS,
    FieldLocation,
    FumbleInfo,
    ParsedPlayEvents,
    PlayerRoles,
    PlayEvent,
    TeamDescriptor,
)
from pbp_grader.services.nfl.field_geometry import (
    infer_offense,
    make_side_is_home_fn,
    parse_location,
)
from pbp_grader.services.nfl.play_classifier import (
    FUMBLE_ANY_RE,
    FUMBLE_LOST_RE,
    classify_event,
    is_no_play,
    is_snap_down,
)
from pbp_grader.services.nfl.play_parser import parse_play_detail
from pbp_grader.services.utils.name_normalizer import (
    clean_player_display_name,
    fuzzy_best_match,
    normalize,
    same_player_loose,
)

logger = logging.getLogger(__name__)

RECOVERED_BY_RE = re.compile(r"\brecovered by\s+([^,;()]+)", re.IGNORECASE)
_RECOVERY_AT_RE = re.compile(r"(?i:\bat)\s+([A-Z]{2,3})[- ]?(\d{1,2}|50)\b")
_RECOVERY_TAIL_RE = re.compile(r"\s+(?:at|and)\s+.*$", re.IGNORECASE)

# Row fields that may hold a player's name, in lookup order
NAME_FIELDS = (
    "name", "player", "fullName", "displayName",
    "last_first", "lastFirst", "Player", "Player Name",
)


class Recovery(NamedTuple):
    """Parsed 'recovered by NAME [at SIDE-YARD]' clause."""
    name: str
    location: Optional[FieldLocation]


# ─────────────────────────────────────────────────────────────────────────────
# Roster lookup
# ─────────────────────────────────────────────────────────────────────────────

def _pull_name(row: Any) -> Optional[str]:
    if isinstance(row, str):
        return row
    if isinstance(row, Mapping):
        for key in NAME_FIELDS:
            if row.get(key):
                return str(row[key])
    return None


def starters_to_list(starters: Any) -> List[Any]:
    """
    Flatten the many shapes a starters block arrives in.

    Lists pass through; dicts contribute their list values, their rows, or
    (for rows without a name field) their keys.
    """
    if not starters:
        return []
    if isinstance(starters, list):
        return list(starters)
    if isinstance(starters, Mapping):
        rows: List[Any] = []
        for key, value in starters.items():
            if isinstance(value, list):
                rows.extend(value)
            elif isinstance(value, Mapping):
                rows.append(value if _pull_name(value) else str(key))
            elif value is not None:
                rows.append(value if isinstance(value, str) else str(key))
        return rows
    return [starters]


def build_starters_map(
    home_starters: Any,
    away_starters: Any,
    home_code: str,
    away_code: str,
) -> Dict[str, str]:
    """
    Map normalized player names to their team code.

    Away entries are written last and win on a name collision.
    """
    starters: Dict[str, str] = {}
    for rows, code in ((home_starters, home_code), (away_starters, away_code)):
        for row in starters_to_list(rows):
            name = _pull_name(row)
            key = normalize(name) if name else ""
            if key:
                starters[key] = str(code).upper()
    return starters


def resolve_player_team(
    name: Optional[str],
    starters_map: Mapping[str, str],
    threshold: Optional[int] = None,
) -> Optional[str]:
    """
    Find the team of a player named in play text.

    Tries an exact normalized lookup, then a RapidFuzz match over the
    roster, then a loose initial/last-name match when it is unambiguous.
    """
    if not name or not starters_map:
        return None

    key = normalize(name)
    if key in starters_map:
        return starters_map[key]

    cutoff = settings.PLAYER_FUZZY_MATCH_THRESHOLD if threshold is None else threshold
    fuzzy = fuzzy_best_match(name, starters_map.keys(), threshold=cutoff)
    if fuzzy is not None:
        return starters_map[fuzzy]

    teams = {team for roster_name, team in starters_map.items() if same_player_loose(name, roster_name)}
    if len(teams) == 1:
        return teams.pop()

    return None


# ─────────────────────────────────────────────────────────────────────────────
# Play helpers
# ─────────────────────────────────────────────────────────────────────────────

def parse_recovery(detail: Optional[str]) -> Optional[Recovery]:
    """
    Extract the recoverer and spot from a fumble description.

    Example:
        >>> parse_recovery("T.Brady fumbles, recovered by Kevin Byard at NE-30")
        Recovery(name='Kevin Byard', location=FieldLocation(side='NE', yard=30))
    """
    match = RECOVERED_BY_RE.search(detail or "")
    if not match:
        return None

    clause = match.group(1).strip()
    spot = _RECOVERY_AT_RE.search(clause)
    location = FieldLocation(side=spot.group(1).upper(), yard=int(spot.group(2))) if spot else None
    name = clean_player_display_name(_RECOVERY_TAIL_RE.sub("", clause))
    if not name:
        return None
    return Recovery(name=name, location=location)


def clean_parsed_players(parsed: ParsedPlayEvents) -> ParsedPlayEvents:
    """Strip trailing clauses from every player name in a parse."""
    def clean(name: Optional[str]) -> Optional[str]:
        return (clean_player_display_name(name) or None) if name else None

    events = [replace(event, player=clean(event.player)) for event in parsed.events]
    roles = PlayerRoles(
        passer=clean(parsed.players.passer),
        receiver=clean(parsed.players.receiver),
        rusher=clean(parsed.players.rusher),
        sacked_qb=clean(parsed.players.sacked_qb),
    )
    fumble = replace(parsed.fumble, by=clean(parsed.fumble.by)) if parsed.fumble else None
    return replace(parsed, events=events, players=roles, fumble=fumble)


# ─────────────────────────────────────────────────────────────────────────────
# State machine
# ─────────────────────────────────────────────────────────────────────────────

class PossessionTracker:
    """
    Single-pass possession scanner for one game.

    A tracker carries scan state and is meant for one annotate() call;
    annotate_plays() creates a fresh one each time.
    """

    def __init__(self, home: Any, away: Any, starters_map: Optional[Mapping[str, str]] = None):
        self.home = TeamDescriptor.from_value(home)
        self.away = TeamDescriptor.from_value(away)
        self.home_code = self.home.code
        self.away_code = self.away.code
        self.side_is_home = make_side_is_home_fn(self.home, self.away)
        self.starters_map = starters_map or {}

        self.pos_team: Optional[str] = None
        self.flip_staged = False
        self.staged_offense: Optional[str] = None
        self.last_snap_offense: Optional[str] = None
        self.seen_snap = False

    def opponent(self, team: Optional[str]) -> Optional[str]:
        if team is None:
            return None
        return self.away_code if team == self.home_code else self.home_code

    def annotate(self, plays: Iterable[Mapping[str, Any]]) -> List[AnnotatedPlay]:
        annotated: List[AnnotatedPlay] = []
        for idx, raw in enumerate(plays):
            play = self._build_play(idx, raw)

            if play.is_snap:
                self._stamp_snap(play)
            else:
                play.pos_team = self.pos_team

            if not is_no_play(play.detail):
                self._apply_transition(play)

            annotated.append(play)

        unresolved = sum(1 for p in annotated if p.is_snap and p.pos_team is None)
        if unresolved:
            logger.debug(f"Possession unresolved at {unresolved} snap(s)")
        return annotated

    def _build_play(self, idx: int, raw: Mapping[str, Any]) -> AnnotatedPlay:
        detail = str(raw.get("detail") or "")
        supplied = raw.get("parsed")
        parsed = supplied if isinstance(supplied, ParsedPlayEvents) else parse_play_detail(detail)
        return AnnotatedPlay(
            raw=raw,
            idx=idx,
            quarter=raw.get("quarter"),
            event=classify_event(detail, raw.get("down")),
            is_snap=is_snap_down(raw.get("down")),
            parsed=clean_parsed_players(parsed),
        )

    def _stamp_snap(self, play: AnnotatedPlay) -> None:
        if self.flip_staged:
            self.pos_team = (
                self.staged_offense
                or infer_offense(play, self.side_is_home, self.home_code, self.away_code)
                or self.pos_team
            )
            self.flip_staged = False
            self.staged_offense = None

        if not self.pos_team:
            self.pos_team = infer_offense(play, self.side_is_home, self.home_code, self.away_code)

        play.pos_team = self.pos_team
        play.start_of_drive = not self.seen_snap or play.pos_team != self.last_snap_offense
        self.last_snap_offense = play.pos_team
        self.seen_snap = True

    def _stage(self, play: AnnotatedPlay, offense: Optional[str]) -> None:
        self.flip_staged = True
        self.staged_offense = offense
        play.possession_flip = True

    def _apply_transition(self, play: AnnotatedPlay) -> None:
        event = play.event
        fumble_info = self._fumble_info(play.detail)
        if fumble_info is not None:
            play.fumble = fumble_info

        if event is PlayEvent.KICKOFF:
            # Predict the receiver from the kicking side; resolved at the next snap otherwise
            kick_spot = parse_location(play.location)
            receiving = None
            if kick_spot is not None and kick_spot.side:
                receiving = self.away_code if self.side_is_home(kick_spot.side) else self.home_code
            self._stage(play, receiving)
        elif event in BOUNDARY_EVENTS:
            self._stage(play, self.opponent(self.pos_team))
        elif event in (PlayEvent.FUMBLE, PlayEvent.SNAP) and FUMBLE_ANY_RE.search(play.detail):
            self._apply_fumble(play, fumble_info)

    def _fumble_info(self, detail: str) -> Optional[FumbleInfo]:
        if not FUMBLE_ANY_RE.search(detail):
            return None
        recovery = parse_recovery(detail)
        if recovery is None:
            return None
        team = resolve_player_team(recovery.name, self.starters_map)
        if team is None:
            logger.debug(f"Could not resolve team for fumble recoverer '{recovery.name}'")
        return FumbleInfo(recovered_by_team=team, recovery_loc=recovery.location)

    def _apply_fumble(self, play: AnnotatedPlay, info: Optional[FumbleInfo]) -> None:
        if info is not None:
            if not self.pos_team:
                return
            if info.recovered_by_team is None:
                # Recoverer not on either roster: assume the ball changed hands
                self._stage(play, self.opponent(self.pos_team))
            elif info.recovered_by_team != self.pos_team:
                self._stage(play, info.recovered_by_team)
        elif FUMBLE_LOST_RE.search(play.detail):
            self._stage(play, self.opponent(self.pos_team))


def annotate_plays(
    plays: Sequence[Mapping[str, Any]],
    home: Any,
    away: Any,
    starters_map: Optional[Mapping[str, str]] = None,
) -> List[AnnotatedPlay]:
    """
    Annotate a flattened play list with possession and drive markers.

    Args:
        plays: Flattened raw plays in game order (see flatten_plays)
        home: Home team descriptor ({code, name} or TeamDescriptor)
        away: Away team descriptor
        starters_map: Normalized name -> team code (see build_starters_map)

    Returns:
        One AnnotatedPlay per input play, same order. Raw plays are not mutated.
    """
    return PossessionTracker(home, away, starters_map).annotate(plays or [])
