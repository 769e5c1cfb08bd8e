"""
Game-data loader.

A game-data document is a list of fragments (or a single dict):

    [
        {"team1": "nwe", "data": {...season stats...}},
        {"team2": "oti", "data": {...}},
        {"matchup_info": {...}, "matchupstats": {
            "pbp": {"1": [...], "2": [...], ...},
            "passing_advanced": {...}, "rushing_advanced": {...},
            "receiving_advanced": {...}, "advanced_defense": {...},
            "home_starters": {...}, "vis_starters": {...},
            "scorebox_meta": {"date": ..., "start_time": ..., "stadium": ...},
            "game_info": {...}, "scoring": {...},
        }},
    ]

team1 is the home team and team2 the visitor. load_game() turns the
document into a GameContext holding the annotated log, computed once.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from pbp_grader.core.config import get_team_descriptor
from pbp_grader.models.pbp import AnnotatedPlay, TeamDescriptor
from pbp_grader.models.stats import SeasonStatTables
from pbp_grader.services.nfl.pbp_flattener import flatten_plays
from pbp_grader.services.nfl.possession_tracker import annotate_plays, build_starters_map

logger = logging.getLogger(__name__)


def _first_fragment(fragments: List[Any], key: str) -> Optional[Mapping[str, Any]]:
    for fragment in fragments:
        if isinstance(fragment, Mapping) and key in fragment:
            return fragment
    return None


def extract_game_entities(payload: Any) -> Dict[str, Any]:
    """
    Pull the pieces the grader needs out of a game-data document.

    Missing fragments yield empty values rather than errors.
    """
    fragments = payload if isinstance(payload, list) else [payload]

    matchup = _first_fragment(fragments, "matchup_info") or {}
    team1 = _first_fragment(fragments, "team1") or {}
    team2 = _first_fragment(fragments, "team2") or {}

    stats = matchup.get("matchupstats") or {}
    meta = stats.get("scorebox_meta") or {}

    home = TeamDescriptor.from_value(get_team_descriptor(team1.get("team1", "")))
    away = TeamDescriptor.from_value(get_team_descriptor(team2.get("team2", "")))

    return {
        "home": home,
        "away": away,
        "date": meta.get("date") or "",
        "time": meta.get("start_time") or "",
        "stadium": meta.get("stadium") or "",
        "game_info": stats.get("game_info") or {},
        "pbp": stats.get("pbp") or None,
        "scoring": stats.get("scoring") or {},
        "passing": stats.get("passing_advanced") or {},
        "rushing": stats.get("rushing_advanced") or {},
        "receiving": stats.get("receiving_advanced") or {},
        "defense": stats.get("advanced_defense") or {},
        "home_starters": stats.get("home_starters") or {},
        "away_starters": stats.get("vis_starters") or {},
        "season_stats_home": team1.get("data") or {},
        "season_stats_away": team2.get("data") or {},
    }


@dataclass
class GameContext:
    """A loaded game: teams, annotated log and season tables."""
    home: TeamDescriptor
    away: TeamDescriptor
    plays: List[AnnotatedPlay]
    tables: SeasonStatTables
    starters_map: Dict[str, str] = field(default_factory=dict)
    date: str = ""
    stadium: str = ""

    @property
    def game_id(self) -> str:
        """Short label used to tag log lines, e.g. "TEN@NWE 2019-11-03"."""
        label = f"{self.away.code}@{self.home.code}"
        return f"{label} {self.date}".strip()


def build_game_context(
    home: Any,
    away: Any,
    pbp: Any,
    home_starters: Any = None,
    away_starters: Any = None,
    tables: Any = None,
    date: str = "",
    stadium: str = "",
) -> GameContext:
    """Flatten, annotate and bundle one game's data."""
    home_team = TeamDescriptor.from_value(home)
    away_team = TeamDescriptor.from_value(away)

    starters_map = build_starters_map(home_starters, away_starters, home_team.code, away_team.code)
    plays = annotate_plays(flatten_plays(pbp), home_team, away_team, starters_map)

    return GameContext(
        home=home_team,
        away=away_team,
        plays=plays,
        tables=SeasonStatTables.from_value(tables),
        starters_map=starters_map,
        date=str(date or ""),
        stadium=str(stadium or ""),
    )


def load_game(payload: Any) -> GameContext:
    """
    Load a game-data document into a GameContext.

    Args:
        payload: Game-data document (list of fragments or a single dict)

    Returns:
        GameContext with the annotated play log
    """
    entities = extract_game_entities(payload)
    context = build_game_context(
        home=entities["home"],
        away=entities["away"],
        pbp=entities["pbp"],
        home_starters=entities["home_starters"],
        away_starters=entities["away_starters"],
        tables={
            "passing": entities["passing"],
            "rushing": entities["rushing"],
            "receiving": entities["receiving"],
        },
        date=entities["date"],
        stadium=entities["stadium"],
    )

    if not context.plays:
        logger.warning(f"Game {context.game_id} has no play-by-play")
    else:
        logger.info(f"Loaded game {context.game_id}: {len(context.plays)} plays")

    return context
