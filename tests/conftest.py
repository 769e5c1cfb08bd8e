"""Shared pytest fixtures for pbp-grader tests.

The synthetic game below (Titans at Patriots) is small enough to trace by
hand. Flattened indices and the offense at each one:

    Q1  0 kickoff (NWE kicks)        -      flip
        1-5  TEN snaps               TEN    1 starts the drive, 3 is 1st down
        6    TEN punt on 4th down    TEN    flip
    Q2  7-10 NWE snaps, 10 is a TD   NWE    7 starts the drive, 9 is 1st down
        11   extra point            (NWE)
        12   kickoff (NWE kicks)    (NWE)   flip
        13-14 TEN snaps, 14 fumble   TEN    14 lost to Kyle Dugger, flip
        15   NWE rushing TD          NWE
        16   extra point            (NWE)
    Q3  17   kickoff (NWE kicks)    (NWE)   flip
        18   TEN passing TD          TEN
        19   extra point            (TEN)
    Q4  20   kickoff (TEN kicks)    (TEN)   flip
        21   NWE interception        NWE    flip
        22-23 TEN snaps              TEN

Final score: NWE 14, TEN 7.
"""
import copy
import sys
from pathlib import Path

import pytest

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


HOME = {"code": "NWE", "name": "New England Patriots"}
AWAY = {"code": "TEN", "name": "Tennessee Titans"}


def _play(detail, down=None, location=None, hm=0, aw=0, yds_to_go=None):
    play = {"detail": detail, "pbp_score_hm": hm, "pbp_score_aw": aw}
    if down is not None:
        play["down"] = down
    if yds_to_go is not None:
        play["yds_to_go"] = yds_to_go
    if location is not None:
        play["location"] = location
    return play


SAMPLE_PBP = {
    "1": [
        _play("Nick Folk kicks off 65 yards, touchback", location="NE 35"),
        _play("Derrick Henry left end for 5 yards (tackle by Matthew Judon)", 1, "TEN 25", yds_to_go=10),
        _play("Ryan Tannehill pass complete short right to Treylon Burks for 12 yards", 2, "TEN 30", yds_to_go=5),
        _play("Ryan Tannehill pass incomplete short right to Treylon Burks", 1, "TEN 42", yds_to_go=10),
        _play("Derrick Henry up the middle for 2 yards", 2, "TEN 42", yds_to_go=10),
        _play("Ryan Tannehill pass incomplete deep left to Treylon Burks", 3, "TEN 44", yds_to_go=8),
        _play("Ryan Stonehouse punts 45 yards, fair catch by Marcus Jones", 4, "TEN 44", yds_to_go=8),
    ],
    "2": [
        _play("Rhamondre Stevenson right tackle for 4 yards", 1, "NE 11", yds_to_go=10),
        _play("Mac Jones pass complete deep left to Hunter Henry for 20 yards", 2, "NE 15", yds_to_go=6),
        _play("Mac Jones sacked at NE 28 for -7 yards (Jeffery Simmons)", 1, "NE 35", yds_to_go=10),
        _play("Mac Jones pass complete deep middle to Hunter Henry for 72 yards, touchdown",
              2, "NE 28", hm=6, yds_to_go=17),
        _play("Nick Folk extra point is good", hm=7),
        _play("Nick Folk kicks off 65 yards, returned by Kyle Philips for 20 yards", location="NE 35", hm=7),
        _play("Derrick Henry right guard for 3 yards", 1, "TEN 20", hm=7, yds_to_go=10),
        _play("Derrick Henry fumbles, recovered by Kyle Dugger at TEN-23", 2, "TEN 23", hm=7, yds_to_go=7),
        _play("Rhamondre Stevenson up the middle for 23 yards, touchdown", 1, "TEN 23", hm=13, yds_to_go=10),
        _play("Nick Folk extra point is good", hm=14),
    ],
    "3": [
        _play("Nick Folk kicks off 65 yards, touchback", location="NE 35", hm=14),
        _play("Ryan Tannehill pass complete deep right to Treylon Burks for 75 yards, touchdown",
              1, "TEN 25", hm=14, aw=6, yds_to_go=10),
        _play("Randy Bullock extra point is good", hm=14, aw=7),
    ],
    "4": [
        _play("Randy Bullock kicks off 65 yards, touchback", location="TEN 35", hm=14, aw=7),
        _play("Mac Jones pass intercepted by Kevin Byard at NE 40", 1, "NE 25", hm=14, aw=7, yds_to_go=10),
        _play("Ryan Tannehill pass complete short left to Treylon Burks for 10 yards",
              1, "NE 40", hm=14, aw=7, yds_to_go=10),
        _play("Ryan Tannehill pass incomplete deep right to Treylon Burks", 1, "NE 30", hm=14, aw=7, yds_to_go=10),
    ],
}

HOME_STARTERS = [
    {"name": "Mac Jones", "pos": "QB"},
    {"name": "Rhamondre Stevenson", "pos": "RB"},
    {"name": "Hunter Henry", "pos": "TE"},
    {"name": "Kyle Dugger", "pos": "S"},
    {"name": "Matthew Judon", "pos": "LB"},
]

AWAY_STARTERS = {
    "Ryan Tannehill": {"pos": "QB"},
    "Derrick Henry": {"pos": "RB"},
    "Treylon Burks": {"pos": "WR"},
    "Kevin Byard": {"pos": "S"},
    "Jeffery Simmons": {"pos": "DT"},
}

SEASON_TABLES = {
    "passing": [
        {"name_display": "Mac Jones", "pass_yds": 2997},
        {"name_display": "Ryan Tannehill", "pass_yds": 2536},
    ],
    "rushing": [
        {"name_display": "Derrick Henry", "rush_yds": "1,538"},
        {"name_display": "Rhamondre Stevenson", "rush_yds": 1040},
    ],
    "receiving": {
        "Hunter Henry": {"rec_yds": 76},
        "Treylon Burks": {"rec_yds": 444},
    },
}


@pytest.fixture
def home_team():
    return dict(HOME)


@pytest.fixture
def away_team():
    return dict(AWAY)


@pytest.fixture
def sample_pbp():
    """Quarter-keyed play-by-play for the synthetic game."""
    return copy.deepcopy(SAMPLE_PBP)


@pytest.fixture
def flat_plays(sample_pbp):
    from pbp_grader.services.nfl.pbp_flattener import flatten_plays

    return flatten_plays(sample_pbp)


@pytest.fixture
def home_starters():
    return copy.deepcopy(HOME_STARTERS)


@pytest.fixture
def away_starters():
    return copy.deepcopy(AWAY_STARTERS)


@pytest.fixture
def starters_map():
    from pbp_grader.services.nfl.possession_tracker import build_starters_map

    return build_starters_map(HOME_STARTERS, AWAY_STARTERS, "NWE", "TEN")


@pytest.fixture
def annotated_plays(flat_plays, home_team, away_team, starters_map):
    """The synthetic game after the possession scan."""
    from pbp_grader.services.nfl.possession_tracker import annotate_plays

    return annotate_plays(flat_plays, home_team, away_team, starters_map)


@pytest.fixture
def season_tables():
    return copy.deepcopy(SEASON_TABLES)


@pytest.fixture
def settlement_context(annotated_plays, home_team, away_team, season_tables):
    from pbp_grader.models.pbp import TeamDescriptor
    from pbp_grader.models.stats import SeasonStatTables
    from pbp_grader.services.betting.settlement_service import SettlementContext

    return SettlementContext(
        home=TeamDescriptor.from_value(home_team),
        away=TeamDescriptor.from_value(away_team),
        plays=annotated_plays,
        tables=SeasonStatTables.from_value(season_tables),
    )


@pytest.fixture
def game_document():
    """Game-data document in the scraped fragment shape (team1 is home)."""
    return [
        {"team1": "nwe", "data": {"wins": 10}},
        {"team2": "oti", "data": {"wins": 7}},
        {
            "matchup_info": {"week": 9},
            "matchupstats": {
                "pbp": copy.deepcopy(SAMPLE_PBP),
                "passing_advanced": copy.deepcopy(SEASON_TABLES["passing"]),
                "rushing_advanced": copy.deepcopy(SEASON_TABLES["rushing"]),
                "receiving_advanced": copy.deepcopy(SEASON_TABLES["receiving"]),
                "home_starters": copy.deepcopy(HOME_STARTERS),
                "vis_starters": copy.deepcopy(AWAY_STARTERS),
                "scorebox_meta": {
                    "date": "2023-11-05",
                    "start_time": "1:00 PM",
                    "stadium": "Gillette Stadium",
                },
            },
        },
    ]


@pytest.fixture
def wager_slip():
    """One wager per supported market, all graded against the synthetic game."""
    return [
        {"id": "1", "market": "player", "type": "td", "selection": "Hunter Henry",
         "threshold": "first", "odds": 0.2},
        {"id": "2", "market": "player", "type": "rec_yds", "selection": "Hunter Henry",
         "threshold": 75, "details": "O", "odds": 0.5},
        {"id": "3", "market": "game", "type": "moneyline", "selection": "NWE", "odds": -150},
        {"id": "4", "market": "game", "type": "total", "selection": "under",
         "threshold": 41.5, "odds": 0.5},
    ]


@pytest.fixture
def test_client():
    """FastAPI TestClient over the application."""
    from fastapi.testclient import TestClient
    from pbp_grader.main import app

    with TestClient(app) as client:
        yield client
