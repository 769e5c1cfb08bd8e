"""Tests for loading a game-data document into a GameContext."""
import logging

from pbp_grader.models.stats import SeasonStatTables
from pbp_grader.services.nfl.game_loader import (
    build_game_context,
    extract_game_entities,
    load_game,
)


class TestExtractGameEntities:
    """Pulling teams, plays and tables out of the fragment list."""

    def test_team_mapping(self, game_document):
        entities = extract_game_entities(game_document)

        assert entities["home"].code == "NWE"
        assert entities["home"].name == "New England Patriots"
        assert entities["away"].code == "TEN"
        assert entities["away"].name == "Tennessee Titans"

    def test_scorebox_and_tables(self, game_document):
        entities = extract_game_entities(game_document)

        assert entities["date"] == "2023-11-05"
        assert entities["time"] == "1:00 PM"
        assert entities["stadium"] == "Gillette Stadium"
        assert set(entities["pbp"]) == {"1", "2", "3", "4"}
        assert entities["receiving"]["Hunter Henry"] == {"rec_yds": 76}
        assert entities["season_stats_home"] == {"wins": 10}
        assert entities["season_stats_away"] == {"wins": 7}

    def test_unknown_team_key_falls_back_to_code(self):
        entities = extract_game_entities([{"team1": "buf"}, {"team2": "mia season"}])

        assert entities["home"].code == "BUF"
        assert entities["away"].code == "MIA"

    def test_missing_fragments(self):
        entities = extract_game_entities({})

        assert entities["pbp"] is None
        assert entities["home_starters"] == {}
        assert entities["passing"] == {}


class TestLoadGame:

    def test_loads_and_annotates(self, game_document, annotated_plays):
        context = load_game(game_document)

        assert len(context.plays) == 24
        assert [p.pos_team for p in context.plays] == [p.pos_team for p in annotated_plays]
        assert context.starters_map["kyle dugger"] == "NWE"
        assert context.starters_map["kevin byard"] == "TEN"
        assert isinstance(context.tables, SeasonStatTables)

    def test_game_id(self, game_document):
        assert load_game(game_document).game_id == "TEN@NWE 2023-11-05"

    def test_empty_game_logs_warning(self, caplog):
        with caplog.at_level(logging.WARNING):
            context = load_game([{"team1": "nwe"}, {"team2": "oti"}])

        assert context.plays == []
        assert "has no play-by-play" in caplog.text

    def test_build_game_context_directly(self, sample_pbp, home_team, away_team):
        context = build_game_context(home_team, away_team, sample_pbp)

        assert context.home.code == "NWE"
        assert context.game_id == "TEN@NWE"
        assert len(context.plays) == 24
        # Without rosters the lost fumble cannot be resolved, so it still flips
        assert context.plays[14].fumble.recovered_by_team is None
        assert context.plays[15].pos_team == "NWE"
