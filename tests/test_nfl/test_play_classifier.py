"""Unit tests for possession-relevant play classification."""
import pytest

from pbp_grader.models.pbp import PlayEvent
from pbp_grader.services.nfl.play_classifier import (
    classify_event,
    classify_score,
    is_no_play,
    is_snap_down,
)


class TestClassifyEvent:
    """Keyword precedence over the presence of a down."""

    @pytest.mark.parametrize("detail, down, expected", [
        ("Nick Folk kicks off 65 yards, touchback", None, PlayEvent.KICKOFF),
        ("Ryan Stonehouse punts 45 yards", 4, PlayEvent.PUNT),
        ("Mac Jones pass intercepted by Kevin Byard", 2, PlayEvent.TURNOVER),
        ("Ryan Tannehill pass incomplete, turnover on downs", 4, PlayEvent.TURNOVER),
        ("Mac Jones sacked in the end zone for a safety", 3, PlayEvent.SAFETY),
        ("Timeout #1 by NWE", None, PlayEvent.TIMEOUT),
        ("Derrick Henry left end for 5 yards", 1, PlayEvent.SNAP),
        ("Derrick Henry left end for 5 yards", "3", PlayEvent.SNAP),
        ("Derrick Henry fumbles, recovered by Kyle Dugger", 2, PlayEvent.SNAP),
        ("Derrick Henry fumbles, recovered by Kyle Dugger", None, PlayEvent.FUMBLE),
        ("Nick Folk extra point is good", None, PlayEvent.OTHER),
        ("", None, PlayEvent.OTHER),
        (None, None, PlayEvent.OTHER),
    ])
    def test_classify_event(self, detail, down, expected):
        assert classify_event(detail, down) is expected


class TestSnapDowns:

    @pytest.mark.parametrize("down", ["1", 2, 3.0, " 4 ", "2.0"])
    def test_snap_downs(self, down):
        assert is_snap_down(down) is True

    @pytest.mark.parametrize("down", [None, "", 0, 5, "1.5", "x", True])
    def test_non_snap_downs(self, down):
        assert is_snap_down(down) is False


class TestScoringKind:

    @pytest.mark.parametrize("detail, expected", [
        ("Hunter Henry 72 yard pass from Mac Jones, touchdown", "TD"),
        ("Nick Folk extra point is good", "XP"),
        ("Nick Folk 44 yard field goal good", "FG"),
        ("Derrick Henry left end for 5 yards", None),
        (None, None),
    ])
    def test_classify_score(self, detail, expected):
        assert classify_score(detail) == expected

    def test_no_play(self):
        assert is_no_play("PENALTY on TEN, No Play")
        assert is_no_play("Penalties offsetting")
        assert not is_no_play("Derrick Henry left end for 5 yards")
        assert not is_no_play(None)
