"""Tests for parlay aggregation and odds conversion."""
import pytest

from pbp_grader.models.wagers import BetResult
from pbp_grader.services.betting.parlay_grader import (
    american_to_decimal,
    combine_parlay_prob,
    decimal_to_american,
    grade_parlay,
    leg_probability,
    parlay_result,
    prob_to_american,
)
from pbp_grader.services.betting.settlement_service import grade_bets


class TestParlayResult:

    @pytest.mark.parametrize("results, expected", [
        (["won", "won"], BetResult.WON),
        (["won", "lost"], BetResult.LOST),
        (["lost", "pending"], BetResult.LOST),
        (["won", "push"], BetResult.PENDING),
        (["won", "pending"], BetResult.PENDING),
        ([], BetResult.PENDING),
    ])
    def test_result(self, results, expected):
        assert parlay_result([{"result": r} for r in results]) is expected

    def test_nested_bet_fields(self):
        assert leg_probability({"result": "won", "bet": {"odds": 0.4}}) == 0.4


class TestParlayProbability:

    def test_multiplies_legs(self):
        probability, legs = combine_parlay_prob([{"odds": 0.5}, {"odds": "0.5"}])

        assert probability == pytest.approx(0.25)
        assert legs == 2

    def test_unpriced_leg_voids_price(self):
        assert combine_parlay_prob([{"odds": 0.5}, {"odds": None}]) == (None, 0)
        assert combine_parlay_prob([{"odds": 0.5}, {"odds": 1.5}]) == (None, 0)
        assert combine_parlay_prob([]) == (None, 0)

    @pytest.mark.parametrize("odds, expected", [
        (-150, 0.6),
        ("+200", 1 / 3),
        (0.25, 0.25),
    ])
    def test_leg_probability(self, odds, expected):
        assert leg_probability({"odds": odds}) == pytest.approx(expected)


class TestOddsConversion:

    @pytest.mark.parametrize("probability, expected", [
        (0.25, "+300"),
        (0.4, "+150"),
        (0.5, "-100"),
        (0.6, "-150"),
        (0, None),
        (1, None),
        (None, None),
    ])
    def test_prob_to_american(self, probability, expected):
        assert prob_to_american(probability) == expected

    def test_american_to_decimal(self):
        assert american_to_decimal(200) == pytest.approx(3.0)
        assert american_to_decimal(-110) == pytest.approx(1.9091, rel=1e-3)
        assert american_to_decimal(1.5) == 1.5

    def test_decimal_to_american(self):
        assert decimal_to_american(3.0) == 200
        assert decimal_to_american(1.5) == -200


class TestGradeParlay:

    def test_graded_slip(self, settlement_context, wager_slip):
        """All four legs of the conftest slip win."""
        summary = grade_parlay(grade_bets(wager_slip, settlement_context))

        assert summary.result is BetResult.WON
        assert summary.legs == 4
        assert summary.probability == pytest.approx(0.2 * 0.5 * 0.6 * 0.5)
        assert summary.american == "+3233"

    def test_unpriced_slip(self, settlement_context):
        graded = grade_bets([
            {"market": "game", "type": "moneyline", "selection": "NWE"},
            {"market": "game", "type": "moneyline", "selection": "TEN", "odds": 0.4},
        ], settlement_context)

        summary = grade_parlay(graded)

        assert summary.result is BetResult.LOST
        assert summary.legs == 2
        assert summary.probability is None
        assert summary.american is None
