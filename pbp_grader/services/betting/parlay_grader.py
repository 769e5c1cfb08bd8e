"""
Parlay aggregation over graded wagers.

A slip wins only when every leg won; any lost leg loses it; otherwise it
stays pending (pushes included). Leg prices are read from `odds`, which the
bet sheet stores as an implied probability in (0, 1). American prices
(|odds| >= 100) are converted.
"""
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Tuple

from pbp_grader.models.wagers import BetResult, GradedWager
from pbp_grader.services.utils.numbers import as_num

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParlaySummary:
    """Aggregate outcome and price of a wager slip."""
    result: BetResult
    legs: int
    probability: Optional[float]
    american: Optional[str]


def _leg_field(leg: Any, key: str) -> Any:
    if isinstance(leg, GradedWager):
        if key == "result":
            return leg.result.value
        return leg.wager.get(key)
    if isinstance(leg, Mapping):
        value = leg.get(key)
        if value is None and isinstance(leg.get("bet"), Mapping):
            value = leg["bet"].get(key)
        return value
    return None


def american_to_decimal(odds: float) -> float:
    """
    Convert odds to decimal format.

    American odds are detected by |value| >= 100 (e.g. -110, +200); anything
    smaller is taken as already decimal.
    """
    if abs(odds) >= 100:
        if odds > 0:
            return (odds / 100) + 1
        return (100 / abs(odds)) + 1
    return odds


def decimal_to_american(decimal: float) -> int:
    """Convert decimal odds to American odds."""
    if decimal >= 2.0:
        return int(round((decimal - 1) * 100))
    return int(round(-100 / (decimal - 1)))


def prob_to_american(probability: Any) -> Optional[str]:
    """
    Fair American price for a win probability, as a signed string.

    Examples:
        >>> prob_to_american(0.4)
        '+150'
        >>> prob_to_american(0.6)
        '-150'
        >>> prob_to_american(1.0) is None
        True
    """
    p = as_num(probability)
    if p is None or p <= 0 or p >= 1:
        return None
    if p >= 0.5:
        odds = -int(round((p / (1 - p)) * 100))
    else:
        odds = int(round(((1 - p) / p) * 100))
    return f"+{odds}" if odds > 0 else str(odds)


def leg_probability(leg: Any) -> Optional[float]:
    """Implied win probability of one leg, or None when it has no usable price."""
    odds = as_num(_leg_field(leg, "odds"))
    if odds is None:
        return None
    if 0 < odds < 1:
        return float(odds)
    if abs(odds) >= 100:
        return 1 / american_to_decimal(odds)
    return None


def parlay_result(legs: Sequence[Any]) -> BetResult:
    """won if every leg won, lost if any leg lost, else pending."""
    if not legs:
        return BetResult.PENDING
    results = [str(_leg_field(leg, "result") or "").lower() for leg in legs]
    if all(r == BetResult.WON.value for r in results):
        return BetResult.WON
    if any(r == BetResult.LOST.value for r in results):
        return BetResult.LOST
    return BetResult.PENDING


def combine_parlay_prob(legs: Sequence[Any]) -> Tuple[Optional[float], int]:
    """
    Multiply leg probabilities.

    Returns:
        (probability, leg count); (None, 0) when any leg lacks a price
    """
    if not legs:
        return None, 0
    probability = 1.0
    for leg in legs:
        p = leg_probability(leg)
        if p is None:
            return None, 0
        probability *= p
    return probability, len(legs)


def grade_parlay(legs: Sequence[Any]) -> ParlaySummary:
    """Result and fair price of a slip in one call."""
    probability, priced_legs = combine_parlay_prob(legs)
    summary = ParlaySummary(
        result=parlay_result(legs),
        legs=priced_legs or len(legs),
        probability=probability,
        american=prob_to_american(probability),
    )
    logger.debug(f"Parlay of {summary.legs} legs: {summary.result.value}")
    return summary
