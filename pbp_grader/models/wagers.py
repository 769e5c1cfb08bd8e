"""
Wager and graded-wager schemas.

Wagers come from the bet sheet as loosely shaped dicts. Each supported
(market, type) pair has its own pydantic model so the fields the grader
reads are validated at the settlement boundary. Fields the grader does not
read (display text, lock groups, ...) are kept and echoed back untouched.
"""
from enum import Enum
from typing import Any, Dict, Literal, Optional, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BetResult(str, Enum):
    """Final state of a graded wager."""
    WON = "won"
    LOST = "lost"
    PUSH = "push"
    PENDING = "pending"


class SettlementReason(str, Enum):
    """Machine-checkable reason behind a grade."""
    NO_PLAY_BY_PLAY = "no_play_by_play"
    NO_TOUCHDOWNS_IN_LOG = "no_touchdowns_in_log"
    TD_SCORER_MATCH = "td_scorer_match"
    TD_SCORER_MISMATCH = "td_scorer_mismatch"
    TD_COUNT = "td_count"
    INVALID_THRESHOLD = "invalid_threshold"
    MISSING_SEASON_STAT = "missing_season_stat"
    MISSING_SIDE = "missing_side"
    STAT_COMPARISON = "stat_comparison"
    NO_FINAL_SCORE = "no_final_score"
    UNKNOWN_TEAM = "unknown_team"
    FINAL_SCORE = "final_score"
    MARGIN_COMPARISON = "margin_comparison"
    TOTAL_COMPARISON = "total_comparison"
    UNKNOWN_MARKET = "unknown_market"
    INVALID_WAGER = "invalid_wager"


Threshold = Union[float, str, None]


class WagerBase(BaseModel):
    """Fields shared by every wager shape."""
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    market: str
    type: str
    selection: str = ""
    threshold: Threshold = None
    details: Optional[str] = None
    team: Optional[str] = None
    price: Any = None
    odds: Any = None

    @field_validator("market", "type", mode="before")
    @classmethod
    def _lower(cls, value: Any) -> str:
        return str(value or "").strip().lower()

    @field_validator("selection", mode="before")
    @classmethod
    def _selection_text(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()

    @field_validator("id", mode="before")
    @classmethod
    def _id_text(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)


class PlayerTdWager(WagerBase):
    """Touchdown scorer prop: threshold is 'first', 'last' or a count."""
    market: Literal["player"]
    type: Literal["td"]
    selection: str = Field(..., min_length=1)


class PlayerYardsWager(WagerBase):
    """Season yardage over/under prop; details carries the O/U side."""
    market: Literal["player"]
    type: Literal["pass_yds", "rec_yds", "rush_yds"]
    selection: str = Field(..., min_length=1)


class MoneylineWager(WagerBase):
    """Straight-up winner; team comes from `team` or `selection`."""
    market: Literal["game"]
    type: Literal["moneyline"]


class SpreadWager(WagerBase):
    """Signed point spread for the selected team."""
    market: Literal["game"]
    type: Literal["spread"]


class TotalWager(WagerBase):
    """Combined score over/under; selection is 'over' or 'under'."""
    market: Literal["game"]
    type: Literal["total"]


Wager = Union[PlayerTdWager, PlayerYardsWager, MoneylineWager, SpreadWager, TotalWager]

WAGER_VARIANTS: Dict[Tuple[str, str], Type[WagerBase]] = {
    ("player", "td"): PlayerTdWager,
    ("player", "pass_yds"): PlayerYardsWager,
    ("player", "rec_yds"): PlayerYardsWager,
    ("player", "rush_yds"): PlayerYardsWager,
    ("game", "moneyline"): MoneylineWager,
    ("game", "spread"): SpreadWager,
    ("game", "total"): TotalWager,
}


def flatten_wager_fields(raw: Any) -> Dict[str, Any]:
    """
    Merge a bet-sheet button's nested `bet` block into its top level.

    Top-level fields win; the nested block only fills gaps.
    """
    if not isinstance(raw, dict):
        return {}
    nested = raw.get("bet")
    merged: Dict[str, Any] = dict(nested) if isinstance(nested, dict) else {}
    for key, value in raw.items():
        if key == "bet":
            continue
        if value is None and key in merged:
            continue
        merged[key] = value
    return merged


class GradedWager(BaseModel):
    """A wager with its settlement verdict."""
    wager: Dict[str, Any]
    result: BetResult
    reason: str
    reason_code: SettlementReason
    actual: Union[bool, int, float, None] = None

    def to_dict(self) -> Dict[str, Any]:
        """The input wager with result, reason, reason_code and actual merged in."""
        data = dict(self.wager)
        data.update({
            "result": self.result.value,
            "reason": self.reason,
            "reason_code": self.reason_code.value,
            "actual": self.actual,
        })
        return data
