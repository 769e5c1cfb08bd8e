"""
Wager grading API routes.
"""
import logging
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from pbp_grader.core.logging import clear_game_id, set_game_id
from pbp_grader.services.betting.parlay_grader import grade_parlay
from pbp_grader.services.betting.settlement_service import grade_bets, summarize_results
from pbp_grader.services.nfl.game_loader import load_game

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bets", tags=["bets"])


# Request/Response models
class GradeBetsRequest(BaseModel):
    """A game-data document and the wagers to grade against it."""
    game: Union[List[Dict[str, Any]], Dict[str, Any]] = Field(
        ..., description="Game-data document (fragments with team1/team2/matchup_info)"
    )
    bets: List[Dict[str, Any]] = Field(..., description="Wagers in bet-sheet shape")


class ParlayResponse(BaseModel):
    """Aggregate slip outcome."""
    result: str
    legs: int
    probability: Optional[float]
    american: Optional[str]


class GradeBetsResponse(BaseModel):
    """Graded wagers plus the slip as a parlay."""
    game_id: str
    bets: List[Dict[str, Any]]
    summary: Dict[str, int]
    parlay: ParlayResponse


@router.post("/grade", response_model=GradeBetsResponse)
async def grade_wagers(request: GradeBetsRequest):
    """
    Grade each wager against the game, then the slip as a whole.

    Wagers that cannot be graded come back as pending with a reason code.
    """
    try:
        context = load_game(request.game)
        token = set_game_id(context.game_id)
        try:
            graded = grade_bets(request.bets, context)
            parlay = grade_parlay(graded)
        finally:
            clear_game_id(token)

        return {
            "game_id": context.game_id,
            "bets": [g.to_dict() for g in graded],
            "summary": summarize_results(graded),
            "parlay": {
                "result": parlay.result.value,
                "legs": parlay.legs,
                "probability": parlay.probability,
                "american": parlay.american,
            },
        }
    except Exception as e:
        logger.error(f"Error grading bets: {e}")
        raise HTTPException(status_code=500, detail=str(e))
