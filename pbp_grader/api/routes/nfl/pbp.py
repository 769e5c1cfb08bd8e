"""
Play-by-play API routes: annotate a game log and locate drives/series.
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from pbp_grader.services.betting.play_impact import replay_impacts
from pbp_grader.services.nfl.drive_locator import (
    find_drive_head_index_robust,
    find_series_head_index,
    find_snap_index,
)
from pbp_grader.services.nfl.game_loader import build_game_context

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pbp", tags=["nfl-pbp"])


# Request/Response models
class TeamIn(BaseModel):
    """Team descriptor as shown on the scorebox."""
    code: str = Field(..., min_length=1, description="Team code used in locations and score fields (e.g. NWE)")
    name: str = Field("", description="Full team name (e.g. New England Patriots)")


class GameLogRequest(BaseModel):
    """A game's quarter-keyed play-by-play plus team context."""
    home: TeamIn
    away: TeamIn
    pbp: Dict[str, List[Dict[str, Any]]] = Field(..., description="Quarter label -> ordered plays")
    home_starters: Any = Field(None, description="Home starting roster (list or dict)")
    away_starters: Any = Field(None, description="Away starting roster (list or dict)")
    bets: Optional[List[Dict[str, Any]]] = Field(
        None, description="Wager slip; when given, each play carries its impact and yardage progress"
    )


class DriveRequest(GameLogRequest):
    """Game log plus the play index to locate."""
    index: int = Field(..., ge=0, description="Index into the flattened play list")


class AnnotateResponse(BaseModel):
    """Annotated plays in game order."""
    plays: List[Dict[str, Any]]
    count: int


class DriveResponse(BaseModel):
    """Drive and series boundaries around a play (-1 when none)."""
    snap_index: int
    drive_head_index: int
    series_head_index: int


def _context_for(request: GameLogRequest):
    return build_game_context(
        home=request.home.model_dump(),
        away=request.away.model_dump(),
        pbp=request.pbp,
        home_starters=request.home_starters,
        away_starters=request.away_starters,
    )


@router.post("/annotate", response_model=AnnotateResponse)
async def annotate_game_log(request: GameLogRequest):
    """
    Annotate every play with event type, offense and drive markers.

    With a wager slip, each play also gets "impact" (positive, negative or
    null) and "betProgress" (yardage-prop progress after the play).
    """
    try:
        context = _context_for(request)
        plays = [play.to_dict() for play in context.plays]
        if request.bets:
            impacts = replay_impacts(context.plays, request.bets, context.home.code, context.away.code)
            for play, entry in zip(plays, impacts):
                play.update(entry)
        return {"plays": plays, "count": len(plays)}
    except Exception as e:
        logger.error(f"Error annotating play-by-play: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/drive", response_model=DriveResponse)
async def locate_drive(request: DriveRequest):
    """Find the snap, drive head and series head for a play index."""
    try:
        context = _context_for(request)
        if request.index >= len(context.plays):
            raise HTTPException(
                status_code=404,
                detail=f"Play {request.index} not found ({len(context.plays)} plays)",
            )

        snap_index = find_snap_index(context.plays, request.index, -1)
        drive_head = find_drive_head_index_robust(context.plays, snap_index)
        series_head = find_series_head_index(context.plays, snap_index, drive_head) if snap_index >= 0 else -1

        return {
            "snap_index": snap_index,
            "drive_head_index": drive_head,
            "series_head_index": series_head,
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error locating drive: {e}")
        raise HTTPException(status_code=500, detail=str(e))
