"""
Play-text parsing route.
"""
import logging

from fastapi import APIRouter
from pydantic import BaseModel, Field

from pbp_grader.services.nfl.play_parser import parse_play_detail

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/plays", tags=["nfl-plays"])


class ParsePlayRequest(BaseModel):
    """A single play description."""
    detail: str = Field(..., description="Play-by-play text, e.g. 'T.Brady pass complete to R.Gronkowski for 12 yards'")


@router.post("/parse")
async def parse_play(request: ParsePlayRequest):
    """Extract play type, yardage and per-player stat events from play text."""
    parsed = parse_play_detail(request.detail)
    logger.debug(f"Parsed play as {parsed.type.value} with {len(parsed.events)} events")
    return parsed.to_dict()
