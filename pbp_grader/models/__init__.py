"""
Data models.

- pbp: dataclasses for parsed plays, field locations and the annotated log
- stats: season stat tables for yardage props
- wagers: pydantic schemas for wager shapes and graded results
"""
from pbp_grader.models.pbp import (
    AnnotatedPlay,
    BOUNDARY_EVENTS,
    FieldLocation,
    FumbleCarrier,
    FumbleInfo,
    ParsedPlayEvents,
    PlayerRoles,
    PlayEvent,
    PlayType,
    StatEvent,
    TeamDescriptor,
)
from pbp_grader.models.stats import SeasonStatTables
from pbp_grader.models.wagers import (
    BetResult,
    GradedWager,
    SettlementReason,
    WAGER_VARIANTS,
    Wager,
)

__all__ = [
    "AnnotatedPlay",
    "BOUNDARY_EVENTS",
    "FieldLocation",
    "FumbleCarrier",
    "FumbleInfo",
    "ParsedPlayEvents",
    "PlayerRoles",
    "PlayEvent",
    "PlayType",
    "StatEvent",
    "TeamDescriptor",
    "SeasonStatTables",
    "BetResult",
    "GradedWager",
    "SettlementReason",
    "WAGER_VARIANTS",
    "Wager",
]
