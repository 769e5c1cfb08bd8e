"""
Play-by-play data model.

Raw plays arrive as plain mappings (detail, down, yds_to_go, location and
running score fields) and are never mutated. Everything derived from them
lives in the dataclasses below:

- StatEvent / ParsedPlayEvents: what the play-text parser extracts
- FieldLocation / FumbleInfo: geometry and recovery details
- AnnotatedPlay: a raw play plus possession/drive annotations
"""
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


class PlayType(str, Enum):
    """Play type inferred from the description text."""
    PASS = "pass"
    RUSH = "rush"
    SACK = "sack"
    OTHER = "other"


class PlayEvent(str, Enum):
    """Possession-relevant classification of a play."""
    KICKOFF = "KICKOFF"
    PUNT = "PUNT"
    TURNOVER = "TURNOVER"
    SAFETY = "SAFETY"
    TIMEOUT = "TIMEOUT"
    SNAP = "SNAP"
    FUMBLE = "FUMBLE"
    OTHER = "OTHER"


# Events after which the other team gets the ball at the next snap
BOUNDARY_EVENTS = frozenset({
    PlayEvent.KICKOFF, PlayEvent.PUNT, PlayEvent.TURNOVER, PlayEvent.SAFETY,
})


@dataclass(frozen=True)
class StatEvent:
    """One signed stat delta credited to a player."""
    player: Optional[str]
    stat: str  # rush_yds, pass_yds, rec_yds, rec, pass_td, fumble, ...
    delta: int
    note: Optional[str] = None


@dataclass(frozen=True)
class PlayerRoles:
    """Named participants of a play (any may be unknown)."""
    passer: Optional[str] = None
    receiver: Optional[str] = None
    rusher: Optional[str] = None
    sacked_qb: Optional[str] = None


@dataclass(frozen=True)
class FumbleCarrier:
    """Player who put the ball on the ground."""
    by: Optional[str]


@dataclass(frozen=True)
class ParsedPlayEvents:
    """Structured stat record extracted from one play description."""
    type: PlayType = PlayType.OTHER
    yards: Optional[int] = None
    touchdown: bool = False
    fumble: Optional[FumbleCarrier] = None
    players: PlayerRoles = field(default_factory=PlayerRoles)
    events: List[StatEvent] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["type"] = self.type.value
        return data


@dataclass(frozen=True)
class FieldLocation:
    """A yard line, optionally qualified by the side of the field."""
    side: Optional[str]
    yard: int


@dataclass(frozen=True)
class FumbleInfo:
    """Recovery details for a fumble with a 'recovered by' clause."""
    recovered_by_team: Optional[str]
    recovery_loc: Optional[FieldLocation] = None


@dataclass(frozen=True)
class TeamDescriptor:
    """Team identity as supplied by the game payload."""
    code: str
    name: str = ""

    @classmethod
    def from_value(cls, value: Any) -> "TeamDescriptor":
        """Build from a {code, name} mapping, another descriptor, or a bare code."""
        if isinstance(value, TeamDescriptor):
            return value
        if isinstance(value, Mapping):
            code = str(value.get("code") or "").upper()
            return cls(code=code, name=str(value.get("name") or code))
        code = str(value or "").upper()
        return cls(code=code, name=code)


@dataclass
class AnnotatedPlay:
    """
    A raw play plus everything the possession scan derived from it.

    Built once per game by annotate_plays and treated as read-only after.
    """
    raw: Mapping[str, Any]
    idx: int
    quarter: Any
    event: PlayEvent
    is_snap: bool
    parsed: ParsedPlayEvents
    start_of_drive: bool = False
    pos_team: Optional[str] = None
    fumble: Optional[FumbleInfo] = None
    # True when this play staged a change of offense for the next snap
    possession_flip: bool = False

    @property
    def detail(self) -> str:
        return str(self.raw.get("detail") or "")

    @property
    def down(self) -> Any:
        return self.raw.get("down")

    @property
    def location(self) -> Optional[str]:
        return self.raw.get("location")

    def get(self, key: str, default: Any = None) -> Any:
        """Read a raw field (score columns, yds_to_go, ...)."""
        return self.raw.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        """Flatten into the raw fields plus the annotations (JSON-ready)."""
        data = dict(self.raw)
        data.update({
            "idx": self.idx,
            "quarter": self.quarter,
            "event": self.event.value,
            "isSnap": self.is_snap,
            "startOfDrive": self.start_of_drive,
            "posTeam": self.pos_team,
            "possessionFlip": self.possession_flip,
            "fumble": asdict(self.fumble) if self.fumble else None,
            "parsed": self.parsed.to_dict(),
        })
        return data
