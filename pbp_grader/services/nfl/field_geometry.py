"""
Field geometry helpers.

Play-by-play locations are written relative to a side of the field
("NE 25", "TEN-40", "25 NWE", or a bare "50"). These helpers resolve such
tokens to a team, to a 0-100 coordinate measured from the left end zone,
and to a direction of travel. Everything here is pure.
"""
import re
from typing import Any, Callable, Optional, Set

from pbp_grader.models.pbp import FieldLocation, TeamDescriptor

SideIsHomeFn = Callable[[Optional[str]], bool]

_SIDE_FIRST_RE = re.compile(r"^([A-Z]{2,3})[- ]?(\d{1,2}|50)$")
_YARD_FIRST_RE = re.compile(r"^(\d{1,2}|50)[- ]?([A-Z]{2,3})$")
_BARE_YARD_RE = re.compile(r"^(\d{1,2}|50)$")

# Abbreviations that cannot be derived from the team name's letters
CITY_ALIASES = {
    "NEW ENGLAND": ("NE",),
    "NEW ORLEANS": ("NO",),
    "NEW YORK": ("NY",),
    "LOS ANGELES": ("LA",),
    "SAN FRANCISCO": ("SF",),
    "TAMPA BAY": ("TB",),
    "GREEN BAY": ("GB",),
    "KANSAS CITY": ("KC",),
    "LAS VEGAS": ("LV",),
    "JACKSONVILLE JAGUARS": ("JAX", "JAC"),
    "WASHINGTON COMMANDERS": ("WAS", "WSH"),
}


def parse_location(loc: Any) -> Optional[FieldLocation]:
    """
    Parse a yard-line string.

    Examples:
        >>> parse_location("NE 25")
        FieldLocation(side='NE', yard=25)
        >>> parse_location("40-TEN")
        FieldLocation(side='TEN', yard=40)
        >>> parse_location("50")
        FieldLocation(side=None, yard=50)
        >>> parse_location("midfield") is None
        True
    """
    if loc is None:
        return None
    text = " ".join(str(loc).strip().upper().split())
    if not text:
        return None

    match = _SIDE_FIRST_RE.match(text)
    if match:
        return FieldLocation(side=match.group(1), yard=int(match.group(2)))

    match = _YARD_FIRST_RE.match(text)
    if match:
        return FieldLocation(side=match.group(2), yard=int(match.group(1)))

    match = _BARE_YARD_RE.match(text)
    if match:
        return FieldLocation(side=None, yard=int(match.group(1)))

    return None


def is_home_left_for_quarter(quarter: Any) -> bool:
    """Home defends the left end zone in quarters 1 and 3 only (OT counts as right)."""
    try:
        number = float(str(quarter).strip())
    except (TypeError, ValueError):
        return False
    return number in (1, 3)


def yardline_to_percent_by_side(
    location: Optional[FieldLocation],
    side_is_home: SideIsHomeFn,
    home_left: bool,
) -> float:
    """
    Convert a parsed location to a 0-100 coordinate from the left end zone.

    Unknown locations and side-less yard lines land at midfield (50).
    """
    if location is None or location.yard is None:
        return 50
    if location.side is None:
        base = 50
    elif side_is_home(location.side):
        base = location.yard
    else:
        base = 100 - location.yard
    return base if home_left else 100 - base


def dir_for_team(team_code: Optional[str], home_left: bool, home_code: str, away_code: str) -> int:
    """+1 if the team drives left-to-right, -1 if right-to-left, 0 if unknown."""
    if team_code not in (home_code, away_code):
        return 0
    is_home = team_code == home_code
    if home_left:
        return 1 if is_home else -1
    return -1 if is_home else 1


def build_team_aliases(team: Any) -> Set[str]:
    """
    Every side token a play-by-play writer might use for this team.

    Includes the code, initials, two/three-letter truncations of the first
    two name words and the hardcoded city abbreviations.

    Example:
        >>> sorted(build_team_aliases({"code": "NWE", "name": "New England Patriots"}))
        ['EN', 'ENG', 'NE', 'NEP', 'NEW', 'NWE']
    """
    descriptor = TeamDescriptor.from_value(team)
    code = descriptor.code.upper()
    name = " ".join(re.sub(r"[^A-Z ]", " ", descriptor.name.upper()).split())
    words = name.split()

    aliases = {code}
    if len(words) >= 2:
        aliases.add(words[0][0] + words[1][0])
    if words:
        aliases.add("".join(w[0] for w in words))
        aliases.add(words[0][:2])
        aliases.add(words[0][:3])
    if len(words) >= 2:
        aliases.add(words[1][:2])
        aliases.add(words[1][:3])

    aliases.update(CITY_ALIASES.get(" ".join(words[:2]), ()))
    aliases.discard("")
    return aliases


def make_side_is_home_fn(home: Any, away: Any) -> SideIsHomeFn:
    """
    Build a resolver deciding whether a side token refers to the home team.

    Exact alias hits are checked first (home, then away), then prefix
    matches in either direction (home, then away). Anything else resolves
    to the away team.
    """
    home_aliases = build_team_aliases(home)
    away_aliases = build_team_aliases(away)

    def side_is_home(side: Optional[str]) -> bool:
        token = str(side or "").strip().upper()
        if not token:
            return False
        if token in home_aliases:
            return True
        if token in away_aliases:
            return False
        if any(a.startswith(token) or token.startswith(a) for a in home_aliases):
            return True
        if any(a.startswith(token) or token.startswith(a) for a in away_aliases):
            return False
        return False

    return side_is_home


def infer_offense(play: Any, side_is_home: SideIsHomeFn, home_code: str, away_code: str) -> Optional[str]:
    """
    Guess the offense from a snap's location.

    A ball spotted in the home team's territory means the away team is
    driving, and vice versa. Returns None without a side token.
    """
    getter = getattr(play, "get", None)
    location = parse_location(getter("location")) if getter else None
    if location is None or location.side is None:
        return None
    return away_code if side_is_home(location.side) else home_code


def ordinal_suffix(value: Any) -> str:
    """
    English ordinal suffix for a down or distance.

    Examples:
        >>> ordinal_suffix(1), ordinal_suffix(2), ordinal_suffix(3), ordinal_suffix(4)
        ('st', 'nd', 'rd', 'th')
        >>> ordinal_suffix(12)
        'th'
    """
    try:
        n = int(float(str(value)))
    except (TypeError, ValueError):
        return ""
    j, k = n % 10, n % 100
    if j == 1 and k != 11:
        return "st"
    if j == 2 and k != 12:
        return "nd"
    if j == 3 and k != 13:
        return "rd"
    return "th"
