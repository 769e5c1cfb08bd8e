"""
Play-text parser for NFL play-by-play descriptions.

Turns one free-text `detail` string into a ParsedPlayEvents record:

    "T.Brady pass complete to R.Gronkowski for 12 yards, touchdown"

    ParsedPlayEvents(
        type=PlayType.PASS, yards=12, touchdown=True,
        players=PlayerRoles(passer="T.Brady", receiver="R.Gronkowski"),
        events=[
            StatEvent("T.Brady", "pass_yds", 12),
            StatEvent("T.Brady", "pass_cmp", 1),
            StatEvent("R.Gronkowski", "rec_yds", 12),
            StatEvent("R.Gronkowski", "rec", 1),
            StatEvent("T.Brady", "pass_td", 1),
            StatEvent("R.Gronkowski", "rec_td", 1),
        ],
    )

Parsing is best-effort and never raises: text it cannot interpret comes
back as PlayType.OTHER with no events. Callers that have a structured feed
can skip this module entirely and build ParsedPlayEvents themselves.
"""
import logging
import re
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Pattern

from pbp_grader.models.pbp import (
    FumbleCarrier,
    ParsedPlayEvents,
    PlayerRoles,
    PlayType,
    StatEvent,
)

logger = logging.getLogger(__name__)

# "Tom", "O'Neal", "St.Brown" or a bare initial "T."
NAME_TOKEN = r"(?:[A-Z][a-zA-Z'.\-]+|[A-Z]\.)"

# Two or more capitalized tokens, or a glued initial like "T.Brady"
NAME_PATTERN = rf"(?:{NAME_TOKEN}(?:\s+{NAME_TOKEN})+|[A-Z]\.[A-Z][a-zA-Z'\-]+)"


class PlayDetailParser:
    """
    Extract stat events from play-by-play text.

    Dispatch order: no-play check, then sack, pass, rush, and finally a
    fumble-only fallback. The first matching play type wins.
    """

    NAME_RE: Pattern[str] = re.compile(rf"\b({NAME_PATTERN})\b")

    NO_PLAY_RE = re.compile(r"\bno play\b|nullified|offsetting", re.IGNORECASE)
    TD_RE = re.compile(r"\btouchdown\b|\bfor a td\b", re.IGNORECASE)
    FUMBLE_RE = re.compile(r"\bfumble[sd]?\b", re.IGNORECASE)
    SACK_RE = re.compile(r"\bsack(?:ed)?\b", re.IGNORECASE)
    PASS_RE = re.compile(r"\bpass(?:es|ed)?\b", re.IGNORECASE)
    INCOMPLETE_RE = re.compile(r"\bincomplete\b", re.IGNORECASE)
    INTERCEPTED_RE = re.compile(r"\bintercept(?:ed|ion)?\b|\bpicked off\b", re.IGNORECASE)
    RUSH_HINT_RE = re.compile(
        r"\b(?:run|rush(?:es|ed)?|scrambles?|left|right|middle|guard|tackle|end)\b",
        re.IGNORECASE,
    )
    # Tackler credits "(tackle by X)" are not run directions
    PARENTHETICAL_RE = re.compile(r"\([^)]*\)")

    # Receiver: "to NAME" or "complete(d) to NAME"; keywords case-insensitive
    RECEIVER_RE = re.compile(rf"(?i:\b(?:complete(?:d)?\s+)?to)\s+({NAME_PATTERN})\b")

    # Yardage, checked in this order
    NO_GAIN_RE = re.compile(r"\bno gain\b", re.IGNORECASE)
    FOR_MINUS_RE = re.compile(r"\bfor\s*-+\s*(\d+)\s*yards?\b", re.IGNORECASE)
    LOSS_OF_RE = re.compile(
        r"\b(?:for\s+(?:a\s+)?loss\s+of|for)\s*-?\s*(\d+)\s*yards?\b", re.IGNORECASE
    )
    LOSS_WORD_RE = re.compile(r"\bloss\b", re.IGNORECASE)
    FOR_YARDS_RE = re.compile(r"\bfor\s+(\d+)\s*yards?\b", re.IGNORECASE)

    def parse(self, detail: Optional[str]) -> ParsedPlayEvents:
        """
        Parse one play description.

        Args:
            detail: Play text; None or empty is allowed

        Returns:
            ParsedPlayEvents (PlayType.OTHER with no events when unparsable)
        """
        text = "" if detail is None else str(detail)
        if not text or self.NO_PLAY_RE.search(text):
            return ParsedPlayEvents()

        names = self.extract_names(text)
        first_name = names[0] if names else None
        yards = self.parse_signed_yards(text)
        touchdown = bool(self.TD_RE.search(text))

        if self.SACK_RE.search(text):
            return self._parse_sack(text, names, yards, touchdown)
        if self.PASS_RE.search(text):
            return self._parse_pass(text, first_name, yards, touchdown)
        if self.RUSH_HINT_RE.search(self.PARENTHETICAL_RE.sub(" ", text)):
            return self._parse_rush(text, first_name, yards, touchdown)

        # Fallback: nothing but a possible fumble
        events: List[StatEvent] = []
        fumble = None
        if self.FUMBLE_RE.search(text):
            fumble = FumbleCarrier(by=self.last_name_before(text, self.FUMBLE_RE, first_name))
            events.append(StatEvent(fumble.by, "fumble", 1))

        return ParsedPlayEvents(yards=yards, touchdown=touchdown, fumble=fumble, events=events)

    def _parse_sack(
        self, text: str, names: List[str], yards: Optional[int], touchdown: bool
    ) -> ParsedPlayEvents:
        qb = self.last_name_before(text, self.SACK_RE, names[0] if names else None)

        # A sack is never a gain for the quarterback
        raw = yards if yards is not None else 0
        signed = raw if raw <= 0 else -abs(raw)
        events = [StatEvent(qb, "rush_yds", signed, note="sack")]

        fumble = None
        if self.FUMBLE_RE.search(text):
            fumble = FumbleCarrier(by=self.last_name_before(text, self.FUMBLE_RE, qb))
            events.append(StatEvent(fumble.by, "fumble", 1))

        if touchdown:
            # Strip-sack returned for a score; the QB only gets a marker
            events.append(StatEvent(qb, "sack", 1))

        return ParsedPlayEvents(
            type=PlayType.SACK,
            yards=yards,
            touchdown=touchdown,
            fumble=fumble,
            players=PlayerRoles(rusher=qb, sacked_qb=qb),
            events=events,
        )

    def _parse_pass(
        self, text: str, first_name: Optional[str], yards: Optional[int], touchdown: bool
    ) -> ParsedPlayEvents:
        passer = self.last_name_before(text, self.PASS_RE, first_name)
        receiver = self.parse_receiver(text)
        incomplete = bool(self.INCOMPLETE_RE.search(text))
        intercepted = bool(self.INTERCEPTED_RE.search(text))

        events: List[StatEvent] = []
        if incomplete or intercepted:
            # No completion; any touchdown belongs to the defense
            events.append(StatEvent(passer, "pass_att", 1))
            if receiver:
                events.append(StatEvent(receiver, "target", 1))
        else:
            gained = yards if yards is not None else 0
            events.append(StatEvent(passer, "pass_yds", gained))
            events.append(StatEvent(passer, "pass_cmp", 1))
            if receiver:
                note = "touchdown" if touchdown else None
                events.append(StatEvent(receiver, "rec_yds", gained, note=note))
                events.append(StatEvent(receiver, "rec", 1))
            if touchdown:
                events.append(StatEvent(passer, "pass_td", 1))
                if receiver:
                    events.append(StatEvent(receiver, "rec_td", 1))

        fumble = None
        if self.FUMBLE_RE.search(text):
            # Ball carrier when it came out: receiver after a catch, else the QB
            carrier = receiver if (receiver and not (incomplete or intercepted)) else passer
            fumble = FumbleCarrier(by=self.last_name_before(text, self.FUMBLE_RE, carrier))
            events.append(StatEvent(fumble.by, "fumble", 1))

        return ParsedPlayEvents(
            type=PlayType.PASS,
            yards=yards,
            touchdown=touchdown,
            fumble=fumble,
            players=PlayerRoles(passer=passer, receiver=receiver),
            events=events,
        )

    def _parse_rush(
        self, text: str, first_name: Optional[str], yards: Optional[int], touchdown: bool
    ) -> ParsedPlayEvents:
        # The first name is almost always the ball carrier
        rusher = first_name
        gained = yards if yards is not None else 0

        events = [
            StatEvent(rusher, "rush_yds", gained),
            StatEvent(rusher, "rush_att", 1),
        ]
        if touchdown:
            events.append(StatEvent(rusher, "rush_td", 1))

        fumble = None
        if self.FUMBLE_RE.search(text):
            fumble = FumbleCarrier(by=self.last_name_before(text, self.FUMBLE_RE, rusher))
            events.append(StatEvent(fumble.by, "fumble", 1))

        return ParsedPlayEvents(
            type=PlayType.RUSH,
            yards=yards,
            touchdown=touchdown,
            fumble=fumble,
            players=PlayerRoles(rusher=rusher),
            events=events,
        )

    def extract_names(self, text: Optional[str]) -> List[str]:
        """All name-shaped spans in order of appearance, de-duplicated."""
        if not text:
            return []
        seen: Dict[str, None] = {}
        for match in self.NAME_RE.finditer(text):
            seen.setdefault(" ".join(match.group(1).split()), None)
        return list(seen)

    def last_name_before(
        self, text: str, pattern: Pattern[str], fallback: Optional[str] = None
    ) -> Optional[str]:
        """The last name appearing before the first match of pattern."""
        match = pattern.search(text or "")
        if not match:
            return fallback
        names = self.extract_names(text[:match.start()])
        return names[-1] if names else fallback

    def parse_signed_yards(self, text: Optional[str]) -> Optional[int]:
        """
        Signed yardage from the text, or None when no yardage is stated.

        Precedence: "no gain" → 0; "for -N yards" → -N; "for a loss of N"
        (or any "for N yards" in a sack/loss context) → -N; "for N yards" → N.
        """
        if not text:
            return None
        if self.NO_GAIN_RE.search(text):
            return 0

        minus = self.FOR_MINUS_RE.search(text)
        if minus:
            return -int(minus.group(1))

        loss = self.LOSS_OF_RE.search(text)
        if loss:
            n = int(loss.group(1))
            negative = self.LOSS_WORD_RE.search(text) or self.SACK_RE.search(text)
            return -n if negative else n

        plain = self.FOR_YARDS_RE.search(text)
        if plain:
            return int(plain.group(1))

        return None

    def parse_receiver(self, text: str) -> Optional[str]:
        """Receiver from a "to NAME" / "complete to NAME" phrase."""
        match = self.RECEIVER_RE.search(text or "")
        return " ".join(match.group(1).split()) if match else None


_default_parser = PlayDetailParser()


def parse_play_detail(detail: Optional[str]) -> ParsedPlayEvents:
    """Parse one play description with the shared parser instance."""
    return _default_parser.parse(detail)


def accumulate_events(events: Iterable[StatEvent]) -> Dict[str, Dict[str, int]]:
    """
    Sum stat deltas into a per-player stat line.

    Events without a player are skipped.

    Example:
        >>> accumulate_events([StatEvent("A B", "rush_yds", 4), StatEvent("A B", "rush_yds", -1)])
        {'A B': {'rush_yds': 3}}
    """
    lines: Dict[str, Dict[str, int]] = defaultdict(dict)
    for event in events:
        if not event.player:
            continue
        row = lines[event.player]
        row[event.stat] = row.get(event.stat, 0) + (event.delta or 0)
    return dict(lines)
