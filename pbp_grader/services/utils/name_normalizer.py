"""Name normalization utilities for matching players across sources.

Bet sheets, season tables, rosters and play text all spell players
differently:
- Initials: "T.Brady" / "T. Brady" vs "Tom Brady"
- Suffixes: "Jr.", "Sr.", "III", "IV", "II"
- Trailing clauses left over from play text: "R.Gronkowski for 12 yards"
- Accents: "Dončić" → "Doncic"
- Case and extra spaces

Loose matching (same last name + same first initial) is intentionally
permissive: "T.Brady" matches "Tom Brady" and also "Tyler Brady". Tightening
it would trade false positives for false negatives.
"""
import re
import unicodedata
from typing import Iterable, Optional

from rapidfuzz import fuzz, process


# Common name suffixes that should be removed for comparison
SUFFIXES = {'jr', 'sr', 'ii', 'iii', 'iv', 'v'}

# Words that start a non-name clause in play text ("... to X for 5 yards")
_CLAUSE_WORDS = r'(?:to|from|on|at|with)'


def normalize(name: str) -> str:
    """
    Normalize a name for exact-key comparison.

    Steps:
    1. Remove common suffixes (Jr, Sr, III, etc.)
    2. Normalize unicode characters (accents)
    3. Convert to lowercase
    4. Remove punctuation (but keep letters, digits and spaces)
    5. Remove extra whitespace

    Examples:
        >>> normalize("Travis Etienne Jr.")
        'travis etienne'
        >>> normalize("D'Andre Swift")
        'dandre swift'
        >>> normalize("  Derrick   Henry ")
        'derrick henry'
    """
    if not name:
        return ""

    name = _remove_suffixes(str(name))
    name = _normalize_unicode(name)
    name = name.lower()
    name = re.sub(r'[^\w\s]', '', name)
    name = ' '.join(name.split())

    return name


def _remove_suffixes(name: str) -> str:
    """Remove a trailing Jr/Sr/II/III/IV/V token from a name."""
    parts = name.split()

    if len(parts) > 1 and parts[-1].lower().replace('.', '') in SUFFIXES:
        return ' '.join(parts[:-1])

    return name


def _normalize_unicode(name: str) -> str:
    """
    Remove accents and diacritics from unicode characters.

    Converts 'č' → 'c', 'é' → 'e', etc.
    """
    normalized = unicodedata.normalize('NFD', name)
    return ''.join(
        c for c in normalized
        if unicodedata.category(c) != 'Mn'
    )


def clean_player_display_name(text: Optional[str]) -> str:
    """
    Strip trailing clauses and punctuation from a player name taken from text.

    Keeps the casing so the result is still fit for display.

    Examples:
        >>> clean_player_display_name("R.Gronkowski for 12 yards")
        'R.Gronkowski'
        >>> clean_player_display_name("Derrick Henry (kick failed)")
        'Derrick Henry'
        >>> clean_player_display_name("Mac Jones, touchdown")
        'Mac Jones'
    """
    t = str(text or "")
    t = re.sub(r'[,;]+.*$', '', t)
    t = re.sub(r'\(.*?\)\s*$', '', t)
    t = re.sub(r'\s+-\s+.*$', '', t)
    t = re.sub(r'\s+for\b.*$', '', t, flags=re.IGNORECASE)
    t = re.sub(rf'\s+{_CLAUSE_WORDS}\b.*$', '', t, flags=re.IGNORECASE)
    t = re.sub(r"[^a-zA-Z'.\-\s]", ' ', t)
    t = ' '.join(t.split())
    t = re.sub(r'\b(?:for|to|from|on|at|with)$', '', t, flags=re.IGNORECASE).strip()
    return t


def canon_name(text: Optional[str]) -> str:
    """
    Canonical lowercase form used for loose player comparison.

    Periods split initials into their own token so "T.Brady" and
    "T. Brady" both become "t brady".

    Examples:
        >>> canon_name("T.Brady")
        't brady'
        >>> canon_name("Rhamondre Stevenson (2 pt conversion)")
        'rhamondre stevenson'
        >>> canon_name("Kenneth Walker III")
        'kenneth walker'
    """
    t = str(text or "")
    t = re.sub(r'[,;]+.*$', '', t)
    t = re.sub(r'\(.*?\)\s*$', '', t)
    t = re.sub(r'\s+-\s+.*$', '', t)
    t = _normalize_unicode(t).lower()
    t = t.replace('.', ' ')
    t = re.sub(r"['\-]", '', t)
    t = re.sub(r'[^a-z\s]', ' ', t)
    return _remove_suffixes(' '.join(t.split()))


def last_name(text: Optional[str]) -> str:
    """Last token of the canonical name, or empty string."""
    tokens = canon_name(text).split()
    return tokens[-1] if tokens else ""


def same_player_loose(a: Optional[str], b: Optional[str]) -> bool:
    """
    Decide whether two spellings refer to the same player.

    Match on full canonical equality, else on the same last token plus the
    same first letter of the first token.

    Examples:
        >>> same_player_loose("T.Brady", "Tom Brady")
        True
        >>> same_player_loose("Tom Brady", "Tom Brady Jr.")
        True
        >>> same_player_loose("Tom Brady", "Kyle Brady")
        False
    """
    left, right = canon_name(a), canon_name(b)
    if not left or not right:
        return False
    if left == right:
        return True

    left_tokens, right_tokens = left.split(), right.split()
    if left_tokens[-1] != right_tokens[-1]:
        return False
    return left_tokens[0][0] == right_tokens[0][0]


def name_mentioned_in(text: Optional[str], name: Optional[str]) -> bool:
    """True when the player's last name appears as a whole word in text."""
    surname = last_name(name)
    if not surname or not text:
        return False
    haystack = canon_name_words(text)
    return re.search(rf'\b{re.escape(surname)}\b', haystack) is not None


def canon_name_words(text: str) -> str:
    """Lowercase, accent-free, letters-only rendering of free text."""
    t = _normalize_unicode(str(text or "")).lower().replace('.', ' ')
    t = re.sub(r"['\-]", '', t)
    return ' '.join(re.sub(r'[^a-z\s]', ' ', t).split())


def fuzzy_best_match(name: str, candidates: Iterable[str], threshold: int = 90) -> Optional[str]:
    """
    Find the closest candidate using RapidFuzz WRatio.

    Args:
        name: Name to look up (any spelling)
        candidates: Already-normalized candidate names
        threshold: Minimum WRatio score (0-100) to accept a match

    Returns:
        The best-scoring candidate or None below threshold
    """
    query = normalize(name)
    if not query:
        return None

    choices = list(candidates)
    if not choices:
        return None

    match = process.extractOne(query, choices, scorer=fuzz.WRatio, score_cutoff=threshold)
    if match is None:
        return None
    return match[0]
