"""
Flatten a quarter-keyed play-by-play document into one chronological list.

Game-data payloads group plays by quarter label:

    {"1": [...], "2": [...], "3": [...], "4": [...], "OT": [...]}

Labels sort 1, 2, 3, 4, 5, OT, ot; anything else goes last in lexical
order. Each output play is a shallow copy stamped with its quarter.
"""
from typing import Any, Dict, List, Mapping

# Known quarter labels in game order
QUARTER_ORDER = ("1", "2", "3", "4", "5", "OT", "ot")


def _quarter_sort_key(label: str):
    try:
        return (0, QUARTER_ORDER.index(label), "")
    except ValueError:
        return (1, 0, label)


def flatten_plays(pbp: Any) -> List[Dict[str, Any]]:
    """
    Flatten quarter-keyed plays into game order.

    Args:
        pbp: Mapping of quarter label -> list of raw play mappings

    Returns:
        New list of play dicts; an existing `quarter` field on a play wins
        over the key it was filed under
    """
    if not isinstance(pbp, Mapping):
        return []

    plays: List[Dict[str, Any]] = []
    labels = {str(key): key for key in pbp.keys()}
    for label in sorted(labels, key=_quarter_sort_key):
        quarter_plays = pbp[labels[label]]
        if not isinstance(quarter_plays, list):
            continue
        for play in quarter_plays:
            if not isinstance(play, Mapping):
                continue
            row = dict(play)
            if row.get("quarter") is None:
                row["quarter"] = label
            plays.append(row)

    return plays
