"""
Drive and series lookups over an annotated play log.

All functions return a play index, or -1 when nothing qualifies.
"""
from typing import Optional, Sequence

from pbp_grader.models.pbp import AnnotatedPlay


def _valid_index(log: Sequence[AnnotatedPlay], idx: Optional[int]) -> bool:
    return idx is not None and 0 <= idx < len(log)


def find_snap_index(log: Sequence[AnnotatedPlay], i: Optional[int], direction: int) -> int:
    """
    Nearest snap from i.

    direction -1 scans backward and includes i itself; +1 scans forward
    starting after i.
    """
    if not log or i is None:
        return -1

    if direction == -1:
        for k in range(min(i, len(log) - 1), -1, -1):
            if log[k].is_snap:
                return k
        return -1

    if direction == 1:
        for k in range(max(i + 1, 0), len(log)):
            if log[k].is_snap:
                return k
        return -1

    return -1


def find_drive_head_index_robust(log: Sequence[AnnotatedPlay], snap_idx: Optional[int]) -> int:
    """
    Index of the first snap of the drive containing snap_idx.

    Looks backward for the nearest play that handed the ball over (a
    boundary play belongs to the drive it ends) and returns the first snap
    after it. Without any boundary, falls back to the most recent change of
    offense among earlier snaps, then to the game's first snap by the same
    offense.
    """
    if not _valid_index(log, snap_idx):
        return -1

    for j in range(snap_idx - 1, -1, -1):
        if log[j].possession_flip:
            for q in range(j + 1, len(log)):
                if log[q].is_snap:
                    return q
            return -1

    offense = log[snap_idx].pos_team
    if offense is not None:
        for j in range(snap_idx, -1, -1):
            play = log[j]
            if play.is_snap and play.pos_team != offense:
                for q in range(j + 1, snap_idx + 1):
                    if log[q].is_snap and log[q].pos_team == offense:
                        return q
                return -1

    for q in range(snap_idx + 1):
        if log[q].is_snap and (offense is None or log[q].pos_team == offense):
            return q
    return -1


def find_series_head_index(
    log: Sequence[AnnotatedPlay],
    ref_idx: Optional[int],
    drive_head_idx: Optional[int] = None,
) -> int:
    """Most recent first-down snap by the same offense within the drive, else the drive head."""
    if not _valid_index(log, ref_idx):
        return -1

    drive_head = find_drive_head_index_robust(log, ref_idx) if drive_head_idx is None else drive_head_idx
    if drive_head < 0:
        return -1

    offense = log[ref_idx].pos_team
    for j in range(ref_idx, drive_head - 1, -1):
        play = log[j]
        if play.is_snap and play.pos_team == offense and str(play.down).strip() in ("1", "1.0"):
            return j
    return drive_head
