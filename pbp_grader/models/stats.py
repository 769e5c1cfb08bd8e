"""Season statistic tables used for yardage props."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional


def table_rows(source: Any) -> List[Mapping[str, Any]]:
    """
    Flatten a stat table into a list of row mappings.

    Tables arrive as a list of rows, or as a dict keyed by player display
    name whose values are rows (or lists of rows). A keyed row without its
    own name field gets the key as `name`.
    """
    if not source:
        return []
    if isinstance(source, list):
        return [row for row in source if isinstance(row, Mapping)]
    if isinstance(source, Mapping):
        rows: List[Mapping[str, Any]] = []
        for key, value in source.items():
            if isinstance(value, list):
                rows.extend(row for row in value if isinstance(row, Mapping))
            elif isinstance(value, Mapping):
                if any(value.get(f) for f in ("name_display", "name", "player")):
                    rows.append(value)
                else:
                    rows.append({"name": str(key), **value})
        return rows
    return []


@dataclass
class SeasonStatTables:
    """Per-player season aggregates for passing, rushing and receiving."""
    passing: Any = field(default_factory=dict)
    rushing: Any = field(default_factory=dict)
    receiving: Any = field(default_factory=dict)

    # Which table carries each yardage stat
    STAT_TABLE = {
        "pass_yds": "passing",
        "rush_yds": "rushing",
        "rec_yds": "receiving",
    }

    def rows_for(self, stat: str) -> Optional[List[Mapping[str, Any]]]:
        """Rows of the table holding `stat`, or None for an unsupported stat."""
        table = self.STAT_TABLE.get(stat)
        if table is None:
            return None
        return table_rows(getattr(self, table))

    @classmethod
    def from_value(cls, value: Any) -> "SeasonStatTables":
        """Accept an existing instance or a {passing, rushing, receiving} mapping."""
        if isinstance(value, SeasonStatTables):
            return value
        if isinstance(value, Mapping):
            return cls(
                passing=value.get("passing") or {},
                rushing=value.get("rushing") or {},
                receiving=value.get("receiving") or {},
            )
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        return {"passing": self.passing, "rushing": self.rushing, "receiving": self.receiving}
