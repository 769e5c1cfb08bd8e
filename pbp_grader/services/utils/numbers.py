"""Lenient numeric coercion for values scraped from stat pages and bet sheets."""
import math
import re
from typing import Any, Optional, Union

Number = Union[int, float]


def as_num(value: Any) -> Optional[Number]:
    """
    Coerce a loosely formatted value to a number.

    Strips everything except digits, '.' and '-', so "+3.5", "24*" and
    "1,204" all parse. Integral results come back as int.

    Examples:
        >>> as_num("+3.5")
        3.5
        >>> as_num("24*")
        24
        >>> as_num("")
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        number = float(value)
    else:
        cleaned = re.sub(r'[^0-9.\-]', '', str(value))
        if not cleaned:
            return None
        try:
            number = float(cleaned)
        except ValueError:
            return None

    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number
