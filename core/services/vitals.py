"""
Helpers for raw vitals: blood pressure strings, ages and loose numbers.
"""
from __future__ import annotations

import datetime
import math
import re
from typing import Optional, Tuple

_BP_RE = re.compile(r'^(\d{2,3})\s*/\s*(\d{2,3})$')


def format_bp(systolic: Optional[int], diastolic: Optional[int]) -> Optional[str]:
    """``120, 80`` -> ``"120/80"``; None unless both parts are given."""
    if systolic is None or diastolic is None:
        return None
    return f'{int(systolic)}/{int(diastolic)}'


def parse_bp(text: Optional[str]) -> Optional[Tuple[int, int]]:
    """``"120 / 80"`` -> ``(120, 80)``; None for anything not shaped like a reading."""
    if not isinstance(text, str):
        return None
    m = _BP_RE.match(text.strip())
    if not m:
        return None
    return int(m.group(1)), int(m.group(2))


def age_on(dob: Optional[datetime.date], today: Optional[datetime.date] = None) -> Optional[int]:
    """Completed years between ``dob`` and ``today``."""
    if dob is None:
        return None
    if isinstance(dob, datetime.datetime):
        dob = dob.date()
    today = today or datetime.date.today()
    years = today.year - dob.year
    if (today.month, today.day) < (dob.month, dob.day):
        years -= 1
    return years


def number_or_none(value):
    """Coerce request input to a number; blanks and garbage become None."""
    if value is None or value == '' or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    try:
        n = float(str(value).strip())
    except ValueError:
        return None
    # nan, inf and overflowing literals such as 1e400
    if not math.isfinite(n):
        return None
    return int(n) if n.is_integer() else n
