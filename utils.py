from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional


def today_str(today: Optional[date] = None) -> str:
    return (today or datetime.now().date()).strftime("%Y-%m-%d")


def safe_int(s: str, default: Optional[int] = 0) -> Optional[int]:
    try:
        return int(str(s).strip())
    except (TypeError, ValueError):
        return default


def safe_float(s: str, default: Optional[float] = 0.0) -> Optional[float]:
    try:
        return float(str(s).strip().replace(",", "."))
    except (TypeError, ValueError):
        return default


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def normalize_code(s: str) -> str:
    # SKUs and serial numbers are stored upper-case
    return (s or "").strip().upper()


def format_money(value: float, *, mode: str = "int", decimals: int = 2, currency: str = "") -> str:
    """
    mode:
      - "int": whole units (rounded)
      - "float": fixed decimals
    Thousands are always comma separated; the currency code is appended when given.
    """
    if mode == "float":
        try:
            text = f"{float(value):,.{int(decimals)}f}"
        except (TypeError, ValueError):
            text = str(value)
    else:
        try:
            text = f"{int(round(float(value))):,}"
        except (TypeError, ValueError):
            text = str(value)

    return f"{text} {currency}" if currency else text
