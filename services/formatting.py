# -*- coding: utf-8 -*-
# services/formatting.py
from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Optional

_NUM_PARTS = re.compile(r"^([^.]*)(\..*)?$", re.DOTALL)
_GROUP = re.compile(r"(\d)(?=(\d{3})+$)")


def format_thousands(value: Any) -> str:
    """
    "1234567.89" -> "1,234,567.89", "-1234" -> "-1,234".
    Дробная часть не трогается; None / "" -> "".
    """
    if value is None:
        return ""
    m = _NUM_PARTS.match(str(value))
    int_part, dec_part = m.group(1), m.group(2) or ""
    sign = ""
    if int_part[:1] in ("-", "+"):
        sign, int_part = int_part[0], int_part[1:]
    return sign + _GROUP.sub(r"\1,", int_part) + dec_part


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def format_signed_percent(value: Any) -> str:
    # positive values get an explicit "+", everything else is left as is
    text = "" if value is None else str(value)
    return f"+{text}" if _to_float(value) > 0 else text


def share_of_market(market_cap: Any, total_market_cap: Any) -> str:
    total = _to_float(total_market_cap)
    if total <= 0:
        return "0.00"
    return f"{_to_float(market_cap) / total * 100:.2f}"


def format_timestamp(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")


def format_event_date(raw: Optional[str]) -> str:
    if not raw:
        return "?"
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).strftime("%Y-%m-%d")
    except ValueError:
        return raw
