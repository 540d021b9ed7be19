# services/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def _opt_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


@dataclass(frozen=True)
class CoinTicker:
    """One row of the CoinMarketCap v1 ticker. Numbers stay as the API sent them."""

    name: str
    symbol: str
    price_usd: Optional[str] = None
    price_btc: Optional[str] = None
    market_cap_usd: Optional[str] = None
    available_supply: Optional[str] = None
    max_supply: Optional[str] = None
    percent_change_1h: Optional[str] = None
    percent_change_24h: Optional[str] = None
    percent_change_7d: Optional[str] = None

    @classmethod
    def from_json(cls, row: Dict[str, Any]) -> "CoinTicker":
        # KeyError on name/symbol is reported by the caller as a fetch failure
        return cls(
            name=str(row["name"]),
            symbol=str(row["symbol"]),
            price_usd=_opt_str(row.get("price_usd")),
            price_btc=_opt_str(row.get("price_btc")),
            market_cap_usd=_opt_str(row.get("market_cap_usd")),
            available_supply=_opt_str(row.get("available_supply")),
            max_supply=_opt_str(row.get("max_supply")),
            percent_change_1h=_opt_str(row.get("percent_change_1h")),
            percent_change_24h=_opt_str(row.get("percent_change_24h")),
            percent_change_7d=_opt_str(row.get("percent_change_7d")),
        )


@dataclass(frozen=True)
class MarketSummary:
    total_market_cap_usd: str
    active_currencies: int

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "MarketSummary":
        return cls(
            total_market_cap_usd=str(data["total_market_cap_usd"]),
            active_currencies=int(data["active_currencies"]),
        )


@dataclass(frozen=True)
class CalendarEvent:
    title: str
    date_event: str
    description: str = ""
    proof: str = ""
    categories: List[str] = field(default_factory=list)
    percentage: float = 0.0

    @classmethod
    def from_json(cls, row: Dict[str, Any]) -> "CalendarEvent":
        cats = []
        for c in row.get("categories") or []:
            # CoinMarketCal отдаёт либо строки, либо {"name": ...}
            cats.append(str(c.get("name", "")) if isinstance(c, dict) else str(c))
        return cls(
            title=str(row["title"]),
            date_event=str(row["date_event"]),
            description=str(row.get("description") or ""),
            proof=str(row.get("proof") or ""),
            categories=[c for c in cats if c],
            percentage=float(row.get("percentage") or 0),
        )
