# -*- coding: utf-8 -*-
# services/replies.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from config import CALENDAR_MIN_CONFIDENCE, REFERENCE_COINS, TOP_MAX_LIMIT
from services.errors import LookupMiss
from services.formatting import (
    format_event_date,
    format_signed_percent,
    format_thousands,
    format_timestamp,
    share_of_market,
)
from services.models import CalendarEvent, CoinTicker, MarketSummary
from services.parser import PriceQuery


def _compact(value: Any) -> str:
    # CryptoCompare DISPLAY: "$ 6,512.30" -> "$6,512.30"
    return str(value or "").replace(" ", "")


def build_coin_info(symbol: str, display: Dict[str, Any]) -> str:
    """
    "BTC: $6,512.30 / Ξ21.04 - MC: $112.5B - H: $6,600.00 / L: $6,400.10 / +1.23%"
    Reference quotes are skipped for the coin itself and when missing in `display`.
    """
    info = display.get(symbol) or {}
    usd = info.get("USD")
    if not usd:
        raise LookupMiss(f"{symbol}: not found.")

    parts = [_compact(usd.get("PRICE"))]
    for ref in REFERENCE_COINS:
        if ref != symbol and info.get(ref):
            parts.append(_compact(info[ref].get("PRICE")))

    high = _compact(usd.get("HIGH24HOUR"))
    low = _compact(usd.get("LOW24HOUR"))
    cap = _compact(usd.get("MKTCAP"))
    pct = format_signed_percent(usd.get("CHANGEPCT24HOUR"))
    return f"{symbol}: {' / '.join(parts)} - MC: {cap} - H: {high} / L: {low} / {pct}%"


def _top_block(coin: CoinTicker, total_market_cap: str) -> List[str]:
    share = share_of_market(coin.market_cap_usd, total_market_cap)
    return [
        f"{coin.name}: {coin.symbol} - ${format_thousands(coin.price_usd)} / ฿{format_thousands(coin.price_btc)}",
        f"{format_signed_percent(coin.percent_change_1h)}%/hr - "
        f"{format_signed_percent(coin.percent_change_24h)}%/d - "
        f"{format_signed_percent(coin.percent_change_7d)}%/w",
        f"Market Cap: ${format_thousands(coin.market_cap_usd)} ({share}% of market)",
        f"Supply: {format_thousands(coin.available_supply)} / {format_thousands(coin.max_supply)}",
    ]


def build_top(tickers: List[CoinTicker], summary: MarketSummary, clamped: bool = False) -> str:
    if not tickers:
        raise LookupMiss("No coins returned.")
    blocks = ["\n".join(_top_block(c, summary.total_market_cap_usd)) for c in tickers]
    if clamped:
        blocks.insert(0, f"Showing the top {TOP_MAX_LIMIT} only, a longer list does not fit in one message.")
    return "\n\n".join(blocks)


def build_price(query: PriceQuery, data: Dict[str, Any]) -> str:
    if query.is_historical:
        price = (data.get(query.coin) or {}).get(query.currency)
    else:
        price = data.get(query.currency)
    if price is None:
        raise LookupMiss(f"{query.coin}: no {query.currency} price on {query.exchange}.")

    msg = f"{query.coin}: {price}{query.currency}"
    if query.is_historical:
        msg += f" - ({format_timestamp(query.as_of)})"
    return msg


def build_global(summary: MarketSummary) -> str:
    return "\n".join([
        f"Total Market Cap: ${format_thousands(summary.total_market_cap_usd)}",
        f"Active Currencies: {summary.active_currencies}",
    ])


def find_calendar_coin(coins: List[str], symbol: str) -> Optional[str]:
    """First entry carrying "(SYMBOL)", e.g. "Litecoin (LTC)" for "ltc"."""
    needle = f"({symbol.upper()})"
    for c in coins:
        if needle in c.upper():
            return c
    return None


def calendar_not_found(symbol: str) -> str:
    return f"{symbol.upper()} not found on the calendar."


def build_calendar(symbol: str, events: List[CalendarEvent]) -> str:
    lines = []
    for ev in events:
        if ev.percentage <= CALENDAR_MIN_CONFIDENCE:
            continue
        line = f"{format_event_date(ev.date_event)} - {ev.title}"
        if ev.categories:
            line += f" [{', '.join(ev.categories)}]"
        if ev.proof:
            line += f" ({ev.proof})"
        lines.append(line)
        if ev.description:
            lines.append(f"    {ev.description}")
    if not lines:
        return f"No upcoming events for {symbol.upper()}."
    return "\n".join(lines)
