# services/commands.py
"""
Text command routing.

ROUTES is an ordered list of (pattern, handler); the first pattern that matches
the message wins. Every handler returns the reply texts for one message and
never raises: parse/fetch/lookup errors are turned into short replies here.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Pattern, Tuple

from config import COMMAND_PREFIX, REFERENCE_COINS
from services import crypto_api as api
from services.errors import FetchFailure, LookupMiss, ParseFailure
from services.parser import (
    COIN_TOKEN_RE,
    parse_calendar,
    parse_coin_symbols,
    parse_price,
    parse_top,
    tokens_after,
    wants_private,
)
from services.replies import (
    build_calendar,
    build_coin_info,
    build_global,
    build_price,
    build_top,
    calendar_not_found,
    find_calendar_coin,
)

log = logging.getLogger(__name__)

FETCH_FAILED = "Could not retrieve data, try again later."

Handler = Callable[[str], Awaitable[List[str]]]


@dataclass(frozen=True)
class Reply:
    text: str
    private: bool = False


async def _guard(job: Awaitable[str]) -> str:
    try:
        return await job
    except ParseFailure as e:
        return e.usage
    except LookupMiss as e:
        return str(e)
    except FetchFailure as e:
        log.warning("fetch failed: %s", e)
        return FETCH_FAILED
    except Exception:
        log.exception("command crashed")
        return FETCH_FAILED


# -------------------------
# one reply each
# -------------------------
async def _coin_info(symbol: str) -> str:
    currencies = ["USD"] + [c for c in REFERENCE_COINS if c != symbol]
    display = await api.fetch_multi_ticker([symbol], currencies)
    return build_coin_info(symbol, display)


async def _top(text: str) -> str:
    query = parse_top(tokens_after(text, f"{COMMAND_PREFIX}top"))
    tickers = await api.fetch_top_ticker(query.limit)
    summary = await api.fetch_global_summary()
    return build_top(tickers, summary, clamped=query.clamped)


async def _price(text: str) -> str:
    query = parse_price(tokens_after(text, f"{COMMAND_PREFIX}price"))
    if query.is_historical:
        data = await api.fetch_historical_price(
            query.coin, query.currency, int(query.as_of.timestamp()), query.exchange
        )
    else:
        data = await api.fetch_price(query.coin, query.currency, query.exchange)
    return build_price(query, data)


async def _global(text: str) -> str:
    return build_global(await api.fetch_global_summary())


async def _calendar(text: str) -> str:
    symbol = parse_calendar(tokens_after(text, f"{COMMAND_PREFIX}cal"))
    coin_id = find_calendar_coin(await api.fetch_calendar_coins(), symbol)
    if coin_id is None:
        return calendar_not_found(symbol)
    return build_calendar(symbol, await api.fetch_calendar_events(coin_id))


# -------------------------
# handlers (routes)
# -------------------------
async def handle_coin_info(text: str) -> List[str]:
    # "!btc !eth" -> one reply per coin, a failing coin does not hide the others
    return [await _guard(_coin_info(sym)) for sym in parse_coin_symbols(text)]


async def handle_top(text: str) -> List[str]:
    return [await _guard(_top(text))]


async def handle_price(text: str) -> List[str]:
    return [await _guard(_price(text))]


async def handle_global(text: str) -> List[str]:
    return [await _guard(_global(text))]


async def handle_calendar(text: str) -> List[str]:
    return [await _guard(_calendar(text))]


def build_routes(prefix: str = COMMAND_PREFIX) -> List[Tuple[Pattern[str], Handler]]:
    p = re.escape(prefix)
    return [
        (re.compile(rf"^{p}top(?:\s|$)", re.IGNORECASE), handle_top),
        (re.compile(rf"^{p}global(?:\s|$)", re.IGNORECASE), handle_global),
        (re.compile(rf"^{p}cal(?:\s|$)", re.IGNORECASE), handle_calendar),
        (re.compile(rf"(?:^|\s){p}price(?:\s|$)", re.IGNORECASE), handle_price),
        (COIN_TOKEN_RE, handle_coin_info),
    ]


ROUTES = build_routes()


async def answer(text: str) -> List[Reply]:
    """Replies for one chat message; empty if no route matches."""
    text = (text or "").strip()
    private = wants_private(text)
    for pattern, handler in ROUTES:
        if pattern.search(text):
            log.info("%s <- %r", handler.__name__, text)
            return [Reply(t, private) for t in await handler(text) if t]
    return []
