# services/parser.py
"""
Command argument parsing.

Message text arrives as typed by the user, e.g.

    !btc !eth
    .top 10
    .price ETH USD e:Kraken 5.days -p
    .cal LTC

Nothing here touches the network; the results are plain dataclasses that the
API client turns into requests.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from config import (
    DEFAULT_CURRENCY,
    DEFAULT_EXCHANGE,
    PRIVATE_FLAG,
    TOP_DEFAULT_LIMIT,
    TOP_MAX_LIMIT,
)
from services.errors import ParseFailure

COIN_TOKEN_RE = re.compile(r"(?<!\S)!([A-Za-z]{1,5})\b")
LETTERS_RE = re.compile(r"^[A-Za-z]+$")
EXCHANGE_RE = re.compile(r"^e:([A-Za-z]+)$", re.IGNORECASE)
OFFSET_RE = re.compile(r"^(\d+)\.([A-Za-z]+)$", re.ASCII)
CAL_SYMBOL_RE = re.compile(r"^[A-Za-z]{1,5}$")

# "5.days" -> 5 * timedelta(days=1)
OFFSET_UNITS = {
    "second": timedelta(seconds=1),
    "minute": timedelta(minutes=1),
    "hour": timedelta(hours=1),
    "day": timedelta(days=1),
    "week": timedelta(weeks=1),
}

PRICE_USAGE = "Usage: .price COIN [CURRENCY] [e:EXCHANGE] [N.days]"
CAL_USAGE = "Usage: .cal COIN"


@dataclass(frozen=True)
class PriceQuery:
    coin: str
    currency: str = DEFAULT_CURRENCY
    exchange: str = DEFAULT_EXCHANGE
    as_of: Optional[datetime] = None

    @property
    def is_historical(self) -> bool:
        return self.as_of is not None


@dataclass(frozen=True)
class TopQuery:
    limit: int = TOP_DEFAULT_LIMIT
    # true when the asked-for limit was cut down to TOP_MAX_LIMIT
    clamped: bool = False


def _tokens(text: str) -> List[str]:
    # служебный флаг "-p" никогда не считается аргументом
    return [t for t in (text or "").split() if t != PRIVATE_FLAG]


def wants_private(text: str) -> bool:
    return PRIVATE_FLAG in (text or "").split()


def tokens_after(text: str, keyword: str) -> List[str]:
    """
    Tokens following the first token equal to `keyword` (case-insensitive).
    "hey .price btc eur" with ".price" -> ["btc", "eur"]
    """
    tokens = _tokens(text)
    kw = keyword.lower()
    for i, tok in enumerate(tokens):
        if tok.lower() == kw:
            return tokens[i + 1:]
    return []


def parse_coin_symbols(text: str) -> List[str]:
    out: List[str] = []
    for m in COIN_TOKEN_RE.finditer(text or ""):
        sym = m.group(1).upper()
        if sym not in out:
            out.append(sym)
    return out


def parse_top(args: List[str]) -> TopQuery:
    # ascii only: "²".isdigit() is true but int("²") fails
    if args and args[0].isascii() and args[0].isdigit():
        try:
            limit = int(args[0])
        except ValueError:
            # past the int() digit limit
            return TopQuery(limit=TOP_MAX_LIMIT, clamped=True)
        if limit < 1:
            return TopQuery()
        if limit > TOP_MAX_LIMIT:
            return TopQuery(limit=TOP_MAX_LIMIT, clamped=True)
        return TopQuery(limit=limit)
    return TopQuery()


def parse_offset(token: str, now: Optional[datetime] = None) -> Optional[datetime]:
    """
    "<N>.<unit>" -> the instant N units before `now`.
    Units: seconds, minutes, hours, days, weeks (singular also accepted).
    Returns None if the token is not an offset, raises ParseFailure if it
    points outside the datetime range.
    """
    m = OFFSET_RE.match(token or "")
    if not m:
        return None
    unit = m.group(2).lower()
    if unit.endswith("s"):
        unit = unit[:-1]
    step = OFFSET_UNITS.get(unit)
    if step is None:
        return None
    now = now or datetime.now(timezone.utc)
    try:
        return now - int(m.group(1)) * step
    except (OverflowError, ValueError):
        # "99999999.weeks" lands before year 1
        raise ParseFailure(PRICE_USAGE)


def parse_price(args: List[str], now: Optional[datetime] = None) -> PriceQuery:
    if not args or not LETTERS_RE.match(args[0]):
        raise ParseFailure(PRICE_USAGE)

    coin = args[0].upper()
    currency: Optional[str] = None
    exchange: Optional[str] = None
    as_of: Optional[datetime] = None

    # fixed order: letters -> e:EXCHANGE -> N.unit, first hit per category wins
    for tok in args[1:]:
        if LETTERS_RE.match(tok):
            if currency is None:
                currency = tok.upper()
            continue
        m = EXCHANGE_RE.match(tok)
        if m:
            if exchange is None:
                exchange = m.group(1).upper()
            continue
        if as_of is None:
            as_of = parse_offset(tok, now)

    return PriceQuery(
        coin=coin,
        currency=currency or DEFAULT_CURRENCY,
        exchange=exchange or DEFAULT_EXCHANGE,
        as_of=as_of,
    )


def parse_calendar(args: List[str]) -> str:
    if not args or not CAL_SYMBOL_RE.match(args[0]):
        raise ParseFailure(CAL_USAGE)
    return args[0].upper()
