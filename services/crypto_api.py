# services/crypto_api.py
"""
Thin async clients for the public APIs the bot talks to:

  CryptoCompare   GET /price, /pricehistorical, /pricemultifull
  CoinMarketCap   GET /v1/ticker/, /v1/global/
  CoinMarketCal   GET /v1/coins, /v1/events

URL builders are pure and return the full request URL. Fetchers do exactly one
GET each, no retries. Anything that goes wrong on the wire or in the payload
shape is raised as FetchFailure; CryptoCompare's own "Response": "Error"
answers are raised as LookupMiss.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, TypeVar

import httpx

from config import (
    COINMARKETCAL_BASE,
    COINMARKETCAL_TOKEN,
    COINMARKETCAP_BASE,
    CRYPTOCOMPARE_BASE,
    DEFAULT_EXCHANGE,
    HTTP_TIMEOUT_SEC,
)
from services.errors import FetchFailure, LookupMiss
from services.models import CalendarEvent, CoinTicker, MarketSummary

log = logging.getLogger(__name__)

T = TypeVar("T")


def _url(base: str, path: str, params: Optional[Dict[str, Any]] = None) -> str:
    if not params:
        return f"{base}{path}"
    return str(httpx.URL(f"{base}{path}", params=params))


def _calendar_params(extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    params: Dict[str, Any] = dict(extra or {})
    if COINMARKETCAL_TOKEN:
        params["access_token"] = COINMARKETCAL_TOKEN
    return params


# -------------------------
# URL builders
# -------------------------
def price_url(coin: str, currency: str, exchange: str = DEFAULT_EXCHANGE) -> str:
    return _url(CRYPTOCOMPARE_BASE, "/price", {"fsym": coin, "tsyms": currency, "e": exchange})


def historical_price_url(coin: str, currency: str, at_unix_time: int, exchange: str = DEFAULT_EXCHANGE) -> str:
    return _url(
        CRYPTOCOMPARE_BASE,
        "/pricehistorical",
        {"fsym": coin, "tsyms": currency, "ts": int(at_unix_time), "e": exchange},
    )


def multi_ticker_url(coins: List[str], currencies: List[str]) -> str:
    return _url(CRYPTOCOMPARE_BASE, "/pricemultifull", {"fsyms": ",".join(coins), "tsyms": ",".join(currencies)})


def top_ticker_url(limit: int) -> str:
    return _url(COINMARKETCAP_BASE, "/ticker/", {"limit": int(limit)})


def global_url() -> str:
    return _url(COINMARKETCAP_BASE, "/global/")


def calendar_coins_url() -> str:
    return _url(COINMARKETCAL_BASE, "/coins", _calendar_params())


def calendar_events_url(coin_id: str) -> str:
    return _url(COINMARKETCAL_BASE, "/events", _calendar_params({"coins": coin_id}))


# -------------------------
# transport
# -------------------------
async def _get_json(url: str) -> Any:
    try:
        async with httpx.AsyncClient(timeout=HTTP_TIMEOUT_SEC) as client:
            r = await client.get(url)
            r.raise_for_status()
            data = r.json()
    except httpx.HTTPError as e:
        log.warning("GET %s failed: %s", url, e)
        raise FetchFailure(f"request failed: {url}") from e
    except ValueError as e:
        log.warning("GET %s returned non-JSON body: %s", url, e)
        raise FetchFailure(f"bad JSON from {url}") from e

    if isinstance(data, dict) and data.get("Response") == "Error":
        raise LookupMiss(data.get("Message") or "Not found.")
    return data


def _shape(url: str, parse: Callable[[Any], T], data: Any) -> T:
    try:
        return parse(data)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        log.warning("Unexpected payload from %s: %r", url, e)
        raise FetchFailure(f"unexpected payload from {url}") from e


def _expect_dict(data: Any) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise TypeError(f"expected object, got {type(data).__name__}")
    return data


def _expect_list(data: Any) -> List[Any]:
    if not isinstance(data, list):
        raise TypeError(f"expected array, got {type(data).__name__}")
    return data


# -------------------------
# CryptoCompare
# -------------------------
async def fetch_price(coin: str, currency: str, exchange: str = DEFAULT_EXCHANGE) -> Dict[str, Any]:
    """{"USD": 6512.3}"""
    url = price_url(coin, currency, exchange)
    return _shape(url, _expect_dict, await _get_json(url))


async def fetch_historical_price(
    coin: str,
    currency: str,
    at_unix_time: int,
    exchange: str = DEFAULT_EXCHANGE,
) -> Dict[str, Any]:
    """{"BTC": {"USD": 6512.3}}"""
    url = historical_price_url(coin, currency, at_unix_time, exchange)
    return _shape(url, _expect_dict, await _get_json(url))


async def fetch_multi_ticker(coins: List[str], currencies: List[str]) -> Dict[str, Any]:
    """
    Returns the DISPLAY block of /pricemultifull:
      {"BTC": {"USD": {"PRICE": "$ 6,512.3", "HIGH24HOUR": ..., "LOW24HOUR": ...,
                       "MKTCAP": ..., "CHANGEPCT24HOUR": "1.23"}, "ETH": {...}}}
    """
    url = multi_ticker_url(coins, currencies)
    return _shape(url, lambda d: _expect_dict(_expect_dict(d)["DISPLAY"]), await _get_json(url))


# -------------------------
# CoinMarketCap
# -------------------------
async def fetch_top_ticker(limit: int) -> List[CoinTicker]:
    url = top_ticker_url(limit)
    return _shape(url, lambda d: [CoinTicker.from_json(row) for row in _expect_list(d)], await _get_json(url))


async def fetch_global_summary() -> MarketSummary:
    url = global_url()
    return _shape(url, lambda d: MarketSummary.from_json(_expect_dict(d)), await _get_json(url))


# -------------------------
# CoinMarketCal
# -------------------------
async def fetch_calendar_coins() -> List[str]:
    """Display strings such as "Litecoin (LTC)"."""
    url = calendar_coins_url()
    return _shape(url, lambda d: [str(x) for x in _expect_list(d)], await _get_json(url))


async def fetch_calendar_events(coin_id: str) -> List[CalendarEvent]:
    url = calendar_events_url(coin_id)
    return _shape(url, lambda d: [CalendarEvent.from_json(row) for row in _expect_list(d)], await _get_json(url))
