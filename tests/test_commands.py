# -*- coding: utf-8 -*-
from __future__ import annotations

import time

import httpx
import pytest
import respx
from httpx import Response

from config import CRYPTOCOMPARE_BASE
from services import commands
from services import crypto_api as api
from services.commands import FETCH_FAILED, Reply, answer
from services.parser import CAL_USAGE, PRICE_USAGE


def _display(symbol, refs):
    quote = {"PRICE": "$ 100", "HIGH24HOUR": "$ 110", "LOW24HOUR": "$ 90", "MKTCAP": "$ 1 B", "CHANGEPCT24HOUR": "2.5"}
    block = {"USD": quote}
    for r in refs:
        block[r] = dict(quote, PRICE=f"{r} 0.5")
    return {"DISPLAY": {symbol: block}}


GLOBAL = {"total_market_cap_usd": 10000.0, "active_currencies": 1376}


@pytest.mark.asyncio
async def test_unrouted_message_gets_no_reply():
    assert await answer("just chatting about the weather") == []
    assert await answer("") == []


@pytest.mark.asyncio
@respx.mock
async def test_coin_info_fan_out():
    btc = respx.get(api.multi_ticker_url(["BTC"], ["USD", "ETH"])).mock(
        return_value=Response(200, json=_display("BTC", ["ETH"]))
    )
    eth = respx.get(api.multi_ticker_url(["ETH"], ["USD", "BTC"])).mock(
        return_value=Response(200, json=_display("ETH", ["BTC"]))
    )
    replies = await answer("what about !BTC and !eth")
    assert btc.called and eth.called
    assert replies == [
        Reply("BTC: $100 / ETH0.5 - MC: $1B - H: $110 / L: $90 / +2.5%"),
        Reply("ETH: $100 / BTC0.5 - MC: $1B - H: $110 / L: $90 / +2.5%"),
    ]


@pytest.mark.asyncio
@respx.mock
async def test_coin_info_one_failure_does_not_hide_others():
    respx.get(api.multi_ticker_url(["BTC"], ["USD", "ETH"])).mock(return_value=Response(500))
    respx.get(api.multi_ticker_url(["LTC"], ["USD", "ETH", "BTC"])).mock(
        return_value=Response(200, json=_display("LTC", ["ETH", "BTC"]))
    )
    replies = await answer("!BTC !LTC")
    assert replies[0].text == FETCH_FAILED
    assert replies[1].text.startswith("LTC: $100 / ETH0.5 / BTC0.5")


@pytest.mark.asyncio
@respx.mock
async def test_coin_info_unknown_symbol():
    respx.get(api.multi_ticker_url(["XYZ"], ["USD", "ETH", "BTC"])).mock(
        return_value=Response(200, json={"Response": "Error", "Message": "There is no data for any of the toSymbols USD ."})
    )
    replies = await answer("!XYZ")
    assert replies == [Reply("There is no data for any of the toSymbols USD .")]


@pytest.mark.asyncio
@respx.mock
async def test_top_uses_ticker_and_global():
    respx.get(api.top_ticker_url(1)).mock(
        return_value=Response(200, json=[{
            "name": "Bitcoin", "symbol": "BTC", "price_usd": "5000", "price_btc": "1.0",
            "market_cap_usd": "500", "available_supply": "1000", "max_supply": "21000000",
            "percent_change_1h": "1", "percent_change_24h": "-2", "percent_change_7d": "3",
        }])
    )
    respx.get(api.global_url()).mock(return_value=Response(200, json=GLOBAL))
    replies = await answer(".top 1 -p")
    assert len(replies) == 1
    assert replies[0].private
    assert "Market Cap: $500 (5.00% of market)" in replies[0].text
    assert "+1%/hr - -2%/d - +3%/w" in replies[0].text


@pytest.mark.asyncio
@respx.mock
async def test_top_default_limit():
    route = respx.get(api.top_ticker_url(5)).mock(return_value=Response(200, json=[{"name": "Bitcoin", "symbol": "BTC"}]))
    respx.get(api.global_url()).mock(return_value=Response(200, json=GLOBAL))
    await answer(".top")
    assert route.called


@pytest.mark.asyncio
@respx.mock
async def test_price_live_path():
    route = respx.get(api.price_url("ETH", "USD", "KRAKEN")).mock(return_value=Response(200, json={"USD": 309.5}))
    replies = await answer(".price ETH USD e:Kraken")
    assert route.called
    assert replies == [Reply("ETH: 309.5USD")]


@pytest.mark.asyncio
@respx.mock
async def test_price_historical_path():
    live = respx.get(url__startswith=f"{CRYPTOCOMPARE_BASE}/price?")
    hist = respx.get(url__startswith=f"{CRYPTOCOMPARE_BASE}/pricehistorical").mock(
        return_value=Response(200, json={"BTC": {"USD": 15170.1}})
    )
    replies = await answer(".price BTC 5.days")
    assert hist.called and not live.called

    ts = int(hist.calls.last.request.url.params["ts"])
    assert abs(ts - (time.time() - 5 * 86400)) < 60
    assert replies[0].text.startswith("BTC: 15170.1USD - (")


@pytest.mark.asyncio
async def test_price_without_coin_gets_usage():
    assert await answer(".price") == [Reply(PRICE_USAGE)]


@pytest.mark.asyncio
@respx.mock
async def test_global():
    respx.get(api.global_url()).mock(return_value=Response(200, json=GLOBAL))
    assert await answer(".global") == [Reply("Total Market Cap: $10,000.0\nActive Currencies: 1376")]


@pytest.mark.asyncio
@respx.mock
async def test_calendar_not_found_skips_events_request():
    respx.get(api.calendar_coins_url()).mock(return_value=Response(200, json=["Bitcoin (BTC)", "Litecoin (LTC)"]))
    events = respx.get(url__startswith=api.calendar_events_url("x").split("?")[0])
    replies = await answer(".cal XYZ")
    assert replies == [Reply("XYZ not found on the calendar.")]
    assert not events.called


@pytest.mark.asyncio
@respx.mock
async def test_calendar_events():
    respx.get(api.calendar_coins_url()).mock(return_value=Response(200, json=["Litecoin (LTC)"]))
    respx.get(api.calendar_events_url("Litecoin (LTC)")).mock(
        return_value=Response(200, json=[
            {"title": "Hard fork", "date_event": "2018-02-18T00:00:00+00:00", "proof": "https://ex.org/p", "percentage": 87},
            {"title": "Rumour", "date_event": "2018-02-19T00:00:00+00:00", "percentage": 20},
        ])
    )
    assert await answer(".cal ltc") == [Reply("2018-02-18 - Hard fork (https://ex.org/p)")]


@pytest.mark.asyncio
async def test_calendar_without_coin_gets_usage():
    assert await answer(".cal") == [Reply(CAL_USAGE)]


@pytest.mark.asyncio
@respx.mock
async def test_network_failure_never_escapes():
    respx.get(api.global_url()).mock(side_effect=httpx.ConnectError("boom"))
    assert await answer(".global") == [Reply(FETCH_FAILED)]


@pytest.mark.asyncio
async def test_unexpected_error_is_answered(monkeypatch):
    async def broken():
        raise RuntimeError("kaboom")

    monkeypatch.setattr(commands.api, "fetch_global_summary", broken)
    assert await answer(".global -p") == [Reply(FETCH_FAILED, private=True)]


def test_routes_first_match_wins():
    routes = commands.build_routes(".")
    handlers = [h for p, h in routes if p.search(".top 3 !BTC")]
    assert handlers[0] is commands.handle_top


@pytest.mark.asyncio
async def test_price_offset_out_of_range_gets_usage():
    assert await answer(".price BTC 99999999.weeks") == [Reply(PRICE_USAGE)]


@pytest.mark.asyncio
async def test_bang_inside_a_word_is_not_a_coin():
    assert await answer("wow!!btc") == []


@pytest.mark.asyncio
@respx.mock
async def test_top_with_odd_digit_falls_back_to_default():
    route = respx.get(api.top_ticker_url(5)).mock(return_value=Response(200, json=[{"name": "Bitcoin", "symbol": "BTC"}]))
    respx.get(api.global_url()).mock(return_value=Response(200, json=GLOBAL))
    replies = await answer(".top ²")
    assert route.called
    assert replies[0].text.startswith("Bitcoin: BTC")


@pytest.mark.asyncio
@respx.mock
async def test_top_over_max_says_so():
    route = respx.get(api.top_ticker_url(25)).mock(return_value=Response(200, json=[{"name": "Bitcoin", "symbol": "BTC"}]))
    respx.get(api.global_url()).mock(return_value=Response(200, json=GLOBAL))
    replies = await answer(".top 50")
    assert route.called
    assert replies[0].text.startswith("Showing the top 25 only")
