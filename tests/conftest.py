"""
Pytest configuration and fixtures for CoinWatch tests
"""
from typing import Any, Dict, List, Optional, Tuple, Union

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from coinwatch.domain import CoinId, CoinSummary
from decimal import Decimal


def market_entry(coin_id: str, name: str, symbol: str, price: float = 1.0, rank: Optional[int] = 1) -> Dict[str, Any]:
    """Raw /coins/markets row as CoinGecko returns it"""
    return {
        "id": coin_id,
        "symbol": symbol,
        "name": name,
        "image": f"https://assets.coingecko.com/coins/images/1/large/{coin_id}.png",
        "current_price": price,
        "market_cap": 1_000_000_000,
        "market_cap_rank": rank,
        "price_change_percentage_24h": -1.25,
        "total_volume": 25_000_000.0,
        "high_24h": price * 1.1,
        "low_24h": price * 0.9,
    }


def trending_item(coin_id: str, score: int) -> Dict[str, Any]:
    return {
        "item": {
            "id": coin_id,
            "coin_id": 1000 + score,
            "name": coin_id.title(),
            "symbol": coin_id[:3].upper(),
            "market_cap_rank": 100 + score,
            "thumb": f"https://img/{coin_id}/thumb.png",
            "small": f"https://img/{coin_id}/small.png",
            "large": f"https://img/{coin_id}/large.png",
            "score": score,
            "data": {
                "price": 0.5 + score,
                "price_change_percentage_24h": {"usd": 3.5, "eur": None},
            },
        }
    }


def coin(coin_id: str, name: str = "", symbol: str = "") -> CoinSummary:
    return CoinSummary(
        id=CoinId(coin_id),
        symbol=symbol or coin_id[:3],
        name=name or coin_id.title(),
        image="",
        current_price=Decimal("1"),
        market_cap=1,
    )


Body = Union[Dict[str, Any], List[Any], str]


class FakeCoinGecko:
    """In-process stand-in for the CoinGecko API"""

    def __init__(self) -> None:
        self.responses: Dict[str, Tuple[int, Body]] = {}
        self.requests: List[Tuple[str, Dict[str, str]]] = []
        app = web.Application()
        app.router.add_get("/api/v3/{tail:.*}", self._handle)
        self.server = TestServer(app)

    @property
    def base_url(self) -> str:
        return str(self.server.make_url("/api/v3/"))

    def respond(self, path: str, body: Body, status: int = 200) -> None:
        self.responses[path] = (status, body)

    async def _handle(self, request: web.Request) -> web.Response:
        path = request.match_info["tail"]
        self.requests.append((path, dict(request.query)))
        status, body = self.responses.get(path, (404, {"error": "coin not found"}))
        if isinstance(body, str):
            return web.Response(text=body, status=status, content_type="text/html")
        return web.json_response(body, status=status)


@pytest.fixture
async def coingecko():
    fake = FakeCoinGecko()
    await fake.server.start_server()
    yield fake
    await fake.server.close()
