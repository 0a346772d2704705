"""
Infrastructure Layer: CoinGecko Client Adapter
"""
import asyncio
import json
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import quote

import aiohttp
import structlog

from coinwatch.application.ports import ICoinMarketClient
from coinwatch.domain import (
    ApiError,
    CoinDetail,
    CoinSummary,
    DecodeError,
    InvalidArgumentError,
    NotFoundError,
    TransportError,
    TrendingCoin,
)
from coinwatch.infrastructure.config import settings
from coinwatch.infrastructure.mapping import (
    coin_detail_from_json,
    coin_summaries_from_json,
    trending_coins_from_json,
)

logger = structlog.get_logger()

# Constants
API_KEY_PARAM = "x_cg_demo_api_key"
MAX_PER_PAGE = 250

class CoinGeckoClient(ICoinMarketClient):
    """
    Adapter for the CoinGecko v3 REST API using aiohttp.
    One attempt per call: no retries, no caching.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._session: Optional[aiohttp.ClientSession] = None
        self._api_key = api_key if api_key is not None else settings.coingecko_api_key.get_secret_value()
        self._base_url = (base_url or settings.coingecko_base_url).rstrip("/") + "/"
        self._timeout = timeout if timeout is not None else settings.request_timeout

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"Accept": "application/json"},
                timeout=aiohttp.ClientTimeout(total=self._timeout)
            )
        return self._session

    async def close(self) -> None:
        if self._session:
            await self._session.close()

    async def __aenter__(self) -> "CoinGeckoClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _get(self, path: str, params: Dict[str, Any], not_found_id: Optional[str] = None) -> Any:
        """
        GET {base}/{path} with the API key appended.
        Raises TransportError, ApiError/NotFoundError or DecodeError.
        """
        session = await self._get_session()
        url = f"{self._base_url}{path}"
        query = dict(params)
        if self._api_key:
            query[API_KEY_PARAM] = self._api_key

        try:
            async with session.get(url, params=query) as response:
                if response.status == 404 and not_found_id is not None:
                    raise NotFoundError(not_found_id)
                if not 200 <= response.status < 300:
                    text = await response.text()
                    logger.error("api_error", status=response.status, path=path, response=text[:200])
                    raise ApiError(response.status, response.reason or "")
                body = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("transport_error", path=path, error=repr(e))
            raise TransportError(f"cannot reach CoinGecko ({path}): {e!r}") from e

        try:
            return json.loads(body)
        except ValueError as e:
            logger.error("decode_error", path=path, error=str(e))
            raise DecodeError(f"malformed JSON from {path}: {e}") from e

    # --- Market Client Implementation ---

    async def list_markets(
        self,
        page: int = 1,
        per_page: int = 50,
        order: str = "market_cap_desc",
        currency: str = "usd",
    ) -> List[CoinSummary]:
        if page < 1:
            raise InvalidArgumentError(f"page must be >= 1, got {page}")
        if not 1 <= per_page <= MAX_PER_PAGE:
            raise InvalidArgumentError(f"per_page must be within 1..{MAX_PER_PAGE}, got {per_page}")
        currency = _require(currency, "currency")

        raw = await self._get("coins/markets", {
            "vs_currency": currency,
            "order": order,
            "per_page": per_page,
            "page": page,
            "sparkline": "false",
        })
        coins = _unique_by_id(coin_summaries_from_json(raw))
        if len(coins) > per_page:
            logger.warning("markets_page_oversized", per_page=per_page, received=len(coins))
            coins = coins[:per_page]
        return coins

    async def search_by_ids(self, ids: Iterable[str], currency: str = "usd") -> List[CoinSummary]:
        wanted = sorted({i.strip() for i in ids if i and i.strip()})
        if not wanted:
            raise InvalidArgumentError("ids must contain at least one coin id")
        currency = _require(currency, "currency")

        raw = await self._get("coins/markets", {
            "vs_currency": currency,
            "ids": ",".join(wanted),
        })
        return _unique_by_id(coin_summaries_from_json(raw))

    async def get_trending(self, currency: str = "usd") -> List[TrendingCoin]:
        # search/trending has no currency parameter; the per-currency
        # change map in each item is selected by the caller
        currency = _require(currency, "currency")
        raw = await self._get("search/trending", {})
        coins = trending_coins_from_json(raw)
        logger.debug("trending_fetched", count=len(coins), currency=currency)
        return coins

    async def get_detail(self, coin_id: str) -> CoinDetail:
        coin_id = _require(coin_id, "coin_id")
        raw = await self._get(f"coins/{quote(coin_id, safe='')}", {
            "localization": "false",
            "tickers": "false",
            "market_data": "true",
            "community_data": "false",
            "developer_data": "false",
        }, not_found_id=coin_id)
        return coin_detail_from_json(raw)


def _require(value: str, name: str) -> str:
    value = (value or "").strip()
    if not value:
        raise InvalidArgumentError(f"{name} must not be empty")
    return value.lower() if name == "currency" else value

def _unique_by_id(coins: List[CoinSummary]) -> List[CoinSummary]:
    seen = set()
    unique = []
    for coin in coins:
        if coin.id in seen:
            logger.warning("duplicate_coin_dropped", coin_id=coin.id)
            continue
        seen.add(coin.id)
        unique.append(coin)
    return unique
