"""
Application Layer: Market Repository
The only error boundary between the API client and the controllers.
"""
from typing import Awaitable, Callable, Iterable, List, TypeVar
import structlog

from coinwatch.application.ports import ICoinMarketClient
from coinwatch.domain import (
    CoinDetail,
    CoinGeckoError,
    CoinSummary,
    Failure,
    Ok,
    Result,
    TrendingCoin,
)

logger = structlog.get_logger()

T = TypeVar("T")

UNKNOWN_ERROR = "Unknown error"

class MarketRepository:
    """
    Wraps every client call into Ok / Failure.
    Single attempt per call, client failures never propagate past here.
    """

    def __init__(self, client: ICoinMarketClient, currency: str = "usd", per_page: int = 50) -> None:
        self.client = client
        self.currency = currency
        self.per_page = per_page

    async def list_markets(self, page: int = 1) -> Result[List[CoinSummary]]:
        return await self._call(
            "list_markets",
            lambda: self.client.list_markets(page=page, per_page=self.per_page, currency=self.currency),
        )

    async def search_by_ids(self, ids: Iterable[str]) -> Result[List[CoinSummary]]:
        ids = list(ids)
        return await self._call(
            "search_by_ids",
            lambda: self.client.search_by_ids(ids, currency=self.currency),
        )

    async def get_trending(self) -> Result[List[TrendingCoin]]:
        return await self._call("get_trending", lambda: self.client.get_trending(currency=self.currency))

    async def get_detail(self, coin_id: str) -> Result[CoinDetail]:
        return await self._call("get_detail", lambda: self.client.get_detail(coin_id))

    async def _call(self, operation: str, fetch: Callable[[], Awaitable[T]]) -> Result[T]:
        try:
            return Ok(await fetch())
        except CoinGeckoError as e:
            message = str(e) or UNKNOWN_ERROR
            logger.warning("market_request_failed", operation=operation, kind=type(e).__name__, error=message)
            return Failure(message, e)
