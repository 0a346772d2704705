"""
Application Layer: Ports (Interfaces)
Defines how the Application layer expects to interact with the Infrastructure.
"""
from typing import FrozenSet, Iterable, List, Protocol

from coinwatch.domain import CoinDetail, CoinSummary, TrendingCoin

class ICoinMarketClient(Protocol):
    """Interface for fetching market data from the CoinGecko API"""

    async def list_markets(
        self,
        page: int = 1,
        per_page: int = 50,
        order: str = "market_cap_desc",
        currency: str = "usd",
    ) -> List[CoinSummary]:
        ...

    async def search_by_ids(self, ids: Iterable[str], currency: str = "usd") -> List[CoinSummary]:
        """Raises InvalidArgumentError for an empty id set"""
        ...

    async def get_trending(self, currency: str = "usd") -> List[TrendingCoin]:
        """Trending coins in upstream order (position is the rank)"""
        ...

    async def get_detail(self, coin_id: str) -> CoinDetail:
        """Raises NotFoundError when the coin does not exist"""
        ...

    async def close(self) -> None:
        ...

class IKeyValueStorage(Protocol):
    """Interface for the local preferences store"""

    def get_string_set(self, key: str) -> FrozenSet[str]:
        ...

    def put_string_set(self, key: str, values: Iterable[str]) -> None:
        """Raises FavoritesStorageError when the write fails"""
        ...
