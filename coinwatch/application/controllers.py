"""
Application Layer: View State Controllers
One controller per screen, each holding a FetchState for the presentation.
"""
from typing import Awaitable, Callable, Generic, List, Optional, TypeVar
import structlog

from coinwatch.application.favorites import FavoritesStore
from coinwatch.application.repository import MarketRepository
from coinwatch.application.state import StateHolder
from coinwatch.domain import (
    CoinDetail,
    CoinSummary,
    Error,
    FetchState,
    Loading,
    Ok,
    Result,
    Success,
    TrendingCoin,
    filter_coins,
    select_favorites,
)

logger = structlog.get_logger()

T = TypeVar("T")

class _FetchController(Generic[T]):
    """Loading -> Success | Error, Loading always published first"""

    def __init__(self, repository: MarketRepository) -> None:
        self.repository = repository
        self.state: StateHolder[FetchState[T]] = StateHolder(Loading())

    @property
    def current(self) -> FetchState[T]:
        return self.state.value

    async def _fetch(self, call: Callable[[], Awaitable[Result[T]]]) -> Result[T]:
        self.state.set(Loading())
        return await call()

    def _publish(self, result: Result[T]) -> None:
        if isinstance(result, Ok):
            self.state.set(Success(result.value))
        else:
            self.state.set(Error(result.message))


class CoinListController(_FetchController[List[CoinSummary]]):
    """Market list with local search over the last successful payload"""

    def __init__(self, repository: MarketRepository, page: int = 1) -> None:
        super().__init__(repository)
        self.page = page
        self.search_query = ""
        self._all_coins: Optional[List[CoinSummary]] = None

    @property
    def all_coins(self) -> Optional[List[CoinSummary]]:
        """Last successful unfiltered payload, None before the first success"""
        return self._all_coins

    async def load(self) -> None:
        result = await self._fetch(lambda: self.repository.list_markets(page=self.page))
        if isinstance(result, Ok):
            self._all_coins = list(result.value)
            self.state.set(Success(filter_coins(self._all_coins, self.search_query)))
        else:
            self._publish(result)

    async def refresh(self) -> None:
        self.search_query = ""
        await self.load()

    def search(self, query: str) -> None:
        """Re-derives the displayed list without touching the network"""
        self.search_query = query
        if self._all_coins is None or not isinstance(self.state.value, Success):
            return
        self.state.set(Success(filter_coins(self._all_coins, query)))


class TrendingController(_FetchController[List[TrendingCoin]]):

    async def load(self) -> None:
        self._publish(await self._fetch(self.repository.get_trending))

    async def refresh(self) -> None:
        await self.load()


class FavoritesController:
    """
    Favorites screen. Owns no fetch: projects the list controller's
    payload through the favorites store on every call to current().
    """

    def __init__(self, list_controller: CoinListController, store: FavoritesStore) -> None:
        self.list_controller = list_controller
        self.store = store

    def current(self) -> FetchState[List[CoinSummary]]:
        state = self.list_controller.current
        if not isinstance(state, Success):
            return state
        coins = self.list_controller.all_coins or []
        return Success(select_favorites(coins, self.store.favorites))

    def toggle(self, coin_id: str) -> bool:
        return self.store.toggle(coin_id)

    async def refresh(self) -> None:
        await self.list_controller.refresh()


class CoinDetailController(_FetchController[CoinDetail]):
    """
    Detail screen keyed by coin id. The most recent load() wins:
    responses for superseded requests are discarded.
    """

    def __init__(self, repository: MarketRepository) -> None:
        super().__init__(repository)
        self.coin_id: Optional[str] = None
        self._generation = 0

    async def load(self, coin_id: str) -> None:
        self._generation += 1
        generation = self._generation
        self.coin_id = coin_id

        result = await self._fetch(lambda: self.repository.get_detail(coin_id))
        if generation != self._generation:
            logger.debug("stale_detail_discarded", coin_id=coin_id, current=self.coin_id)
            return
        self._publish(result)

    async def retry(self) -> None:
        if self.coin_id is None:
            raise RuntimeError("retry() called before load()")
        await self.load(self.coin_id)
