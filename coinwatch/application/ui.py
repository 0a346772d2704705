"""
Application Layer: UI Dashboard
Renders controller state using 'rich' library.
"""
import datetime
from decimal import Decimal
from typing import Any, List, Optional, Union
from rich.live import Live
from rich.table import Table
from rich.layout import Layout
from rich.panel import Panel
from rich.console import Console, Group, RenderableType
from rich import box
from rich.text import Text

from coinwatch.application.controllers import (
    CoinDetailController,
    CoinListController,
    FavoritesController,
    TrendingController,
)
from coinwatch.application.favorites import FavoritesStore
from coinwatch.domain import (
    CoinDetail,
    CoinSummary,
    Error,
    FetchState,
    Loading,
    TrendingCoin,
)

Number = Union[int, float, Decimal]

UNKNOWN = "-"

# --- Formatting ---

def format_currency(value: Optional[Number]) -> str:
    """US dollar amount, more decimals for sub-dollar prices"""
    if value is None:
        return UNKNOWN
    amount = Decimal(str(value))
    if abs(amount) >= 1 or amount == 0:
        return f"${amount:,.2f}"
    # three significant digits below one dollar
    decimals = max(2, 2 - abs(amount).adjusted())
    return f"${amount:.{decimals}f}"

def format_large_number(value: Optional[Number]) -> str:
    if value is None:
        return UNKNOWN
    amount = Decimal(str(value))
    if amount >= 1_000_000_000_000:
        return f"${amount / 1_000_000_000_000:.2f}T"
    if amount >= 1_000_000_000:
        return f"${amount / 1_000_000_000:.2f}B"
    if amount >= 1_000_000:
        return f"${amount / 1_000_000:.2f}M"
    return format_currency(amount)

def format_supply(value: Optional[Number]) -> str:
    if value is None:
        return UNKNOWN
    amount = Decimal(str(value))
    if amount >= 1_000_000_000:
        return f"{amount / 1_000_000_000:.2f}B"
    if amount >= 1_000_000:
        return f"{amount / 1_000_000:.2f}M"
    if amount >= 1_000:
        return f"{amount / 1_000:.2f}K"
    return f"{amount:.0f}"

def format_change(value: Optional[Number]) -> Text:
    if value is None:
        return Text(UNKNOWN, style="grey50")
    amount = Decimal(str(value))
    prefix = "+" if amount >= 0 else ""
    return Text(f"{prefix}{amount:.2f}%", style="green" if amount >= 0 else "red")

def display_rank(coin: TrendingCoin) -> int:
    """Trending score is 0-based upstream"""
    return coin.score + 1


class DashboardService:
    """
    Manages the terminal UI.
    Uses rich.live to update the screen without flickering.
    """
    def __init__(
        self,
        list_controller: CoinListController,
        trending_controller: TrendingController,
        favorites_controller: FavoritesController,
        favorites: FavoritesStore,
        currency: str = "usd",
        console: Optional[Console] = None,
    ) -> None:
        self.console = console or Console()
        self.list_controller = list_controller
        self.trending_controller = trending_controller
        self.favorites_controller = favorites_controller
        self.favorites = favorites
        self.currency = currency.lower()
        self.layout = Layout()
        self.start_time = datetime.datetime.now()

        # State
        self.last_refresh_time: Optional[datetime.datetime] = None
        self.refresh_count = 0
        self.active = False
        self._live: Optional[Live] = None
        self._unsubscribe: List[Any] = []

    def start(self) -> None:
        """Starts the Live display context and follows controller state"""
        self.active = True
        self._init_layout()
        self._unsubscribe = [
            self.list_controller.state.subscribe(lambda _: self._update_layout()),
            self.trending_controller.state.subscribe(lambda _: self._update_layout()),
            self.favorites.subscribe(lambda _: self._update_layout()),
        ]
        self._update_layout()
        self._live = Live(self.layout, console=self.console, refresh_per_second=4, screen=True)
        self._live.start()

    def stop(self) -> None:
        """Stops the Live display"""
        self.active = False
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe = []
        if self._live:
            self._live.stop()
            self._live = None

    def mark_refreshed(self) -> None:
        self.refresh_count += 1
        self.last_refresh_time = datetime.datetime.now()
        if self.active:
            self._update_layout()

    def _init_layout(self) -> None:
        """Splits screen into sections"""
        self.layout.split(
            Layout(name="header", size=3),
            Layout(name="body", ratio=1),
        )
        self.layout["body"].split_row(
            Layout(name="markets", ratio=3),
            Layout(name="side", ratio=2),
        )
        self.layout["side"].split(
            Layout(name="trending", ratio=1),
            Layout(name="favorites", ratio=1),
        )

    def _update_layout(self) -> None:
        """Re-renders all panels"""
        if not self.active:
            return
        self.layout["header"].update(self._make_header())
        self.layout["markets"].update(self.render_markets())
        self.layout["trending"].update(self.render_trending())
        self.layout["favorites"].update(self.render_favorites())

    def _make_header(self) -> Panel:
        uptime = str(datetime.datetime.now() - self.start_time).split('.')[0]
        last = self.last_refresh_time.strftime("%H:%M:%S") if self.last_refresh_time else "never"

        grid = Table.grid(expand=True)
        grid.add_column(justify="left", ratio=1)
        grid.add_column(justify="right", ratio=1)

        query = self.list_controller.search_query
        search = f" | Search: [bold]{query}[/bold]" if query else ""
        grid.add_row(
            f"[bold blue]CoinWatch[/bold blue] | Refreshes: {self.refresh_count}{search}",
            f"Favorites: [bold green]{len(self.favorites.favorites)}[/bold green] | Last: {last} | Uptime: {uptime}"
        )
        return Panel(grid, style="white on blue")

    # --- Screens ---

    def render_markets(self) -> Panel:
        state = self.list_controller.current
        return Panel(
            self._render_state(state, self._coin_table, "No coins match the search"),
            title="Market Overview", border_style="blue"
        )

    def render_favorites(self) -> Panel:
        state = self.favorites_controller.current()
        return Panel(
            self._render_state(state, self._coin_table, "No favorites yet"),
            title="Favorites", border_style="yellow"
        )

    def render_trending(self) -> Panel:
        state = self.trending_controller.current
        return Panel(
            self._render_state(state, self._trending_table, "Nothing trending"),
            title="Trending (24h searches)", border_style="magenta"
        )

    def render_detail(self, controller: CoinDetailController) -> Panel:
        state = controller.current
        if isinstance(state, Loading):
            return Panel(Text("Loading...", style="grey50"), title=controller.coin_id or "Detail")
        if isinstance(state, Error):
            return Panel(Text(f"Error: {state.message}", style="red"), title=controller.coin_id or "Detail", border_style="red")
        return self._detail_panel(state.data)

    def _render_state(self, state: FetchState[Any], render: Any, empty_message: str) -> RenderableType:
        if isinstance(state, Loading):
            return Text("Loading...", style="grey50")
        if isinstance(state, Error):
            return Text(f"Error: {state.message}", style="red")
        if not state.data:
            return Text(empty_message, style="grey50")
        return render(state.data)

    def _coin_table(self, coins: List[CoinSummary]) -> Table:
        table = Table(box=box.SIMPLE, expand=True)
        table.add_column("#", justify="right", style="grey50")
        table.add_column("Coin", style="cyan", no_wrap=True)
        table.add_column("Price", justify="right", style="white")
        table.add_column("24h", justify="right")
        table.add_column("Market Cap", justify="right", style="green")
        table.add_column("", justify="center")

        for coin in coins:
            table.add_row(
                str(coin.market_cap_rank) if coin.market_cap_rank is not None else UNKNOWN,
                f"{coin.name} ({coin.symbol.upper()})",
                format_currency(coin.current_price),
                format_change(coin.price_change_percentage_24h),
                format_large_number(coin.market_cap),
                "*" if self.favorites.is_favorite(coin.id) else "",
            )
        return table

    def _trending_table(self, coins: List[TrendingCoin]) -> Table:
        table = Table(box=box.SIMPLE, expand=True)
        table.add_column("Score", justify="right", style="magenta")
        table.add_column("Coin", style="cyan", no_wrap=True)
        table.add_column("MC Rank", justify="right")
        table.add_column("24h", justify="right")

        for coin in coins:
            change = coin.data.price_change_percentage_24h.get(self.currency) if coin.data else None
            table.add_row(
                f"#{display_rank(coin)}",
                f"{coin.name} ({coin.symbol.upper()})",
                str(coin.market_cap_rank) if coin.market_cap_rank is not None else UNKNOWN,
                format_change(change),
            )
        return table

    def _detail_panel(self, coin: CoinDetail) -> Panel:
        data = coin.market_data
        cur = self.currency

        def pick(name: str) -> Any:
            return data.in_currency(name, cur) if data else None

        stats = Table.grid(padding=(0, 2))
        stats.add_column(style="grey50")
        stats.add_column(justify="right")
        stats.add_row("Price", format_currency(pick("current_price")))
        stats.add_row("24h High", format_currency(pick("high_24h")))
        stats.add_row("24h Low", format_currency(pick("low_24h")))
        stats.add_row("Market Cap", format_large_number(pick("market_cap")))
        stats.add_row("Volume 24h", format_large_number(pick("total_volume")))
        stats.add_row("24h", format_change(data.price_change_percentage_24h if data else None))
        stats.add_row("7d", format_change(data.price_change_percentage_7d if data else None))
        stats.add_row("30d", format_change(data.price_change_percentage_30d if data else None))
        stats.add_row("Circulating", format_supply(data.circulating_supply if data else None))
        stats.add_row("Total Supply", format_supply(data.total_supply if data else None))
        stats.add_row("Max Supply", format_supply(data.max_supply if data else None))
        stats.add_row("ATH", f"{format_currency(pick('ath'))} {(pick('ath_date') or '')[:10]}")
        stats.add_row("ATL", f"{format_currency(pick('atl'))} {(pick('atl_date') or '')[:10]}")

        parts: List[RenderableType] = [stats]
        if coin.categories:
            parts.append(Text("Categories: " + ", ".join(coin.categories), style="grey50"))
        if coin.links and coin.links.primary_homepage:
            parts.append(Text(f"Homepage: {coin.links.primary_homepage}", style="blue"))
        if coin.description:
            parts.append(Text(coin.description[:600], style="white"))

        rank = f" #{coin.market_cap_rank}" if coin.market_cap_rank is not None else ""
        star = " *" if self.favorites.is_favorite(coin.id) else ""
        return Panel(
            Group(*parts),
            title=f"{coin.name} ({coin.symbol.upper()}){rank}{star}",
            border_style="green", box=box.ROUNDED
        )
