"""
Main Entry Point (Composition Root)
"""
import argparse
import asyncio
import logging
import signal
import sys
from typing import List, Optional

import structlog

from coinwatch.infrastructure.config import settings
from coinwatch.infrastructure.api_client import CoinGeckoClient
from coinwatch.infrastructure.repo import JsonPreferences
from coinwatch.application.controllers import (
    CoinDetailController,
    CoinListController,
    FavoritesController,
    TrendingController,
)
from coinwatch.application.favorites import FavoritesStore
from coinwatch.application.repository import MarketRepository
from coinwatch.application.ui import DashboardService

# Setup Logging
structlog.configure(
    processors=[
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        logging.getLevelName(settings.log_level.upper())
    ),
    logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
)

logger = structlog.get_logger()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="coinwatch", description="CoinGecko market dashboard")
    parser.add_argument("--search", default="", help="filter the market list by name or symbol")
    parser.add_argument("--detail", metavar="COIN_ID", help="show the detail view of one coin and exit")
    parser.add_argument("--toggle-favorite", metavar="COIN_ID", help="add or remove a favorite before rendering")
    parser.add_argument("--once", action="store_true", help="render a single snapshot instead of the live view")
    return parser.parse_args(argv)


async def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    logger.info("startup", **settings.model_dump(exclude={'coingecko_api_key'}, mode="json"))

    # 1. Composition
    client = CoinGeckoClient()
    repository = MarketRepository(client, currency=settings.vs_currency, per_page=settings.per_page)
    favorites = FavoritesStore(JsonPreferences(settings.favorites_path))
    favorites.load()

    list_controller = CoinListController(repository)
    trending_controller = TrendingController(repository)
    favorites_controller = FavoritesController(list_controller, favorites)
    dashboard = DashboardService(
        list_controller, trending_controller, favorites_controller, favorites,
        currency=settings.vs_currency,
    )

    try:
        if args.toggle_favorite:
            is_favorite = favorites.toggle(args.toggle_favorite)
            dashboard.console.print(
                f"{args.toggle_favorite}: {'added to' if is_favorite else 'removed from'} favorites"
            )

        # 2. Detail screen
        if args.detail:
            detail_controller = CoinDetailController(repository)
            await detail_controller.load(args.detail)
            dashboard.console.print(dashboard.render_detail(detail_controller))
            return

        # 3. Snapshot
        if args.once:
            await asyncio.gather(list_controller.load(), trending_controller.load())
            list_controller.search(args.search)
            dashboard.console.print(dashboard.render_markets())
            dashboard.console.print(dashboard.render_trending())
            dashboard.console.print(dashboard.render_favorites())
            return

        await run_live(dashboard, list_controller, trending_controller, args.search)
    finally:
        favorites.close()
        await client.close()
        logger.info("shutdown_complete")


async def run_live(
    dashboard: DashboardService,
    list_controller: CoinListController,
    trending_controller: TrendingController,
    query: str,
) -> None:
    # Shutdown handling
    stop_event = asyncio.Event()

    def signal_handler() -> None:
        logger.info("shutdown_signal_received")
        stop_event.set()

    loop = asyncio.get_running_loop()
    loop.add_signal_handler(signal.SIGINT, signal_handler)
    loop.add_signal_handler(signal.SIGTERM, signal_handler)

    # Main Loop
    logger.info("starting_loop", refresh_interval=settings.refresh_interval)
    dashboard.start()
    try:
        while not stop_event.is_set():
            await asyncio.gather(list_controller.refresh(), trending_controller.refresh())
            list_controller.search(query)
            dashboard.mark_refreshed()

            try:
                await asyncio.wait_for(stop_event.wait(), timeout=settings.refresh_interval)
            except asyncio.TimeoutError:
                pass
    finally:
        dashboard.stop()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
