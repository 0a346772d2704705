"""
Domain Layer: Projections
Pure functions deriving displayed collections from fetched payloads.
"""
from typing import AbstractSet, List, Sequence

from .models import CoinSummary

def filter_coins(coins: Sequence[CoinSummary], query: str) -> List[CoinSummary]:
    """
    Case-insensitive substring match over name OR symbol.
    An empty query returns every coin.
    """
    if not query:
        return list(coins)
    needle = query.casefold()
    return [
        coin for coin in coins
        if needle in coin.name.casefold() or needle in coin.symbol.casefold()
    ]

def select_favorites(coins: Sequence[CoinSummary], favorites: AbstractSet[str]) -> List[CoinSummary]:
    """Coins whose id is a favorite, in listing order. Unknown ids are ignored."""
    return [coin for coin in coins if coin.id in favorites]
