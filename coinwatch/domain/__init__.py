"""
Domain Layer
"""
from .models import (
    CoinId,
    CoinImage,
    CoinLinks,
    CoinSummary,
    TrendingCoin,
    TrendingCoinData,
    MarketData,
    CoinDetail,
    FetchState,
    Loading,
    Success,
    Error,
    Result,
    Ok,
    Failure,
    DomainError,
    CoinGeckoError,
    TransportError,
    DecodeError,
    ApiError,
    NotFoundError,
    InvalidArgumentError,
    FavoritesStorageError,
)
from .filters import filter_coins, select_favorites

__all__ = [
    "CoinId",
    "CoinImage",
    "CoinLinks",
    "CoinSummary",
    "TrendingCoin",
    "TrendingCoinData",
    "MarketData",
    "CoinDetail",
    "FetchState",
    "Loading",
    "Success",
    "Error",
    "Result",
    "Ok",
    "Failure",
    "DomainError",
    "CoinGeckoError",
    "TransportError",
    "DecodeError",
    "ApiError",
    "NotFoundError",
    "InvalidArgumentError",
    "FavoritesStorageError",
    "filter_coins",
    "select_favorites",
]
