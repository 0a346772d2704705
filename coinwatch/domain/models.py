"""
Domain Layer: Entities, Value Objects and Results
Pure Python, No external dependencies.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Generic, List, Optional, Tuple, TypeVar, Union, NewType

T = TypeVar("T")

# --- Value Objects ---

CoinId = NewType("CoinId", str)

@dataclass(frozen=True)
class CoinImage:
    thumb: str
    small: str
    large: str

@dataclass(frozen=True)
class CoinLinks:
    homepage: List[str] = field(default_factory=list)
    blockchain_site: List[str] = field(default_factory=list)
    subreddit_url: Optional[str] = None
    twitter_screen_name: Optional[str] = None

    @property
    def primary_homepage(self) -> Optional[str]:
        return next((url for url in self.homepage if url), None)

# --- Entities ---

@dataclass(frozen=True)
class CoinSummary:
    """Row of the /coins/markets listing"""
    id: CoinId
    symbol: str
    name: str
    image: str
    current_price: Decimal
    market_cap: int
    market_cap_rank: Optional[int] = None
    price_change_percentage_24h: Optional[Decimal] = None
    total_volume: Optional[int] = None
    high_24h: Optional[Decimal] = None
    low_24h: Optional[Decimal] = None

@dataclass(frozen=True)
class TrendingCoinData:
    price: Optional[Decimal] = None
    price_change_percentage_24h: Dict[str, Decimal] = field(default_factory=dict)

@dataclass(frozen=True)
class TrendingCoin:
    """Unwrapped `item` of the /search/trending response"""
    id: CoinId
    coin_id: int
    name: str
    symbol: str
    thumb: str
    small: str
    large: str
    score: int  # 0-based position among trending coins
    market_cap_rank: Optional[int] = None
    data: Optional[TrendingCoinData] = None

@dataclass(frozen=True)
class MarketData:
    """
    Market block of /coins/{id}.
    Per-currency maps are keyed by lowercase ISO code; a missing key means unknown.
    """
    current_price: Dict[str, Decimal] = field(default_factory=dict)
    market_cap: Dict[str, int] = field(default_factory=dict)
    total_volume: Dict[str, int] = field(default_factory=dict)
    high_24h: Dict[str, Decimal] = field(default_factory=dict)
    low_24h: Dict[str, Decimal] = field(default_factory=dict)
    ath: Dict[str, Decimal] = field(default_factory=dict)
    ath_date: Dict[str, str] = field(default_factory=dict)
    atl: Dict[str, Decimal] = field(default_factory=dict)
    atl_date: Dict[str, str] = field(default_factory=dict)
    price_change_percentage_24h: Optional[Decimal] = None
    price_change_percentage_7d: Optional[Decimal] = None
    price_change_percentage_30d: Optional[Decimal] = None
    circulating_supply: Optional[Decimal] = None
    total_supply: Optional[Decimal] = None
    max_supply: Optional[Decimal] = None  # None means uncapped or unknown

    def in_currency(self, name: str, currency: str = "usd") -> Any:
        """Value of a per-currency field, or None when the currency is absent"""
        values = getattr(self, name)
        if not isinstance(values, dict):
            raise ValueError(f"{name} is not a per-currency field")
        return values.get(currency.lower())

@dataclass(frozen=True)
class CoinDetail:
    """Full /coins/{id} payload"""
    id: CoinId
    symbol: str
    name: str
    image: CoinImage
    description: Optional[str] = None
    market_cap_rank: Optional[int] = None
    market_data: Optional[MarketData] = None
    categories: Tuple[str, ...] = ()
    links: Optional[CoinLinks] = None

# --- Fetch State (tri-state screen value) ---

@dataclass(frozen=True)
class Loading:
    pass

@dataclass(frozen=True)
class Success(Generic[T]):
    data: T

@dataclass(frozen=True)
class Error:
    message: str

FetchState = Union[Loading, Success[T], Error]

# --- Repository Result ---

@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

@dataclass(frozen=True)
class Failure:
    message: str
    error: Optional[Exception] = field(default=None, compare=False)

Result = Union[Ok[T], Failure]

# --- Exceptions ---

class DomainError(Exception):
    """Base domain exception"""

class CoinGeckoError(DomainError):
    """Base for every failure raised by the market client"""

class TransportError(CoinGeckoError):
    """Raised when the API cannot be reached"""

class DecodeError(CoinGeckoError):
    """Raised when a response body does not match the expected schema"""

class ApiError(CoinGeckoError):
    """Raised on a non-2xx HTTP status"""

    def __init__(self, status: int, message: str = "") -> None:
        self.status = status
        detail = f": {message}" if message else ""
        super().__init__(f"CoinGecko API returned HTTP {status}{detail}")

class NotFoundError(ApiError):
    """Raised when a coin detail lookup returns 404"""

    def __init__(self, coin_id: str) -> None:
        self.coin_id = coin_id
        super().__init__(404, f"coin '{coin_id}' not found")

class InvalidArgumentError(CoinGeckoError):
    """Raised when the caller passes an empty or out-of-range parameter"""

class FavoritesStorageError(DomainError):
    """Raised when the favorites set cannot be persisted"""
