"""
Infrastructure Layer: CoinGecko JSON -> Domain mapping
Any schema mismatch surfaces as DecodeError.
"""
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional

from coinwatch.domain import (
    CoinDetail,
    CoinId,
    CoinImage,
    CoinLinks,
    CoinSummary,
    DecodeError,
    MarketData,
    TrendingCoin,
    TrendingCoinData,
)

def _decimal(value: Any) -> Decimal:
    if isinstance(value, bool) or value is None:
        raise TypeError(f"expected a number, got {value!r}")
    return Decimal(str(value))

def _opt_decimal(value: Any) -> Optional[Decimal]:
    return None if value is None else _decimal(value)

def _int(value: Any) -> int:
    # Volumes occasionally arrive as floats
    return int(_decimal(value))

def _opt_int(value: Any) -> Optional[int]:
    return None if value is None else _int(value)

def _decimal_or_zero(value: Any) -> Decimal:
    # Illiquid or delisted coins arrive with null price / market cap
    return Decimal(0) if value is None else _decimal(value)

def _int_or_zero(value: Any) -> int:
    return 0 if value is None else _int(value)

def _str(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"expected a string, got {value!r}")
    return value

def _currency_map(raw: Any, convert: Any) -> Dict[str, Any]:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise TypeError(f"expected an object, got {raw!r}")
    return {str(k).lower(): convert(v) for k, v in raw.items() if v is not None}

def _object(raw: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(raw, Mapping):
        raise DecodeError(f"{what}: expected a JSON object, got {type(raw).__name__}")
    return raw

def _list(raw: Any, what: str) -> List[Any]:
    if not isinstance(raw, list):
        raise DecodeError(f"{what}: expected a JSON array, got {type(raw).__name__}")
    return raw


def coin_summary_from_json(raw: Any) -> CoinSummary:
    item = _object(raw, "coin")
    try:
        return CoinSummary(
            id=CoinId(_str(item["id"])),
            symbol=_str(item["symbol"]),
            name=_str(item["name"]),
            image=_str(item["image"]),
            current_price=_decimal_or_zero(item["current_price"]),
            market_cap=_int_or_zero(item["market_cap"]),
            market_cap_rank=_opt_int(item.get("market_cap_rank")),
            price_change_percentage_24h=_opt_decimal(item.get("price_change_percentage_24h")),
            total_volume=_opt_int(item.get("total_volume")),
            high_24h=_opt_decimal(item.get("high_24h")),
            low_24h=_opt_decimal(item.get("low_24h")),
        )
    except (KeyError, TypeError, ValueError, InvalidOperation) as e:
        raise DecodeError(f"invalid market entry {item.get('id')!r}: {e!r}") from e

def coin_summaries_from_json(raw: Any) -> List[CoinSummary]:
    return [coin_summary_from_json(item) for item in _list(raw, "coins/markets")]


def trending_coin_from_json(raw: Any) -> TrendingCoin:
    item = _object(raw, "trending item")
    try:
        data = None
        raw_data = item.get("data")
        if raw_data is not None:
            raw_data = _object(raw_data, "trending data")
            data = TrendingCoinData(
                price=_opt_decimal(raw_data.get("price")),
                price_change_percentage_24h=_currency_map(
                    raw_data.get("price_change_percentage_24h"), _decimal
                ),
            )
        return TrendingCoin(
            id=CoinId(_str(item["id"])),
            coin_id=_int(item["coin_id"]),
            name=_str(item["name"]),
            symbol=_str(item["symbol"]),
            thumb=_str(item["thumb"]),
            small=_str(item["small"]),
            large=_str(item["large"]),
            score=_int(item["score"]),
            market_cap_rank=_opt_int(item.get("market_cap_rank")),
            data=data,
        )
    except (KeyError, TypeError, ValueError, InvalidOperation) as e:
        raise DecodeError(f"invalid trending entry {item.get('id')!r}: {e!r}") from e

def trending_coins_from_json(raw: Any) -> List[TrendingCoin]:
    """Unwraps {"coins": [{"item": {...}}]} keeping upstream order"""
    body = _object(raw, "search/trending")
    coins = []
    for wrapper in _list(body.get("coins"), "search/trending coins"):
        wrapper = _object(wrapper, "trending wrapper")
        if "item" not in wrapper:
            raise DecodeError("trending wrapper without 'item'")
        coins.append(trending_coin_from_json(wrapper["item"]))
    return coins


def _market_data_from_json(raw: Mapping[str, Any]) -> MarketData:
    return MarketData(
        current_price=_currency_map(raw.get("current_price"), _decimal),
        market_cap=_currency_map(raw.get("market_cap"), _int),
        total_volume=_currency_map(raw.get("total_volume"), _int),
        high_24h=_currency_map(raw.get("high_24h"), _decimal),
        low_24h=_currency_map(raw.get("low_24h"), _decimal),
        ath=_currency_map(raw.get("ath"), _decimal),
        ath_date=_currency_map(raw.get("ath_date"), _str),
        atl=_currency_map(raw.get("atl"), _decimal),
        atl_date=_currency_map(raw.get("atl_date"), _str),
        price_change_percentage_24h=_opt_decimal(raw.get("price_change_percentage_24h")),
        price_change_percentage_7d=_opt_decimal(raw.get("price_change_percentage_7d")),
        price_change_percentage_30d=_opt_decimal(raw.get("price_change_percentage_30d")),
        circulating_supply=_opt_decimal(raw.get("circulating_supply")),
        total_supply=_opt_decimal(raw.get("total_supply")),
        max_supply=_opt_decimal(raw.get("max_supply")),
    )

def _links_from_json(raw: Mapping[str, Any]) -> CoinLinks:
    return CoinLinks(
        homepage=[url for url in raw.get("homepage") or [] if url],
        blockchain_site=[url for url in raw.get("blockchain_site") or [] if url],
        subreddit_url=raw.get("subreddit_url") or None,
        twitter_screen_name=raw.get("twitter_screen_name") or None,
    )

def coin_detail_from_json(raw: Any) -> CoinDetail:
    body = _object(raw, "coins/{id}")
    try:
        image = _object(body["image"], "image")
        description = (body.get("description") or {}).get("en") or None
        market_data = body.get("market_data")
        links = body.get("links")
        return CoinDetail(
            id=CoinId(_str(body["id"])),
            symbol=_str(body["symbol"]),
            name=_str(body["name"]),
            image=CoinImage(
                thumb=_str(image["thumb"]),
                small=_str(image["small"]),
                large=_str(image["large"]),
            ),
            description=description,
            market_cap_rank=_opt_int(body.get("market_cap_rank")),
            market_data=None if market_data is None else _market_data_from_json(
                _object(market_data, "market_data")
            ),
            categories=tuple(c for c in body.get("categories") or [] if c),
            links=None if links is None else _links_from_json(_object(links, "links")),
        )
    except (KeyError, TypeError, ValueError, AttributeError, InvalidOperation) as e:
        raise DecodeError(f"invalid coin detail {body.get('id')!r}: {e!r}") from e
