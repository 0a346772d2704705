"""
Unit tests for domain projections
"""
import pytest

from coinwatch.domain import MarketData, filter_coins, select_favorites

from conftest import coin

BTC = coin("bitcoin", "Bitcoin", "btc")
ETH = coin("ethereum", "Ethereum", "eth")
WETH = coin("weth", "Wrapped Ether", "weth")


def test_filter_matches_symbol_or_name():
    coins = [BTC, ETH, WETH]

    assert filter_coins(coins, "ETH") == [ETH, WETH]
    assert filter_coins(coins, "wrapped") == [WETH]
    assert filter_coins(coins, "") == coins
    assert filter_coins(coins, "zzz") == []


def test_filter_returns_a_new_list():
    coins = [BTC]
    assert filter_coins(coins, "") is not coins


def test_select_favorites_keeps_listing_order():
    favorites = {"weth", "bitcoin", "dogecoin"}

    assert select_favorites([BTC, ETH, WETH], favorites) == [BTC, WETH]
    assert select_favorites([], favorites) == []


def test_market_data_rejects_scalar_field_lookup():
    with pytest.raises(ValueError):
        MarketData().in_currency("max_supply")
