from coindash.config import get_settings
from coindash.providers.base import CoinSearchProvider, MarketDataProvider
from coindash.providers.coinbase import CoinbaseProvider
from coindash.providers.coingecko import CoinGeckoSearch


def get_provider() -> MarketDataProvider:
    """
    Provider loader / factory.

    This is the single place that knows about concrete providers.
    """
    settings = get_settings()
    return CoinbaseProvider(timeout_s=settings.http_timeout_seconds)


def get_search_provider() -> CoinSearchProvider:
    settings = get_settings()
    return CoinGeckoSearch(timeout_s=settings.http_timeout_seconds)
