from sports.proxy.core.cache.result_cache import CacheEntry, ResultCache, cache_key
from sports.proxy.core.cache.volatility import DEFAULT_TTLS, Volatility, VolatilityTable

__all__ = [
    "CacheEntry",
    "ResultCache",
    "cache_key",
    "DEFAULT_TTLS",
    "Volatility",
    "VolatilityTable",
]
