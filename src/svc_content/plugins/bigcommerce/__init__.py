from .client import StoreClient
from .server import (
    STORE_CACHE_KEY,
    add_bigcommerce,
    add_bigcommerce_authentication,
    add_bigcommerce_routes,
    resolve_store_token,
)

__all__ = [
    "StoreClient",
    "STORE_CACHE_KEY",
    "add_bigcommerce",
    "add_bigcommerce_authentication",
    "add_bigcommerce_routes",
    "resolve_store_token",
]
