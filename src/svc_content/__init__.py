from . import api, app

# Base exception
from .exceptions import ContentError

__all__ = [
    # Modules
    "app",
    "api",
    # Base exception
    "ContentError",
]
