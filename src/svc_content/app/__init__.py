from .core.env import ENV, IS_DEV, IS_LOCAL, IS_PROD, IS_TEST, Env, get_env, pick
from .core.logging import setup_logging
from .settings import AppSettings, get_app_settings

CURRENT_ENVIRONMENT = ENV

__all__ = [
    "CURRENT_ENVIRONMENT",
    "Env",
    "get_env",
    "pick",
    "IS_LOCAL",
    "IS_DEV",
    "IS_TEST",
    "IS_PROD",
    "setup_logging",
    "AppSettings",
    "get_app_settings",
]
