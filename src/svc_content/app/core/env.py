"""Which deployment this process runs as: local, dev, test or prod."""

from __future__ import annotations

import os
import warnings
from enum import StrEnum
from functools import cache
from typing import NamedTuple

# Checked in order; the first one that is set decides.
ENV_VARIABLES = ("APP_ENV", "ENVIRONMENT")


class Env(StrEnum):
    LOCAL = "local"
    DEV = "dev"
    TEST = "test"
    PROD = "prod"

    @classmethod
    def parse(cls, raw: str | None) -> Env | None:
        if not raw:
            return None
        value = raw.strip().lower()
        if value in cls._value2member_map_:
            return cls(value)
        return _ALIASES.get(value)


_ALIASES: dict[str, Env] = {
    "development": Env.DEV,
    "testing": Env.TEST,
    "ci": Env.TEST,
    "preview": Env.TEST,
    "production": Env.PROD,
}


@cache
def get_env() -> Env:
    raw = next((os.environ[name] for name in ENV_VARIABLES if os.environ.get(name)), None)
    env = Env.parse(raw)
    if env is None and raw:
        warnings.warn(f"Unknown environment {raw!r}; running as local.", RuntimeWarning, stacklevel=2)
    return env or Env.LOCAL


class EnvFlags(NamedTuple):
    env: Env
    is_local: bool
    is_dev: bool
    is_test: bool
    is_prod: bool

    @classmethod
    def of(cls, env: Env) -> EnvFlags:
        return cls(env, env is Env.LOCAL, env is Env.DEV, env is Env.TEST, env is Env.PROD)


def get_env_flags(env: Env | None = None) -> EnvFlags:
    return EnvFlags.of(env or get_env())


ENV: Env = get_env()
_, IS_LOCAL, IS_DEV, IS_TEST, IS_PROD = get_env_flags(ENV)


def pick(*, prod, nonprod, dev=None, test=None, local=None):
    """
    Value for the active environment; ``nonprod`` covers any left unset.

    Example:
        log_format = pick(prod="json", nonprod="plain")
    """
    chosen = {Env.PROD: prod, Env.DEV: dev, Env.TEST: test, Env.LOCAL: local}[get_env()]
    return nonprod if chosen is None else chosen
