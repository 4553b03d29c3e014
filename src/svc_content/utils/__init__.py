"""Small helpers shared across the service."""

from __future__ import annotations

import secrets
import time
import uuid


def now() -> int:
    """Current time in whole seconds since the epoch."""
    return int(time.time())


def verification_code(digits: int = 8) -> str:
    return "".join(str(secrets.randbelow(10)) for _ in range(digits))


def new_key() -> str:
    return str(uuid.uuid4())


__all__ = ["now", "verification_code", "new_key"]
