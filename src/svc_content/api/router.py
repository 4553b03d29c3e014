from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

Handler = Callable[[Any], Awaitable[Any]]

WILDCARD = "*"


@dataclass(frozen=True)
class Route:
    method: str
    pattern: str
    handler: Handler
    regex: re.Pattern[str]


@dataclass(frozen=True)
class Match:
    route: Route
    params: dict[str, str]

    @property
    def handler(self) -> Handler:
        return self.route.handler


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Translate ``/api/:model/*`` style patterns into a regex.

    ``:name`` captures one path segment. A trailing ``*`` captures the rest
    of the path, slashes included, under the ``*`` parameter.
    """
    segments = [s for s in pattern.strip("/").split("/") if s]
    parts: list[str] = []
    for i, segment in enumerate(segments):
        if segment == WILDCARD:
            if i != len(segments) - 1:
                raise ValueError(f"Wildcard must be the last segment: {pattern}")
            parts.append("/(?P<_wild>.*)")
        elif segment.startswith(":"):
            name = segment[1:]
            if not name.isidentifier():
                raise ValueError(f"Invalid parameter name '{name}' in {pattern}")
            parts.append(f"/(?P<{name}>[^/]+)")
        else:
            parts.append("/" + re.escape(segment))
    body = "".join(parts)
    if not segments or segments[-1] != WILDCARD:
        body += "/?"
    return re.compile(f"^{body}$")


class Router:
    """Method + path router. The first registered route that matches wins,
    so register specific patterns before general ones."""

    def __init__(self):
        self._routes: list[Route] = []
        self._frozen = False

    @property
    def routes(self) -> tuple[Route, ...]:
        return tuple(self._routes)

    def add(self, method: str, pattern: str, handler: Handler) -> Route:
        if self._frozen:
            raise RuntimeError("Router is frozen; register routes during startup.")
        route = Route(method=method.upper(), pattern=pattern, handler=handler, regex=compile_pattern(pattern))
        self._routes.append(route)
        return route

    def freeze(self) -> None:
        self._frozen = True

    def find(self, method: str, path: str) -> Optional[Match]:
        method = method.upper()
        for route in self._routes:
            if route.method != method:
                continue
            m = route.regex.match(path)
            if m is None:
                continue
            params = {k: v for k, v in m.groupdict().items() if k != "_wild" and v is not None}
            if "_wild" in m.groupdict():
                params[WILDCARD] = m.group("_wild") or ""
            return Match(route=route, params=params)
        return None
