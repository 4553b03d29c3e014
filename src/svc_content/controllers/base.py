from __future__ import annotations

from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional

from svc_content.exceptions import OperationNotImplemented

if TYPE_CHECKING:
    from svc_content.api.context import RequestContext
    from svc_content.db.pagination import Page

# Every operation is called as ``op(ctx, **keywords)``:
#   list(ctx, *, model, search, limit, after) -> Page
#   exists(ctx, *, model, name) -> bool
#   get(ctx, *, model, name) -> dict | Response | None
#   put(ctx, *, model, name, value, modified_by, rename=None, move=None) -> bool
#   delete(ctx, *, model, name) -> bool
ListOp = Callable[..., Awaitable["Page"]]
ExistsOp = Callable[..., Awaitable[bool]]
GetOp = Callable[..., Awaitable[Any]]
PutOp = Callable[..., Awaitable[bool]]
DeleteOp = Callable[..., Awaitable[bool]]


@dataclass(frozen=True)
class Controller:
    """Capability set for one model. Unset operations are not supported."""

    list: Optional[ListOp] = None
    exists: Optional[ExistsOp] = None
    get: Optional[GetOp] = None
    put: Optional[PutOp] = None
    delete: Optional[DeleteOp] = None

    @property
    def operations(self) -> set[str]:
        return {f.name for f in fields(self) if getattr(self, f.name) is not None}

    def operation(self, model: str, name: str) -> Callable[..., Awaitable[Any]]:
        op = getattr(self, name, None)
        if op is None:
            raise OperationNotImplemented(model, name)
        return op


class ControllerRegistry:
    """Controllers keyed by model name; unknown models use ``default``."""

    def __init__(self, default: Controller, controllers: Optional[dict[str, Controller]] = None):
        self.default = default
        self._controllers: dict[str, Controller] = dict(controllers or {})
        self._frozen = False

    def register(self, model: str, controller: Controller) -> None:
        if self._frozen:
            raise RuntimeError("Controller registry is frozen; register controllers during startup.")
        self._controllers[model] = controller

    def freeze(self) -> None:
        self._frozen = True

    def resolve(self, model: str) -> Controller:
        return self._controllers.get(model, self.default)

    def operation(self, model: str, name: str) -> Callable[..., Awaitable[Any]]:
        return self.resolve(model).operation(model, name)

    def __contains__(self, model: str) -> bool:
        return model in self._controllers


async def call(ctx: "RequestContext", registry: ControllerRegistry, model: str, operation: str, **kwargs) -> Any:
    """Run ``operation`` of the controller registered for ``model``."""
    return await registry.operation(model, operation)(ctx, model=model, **kwargs)
