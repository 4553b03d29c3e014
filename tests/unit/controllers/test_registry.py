from __future__ import annotations

import pytest

from svc_content.controllers import Controller, ControllerRegistry, call, default_registry, documents_controller
from svc_content.exceptions import OperationNotImplemented


async def _exists(ctx, *, model, name):
    return (model, name)


def test_unknown_models_use_default():
    registry = default_registry()
    assert registry.resolve("pages") is documents_controller
    assert "users" in registry
    assert "pages" not in registry


def test_missing_operation_raises_fatal_error():
    registry = default_registry()
    with pytest.raises(OperationNotImplemented) as exc_info:
        registry.operation("users", "get")
    assert exc_info.value.fatal is True
    assert exc_info.value.model == "users"


def test_frozen_registry_rejects_registration():
    registry = ControllerRegistry(Controller())
    registry.freeze()
    with pytest.raises(RuntimeError):
        registry.register("x", Controller())


@pytest.mark.asyncio
async def test_call_passes_model_and_keywords():
    registry = ControllerRegistry(Controller(), {"tags": Controller(exists=_exists)})
    assert await call(object(), registry, "tags", "exists", name="red") == ("tags", "red")
