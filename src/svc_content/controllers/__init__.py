from .base import Controller, ControllerRegistry, call
from .documents import documents_controller
from .users import users_controller


def default_registry() -> ControllerRegistry:
    registry = ControllerRegistry(documents_controller)
    registry.register("users", users_controller)
    return registry


__all__ = [
    "Controller",
    "ControllerRegistry",
    "call",
    "documents_controller",
    "users_controller",
    "default_registry",
]
