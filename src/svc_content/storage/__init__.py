from .base import InvalidKeyError, ObjectStorage, StoredObject
from .local import LocalStorage
from .memory import MemoryStorage

__all__ = [
    "ObjectStorage",
    "StoredObject",
    "InvalidKeyError",
    "MemoryStorage",
    "LocalStorage",
]
