from .base import BaseSchema, GenericManager, JSONType

__all__ = [
    "BaseSchema",
    "GenericManager",
    "JSONType",
]
