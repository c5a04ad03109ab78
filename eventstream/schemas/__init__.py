"""Schema exports."""

from .connections import ConnectionStateResponse

__all__ = [
    "ConnectionStateResponse",
]
