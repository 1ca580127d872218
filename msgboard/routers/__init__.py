"""API routers package."""
from msgboard.routers import board

__all__ = [
    "board",
]
