"""
API routers package.
"""

from equiptrack.routers import (
    health,
    equipment,
    movements,
    uploads,
)

__all__ = [
    "health",
    "equipment",
    "movements",
    "uploads",
]
