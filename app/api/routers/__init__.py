"""
app/api/routers package marker.
"""

from app.api.routers.readings import router as readings_router

__all__ = [
    "readings_router",
]
