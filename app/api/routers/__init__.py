"""
app/api/routers package marker.
"""

from app.api.routers.submission import router as submission_router

__all__ = [
    "submission_router",
]
