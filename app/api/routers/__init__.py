"""
app/api/routers package marker.
"""

from app.api.routers.auth_router import router as auth_router
from app.api.routers.tags_router import router as tags_router
from app.api.routers.targets_router import router as targets_router
from app.api.routers.upload_router import router as upload_router

__all__ = [
    "auth_router",
    "tags_router",
    "targets_router",
    "upload_router",
]
