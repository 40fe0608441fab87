"""API routes package."""

from controller.routes.namespace_routes import router as namespace_router
from controller.routes.fsck_routes import router as fsck_router

__all__ = ["namespace_router", "fsck_router"]
