"""HTTP routers."""
from .admin import router as admin_router
from .auth import router as auth_router
from .search import router as search_router
from .songs import router as songs_router
from .streaming import router as streaming_router

__all__ = ["admin_router", "auth_router", "search_router", "songs_router", "streaming_router"]
