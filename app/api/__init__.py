from app.api.health import router as health_router
from app.api.licenses import router as licenses_router

__all__ = ["health_router", "licenses_router"]
