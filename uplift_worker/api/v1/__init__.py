"""
Version 1 API routers
"""

from .cron import router as cron_router
from .webhooks import router as webhooks_router
from .health import router as health_router

__all__ = ["cron_router", "webhooks_router", "health_router"]
