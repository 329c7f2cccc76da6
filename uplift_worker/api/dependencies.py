"""
Shared request dependencies
"""

from typing import Optional

from fastapi import Header, HTTPException

from uplift_worker.core.config import settings
from uplift_worker.core.logging import get_logger

logger = get_logger(__name__)


async def verify_cron_secret(authorization: Optional[str] = Header(default=None)) -> None:
    """Require `Authorization: Bearer <CRON_SECRET>` when a secret is configured"""
    secret = settings.security.CRON_SECRET
    if secret and authorization != f"Bearer {secret}":
        logger.warning("Unauthorized cron attempt")
        raise HTTPException(status_code=401, detail="Unauthorized")
