"""
auth.py - Admin API key check.

Seeding and manual balance adjustments are administrative. When an admin
key is configured those routes require a matching X-API-Key header; with no
key configured they stay open, which is how the mini app backend has always
run in development.
"""

import hmac
import logging

from fastapi import HTTPException

logger = logging.getLogger("auth")


class AuthService:
    """Compares X-API-Key headers against the configured admin key."""

    def __init__(self, admin_key: str = ""):
        self._admin_key = admin_key
        if not admin_key:
            logger.warning("No admin key configured; admin endpoints are open")

    @property
    def enabled(self) -> bool:
        return bool(self._admin_key)

    def is_admin(self, x_api_key: str) -> bool:
        if not self.enabled:
            return True
        if not x_api_key:
            return False
        return hmac.compare_digest(x_api_key.encode(), self._admin_key.encode())

    def require_admin(self, x_api_key: str):
        if not self.is_admin(x_api_key):
            logger.warning("Rejected admin request with %s API key", "invalid" if x_api_key else "missing")
            raise HTTPException(status_code=403, detail="Admin access required")
