from __future__ import annotations

import logging
import secrets

from fastapi import Depends, HTTPException
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from database_locks.core.config import get_settings


logger = logging.getLogger(__name__)

ADMIN_REALM = "database-locks"

lock_admin_basic = HTTPBasic(realm=ADMIN_REALM, auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=detail,
        headers={"WWW-Authenticate": f'Basic realm="{ADMIN_REALM}"'},
    )


def require_lock_admin(credentials: HTTPBasicCredentials | None = Depends(lock_admin_basic)) -> str:
    """Username of the authenticated lock admin; every admin API route depends on it."""
    if credentials is None:
        raise _unauthorized("Lock admin credentials required")

    settings = get_settings()
    valid_user = secrets.compare_digest(credentials.username.encode(), settings.lock_admin_username.encode())
    valid_pass = secrets.compare_digest(credentials.password.encode(), settings.lock_admin_password.encode())
    if not (valid_user and valid_pass):
        logger.warning("Rejected lock admin login for %r", credentials.username)
        raise _unauthorized("Invalid lock admin credentials")
    return credentials.username
