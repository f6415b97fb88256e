# backend/parkmap/api/deps.py
from typing import Optional

from fastapi import Cookie, HTTPException

from parkmap.services.auth.session import SESSION_COOKIE_NAME, is_authenticated


def require_admin(session: Optional[str] = Cookie(None, alias=SESSION_COOKIE_NAME)) -> None:
    if not is_authenticated(session):
        raise HTTPException(status_code=401, detail="Unauthorized")
