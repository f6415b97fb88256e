# backend/parkmap/api/routers/auth.py
import logging
from typing import Optional

from fastapi import APIRouter, Cookie, HTTPException, Response
from pydantic import BaseModel

from parkmap.services.auth.session import (
    SESSION_COOKIE_NAME,
    SESSION_MAX_AGE,
    create_session_token,
    is_authenticated,
    verify_credentials,
)

logger = logging.getLogger(__name__)
router = APIRouter()


class LoginIn(BaseModel):
    username: str
    password: str


@router.post("/login")
def login(payload: LoginIn, response: Response):
    if not verify_credentials(payload.username, payload.password):
        logger.warning("failed admin login for %r", payload.username)
        raise HTTPException(status_code=401, detail="Invalid credentials")
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=create_session_token(),
        max_age=SESSION_MAX_AGE,
        path="/",
        httponly=True,
        secure=False,
        samesite="lax",
    )
    return {"ok": True}


@router.post("/logout")
def logout(response: Response):
    response.delete_cookie(key=SESSION_COOKIE_NAME, path="/")
    return {"ok": True}


@router.get("/me")
def me(session: Optional[str] = Cookie(None, alias=SESSION_COOKIE_NAME)):
    return {"authenticated": is_authenticated(session)}
