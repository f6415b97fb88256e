# backend/parkmap/services/auth/session.py
"""Admin session cookie helpers.

There is a single administrator configured through the environment. The
session cookie carries a signed random token; a valid signature younger than
``SESSION_MAX_AGE`` means the request is authenticated.
"""
import secrets
from typing import Optional

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from parkmap import settings

SESSION_COOKIE_NAME = "admin_session"
SESSION_MAX_AGE = 60 * 60 * 24 * 7  # 7 days

serializer = URLSafeTimedSerializer(settings.SESSION_SECRET_KEY, salt="parkmap-admin")


def verify_credentials(username: str, password: str) -> bool:
    if not settings.ADMIN_USERNAME or not settings.ADMIN_PASSWORD:
        return False
    user_ok = secrets.compare_digest(username.encode(), settings.ADMIN_USERNAME.encode())
    pass_ok = secrets.compare_digest(password.encode(), settings.ADMIN_PASSWORD.encode())
    return user_ok and pass_ok


def create_session_token() -> str:
    return serializer.dumps(secrets.token_urlsafe(16))


def is_authenticated(session_cookie: Optional[str]) -> bool:
    if not session_cookie:
        return False
    try:
        serializer.loads(session_cookie, max_age=SESSION_MAX_AGE)
    except (BadSignature, SignatureExpired):
        return False
    return True
