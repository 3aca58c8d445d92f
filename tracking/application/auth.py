"""Shared-password admin gate.

There is one password and no user identity; a successful ``verify`` lets the
caller issue a short-lived signed token that acts as the session flag.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

ADMIN_SUBJECT = "admin"

class AuthSession:
    def __init__(self, password: str, secret: str, algorithm: str = "HS256", ttl_minutes: int = 480):
        self._password = password
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = timedelta(minutes=ttl_minutes)

    def verify(self, password: Optional[str]) -> bool:
        if not password:
            return False
        return secrets.compare_digest(password.encode(), self._password.encode())

    def issue_token(self) -> str:
        now = datetime.now(timezone.utc)
        payload = {"sub": ADMIN_SUBJECT, "iat": now, "exp": now + self._ttl}
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def is_valid(self, token: Optional[str]) -> bool:
        if not token:
            return False
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.PyJWTError:
            return False
        return payload.get("sub") == ADMIN_SUBJECT
