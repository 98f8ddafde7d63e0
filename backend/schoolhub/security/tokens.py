"""JWT de sesión: lleva el token opaco de la tabla tokens y la escuela."""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

ALGORITHM = "HS256"


class InvalidSessionToken(Exception):
    pass


@dataclass(frozen=True)
class SessionClaims:
    user_token: str
    school_id: int


class JwtCodec:
    def __init__(self, secret: str, expires_hours: int = 24):
        self.secret = secret
        self.expires_hours = expires_hours

    def encode(self, user_token: str, school_id: int) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "user_token": user_token,
            "school_id": int(school_id),
            "iat": now,
            "exp": now + timedelta(hours=self.expires_hours),
        }
        return jwt.encode(payload, self.secret, algorithm=ALGORITHM)

    def decode(self, token: str) -> SessionClaims:
        try:
            payload = jwt.decode(token, self.secret, algorithms=[ALGORITHM])
        except jwt.InvalidTokenError as e:
            raise InvalidSessionToken(str(e)) from e
        try:
            return SessionClaims(str(payload["user_token"]), int(payload["school_id"]))
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidSessionToken("Missing claims") from e
