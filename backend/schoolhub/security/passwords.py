import secrets
import string

import bcrypt

ALPHANUMERIC = string.ascii_letters + string.digits


def hash_password(password: str) -> str:
    """Hash bcrypt; bcrypt solo usa los primeros 72 bytes."""
    password_bytes = password.encode("utf-8")[:72]
    return bcrypt.hashpw(password_bytes, bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8")[:72], hashed.encode("utf-8"))
    except ValueError:
        # Hash corrupto o con otro formato
        return False


def generate_password(length=8) -> str:
    return "".join(secrets.choice(ALPHANUMERIC) for _ in range(length))


def generate_session_token(length=32) -> str:
    return "".join(secrets.choice(ALPHANUMERIC) for _ in range(length))
