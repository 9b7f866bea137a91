from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from errors import AuthenticationFailed

JWT_ALGO = "HS256"
TOKEN_EXPIRE_MINUTES = 15
BCRYPT_ROUNDS = 12

# bcrypt only looks at the first 72 bytes of its input
_BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(password), hashed.encode("utf-8"))
    except ValueError:
        # stored value is not a bcrypt hash
        return False


def create_token(user_id: str, secret: str, expires_minutes: int = TOKEN_EXPIRE_MINUTES) -> str:
    exp = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    claims = {"authorized": True, "user_id": user_id, "exp": exp}
    return jwt.encode(claims, secret, algorithm=JWT_ALGO)


def decode_token(token: str, secret: str) -> dict:
    try:
        return jwt.decode(token, secret, algorithms=[JWT_ALGO])
    except jwt.ExpiredSignatureError:
        raise AuthenticationFailed("Token expired")
    except jwt.InvalidTokenError:
        raise AuthenticationFailed("Unable to parse token")
