import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import JWTError, jwt

from tasktracker.core.config import settings
from tasktracker.core.errors import Internal
from tasktracker.models.role import Role

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
MAX_PASSWORD_BYTES = 72  # limite de bcrypt


class TokenError(Exception):
    """Token refusé par verify_token"""


class MalformedToken(TokenError):
    pass


class InvalidSignature(TokenError):
    pass


class TokenExpired(TokenError):
    pass


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    role: Role


def _now(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def create_access_token(user_id: int, role: Role, now: Optional[datetime] = None) -> str:
    #crée un token d'accès JWT valable JWT_EXPIRE_MIN minutes (1h par défaut)
    issued_at = _now(now)
    expires_at = issued_at + timedelta(minutes=settings.JWT_EXPIRE_MIN)
    payload = {
        "userId": user_id,
        "role": Role(role).value,
        "iat": int(issued_at.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=ALGORITHM)


def verify_token(token: str, now: Optional[datetime] = None) -> TokenClaims:
    """Vérifie la signature et l'expiration, retourne les deux claims.

    L'expiration est comparée à `now` (horloge injectable), jose ne la vérifie pas.
    """
    try:
        jwt.get_unverified_claims(token)
    except JWTError as e:
        raise MalformedToken(str(e)) from e

    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[ALGORITHM],
            options={"verify_exp": False},
        )
    except JWTError as e:
        raise InvalidSignature(str(e)) from e

    user_id = payload.get("userId")
    expires_at = payload.get("exp")
    if isinstance(user_id, bool) or not isinstance(user_id, int):
        raise MalformedToken("userId claim missing or not an integer")
    if isinstance(expires_at, bool) or not isinstance(expires_at, (int, float)):
        raise MalformedToken("exp claim missing")
    try:
        role = Role(payload.get("role"))
    except ValueError as e:
        raise MalformedToken("unknown role claim") from e

    if _now(now).timestamp() >= expires_at:
        raise TokenExpired("token expired")

    return TokenClaims(user_id=user_id, role=role)


def hash_password(password: str) -> str:
    try:
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()
    except ValueError as e:
        logger.error(f"Password hashing failed: {e}")
        raise Internal() from e


def verify_password(password: str, password_hash: str) -> bool:
    if len(password.encode()) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError as e:
        # hash corrompu en base
        logger.error(f"Password verification failed: {e}")
        raise Internal() from e
