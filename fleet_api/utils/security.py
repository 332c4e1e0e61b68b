from datetime import datetime, timedelta, timezone

from jose import JWTError, ExpiredSignatureError, jwt

from fleet_api.config import settings
from fleet_api.utils.exceptions import TokenExpiredException, UnauthorizedException


# ─── JWT ──────────────────────────────────────────────────────────────────────
# Tokens are issued by the authentication service; this module only needs to
# verify them. create_access_token mirrors the issuer's payload layout.
def create_access_token(user_id: int, role: str, expires_minutes: int | None = None) -> str:
    """
    Create a short-lived JWT access token.
    Payload: sub (user_id), role, type, exp
    """
    minutes = expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    payload = {
        "sub": str(user_id),
        "role": role,
        "type": "access",
        "exp": expire,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_access_token(token: str) -> dict:
    """
    Decode and validate a JWT access token.
    Raises 401 if invalid, 401 (TOKEN_EXPIRED) if expired.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError:
        raise TokenExpiredException()
    except JWTError:
        raise UnauthorizedException("Invalid or malformed token")
    if payload.get("type") != "access":
        raise UnauthorizedException("Invalid token type")
    return payload
