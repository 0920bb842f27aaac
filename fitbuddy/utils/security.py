import logging
from datetime import datetime, timedelta, timezone

from jose import jwt, JWTError
from fastapi import HTTPException, status, Depends
from fastapi.security import OAuth2PasswordBearer

from fitbuddy.config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES

logger = logging.getLogger("security")

# Sign-in happens at the hosted auth provider; this API only verifies the
# bearer tokens it issues. The "sub" claim is the opaque user id.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=True)


# ---------- Time Helpers ----------
def _utcnow() -> datetime:
    """Return current UTC time with timezone."""
    return datetime.now(timezone.utc)


# ---------- Token Management ----------
def create_access_token(data: dict, expires_minutes: int = ACCESS_TOKEN_EXPIRE_MINUTES) -> str:
    """Create a JWT access token (used by tooling and tests)."""
    to_encode = data.copy()
    expire = _utcnow() + timedelta(minutes=expires_minutes)
    to_encode.update({"exp": expire, "iat": _utcnow()})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Decode a JWT access token. Raises 401 if invalid/expired."""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM], options={"verify_aud": False})
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
                            detail="Invalid or expired access token")


# ---------- FastAPI Dependencies ----------
def get_current_user_id(token: str = Depends(oauth2_scheme)) -> str:
    """Extract the authenticated user's id from an access token."""
    payload = decode_access_token(token)
    user_id = payload.get("sub")
    if not user_id:
        logger.warning("Access token without a subject")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
                            detail="Invalid token payload")
    return str(user_id)
