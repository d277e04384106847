from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from bloodbank.core.config import Settings
from bloodbank.core.exceptions import UnauthorizedError
import bcrypt
import logging

logger = logging.getLogger(__name__)

def hash_password(password: str, rounds: int = 10) -> str:
    """Hash a password using bcrypt with configurable rounds."""
    # bcrypt only looks at the first 72 bytes
    password_bytes = password.encode('utf-8')
    if len(password_bytes) > 72:
        password_bytes = password_bytes[:72]

    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password_bytes, salt).decode('utf-8')

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    try:
        password_bytes = plain_password.encode('utf-8')
        if len(password_bytes) > 72:
            password_bytes = password_bytes[:72]

        return bcrypt.checkpw(password_bytes, hashed_password.encode('utf-8'))
    except ValueError as e:
        logger.error(f"Password verification error: {e}")
        return False

def create_access_token(user_id: str, role: str, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed credential for a user.

    The payload keeps the {"user": {"id", "role"}} shape the frontend decodes.
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))

    to_encode = {
        "user": {"id": str(user_id), "role": role},
        "exp": expire,
        "iat": now,
        "iss": settings.APP_NAME,
        "aud": settings.APP_NAME,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def verify_token(token: str, settings: Settings) -> dict:
    """Verify and decode a credential, returning its {"id", "role"} user claim."""
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            audience=settings.APP_NAME,
            issuer=settings.APP_NAME
        )
    except JWTError as e:
        logger.warning(f"Token verification failed: {e}")
        raise UnauthorizedError("Token is not valid")

    user = payload.get("user")
    if not isinstance(user, dict) or not user.get("id") or not user.get("role"):
        raise UnauthorizedError("Token is not valid")
    return user
