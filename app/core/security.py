from datetime import datetime, timedelta
from typing import Optional, Dict, Any
from jose import ExpiredSignatureError, JWTError, jwt
import bcrypt

from app.config import settings
from app.core.exceptions import AuthenticationError


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password"""
    # Bcrypt has a 72 byte limit - truncate password if necessary
    password_bytes = plain_password.encode('utf-8')[:72]
    return bcrypt.checkpw(password_bytes, hashed_password.encode('utf-8'))


def get_password_hash(password: str) -> str:
    """Hash password with configurable rounds (BCRYPT_ROUNDS in .env)"""
    password_bytes = password.encode('utf-8')[:72]
    hashed = bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS))
    return hashed.decode('utf-8')


def access_token_ttl_seconds() -> int:
    return settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60


def create_access_token(user_id: int, is_admin: bool, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token carrying the subject id and the is_admin claim"""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {
        "sub": str(user_id),
        "is_admin": bool(is_admin),
        "exp": datetime.utcnow() + expires_delta,
        "type": "access",
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and validate a JWT access token"""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError:
        raise AuthenticationError("Token has expired.")
    except JWTError:
        raise AuthenticationError("Could not validate credentials.")

    if payload.get("type") != "access" or not str(payload.get("sub", "")).isdigit():
        raise AuthenticationError("Invalid token.")

    return payload
