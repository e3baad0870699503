from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from app.config import settings
import secrets

# bcrypt is pinned below 4.1 in the project dependencies; passlib 1.7's
# wrap-bug detection fails against newer bcrypt releases.
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__ident="2b",
    bcrypt__rounds=12,
)

SELLER_TOKEN_TYPE = "access"
ADMIN_TOKEN_TYPE = "admin"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def _encode(data: dict, token_type: str, expires_delta: timedelta) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire, "type": token_type})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def _decode(token: str, token_type: str) -> Optional[dict]:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        if payload.get("type") != token_type:
            return None
        return payload
    except JWTError:
        return None


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Seller token; ``sub`` is the seller id."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return _encode(data, SELLER_TOKEN_TYPE, expires_delta)


def create_admin_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Admin token; ``sub`` is the admin id."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ADMIN_TOKEN_EXPIRE_MINUTES)
    return _encode(data, ADMIN_TOKEN_TYPE, expires_delta)


def decode_access_token(token: str) -> Optional[dict]:
    return _decode(token, SELLER_TOKEN_TYPE)


def decode_admin_token(token: str) -> Optional[dict]:
    return _decode(token, ADMIN_TOKEN_TYPE)


def generate_otp() -> str:
    return f"{secrets.randbelow(900000) + 100000}"
