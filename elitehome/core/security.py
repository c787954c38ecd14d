# elitehome/core/security.py

from datetime import datetime, timedelta
from typing import Optional
from jose import jwt, JWTError
from passlib.context import CryptContext
from pydantic import ValidationError as PydanticValidationError
from elitehome.core.config import settings
from elitehome.models.user import Principal
from elitehome.utils.errors import AuthorizationError

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_principal(token: Optional[str]) -> Principal:
    """Verify a bearer token and return the principal it was issued to."""
    if not token:
        raise AuthorizationError()
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise AuthorizationError("Could not validate credentials")

    user_id = payload.get("sub")
    role = payload.get("role")
    if not user_id or not role:
        raise AuthorizationError("Invalid token")
    try:
        return Principal(user_id=user_id, role=role)
    except PydanticValidationError:
        raise AuthorizationError("Invalid token")
