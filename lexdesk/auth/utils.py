from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt
from passlib.context import CryptContext

from lexdesk.config import JWT_SECRET, JWT_ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES
from lexdesk.auth.schemas import Identity

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, JWT_SECRET, algorithm=JWT_ALGORITHM)


def create_token_for_user(user) -> str:
    payload = {"sub": user.id, "role": user.role.value}
    if user.client_id:
        payload["client_id"] = user.client_id
    return create_access_token(payload)


def decode_token(token: str) -> Identity:
    """Decode and verify ``token``.

    Raises ``jose.JWTError`` (``ExpiredSignatureError`` for expired tokens)
    and ``KeyError`` when the payload carries no subject.
    """
    payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    user_id = payload.get("sub")
    if not user_id:
        raise KeyError("sub")
    return Identity(user_id=user_id, role=payload.get("role"), client_id=payload.get("client_id"))
