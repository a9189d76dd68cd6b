from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from matchmaking.config import settings
from matchmaking.utils.errors import Forbidden, Unauthorized

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        # Stored value is not a recognizable hash
        return False


def issue_token(claims: dict, secret: str, ttl: timedelta) -> str:
    now = datetime.now(timezone.utc)
    to_encode = dict(claims)
    to_encode.update({"iat": now, "exp": now + ttl})
    return jwt.encode(to_encode, secret, algorithm=settings.ALGORITHM)


def verify_token(token: str | None, secret: str) -> dict:
    """Decode a bearer token against the secret of the expected principal type."""
    if not token:
        raise Unauthorized("Unauthorized: No token provided")
    try:
        return jwt.decode(token, secret, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError as exc:
        raise Forbidden("Forbidden: Token expired") from exc
    except JWTError as exc:
        raise Forbidden("Forbidden: Invalid token") from exc


def create_user_token(user_id: str) -> str:
    return issue_token(
        {"userId": user_id},
        settings.JWT_SECRET_KEY,
        timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_admin_token(admin_id: str, username: str) -> str:
    return issue_token(
        {"adminId": admin_id, "username": username},
        settings.ADMIN_SECRET_KEY,
        timedelta(minutes=settings.ADMIN_TOKEN_EXPIRE_MINUTES),
    )
