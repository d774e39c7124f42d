from datetime import timedelta
from uuid import UUID

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from makeeasy import settings
from makeeasy.dates import utcnow

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class InvalidToken(Exception):
    pass


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user_id: UUID, expires_delta: timedelta | None = None) -> str:
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.jwt_expire_minutes)
    expire = utcnow() + expires_delta
    return jwt.encode(
        {"sub": str(user_id), "exp": expire},
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )


def decode_access_token(token: str) -> UUID:
    """Return the user id carried by `token` or raise InvalidToken."""
    try:
        payload = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
    except ExpiredSignatureError:
        raise InvalidToken("Your token has expired. Please log in again.") from None
    except JWTError:
        raise InvalidToken("Invalid token. Please log in again.") from None

    try:
        return UUID(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise InvalidToken("Invalid token. Please log in again.") from None
