"""Password hashing and bearer token helpers."""

import secrets
import string
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from tracker.config import get_settings

pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
    pbkdf2_sha256__rounds=310_000,
)

JWT_ALGORITHM = "HS256"
GENERATED_PASSWORD_LENGTH = 12
_PASSWORD_CLASSES = (
    string.ascii_lowercase,
    string.ascii_uppercase,
    string.digits,
    "!#$%&*+-=?@_",
)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(subject: str, *, expires_delta: timedelta | None = None) -> str:
    """Return a signed JWT whose ``sub`` claim is the user's email."""

    settings = get_settings()
    issued_at = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims = {"sub": subject, "iat": issued_at, "exp": issued_at + lifetime}
    return jwt.encode(claims, settings.secret_key, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Return the token claims, raising ``ValueError`` when it is invalid or expired."""

    try:
        return jwt.decode(token, get_settings().secret_key, algorithms=[JWT_ALGORITHM])
    except JWTError as exc:
        raise ValueError("Could not validate credentials") from exc


def generate_secure_password(length: int = GENERATED_PASSWORD_LENGTH) -> str:
    """Generate a password with at least one character of every class."""

    if length < len(_PASSWORD_CLASSES):
        raise ValueError("Password length is too short")

    alphabet = "".join(_PASSWORD_CLASSES)
    characters = [secrets.choice(group) for group in _PASSWORD_CLASSES]
    characters += [secrets.choice(alphabet) for _ in range(length - len(characters))]
    secrets.SystemRandom().shuffle(characters)
    return "".join(characters)
