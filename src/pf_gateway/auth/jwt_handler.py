"""JWT access token creation and verification.

Identity is owned by an external provider; this service only needs the
opaque owner id carried in the ``sub`` claim. HS256 with a shared
JWT_SECRET, no revocation: a token is valid until it expires.
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from config.settings import settings
from src.pf_common.errors import InvalidCredentialsError

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"
_ACCESS_EXPIRE = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
# Width of the user_id columns the subject is stored in
MAX_SUBJECT_LENGTH = 64


def create_access_token(user_id: str, expires_in: timedelta | None = None) -> str:
    """Issue an access token for user_id (default lifetime: JWT_EXPIRE_MINUTES)."""
    now = datetime.now(UTC)
    payload = {
        "sub": user_id,
        "type": "access",
        "iat": now,
        "exp": now + (expires_in if expires_in is not None else _ACCESS_EXPIRE),
    }
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=_ALGORITHM))


def decode_token(token: str) -> dict[str, str]:
    """Decode and validate an access token.

    Raises:
        InvalidCredentialsError: bad signature, expired, wrong token type, or a
            subject that is missing or wider than MAX_SUBJECT_LENGTH.
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise InvalidCredentialsError() from None

    subject = payload.get("sub")
    if payload.get("type") != "access" or not isinstance(subject, str):
        raise InvalidCredentialsError()
    if not 0 < len(subject) <= MAX_SUBJECT_LENGTH:
        raise InvalidCredentialsError()
    return payload
