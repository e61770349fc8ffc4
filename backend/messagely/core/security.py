from datetime import datetime, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from messagely.core.config import settings
from messagely.core.errors import ErrorKind, ServiceError


class PasswordHasher:
    """
    One-way hashing for passwords and reset codes.

    bcrypt generates a salt per hash and embeds it in the output, so the same
    secret produces a different hash every time. The work factor is fixed at
    construction.
    """

    def __init__(self, work_factor: int):
        # 'deprecated="auto"' lets passlib flag hashes from older schemes
        self._context = CryptContext(
            schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=work_factor
        )

    def hash(self, secret: str) -> str:
        return self._context.hash(secret)

    def verify(self, secret: str, hashed: Optional[str]) -> bool:
        """Constant-time check of secret against hashed; False when there is no hash"""
        # A missing hash short-circuits to False; callers only ever see a bool
        if not hashed:
            return False
        try:
            return self._context.verify(secret, hashed)
        except (ValueError, TypeError):
            # Malformed stored hash - treat as a non-match
            return False


class SessionIssuer:
    """
    Signs and checks bearer tokens asserting a username.

    Tokens carry {username, iat} and no expiry; there is no server-side
    session store and no revocation list. The key is injected once and never
    rotated within the process lifetime.
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256"):
        self._secret_key = secret_key
        self._algorithm = algorithm

    def issue(self, username: str) -> str:
        claims = {
            "username": username,
            "iat": int(datetime.now(timezone.utc).timestamp()),
        }
        return jwt.encode(claims, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: str) -> dict:
        """Return {"username": ...} for a valid token, else raise INVALID_TOKEN"""
        try:
            payload = jwt.decode(token, self._secret_key,
                                 algorithms=[self._algorithm])
        except JWTError as e:
            raise ServiceError(ErrorKind.INVALID_TOKEN, "Could not validate credentials") from e

        username = payload.get("username")
        if not isinstance(username, str) or not username:
            raise ServiceError(ErrorKind.INVALID_TOKEN, "Could not validate credentials")
        return {"username": username}


# Process-wide instances built from startup configuration
password_hasher = PasswordHasher(settings.BCRYPT_WORK_FACTOR)
session_issuer = SessionIssuer(settings.SECRET_KEY, settings.ALGORITHM)
