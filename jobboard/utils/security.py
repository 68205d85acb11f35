from datetime import datetime, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from jobboard.config import Settings
from jobboard.errors import Unauthenticated

SESSION_TOKEN = "session"
EMAIL_TOKEN = "email"


class PasswordHasher:
    """Argon2 hashing through passlib."""

    def __init__(self, schemes=("argon2",)):
        self.context = CryptContext(schemes=list(schemes), deprecated="auto")

    def hash(self, password: str) -> str:
        return self.context.hash(password)

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """Checks if the typed password matches the saved hash."""
        try:
            return self.context.verify(plain_password, hashed_password)
        except (ValueError, TypeError):
            return False


class TokenService:
    """
    Issues and verifies the two signed token kinds.

    Session tokens carry {id, role} and are signed with JWT_SECRET; email
    verification tokens carry {userId} and are signed with JWT_EMAIL_SECRET.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def _encode(self, claims: dict, secret: str, ttl) -> str:
        to_encode = claims.copy()
        to_encode["exp"] = datetime.now(timezone.utc) + ttl
        return jwt.encode(to_encode, secret, algorithm=self.settings.jwt_algorithm)

    def _decode(self, token: str, secret: str, token_type: str) -> dict:
        try:
            payload = jwt.decode(token, secret, algorithms=[self.settings.jwt_algorithm])
        except JWTError as exc:
            raise Unauthenticated("Invalid token") from exc
        if payload.get("type") != token_type:
            raise Unauthenticated("Invalid token")
        return payload

    def create_session_token(self, user: dict) -> str:
        return self._encode(
            {"id": str(user["_id"]), "role": user["role"], "type": SESSION_TOKEN},
            self.settings.jwt_secret,
            self.settings.session_ttl,
        )

    def decode_session_token(self, token: str) -> dict:
        return self._decode(token, self.settings.jwt_secret, SESSION_TOKEN)

    def create_email_token(self, user_id) -> str:
        return self._encode(
            {"userId": str(user_id), "type": EMAIL_TOKEN},
            self.settings.jwt_email_secret,
            self.settings.email_token_ttl,
        )

    def decode_email_token(self, token: str) -> dict:
        return self._decode(token, self.settings.jwt_email_secret, EMAIL_TOKEN)
