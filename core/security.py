"""Password hashing and signed access tokens."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import ExpiredSignatureError, JWTError, jwt
from pwdlib import PasswordHash

from core.errors import AuthException
from core.settings import Settings

password_hash = PasswordHash.recommended()


def hash_password(raw_password: str) -> str:
    return password_hash.hash(raw_password)


def verify_password(raw_password: str, hashed_password: str) -> bool:
    return password_hash.verify(raw_password, hashed_password)


class TokenService:
    def __init__(self, settings: Settings):
        self.settings = settings

    def issue(self, claims: Dict[str, Any]) -> str:
        expires_at = datetime.now(tz=timezone.utc) + timedelta(minutes=self.settings.access_token_expire_minutes)
        payload = {**claims, "sub": str(claims["id"]), "exp": expires_at}
        return jwt.encode(payload, self.settings.jwt_secret, algorithm=self.settings.jwt_algorithm)

    def decode(self, token: str) -> Dict[str, Any]:
        try:
            return jwt.decode(token, self.settings.jwt_secret, algorithms=[self.settings.jwt_algorithm])
        except ExpiredSignatureError as exc:
            raise AuthException("Token expired") from exc
        except JWTError as exc:
            raise AuthException("Invalid token") from exc
