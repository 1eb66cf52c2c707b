from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.dependencies import get_app_settings
from core.errors import AuthException, ForbiddenException
from core.security import TokenService
from core.settings import Settings
from modules.auth.types import Role

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class Principal:
    id: int
    name: str
    email: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_app_settings),
) -> Principal:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthException("Missing token")
    claims = TokenService(settings).decode(credentials.credentials)
    try:
        return Principal(
            id=int(claims["id"]),
            name=claims["name"],
            email=claims["email"],
            role=Role(claims["role"]),
        )
    except (KeyError, ValueError) as exc:
        raise AuthException("Invalid token") from exc


def require_role(*allowed: Role):
    def _dep(principal: Principal = Depends(get_current_user)) -> Principal:
        if principal.role not in allowed:
            raise ForbiddenException()
        return principal

    return _dep


require_admin = require_role(Role.ADMIN)
