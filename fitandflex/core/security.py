from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from fitandflex.core.config import settings
from fitandflex.core.permissions import (
    Action,
    Resource,
    RoleName,
    is_admin,
    is_authorized,
    parse_role,
)

bearer_scheme = HTTPBearer(auto_error=False)
_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


@dataclass(frozen=True)
class Principal:
    """Caller identity decoded from the bearer token."""

    user_id: int
    email: str
    role: Optional[RoleName]
    branch_id: Optional[int]

    @property
    def is_super_admin(self) -> bool:
        return self.role == RoleName.SUPER_ADMIN

    @property
    def is_admin(self) -> bool:
        return is_admin(self.role)


def hash_password(password: str) -> str:
    return _pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return _pwd_context.verify(password, password_hash)


def create_access_token(
    subject: str,
    claims: Optional[Dict[str, Any]] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    to_encode: Dict[str, Any] = dict(claims or {})
    issued_at = datetime.now(timezone.utc)
    expire = issued_at + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"sub": subject, "iat": issued_at, "exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str, *, verify_exp: bool = True) -> Dict[str, Any]:
    return jwt.decode(
        token,
        settings.SECRET_KEY,
        algorithms=[settings.ALGORITHM],
        options={"verify_exp": verify_exp},
    )


def _credentials_exception(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    if credentials is None or not credentials.scheme or credentials.scheme.lower() != "bearer":
        raise _credentials_exception("Not authenticated")
    return credentials.credentials


def get_current_user(token: str = Depends(get_bearer_token)) -> Principal:
    """Validate the bearer token and return the caller.

    Raises an HTTP 401 error when the token is missing, expired or malformed.
    """

    try:
        payload = decode_access_token(token)
    except JWTError as exc:
        raise _credentials_exception() from exc

    email = payload.get("sub")
    user_id = payload.get("user_id")
    if email is None or user_id is None:
        raise _credentials_exception()

    branch_id = payload.get("branch_id")
    return Principal(
        user_id=int(user_id),
        email=email,
        role=parse_role(payload.get("role")),
        branch_id=int(branch_id) if branch_id is not None else None,
    )


def require_permission(resource: Resource, action: Action) -> Callable[..., Principal]:
    """Build a dependency that lets the request through only for allowed roles."""

    def dependency(principal: Principal = Depends(get_current_user)) -> Principal:
        if not is_authorized(principal.role, resource, action):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role not allowed to {action.value} {resource.value}",
            )
        return principal

    return dependency


def ensure_self_or_admin(principal: Principal, user_id: Optional[int]) -> None:
    """Plain members may only act on their own records."""
    if principal.is_admin:
        return
    if user_id is None or principal.user_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only access your own records",
        )


def ensure_branch_access(principal: Principal, branch_id: Optional[int]) -> None:
    """Branch admins are confined to the branch carried in their token."""
    if principal.is_super_admin or principal.role != RoleName.BRANCH_ADMIN:
        return
    if branch_id is not None and principal.branch_id != branch_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access to another branch is not allowed",
        )


__all__ = [
    "Principal",
    "bearer_scheme",
    "create_access_token",
    "decode_access_token",
    "ensure_branch_access",
    "ensure_self_or_admin",
    "get_bearer_token",
    "get_current_user",
    "hash_password",
    "require_permission",
    "verify_password",
]
