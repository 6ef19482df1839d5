import logging
from datetime import datetime, timedelta, timezone
from typing import Tuple

from fastapi import HTTPException, status
from jose import JWTError
from sqlalchemy.orm import Session

from fitandflex.core.config import settings
from fitandflex.core.security import create_access_token, decode_access_token, verify_password
from fitandflex.models.user import User
from fitandflex.repository import user_repository
from fitandflex.schemas.auth import LoginRequest, TokenResponse

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def _invalid_credentials(detail: str = "Invalid credentials") -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )

    def _issue_token(self, user: User) -> TokenResponse:
        claims = {
            "user_id": user.id_user,
            "role": user.role_name,
            "branch_id": user.id_branch,
        }
        token = create_access_token(user.email, claims)
        return self._token_response(user, token)

    def _token_response(self, user: User, token: str) -> TokenResponse:
        return TokenResponse(
            token=token,
            token_type="Bearer",
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            user_id=user.id_user,
            email=user.email,
            name=user.name,
            role=user.role_name,
            branch_id=user.id_branch,
            branch_name=user.branch.name if user.branch is not None else None,
            active=user.active,
        )

    def _get_active_user(self, email: str) -> User:
        user = user_repository.get_user_by_email(self.db, email)
        if user is None:
            raise self._invalid_credentials()
        if not user.active:
            logger.warning("Login attempt for inactive user %s", email)
            raise self._invalid_credentials("User is inactive")
        return user

    def login(self, login_data: LoginRequest) -> TokenResponse:
        user = user_repository.get_user_by_email(self.db, login_data.email)
        if user is None or not verify_password(login_data.password, user.password_hash):
            logger.warning("Failed login for %s", login_data.email)
            raise self._invalid_credentials()
        if not user.active:
            logger.warning("Login attempt for inactive user %s", login_data.email)
            raise self._invalid_credentials("User is inactive")

        logger.info("User %s logged in", user.email)
        return self._issue_token(user)

    def validate(self, token: str) -> TokenResponse:
        try:
            payload = decode_access_token(token)
        except JWTError as exc:
            raise self._invalid_credentials("Invalid token") from exc
        user = self._get_active_user(payload.get("sub", ""))
        return self._token_response(user, token)

    def refresh(self, token: str) -> TokenResponse:
        """Issue a new token for a valid one or one expired within the grace period."""
        try:
            payload = decode_access_token(token, verify_exp=False)
        except JWTError as exc:
            raise self._invalid_credentials("Invalid token") from exc

        expires_at, grace = self._expiry_and_grace(payload)
        if datetime.now(timezone.utc) > expires_at + grace:
            raise self._invalid_credentials("Token expired beyond the refresh window")

        user = self._get_active_user(payload.get("sub", ""))
        logger.info("Token refreshed for %s", user.email)
        return self._issue_token(user)

    @staticmethod
    def _expiry_and_grace(payload: dict) -> Tuple[datetime, timedelta]:
        exp = payload.get("exp")
        if exp is None:
            raise AuthService._invalid_credentials("Token has no expiration")
        return (
            datetime.fromtimestamp(int(exp), tz=timezone.utc),
            timedelta(days=settings.REFRESH_GRACE_DAYS),
        )


__all__ = ["AuthService"]
