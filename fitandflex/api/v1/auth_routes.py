from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fitandflex.core.security import get_bearer_token
from fitandflex.dependencies import get_db
from fitandflex.schemas.auth import LoginRequest, TokenResponse
from fitandflex.schemas.common import MessageResponse
from fitandflex.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
def login(login_data: LoginRequest, db: Session = Depends(get_db)):
    service = AuthService(db)
    return service.login(login_data)


@router.get("/validate", response_model=TokenResponse)
def validate_token(token: str = Depends(get_bearer_token), db: Session = Depends(get_db)):
    service = AuthService(db)
    return service.validate(token)


@router.post("/refresh", response_model=TokenResponse)
def refresh_token(token: str = Depends(get_bearer_token), db: Session = Depends(get_db)):
    service = AuthService(db)
    return service.refresh(token)


@router.post("/logout", response_model=MessageResponse)
def logout():
    """Tokens are stateless; the client discards its copy."""
    return MessageResponse(success=True, message="Logged out successfully")
