from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from inventory_api.api.errors import unwrap
from inventory_api.database import get_db
from inventory_api.services.user_service import UserService
from inventory_api.schemas.auth import UserRegister, UserLogin, AuthResponse
from inventory_api.schemas.error import ErrorResponse
from inventory_api.utils.security import PasswordHasher, get_password_hasher

router = APIRouter(prefix="/auth", tags=["Auth"])


def get_user_service(
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> UserService:
    return UserService(db, hasher)


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a user",
    responses={409: {"model": ErrorResponse}},
)
def register(
    registration: UserRegister,
    service: UserService = Depends(get_user_service)
):
    """Register a new user."""
    user = unwrap(service.register(registration))
    return AuthResponse(login=user.username)


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Check user credentials",
    responses={400: {"model": ErrorResponse}},
)
def login(
    credentials: UserLogin,
    service: UserService = Depends(get_user_service)
):
    """Verify a username and password."""
    user = unwrap(service.authenticate(credentials))
    return AuthResponse(login=user.username)
