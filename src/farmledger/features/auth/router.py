"""API routes for user authentication: token issue, registration, current user."""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from typing import Annotated

from ...core.config import ACCESS_TOKEN_EXPIRE_MINUTES
from . import schemas
from . import security as auth_security
from . import service as auth_service
from .models import User

logger = logging.getLogger(__name__)
router = APIRouter(
    tags=["Authentication"],
    prefix="/auth"
)


@router.post("/token", response_model=schemas.Token)
async def login_for_access_token(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()]
):
    user = await auth_service.get_user_by_username(username=form_data.username)
    if not user or not auth_security.verify_password(form_data.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Inactive user",
        )
    access_token = auth_security.create_access_token(data={"sub": user.username, "role": user.role})
    logger.info(f"Issued access token for {user.username}")
    return schemas.Token(
        access_token=access_token,
        role=user.role,
        expires_in=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


@router.post("/register", response_model=schemas.UserResponse, status_code=status.HTTP_201_CREATED)
async def register_user(user_in: schemas.UserCreate):
    if await auth_service.get_user_by_username(username=user_in.username):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already registered",
        )
    if await auth_service.get_user_by_email(email=user_in.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )
    hashed_password = auth_security.get_password_hash(user_in.password)
    user_data_dict = user_in.model_dump(exclude={"password"})
    try:
        new_user_model = await auth_service.create_user(
            user_in=user_data_dict,
            hashed_password_val=hashed_password
        )
    except Exception as e:
        logger.error(f"Register user failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not create user.",
        )
    return schemas.UserResponse.model_validate(new_user_model)


@router.get("/me", response_model=schemas.UserResponse)
async def read_current_user(
    current_user: Annotated[User, Depends(auth_security.get_current_active_user)]
):
    return schemas.UserResponse.model_validate(current_user)
