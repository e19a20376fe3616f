"""API routes for user authentication and user management."""
import logging
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.security import OAuth2PasswordRequestForm
from typing import Annotated, Optional

from . import schemas
from . import models
from . import security as auth_security
from . import service as auth_service
from .permissions import USER_CREATE, USER_READ, USER_UPDATE

logger = logging.getLogger(__name__)
router = APIRouter(
    tags=["Authentication"],
    prefix="/auth"
)

users_router = APIRouter(
    tags=["Users"],
    prefix="/users",
    responses={404: {"description": "Not found"}},
)

@router.post("/token", response_model=schemas.Token)
async def login_for_access_token(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()]
):
    # The OAuth2 form calls it "username"; accounts log in with their email
    user = await auth_service.get_user_by_email(email=form_data.username)
    if not user or not auth_security.verify_password(form_data.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Inactive user",
        )
    access_token = auth_security.create_access_token(data={"sub": user.id, "role": user.role})
    logger.info(f"Issued access token for {user.email}")
    return {"access_token": access_token, "token_type": "bearer"}

@router.get("/me", response_model=schemas.UserResponse)
async def read_current_user(
    current_user: Annotated[models.User, Depends(auth_security.get_current_active_user)]
):
    return schemas.UserResponse.model_validate(current_user)


# --- User management ---
@users_router.get(
    "",
    response_model=schemas.PaginatedUserResponse,
    dependencies=[Depends(auth_security.require_permission(USER_READ))],
)
async def list_users(
    role: Optional[schemas.Role] = Query(None, description="Role to filter by"),
    is_active: Optional[bool] = Query(None, description="Account status to filter by"),
    search: Optional[str] = Query(None, min_length=1, description="Matches email, first or last name"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    return await auth_service.list_users(role, is_active, search, limit, offset)


@users_router.post(
    "",
    response_model=schemas.UserResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(auth_security.require_permission(USER_CREATE))],
)
async def create_user(user_in: schemas.UserCreate):
    if await auth_service.get_user_by_email(email=user_in.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )
    hashed_password = auth_security.get_password_hash(user_in.password)
    new_user = await auth_service.create_user(
        user_in=user_in.model_dump(exclude={"password"}),
        hashed_password_val=hashed_password,
    )
    logger.info(f"Created user {new_user.id} with role {new_user.role}")
    return schemas.UserResponse.model_validate(new_user)


@users_router.get(
    "/{user_id}",
    response_model=schemas.UserResponse,
    dependencies=[Depends(auth_security.require_permission(USER_READ))],
)
async def get_user(user_id: str):
    return await auth_service.get_user(user_id)


@users_router.patch(
    "/{user_id}",
    response_model=schemas.UserResponse,
    dependencies=[Depends(auth_security.require_permission(USER_UPDATE))],
)
async def update_user(user_id: str, user_in: schemas.UserUpdate):
    return await auth_service.update_user(user_id, user_in)


@users_router.patch("/{user_id}/status", response_model=schemas.UserResponse)
async def update_user_status(
    user_id: str,
    status_in: schemas.UserStatusUpdate,
    current_user: Annotated[models.User, Depends(auth_security.require_permission(USER_UPDATE))],
):
    return await auth_service.set_user_status(user_id, status_in.is_active, current_user)
