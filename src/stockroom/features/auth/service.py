"""Business logic for authentication and user management."""
import logging
from typing import Optional

from fastapi import HTTPException, status
from tortoise.expressions import Q

from . import models
from .schemas import PaginatedUserResponse, UserResponse, UserUpdate

logger = logging.getLogger(__name__)


async def get_user_by_email(email: str) -> Optional[models.User]:
    """Retrieves a user by their email address.

    Args:
        email: The email address of the user to retrieve.

    Returns:
        The User object if found, otherwise None.
    """
    return await models.User.get_or_none(email=email)


async def get_user_by_id(user_id: str) -> Optional[models.User]:
    return await models.User.get_or_none(id=user_id)


async def create_user(user_in: dict, hashed_password_val: str) -> models.User:
    """Creates a new user in the database.

    Args:
        user_in: A dictionary containing the user data (excluding password).
        hashed_password_val: The hashed password for the new user.

    Returns:
        The newly created User object.
    """
    new_user = await models.User.create(
        **user_in,
        hashed_password=hashed_password_val
    )
    return new_user


async def _get_user_or_404(user_id: str) -> models.User:
    user = await get_user_by_id(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


async def list_users(
    role: Optional[str] = None,
    is_active: Optional[bool] = None,
    search: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
) -> PaginatedUserResponse:
    """
    Lists users, optionally filtered.

    Args:
        role: Only users holding this role.
        is_active: Only active (or only inactive) accounts.
        search: Case-insensitive match against email, first and last name.
        limit: Page size.
        offset: Number of users to skip.
    """
    query = models.User.all()
    if role:
        query = query.filter(role=role)
    if is_active is not None:
        query = query.filter(is_active=is_active)
    if search:
        query = query.filter(
            Q(email__icontains=search) | Q(first_name__icontains=search) | Q(last_name__icontains=search)
        )

    total = await query.count()
    users = await query.order_by("last_name", "first_name").offset(offset).limit(limit)
    return PaginatedUserResponse(
        users=[UserResponse.model_validate(user) for user in users],
        total=total,
        limit=limit,
        offset=offset,
        has_more=offset + limit < total,
    )


async def get_user(user_id: str) -> UserResponse:
    return UserResponse.model_validate(await _get_user_or_404(user_id))


async def update_user(user_id: str, user_in: UserUpdate) -> UserResponse:
    user = await _get_user_or_404(user_id)
    update_data = user_in.model_dump(exclude_unset=True, exclude_none=True)
    if not update_data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="No fields for update"
        )

    for key, value in update_data.items():
        setattr(user, key, value)
    await user.save()
    logger.info(f"Updated user {user.id}: {sorted(update_data)}")
    return UserResponse.model_validate(user)


async def set_user_status(user_id: str, is_active: bool, current_user: models.User) -> UserResponse:
    """Activates or deactivates an account. Nobody can deactivate themselves."""
    user = await _get_user_or_404(user_id)
    if user.id == current_user.id and not is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot deactivate your own account"
        )

    user.is_active = is_active
    await user.save(update_fields=["is_active", "updated_at"])
    logger.info(f"User {user.id} {'activated' if is_active else 'deactivated'} by {current_user.id}")
    return UserResponse.model_validate(user)
