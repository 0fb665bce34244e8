"""User lookup and creation."""
from typing import Optional
from . import models


async def get_user_by_username(username: str) -> Optional[models.User]:
    return await models.User.get_or_none(username=username)


async def get_user_by_email(email: str) -> Optional[models.User]:
    return await models.User.get_or_none(email=email)


async def create_user(user_in: dict, hashed_password_val: str, role: str = "worker") -> models.User:
    """Creates a new user in the database.

    Args:
        user_in: The user data (excluding password).
        hashed_password_val: The bcrypt hash of the user's password.
        role: Farm role for the new account. Self-registration always
            yields a worker; admins are created from the CLI.

    Returns:
        The newly created User object.
    """
    if role not in models.ROLES:
        raise ValueError(f"Unknown role '{role}'")
    return await models.User.create(
        **user_in,
        hashed_password=hashed_password_val,
        role=role,
    )


async def set_user_role(username: str, role: str) -> Optional[models.User]:
    if role not in models.ROLES:
        raise ValueError(f"Unknown role '{role}'")
    user = await models.User.get_or_none(username=username)
    if user is None:
        return None
    user.role = role
    await user.save(update_fields=["role"])
    return user
