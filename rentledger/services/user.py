import uuid

from sqlalchemy.orm import Session

import rentledger.repositories.user as user_repo
from rentledger.core.security import get_password_hash, validate_password
from rentledger.db.models.user import User as UserModel
from rentledger.domain.enums import UserRole
from rentledger.errors import (
    DomainValidationError,
    DuplicateResourceError,
    ForbiddenError,
    NotFoundError,
)
from rentledger.schemas.user import UserCreate


def create_user(db: Session, user_data: UserCreate) -> UserModel:
    """
    Create a new user with business logic validation.

    - Validates email uniqueness
    - Validates password requirements
    """
    existing_user = user_repo.get_user_by_email(db, user_data.email)
    if existing_user:
        raise DuplicateResourceError("Email already registered")

    is_valid, error_message = validate_password(user_data.password)
    if not is_valid:
        raise DomainValidationError(error_message)

    return user_repo.create_user(
        db,
        email=user_data.email,
        full_name=user_data.full_name,
        password_hash=get_password_hash(user_data.password),
        role=user_data.role.value,
    )


def get_user(db: Session, user_id: uuid.UUID) -> UserModel:
    user = user_repo.get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def get_user_for_viewer(db: Session, user_id: uuid.UUID, viewer: UserModel) -> UserModel:
    """
    Get a user as seen by another user.

    Owners and admins can read any user; everyone else only themselves.

    Raises:
        ForbiddenError: If the viewer asks for somebody else.
        NotFoundError: If the user does not exist.
    """
    if viewer.role not in (UserRole.OWNER.value, UserRole.ADMIN.value) and viewer.id != user_id:
        raise ForbiddenError("You can only access your own user information")
    return get_user(db, user_id)
