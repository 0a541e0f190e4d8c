"""Auth service: login with email and password."""

import logging

from sqlalchemy.orm import Session

from rentledger.core.security import create_access_token, verify_password
from rentledger.errors import UnauthorizedError
from rentledger.repositories.user import get_user_by_email
from rentledger.schemas.user import Token, User

logger = logging.getLogger(__name__)


def login(db: Session, email: str, password: str) -> Token:
    """
    Authenticate user by email and password, return JWT access token.

    Raises:
        UnauthorizedError: If email not found, password incorrect or the user is inactive.
    """
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        logger.info("Failed login attempt for %s", email)
        raise UnauthorizedError("Incorrect email or password")
    if not user.is_active:
        raise UnauthorizedError("User is inactive")

    access_token = create_access_token(data={"sub": user.id, "role": user.role})
    return Token(
        access_token=access_token,
        token_type="bearer",
        user=User.model_validate(user),
    )
