import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from rentledger.core.security import decode_token
from rentledger.db import SessionLocal
from rentledger.db.models.user import User
from rentledger.domain.enums import STAFF_ROLES

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _credentials_error(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Get the current authenticated user from JWT token."""
    payload = decode_token(token)
    if payload is None:
        raise _credentials_error()

    # Only access tokens authenticate requests
    if payload.get("type") != "access":
        raise _credentials_error()

    try:
        user_id = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise _credentials_error() from None

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise _credentials_error("User not found")
    if not user.is_active:
        raise _credentials_error("Inactive user")

    return user


def require_roles(*role_names: str):
    """
    Create a dependency that requires the current user to have one of the specified roles.

    Example:
        Depends(require_roles("owner", "admin"))
        Depends(require_roles(*STAFF_ROLES))
    """

    def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in role_names:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not enough permissions",
            )
        return current_user

    return role_checker


require_staff = require_roles(*STAFF_ROLES)
