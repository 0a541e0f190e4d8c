import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rentledger.api.deps import get_current_user, get_db, require_roles
from rentledger.db.models.user import User as UserModel
from rentledger.schemas.user import User, UserCreate
from rentledger.services.user import create_user, get_user_for_viewer

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=User, status_code=status.HTTP_201_CREATED)
def create_new_user(
    user_data: UserCreate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_roles("owner", "admin")),
):
    """
    Create a new user. Only owners and admins can create users.
    """
    user = create_user(db, user_data)
    return User.model_validate(user)


@router.get("/{user_id}", response_model=User)
def get_user_by_id(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """
    Get a user by ID.
    - Owners and admins can get any user
    - Other users can only get themselves
    """
    return User.model_validate(get_user_for_viewer(db, user_id, current_user))
