from datetime import timedelta

from sqlalchemy.orm import Session

from rentledger.core.security import create_access_token, decode_token
from rentledger.db.models.user import User as UserModel


# ============================================================================
# LOGIN TESTS
# ============================================================================


def test_login_success(client, db: Session, admin_user: dict):
    """Test successful login returns access token and user info."""
    response = client.post(
        "/api/v1/auth/login",
        data={
            "username": admin_user["email"],
            "password": admin_user["password"],
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert "access_token" in data
    assert data["token_type"] == "bearer"
    assert data["user"]["email"] == admin_user["email"]
    assert data["user"]["role"] == "admin"

    payload = decode_token(data["access_token"])
    assert payload["sub"] == str(admin_user["id"])
    assert payload["role"] == "admin"
    assert payload["type"] == "access"


def test_login_invalid_email(client, db: Session):
    """Test login with non-existent email."""
    response = client.post(
        "/api/v1/auth/login",
        data={
            "username": "nonexistent@example.com",
            "password": "Password123!",
        },
    )
    assert response.status_code == 401
    assert response.json()["code"] == "UNAUTHORIZED"
    assert "Incorrect email or password" in response.json()["detail"]


def test_login_wrong_password(client, db: Session, admin_user: dict):
    """Test login with wrong password."""
    response = client.post(
        "/api/v1/auth/login",
        data={
            "username": admin_user["email"],
            "password": "WrongPassword123!",
        },
    )
    assert response.status_code == 401
    assert "Incorrect email or password" in response.json()["detail"]


def test_login_inactive_user(client, db: Session, make_user):
    """Test login of a deactivated user fails even with the right password."""
    user = make_user("accountant")
    db.query(UserModel).filter(UserModel.id == user["id"]).update({"is_active": False})
    db.commit()

    response = client.post(
        "/api/v1/auth/login",
        data={"username": user["email"], "password": user["password"]},
    )
    assert response.status_code == 401
    assert "inactive" in response.json()["detail"]


def test_login_as_caretaker(client, db: Session, make_user):
    user = make_user("caretaker")

    response = client.post(
        "/api/v1/auth/login",
        data={"username": user["email"], "password": user["password"]},
    )
    assert response.status_code == 200
    assert response.json()["user"]["role"] == "caretaker"


# ============================================================================
# GET CURRENT USER TESTS
# ============================================================================


def test_get_current_user_success(client, db: Session, admin_token: str, admin_user: dict):
    """Test getting current user info with valid token."""
    response = client.get(
        "/api/v1/auth/me",
        headers={"Authorization": f"Bearer {admin_token}"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["email"] == admin_user["email"]
    assert data["id"] == str(admin_user["id"])
    assert data["is_active"] is True


def test_get_current_user_without_token(client, db: Session):
    """Test getting current user without token fails."""
    response = client.get("/api/v1/auth/me")
    assert response.status_code == 401  # Missing authentication credentials


def test_get_current_user_invalid_token(client, db: Session):
    """Test getting current user with invalid token fails."""
    response = client.get(
        "/api/v1/auth/me",
        headers={"Authorization": "Bearer invalid_token"},
    )
    assert response.status_code == 401
    assert "Could not validate credentials" in response.json()["detail"]


def test_get_current_user_expired_token(client, db: Session, admin_user: dict):
    token = create_access_token(data={"sub": admin_user["id"]}, expires_delta=timedelta(minutes=-1))

    response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_get_current_user_malformed_subject(client, db: Session):
    token = create_access_token(data={"sub": "not-a-uuid"})

    response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert "Could not validate credentials" in response.json()["detail"]


def test_get_current_user_inactive(client, db: Session, make_user):
    user = make_user("tenant")
    token = create_access_token(data={"sub": user["id"]})
    db.query(UserModel).filter(UserModel.id == user["id"]).update({"is_active": False})
    db.commit()

    response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert "Inactive user" in response.json()["detail"]
