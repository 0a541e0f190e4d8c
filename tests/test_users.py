import pytest
from sqlalchemy.orm import Session

from rentledger.core.security import create_access_token
from rentledger.db.models.user import User as UserModel


def _new_user(**overrides) -> dict:
    payload = {
        "email": "newuser@example.com",
        "full_name": "New User",
        "password": "NewPassword123!",
    }
    payload.update(overrides)
    return payload


# ============================================================================
# USER CREATION TESTS
# ============================================================================


def test_create_user_as_admin_success(client, db: Session, admin_token: str):
    """Test successful user creation by admin."""
    response = client.post(
        "/api/v1/users",
        json=_new_user(),
        headers={"Authorization": f"Bearer {admin_token}"},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "newuser@example.com"
    assert data["full_name"] == "New User"
    assert "password_hash" not in data  # Password hash should not be exposed
    # New users are tenants unless a role is given
    assert data["role"] == "tenant"

    stored = db.query(UserModel).filter(UserModel.email == "newuser@example.com").one()
    assert stored.password_hash != "NewPassword123!"


@pytest.mark.parametrize("role", ["owner", "property_manager", "accountant", "caretaker"])
def test_create_user_with_specific_role(client, db: Session, admin_token: str, role: str):
    response = client.post(
        "/api/v1/users",
        json=_new_user(email=f"{role}.new@example.com", role=role),
        headers={"Authorization": f"Bearer {admin_token}"},
    )
    assert response.status_code == 201
    assert response.json()["role"] == role


def test_create_user_as_owner_success(client, db: Session, make_user):
    token = create_access_token(data={"sub": make_user("owner")["id"]})

    response = client.post(
        "/api/v1/users",
        json=_new_user(role="accountant"),
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 201


def test_create_user_invalid_role(client, db: Session, admin_token: str):
    response = client.post(
        "/api/v1/users",
        json=_new_user(role="landlord"),
        headers={"Authorization": f"Bearer {admin_token}"},
    )
    assert response.status_code == 422


def test_create_user_without_authentication(client, db: Session):
    """Test user creation without authentication fails."""
    response = client.post("/api/v1/users", json=_new_user())
    assert response.status_code == 401  # Missing authentication credentials


@pytest.mark.parametrize("token_fixture", ["tenant_token", "accountant_token", "caretaker_token"])
def test_create_user_as_non_admin(client, db: Session, request, token_fixture: str):
    """Test user creation by non-admin fails."""
    token = request.getfixturevalue(token_fixture)
    response = client.post(
        "/api/v1/users",
        json=_new_user(email="another@example.com"),
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 403
    assert "Not enough permissions" in response.json()["detail"]


def test_create_user_email_already_exists(client, db: Session, admin_token: str, admin_user: dict):
    """Test user creation with duplicate email fails."""
    response = client.post(
        "/api/v1/users",
        json=_new_user(email=admin_user["email"]),
        headers={"Authorization": f"Bearer {admin_token}"},
    )
    assert response.status_code == 409
    assert response.json()["code"] == "DUPLICATE_RESOURCE"
    assert "Email already registered" in response.json()["detail"]


def test_create_user_invalid_password_too_short(client, db: Session, admin_token: str):
    """Test user creation with password too short fails."""
    response = client.post(
        "/api/v1/users",
        json=_new_user(password="Short1!"),
        headers={"Authorization": f"Bearer {admin_token}"},
    )
    # Pydantic validates min_length at request parsing level (422)
    assert response.status_code == 422


@pytest.mark.parametrize(
    "password, expected",
    [
        ("password123!", "uppercase"),
        ("PASSWORD123!", "lowercase"),
        ("Password!", "number"),
    ],
)
def test_create_user_weak_password(client, db: Session, admin_token: str, password, expected):
    response = client.post(
        "/api/v1/users",
        json=_new_user(password=password),
        headers={"Authorization": f"Bearer {admin_token}"},
    )
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"
    assert expected in response.json()["detail"]


def test_create_user_invalid_email(client, db: Session, admin_token: str):
    response = client.post(
        "/api/v1/users",
        json=_new_user(email="not-an-email"),
        headers={"Authorization": f"Bearer {admin_token}"},
    )
    assert response.status_code == 422


# ============================================================================
# GET USER BY ID TESTS
# ============================================================================


def test_get_user_by_id_as_admin_success(client, db: Session, admin_token: str, make_user):
    """Test admin can get any user by ID."""
    user = make_user("tenant")
    response = client.get(
        f"/api/v1/users/{user['id']}",
        headers={"Authorization": f"Bearer {admin_token}"},
    )
    assert response.status_code == 200
    assert response.json()["email"] == user["email"]


def test_get_user_by_id_self_success(client, db: Session, make_user):
    """Test a non-admin user can get themselves."""
    user = make_user("caretaker")
    token = create_access_token(data={"sub": user["id"]})

    response = client.get(
        f"/api/v1/users/{user['id']}",
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 200
    assert response.json()["id"] == str(user["id"])


def test_get_user_by_id_other_user_forbidden(client, db: Session, tenant_token: str, admin_user: dict):
    """Test a non-admin user cannot get another user."""
    response = client.get(
        f"/api/v1/users/{admin_user['id']}",
        headers={"Authorization": f"Bearer {tenant_token}"},
    )
    assert response.status_code == 403
    assert response.json()["code"] == "FORBIDDEN"
    assert "You can only access your own user information" in response.json()["detail"]


def test_get_user_by_id_not_found(client, db: Session, admin_token: str):
    response = client.get(
        "/api/v1/users/00000000-0000-0000-0000-000000000000",
        headers={"Authorization": f"Bearer {admin_token}"},
    )
    assert response.status_code == 404
