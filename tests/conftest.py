import os
import tempfile
from datetime import date

# Set environment variables BEFORE any imports that might use settings
# Use a temporary directory for test database to avoid permission issues
_test_db_dir = tempfile.mkdtemp()
_test_db_path = os.path.join(_test_db_dir, "test_rentledger.db")
os.environ["DATABASE_URL"] = f"sqlite:///{_test_db_path}"
os.environ["SECRET_KEY"] = "test-secret-key-min-32-characters-long-for-testing"
os.environ["ALGORITHM"] = "HS256"
os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "30"
os.environ["FIRST_ADMIN_EMAIL"] = "admin@test.example.com"
os.environ["FIRST_ADMIN_PASSWORD"] = "AdminTest123!"
os.environ["ALLOCATION_MAX_RETRIES"] = "3"
os.environ["WATER_RATE_CENTS_PER_LITER"] = "0.5"
os.environ["WATER_INVOICE_DUE_DAYS"] = "14"

import pytest
from alembic import command
from alembic.config import Config
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from rentledger.core.security import create_access_token, get_password_hash
from rentledger.db.models.user import User as UserModel
from rentledger.main import app


@pytest.fixture(scope="function")
def session_factory():
    """Create a fresh database for each test, run migrations and return a session factory.

    Tests that need two independent sessions on the same database (concurrent
    payment recording) call the factory twice.
    """
    temp_db_dir = tempfile.mkdtemp()
    test_db_path = os.path.join(temp_db_dir, "test.db")
    test_db_url = f"sqlite:///{test_db_path}"

    test_engine = create_engine(
        test_db_url,
        connect_args={"check_same_thread": False},
    )

    # WAL lets one session read while another commits
    @event.listens_for(test_engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=test_engine
    )

    # Run Alembic migrations to set up the database schema and seed data
    alembic_cfg = Config("alembic.ini")
    alembic_cfg.set_main_option("sqlalchemy.url", test_db_url)
    command.upgrade(alembic_cfg, "head")

    try:
        yield TestingSessionLocal
    finally:
        test_engine.dispose()
        for suffix in ("", "-wal", "-shm"):
            path = f"{test_db_path}{suffix}"
            if os.path.exists(path):
                os.remove(path)
        if os.path.exists(temp_db_dir):
            os.rmdir(temp_db_dir)


@pytest.fixture(scope="function")
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with database dependency override."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    from rentledger.api.deps import get_db

    app.dependency_overrides[get_db] = override_get_db

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def db(db_session):
    """Alias for db_session to match test naming conventions."""
    return db_session


# ============================================================================
# USERS
# ============================================================================


@pytest.fixture(scope="function")
def admin_user(db: Session) -> dict:
    """The admin user seeded by the first migration."""
    from rentledger.core.config import settings
    from rentledger.repositories.user import get_user_by_email

    user = get_user_by_email(db, settings.first_admin_email)
    if not user:
        raise RuntimeError("Admin user not found. Check migration 001.")

    return {
        "id": user.id,
        "email": user.email,
        "password": settings.first_admin_password,  # Plaintext password from env
        "role": user.role,
    }


@pytest.fixture(scope="function")
def admin_token(admin_user: dict) -> str:
    return create_access_token(data={"sub": admin_user["id"]})


@pytest.fixture(scope="function")
def make_user(db: Session):
    """Factory creating a user with the given role; returns a dict with its plaintext password."""

    def _make_user(role: str, email: str | None = None, password: str = "UserPass123!") -> dict:
        user = UserModel(
            email=email or f"{role}@example.com",
            full_name=f"Test {role.replace('_', ' ').title()}",
            role=role,
            password_hash=get_password_hash(password),
            is_active=True,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return {"id": user.id, "email": user.email, "password": password, "role": role}

    return _make_user


@pytest.fixture(scope="function")
def accountant_token(make_user) -> str:
    return create_access_token(data={"sub": make_user("accountant")["id"]})


@pytest.fixture(scope="function")
def caretaker_token(make_user) -> str:
    return create_access_token(data={"sub": make_user("caretaker")["id"]})


@pytest.fixture(scope="function")
def tenant_token(make_user) -> str:
    return create_access_token(data={"sub": make_user("tenant")["id"]})


@pytest.fixture(scope="function")
def auth_headers(admin_token: str) -> dict:
    return {"Authorization": f"Bearer {admin_token}"}


# ============================================================================
# LEDGER DATA
# ============================================================================


@pytest.fixture(scope="function")
def property_(db: Session):
    from rentledger.repositories.property import create_property

    return create_property(db, name="Riverside Court", code="RVC", city="Nairobi", country="Kenya")


@pytest.fixture(scope="function")
def other_property(db: Session):
    from rentledger.repositories.property import create_property

    return create_property(db, name="Hilltop Flats", code="HTF", city="Mombasa", country="Kenya")


@pytest.fixture(scope="function")
def unit(db: Session, property_):
    from rentledger.repositories.unit import create_unit

    return create_unit(
        db, property_id=property_.id, unit_number="A1", status="available", monthly_rent_cents=30000
    )


@pytest.fixture(scope="function")
def tenant(db: Session, property_):
    from rentledger.repositories.tenant import create_tenant

    return create_tenant(
        db,
        property_id=property_.id,
        full_name="Amina Otieno",
        email="amina@example.com",
        phone="+254700000001",
        status="active",
    )


@pytest.fixture(scope="function")
def make_invoice(db: Session, property_, tenant):
    """Factory creating an issued invoice for the default tenant."""
    from rentledger.services.invoice import create_invoice

    def _make_invoice(
        amount_cents: int,
        due_on: date,
        issued_on: date | None = None,
        invoice_type: str = "rent",
        as_of: date | None = None,
        tenant_id=None,
        issue: bool = True,
    ):
        return create_invoice(
            db,
            property_id=property_.id,
            tenant_id=tenant_id or tenant.id,
            invoice_type=invoice_type,
            issued_on=issued_on or due_on,
            due_on=due_on,
            amount_cents=amount_cents,
            issue=issue,
            as_of=as_of or issued_on or due_on,
        )

    return _make_invoice
