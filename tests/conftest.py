import pytest
import os
import uuid
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"

from leavedesk.database import Base, get_db
from leavedesk.main import app
from leavedesk.models.user import User, UserRole
from leavedesk.services import auth as auth_service
from fastapi.testclient import TestClient

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# pysqlite needs explicit BEGIN for SAVEPOINT-based test isolation
@event.listens_for(engine, "connect")
def _disable_pysqlite_transactions(dbapi_connection, connection_record):
    dbapi_connection.isolation_level = None


@event.listens_for(engine, "begin")
def _emit_begin(conn):
    conn.exec_driver_sql("BEGIN")


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

DEFAULT_PASSWORD = "Password123!"


@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Create tables once for the whole test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Get a clean database session for each test function with rollback safety."""
    connection = engine.connect()
    transaction = connection.begin()
    # Service-level commits become savepoints inside the outer transaction
    session = TestingSessionLocal(bind=connection, join_transaction_mode="create_savepoint")

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="function")
def make_user(db_session):
    """Factory for users of any role, optionally reporting to a manager."""
    def _make_user(role=UserRole.EMPLOYEE, manager=None, full_name=None, password=DEFAULT_PASSWORD):
        tag = uuid.uuid4().hex[:8]
        user = User(
            email=f"{role.value}-{tag}@acme.io",
            hashed_password=auth_service.get_password_hash(password),
            full_name=full_name or f"{role.value.title()} {tag}",
            role=role,
            department="Engineering",
            manager_id=manager.id if manager else None,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make_user


@pytest.fixture(scope="function")
def admin_user(make_user):
    return make_user(UserRole.ADMIN, full_name="Ada Admin")


@pytest.fixture(scope="function")
def manager_user(make_user):
    return make_user(UserRole.MANAGER, full_name="Morgan Manager")


@pytest.fixture(scope="function")
def other_manager(make_user):
    return make_user(UserRole.MANAGER, full_name="Noel Othermanager")


@pytest.fixture(scope="function")
def employee_user(make_user, manager_user):
    """An employee reporting to manager_user."""
    return make_user(UserRole.EMPLOYEE, manager=manager_user, full_name="Evan Employee")


@pytest.fixture(scope="function")
def get_token():
    """Helper fixture to create access tokens."""
    return auth_service.token_for


@pytest.fixture(scope="function")
def auth_headers(get_token):
    def _auth_headers(user):
        return {"Authorization": f"Bearer {get_token(user)}"}
    return _auth_headers


@pytest.fixture(scope="function")
def client(db_session):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
