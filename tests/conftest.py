"""
Pytest configuration and shared fixtures for Sego Command Agent tests.
"""
import pytest
import tempfile
import os
from datetime import date
from unittest.mock import MagicMock
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

# Point the app's own engine at a throwaway file before anything imports it
os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(tempfile.gettempdir(), 'sego_app_db.sqlite')}"

from database.models import Base, User, Project, Task, Ticket, WarehouseRequest
from database.connection import get_db
from app.application.command_processor import CommandProcessor
from app.application.dispatcher import CommandDispatcher
from app.application.session import ConversationRegistry, ConversationSession
from app.dependencies import get_command_processor, get_conversation_registry, get_entity_store
from app.domain.commands import UserContext
from app.infrastructure.repositories import EntityStore, SqlAlchemyEntityStore
from main import app

# Monday
FIXED_TODAY = date(2026, 10, 19)


@pytest.fixture(scope="session")
def test_db_engine():
    """Create a test database engine backed by a temporary SQLite file."""
    # File-based SQLite allows multiple connections (TestClient + direct sessions)
    tmp_path = os.path.join(tempfile.gettempdir(), "sego_test_db.sqlite")
    engine = create_engine(
        f"sqlite:///{tmp_path}",
        connect_args={"check_same_thread": False}
    )
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture(scope="function")
def test_session_factory(test_db_engine):
    """Session factory for one test; all tables are emptied afterwards."""
    factory = sessionmaker(autocommit=False, autoflush=False, bind=test_db_engine)
    yield factory
    with test_db_engine.connect() as connection:
        with connection.begin():
            for table in reversed(Base.metadata.sorted_tables):
                connection.execute(table.delete())


@pytest.fixture(scope="function")
def test_db_session(test_session_factory):
    """Create a fresh database session for each test."""
    session = test_session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(test_session_factory):
    return SqlAlchemyEntityStore(test_session_factory)


@pytest.fixture
def clock():
    return lambda: FIXED_TODAY


@pytest.fixture
def processor(store, clock):
    return CommandProcessor(store, dispatcher=CommandDispatcher(store, clock=clock))


@pytest.fixture
def registry():
    return ConversationRegistry()


@pytest.fixture
def conversation():
    return ConversationSession()


@pytest.fixture
def sample_admin(test_db_session):
    """The Super-Admin the agent acts as when no user is given."""
    user = User(id="user-1", name="Ana Admin", email="ana@sego.mx", role="Super-Admin")
    test_db_session.add(user)
    test_db_session.commit()
    return user


@pytest.fixture
def sample_viewer(test_db_session):
    user = User(id="user-9", name="Victor Viewer", email="victor@sego.mx", role="Viewer")
    test_db_session.add(user)
    test_db_session.commit()
    return user


@pytest.fixture
def admin_context():
    return UserContext(user_id="user-1", name="Ana Admin", role="Super-Admin")


@pytest.fixture
def viewer_context():
    return UserContext(user_id="user-9", name="Victor Viewer", role="Viewer")


@pytest.fixture
def sample_project(test_db_session):
    project = Project(
        id="PROJ-0001",
        name="Boda García",
        client="Ana López",
        status="On Track",
        due_date=date(2026, 12, 1),
        event_type="Boda",
    )
    test_db_session.add(project)
    test_db_session.commit()
    return project


@pytest.fixture
def sample_ticket(test_db_session, sample_admin):
    ticket = Ticket(
        id="TKT-1234",
        title="Impresora sin tóner",
        description="La impresora de la oficina no imprime",
        requester_id=sample_admin.id,
        status="Open",
        priority="High",
    )
    test_db_session.add(ticket)
    test_db_session.commit()
    return ticket


@pytest.fixture
def sample_task(test_db_session, sample_project, sample_admin):
    task = Task(
        id="TASK-0001",
        title="Confirmar banquete",
        project_id=sample_project.id,
        status="To Do",
        due_date=date(2026, 11, 20),
        created_by=sample_admin.id,
    )
    test_db_session.add(task)
    test_db_session.commit()
    return task


@pytest.fixture
def sample_warehouse_request(test_db_session, sample_project, sample_admin):
    request = WarehouseRequest(
        id="WR-0001",
        project_id=sample_project.id,
        requester_id=sample_admin.id,
        status="Pending",
        request_date=date(2026, 10, 1),
        items=[{"id": "item-1", "name": "sillas", "quantity": 100}],
    )
    test_db_session.add(request)
    test_db_session.commit()
    return request


@pytest.fixture
def mock_store():
    """EntityStore double that records every call."""
    return MagicMock(spec=EntityStore)


@pytest.fixture(scope="function")
def test_client(test_db_session, store, processor, registry):
    """Create a test client with overridden database and service dependencies."""

    def override_get_db():
        try:
            yield test_db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_entity_store] = lambda: store
    app.dependency_overrides[get_command_processor] = lambda: processor
    app.dependency_overrides[get_conversation_registry] = lambda: registry

    with TestClient(app) as client:
        yield client

    # Clean up
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Set up test environment variables."""
    test_env_vars = {
        "ENVIRONMENT": "testing",
        "USE_LLM_INTERPRETER": "false",
        "APP_TIMEZONE": "America/Mexico_City",
    }

    # Store original values
    original_values = {}
    for key, value in test_env_vars.items():
        original_values[key] = os.getenv(key)
        os.environ[key] = value

    yield

    # Restore original values
    for key, original_value in original_values.items():
        if original_value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = original_value


# Utility functions for tests
def open_session(client, user_id=None):
    """Open a conversation over HTTP and return its id."""
    headers = {"X-User-Id": user_id} if user_id else {}
    response = client.post("/agent/sessions", headers=headers)
    assert response.status_code == 201
    return response.json()["session_id"]


def send_command(client, session_id, text, user_id=None):
    """Submit one command and return the HTTP response."""
    headers = {"X-User-Id": user_id} if user_id else {}
    return client.post(f"/agent/sessions/{session_id}/commands", json={"text": text}, headers=headers)
