"""
Integration test fixtures. In-memory SQLite shared through StaticPool, get_db and the
question bank overridden for API tests.
"""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tests.helpers import make_goal, register


@pytest.fixture
def session_factory():
    """In-memory engine shared by every session of one test."""
    import learnpath.models  # noqa: F401
    from learnpath.config import Base

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def override_get_db(session_factory):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    return _get_db


@pytest.fixture
def seeded_goals(db):
    """Beginner ML goal with 3 modules plus follow-up goals."""
    from infra.db.sql_repositories import SqlGoalRepository

    goals = SqlGoalRepository(db)
    return [
        goals.add(make_goal()),
        goals.add(make_goal(goal_id="ml-int", level="intermediate")),
        goals.add(make_goal(goal_id="nlp-beg", category="nlp")),
    ]


@pytest.fixture
def api_client(override_get_db, question_bank):
    """FastAPI TestClient with in-memory DB and fixture question bank."""
    from fastapi.testclient import TestClient

    from learnpath.api import app
    from learnpath.config import get_db
    from learnpath.services.question_bank import get_question_bank

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_question_bank] = lambda: question_bank
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_client(api_client):
    """API client logged in as a freshly registered user (cookie kept by the client)."""
    response = register(api_client)
    assert response.status_code == 201
    return api_client
