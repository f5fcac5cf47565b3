"""
Pytest configuration and shared fixtures.

Provides a test application, database session, and test client that
all test modules can use. Uses the ``testing`` configuration, which
points at an in-memory SQLite database unless TEST_DATABASE_URL is set.
"""

import pytest
from flask import g

from recruitflow import create_app
from recruitflow.extensions import db as _db
from recruitflow.models.user import User
from recruitflow.services import requisition_service
from recruitflow.services.actor import Actor


@pytest.fixture(scope="session")
def app():
    """
    Create a Flask application configured for testing.

    The app is created once per test session.
    """
    app = create_app("testing")

    with app.app_context():
        yield app


@pytest.fixture(scope="session")
def database(app):  # pylint: disable=redefined-outer-name
    """Provide the SQLAlchemy database instance."""
    yield _db


@pytest.fixture(scope="function")
def db_session(app, database):  # pylint: disable=redefined-outer-name
    """
    Provide a fresh schema for each test function.

    Each test gets its own application context (and therefore its own
    scoped session and ``g``); tables are created before the test and
    dropped after it.
    """
    with app.app_context():
        database.create_all()
        yield database.session
        database.session.remove()
        database.drop_all()


@pytest.fixture(scope="function")
def client(app, db_session):  # pylint: disable=redefined-outer-name,unused-argument
    """
    Provide a Flask test client for making HTTP requests.

    Usage in tests::

        def test_health(client):
            response = client.get("/health")
            assert response.status_code == 200
    """
    with app.test_client() as test_client:
        yield test_client


# -- Domain fixtures -------------------------------------------------------


@pytest.fixture
def make_user(db_session):
    """Factory fixture: ``make_user("hod", department="Engineering")``."""
    counter = {"n": 0}

    def _make_user(role="user", department=None, is_active=True, first_name=None):
        counter["n"] += 1
        user = User(
            email=f"{role}.{counter['n']}@example.test",
            first_name=first_name or role.title(),
            last_name=f"Test{counter['n']}",
            role=role,
            department=department,
            is_active=is_active,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture
def users(make_user):
    """One user per workflow role; HOD and sub-recruiter are in Engineering."""
    return {
        "admin": make_user("admin"),
        "recruiter": make_user("recruiter"),
        "sub_recruiter": make_user("sub_recruiter", department="Engineering"),
        "hod": make_user("hod", department="Engineering"),
        "hr": make_user("hr"),
        "coo": make_user("coo"),
        "applicant": make_user("user"),
    }


@pytest.fixture
def actors(users):  # pylint: disable=redefined-outer-name
    """``Actor`` for each user in ``users``."""
    return {name: Actor.from_user(user) for name, user in users.items()}


@pytest.fixture
def requisition_data():
    return {
        "position": "Backend Engineer",
        "department": "Engineering",
        "location": "Lahore",
        "requisition_type": "New",
        "nature_of_employment": "Permanent",
        "grade": "G7",
        "salary": "250000",
        "description": "Build and run the recruitment platform.",
        "experience": "3+ years",
    }


@pytest.fixture
def requisition(actors, requisition_data):  # pylint: disable=redefined-outer-name
    """A freshly raised requisition with every stage pending."""
    return requisition_service.create_requisition(actors["recruiter"], requisition_data)


@pytest.fixture
def login(client):  # pylint: disable=redefined-outer-name
    """Log the test client in as ``user`` through the dev-login route."""

    def _login(user):
        g.pop("_login_user", None)
        response = client.post(f"/auth/dev-login?user_id={user.id}")
        assert response.status_code == 200, response.get_json()
        return response

    return _login
