"""
Pytest configuration and fixtures for the back-office API tests.
"""

import os

# Settings are read at import time, so the test values go in first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ADMIN_EMAIL"] = ""
os.environ["ADMIN_PASSWORD"] = ""

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fitandflex.core.database import Base
from fitandflex.dependencies import get_db
from fitandflex.main import app
from fitandflex.models import Branch, FitnessClass, Product, Schedule
from fitandflex.schemas.user import UserCreate
from fitandflex.services.role_service import RoleService
from fitandflex.services.user_service import UserService

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

DEFAULT_PASSWORD = "secret123"


@pytest.fixture(scope="function")
def db_session():
    """
    Fresh in-memory database per test, with the built-in roles seeded.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    RoleService(session).seed_roles()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """
    Test client whose requests share the test session.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def seed_branch(db_session):
    """Create the main test branch."""
    branch = Branch(name="Downtown", address="1 Main St", city="Springfield", country="US")
    db_session.add(branch)
    db_session.commit()
    db_session.refresh(branch)
    return branch


@pytest.fixture
def other_branch(db_session):
    """Create a second branch for cross-branch checks."""
    branch = Branch(name="Uptown", city="Shelbyville", country="US")
    db_session.add(branch)
    db_session.commit()
    db_session.refresh(branch)
    return branch


@pytest.fixture
def make_user(db_session):
    """Factory creating users through the service so passwords are hashed."""

    def _make_user(email, role, branch_id=None, name="Test User", password=DEFAULT_PASSWORD):
        return UserService(db_session).create_user(
            UserCreate(
                name=name,
                email=email,
                password=password,
                role=role,
                id_branch=branch_id,
            )
        )

    return _make_user


@pytest.fixture
def super_admin(make_user):
    return make_user("root@fitandflex.com", "SUPER_ADMIN", name="Root Admin")


@pytest.fixture
def branch_admin(make_user, seed_branch):
    return make_user("manager@fitandflex.com", "BRANCH_ADMIN", seed_branch.id_branch, "Branch Manager")


@pytest.fixture
def member(make_user, seed_branch):
    return make_user("alice@fitandflex.com", "USER", seed_branch.id_branch, "Alice")


@pytest.fixture
def other_member(make_user, seed_branch):
    return make_user("bob@fitandflex.com", "USER", seed_branch.id_branch, "Bob")


@pytest.fixture
def instructor(make_user, seed_branch):
    return make_user("coach@fitandflex.com", "INSTRUCTOR", seed_branch.id_branch, "Coach")


def login(client, email, password=DEFAULT_PASSWORD):
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, f"Login failed: {response.json()}"
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def admin_headers(client, super_admin):
    return login(client, super_admin.email)


@pytest.fixture
def branch_admin_headers(client, branch_admin):
    return login(client, branch_admin.email)


@pytest.fixture
def member_headers(client, member):
    return login(client, member.email)


@pytest.fixture
def other_member_headers(client, other_member):
    return login(client, other_member.email)


@pytest.fixture
def instructor_headers(client, instructor):
    return login(client, instructor.email)


@pytest.fixture
def seed_class(db_session, seed_branch):
    """An active class with room for two people."""
    fitness_class = FitnessClass(
        name="Spinning", description="Indoor cycling", capacity=2, active=True,
        id_branch=seed_branch.id_branch,
    )
    db_session.add(fitness_class)
    db_session.commit()
    db_session.refresh(fitness_class)
    return fitness_class


@pytest.fixture
def make_schedule(db_session, seed_class):
    """Factory for schedules starting ``days`` from now and lasting an hour."""

    def _make_schedule(days=1, hours=0, active=True, fitness_class=None):
        start = (datetime.now() + timedelta(days=days, hours=hours)).replace(microsecond=0)
        schedule = Schedule(
            start_time=start,
            end_time=start + timedelta(hours=1),
            active=active,
            id_class=(fitness_class or seed_class).id_class,
        )
        db_session.add(schedule)
        db_session.commit()
        db_session.refresh(schedule)
        return schedule

    return _make_schedule


@pytest.fixture
def seed_product(db_session, seed_branch):
    """A monthly membership priced at 100.00."""
    product = Product(
        name="Monthly Pass", sku="MON0001", price=100, duration_days=30, active=True,
        category="MEMBERSHIP", membership_type="MONTHLY", id_branch=seed_branch.id_branch,
    )
    db_session.add(product)
    db_session.commit()
    db_session.refresh(product)
    return product


@pytest.fixture
def login_as(client):
    """Return auth headers for any user created during the test."""

    def _login_as(user, password=DEFAULT_PASSWORD):
        return login(client, user.email, password)

    return _login_as
