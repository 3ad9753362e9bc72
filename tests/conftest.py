from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import shg.models  # noqa: F401  registers every table on Base.metadata
from shg.core.config import settings
from shg.db.base import Base, get_db
from shg.main import app
from shg.models.member import MemberStatus
from shg.services.member import create_member, change_member_status

GROUP_ID = "group-1"
OTHER_GROUP_ID = "group-2"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def audit_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "AUDIT_LOG_DIR", str(tmp_path / "logs"))
    return tmp_path / "logs"


@pytest.fixture
def make_member(db):
    """Create a member in GROUP_ID, optionally moving it to another status."""
    counter = {"n": 0}

    def _make(member_id, name=None, status=MemberStatus.ACTIVE, join_date=date(2024, 1, 1), group_id=GROUP_ID):
        counter["n"] += 1
        member = create_member(
            db,
            group_id,
            member_id,
            name or f"Member {member_id}",
            f"98765{counter['n']:05d}",
            f"{counter['n']:012d}",
            join_date,
        )
        if status != MemberStatus.ACTIVE:
            member = change_member_status(db, group_id, member_id, status)
        return member

    return _make


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def headers():
    return {"X-Viewing-User": GROUP_ID}


@pytest.fixture
def group_id():
    return GROUP_ID
