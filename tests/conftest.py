import os

# Must be set before app modules read settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("TESTING", "true")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.core.config import settings
from app.core.security import create_user_token
from app.database import get_db
from app.db.base import Base
from app.main import app
from app.models.property import ApprovalStatus, Property
from app.models.user import User, UserRole, UserStatus


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def upload_dir(tmp_path, monkeypatch):
    path = tmp_path / "uploads"
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(path))
    return path


@pytest.fixture()
def client(session_factory, upload_dir):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db_session):
    counter = {"n": 0}

    def _make_user(role=UserRole.CUSTOMER, status=UserStatus.ACTIVE, name=None, email=None, password_hash=None):
        counter["n"] += 1
        role = UserRole(role)
        user = User(
            role=role,
            status=UserStatus(status),
            name=name or f"{role.value.title()} {counter['n']}",
            email=email or f"{role.value}{counter['n']}@example.com",
            phone="0700000000",
            password_hash=password_hash,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def make_property(db_session):
    def _make_property(owner=None, broker=None, approval_status=ApprovalStatus.APPROVED, title="Garden flat"):
        prop = Property(
            title=title,
            description="Two bedrooms near the market",
            price=1200.0,
            type="apartment",
            location="Hai Malakal",
            area="Juba",
            owner_id=owner.id if owner else None,
            broker_id=broker.id if broker else None,
            approval_status=approval_status,
        )
        db_session.add(prop)
        db_session.commit()
        db_session.refresh(prop)
        return prop

    return _make_property


@pytest.fixture()
def auth():
    def _auth(user):
        return {"Authorization": f"Bearer {create_user_token(user)}"}

    return _auth


@pytest.fixture()
def admin(make_user):
    return make_user(UserRole.ADMIN, name="Site Admin")


@pytest.fixture()
def owner(make_user):
    return make_user(UserRole.OWNER)


@pytest.fixture()
def broker(make_user):
    return make_user(UserRole.BROKER)


@pytest.fixture()
def customer(make_user):
    return make_user(UserRole.CUSTOMER)


@pytest.fixture()
def photographer(make_user):
    return make_user(UserRole.PHOTOGRAPHER)
