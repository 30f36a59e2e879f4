import os

# Configure the app before it is imported anywhere
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["CRON_SECRET"] = ""
os.environ["MAILGUN_API_KEY"] = ""
os.environ["MAILGUN_DOMAIN"] = ""
os.environ["CLOUDINARY_URL"] = ""

from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app import models  # noqa: F401  registers every table on Base.metadata
from app.config import settings
from app.db import Base, get_db
from app.main import app
from app.models import Room, Bed, RoomType, User, UserRole
from app.schemas import PropertyIn, RoomIn, TenantIn
from app.security import hash_password, serializer
from app.services import inventory, tenants


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
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def login(client: TestClient, user: User) -> TestClient:
    client.cookies.set(settings.SESSION_COOKIE_NAME, serializer.dumps({"uid": user.id}))
    return client


@pytest.fixture()
def admin(db):
    user = User(
        name="Owner",
        phone="9999900000",
        hashed_password=hash_password("admin-pass"),
        role=UserRole.ADMIN.value,
    )
    db.add(user)
    db.commit()
    return user


def make_property(db, name="Green Nest PG", **overrides):
    values = dict(
        name=name,
        address="12 MG Road, Indiranagar",
        city="Bengaluru",
        state="Karnataka",
        pincode="560038",
    )
    values.update(overrides)
    return inventory.create_property(db, PropertyIn(**values))


def make_room(db, prop, room_number="101", room_type=RoomType.DOUBLE, monthly_rent=8000, **overrides) -> Room:
    values = dict(
        property_id=prop.id,
        room_number=room_number,
        room_type=room_type,
        monthly_rent=monthly_rent,
        security_deposit=10000,
    )
    values.update(overrides)
    return inventory.create_room(db, RoomIn(**values))


def make_tenant(db, bed: Bed, phone="9876500001", name="Asha Rao", **overrides):
    values = dict(bed_id=bed.id, name=name, phone=phone, check_in_date=date(2024, 1, 10))
    values.update(overrides)
    return tenants.create_tenant(db, TenantIn(**values))


@pytest.fixture()
def prop(db):
    return make_property(db)


@pytest.fixture()
def room(db, prop):
    return make_room(db, prop)


@pytest.fixture()
def tenant(db, room):
    return make_tenant(db, room.beds[0])
