import os

# Must be set before hub is imported: the app builds its engine at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from hub.core.enums import Currency, UserRole
from hub.database import Base, enable_sqlite_foreign_keys, get_db
from hub.main import app
from hub.models import AppSetting, CURRENCY_RATES_KEY, Firm, Product, User
from hub.security import get_password_hash

ADMIN_PASSWORD = "admin123"
EMPLOYEE_PASSWORD = "secret1"

# bcrypt is slow; hash once per session
_ADMIN_HASH = get_password_hash(ADMIN_PASSWORD)
_EMPLOYEE_HASH = get_password_hash(EMPLOYEE_PASSWORD)


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def seeded(db):
    """Admin, employee and a currency_rates row (USD 30, EUR 0 i.e. not set)."""
    admin = User(username="admin", display_name="Admin", password_hash=_ADMIN_HASH, role=UserRole.ADMIN)
    employee = User(username="ali", display_name="Ali", password_hash=_EMPLOYEE_HASH, role=UserRole.EMPLOYEE)
    db.add_all([admin, employee])
    db.add(AppSetting(key=CURRENCY_RATES_KEY, value={"usd_try": 30, "eur_try": 0}))
    db.commit()
    return {"admin": admin, "employee": employee}


@pytest.fixture()
def client(session_factory, seeded):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
    app.dependency_overrides.clear()


def login(client, username, password):
    resp = client.post("/api/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    # Tests pick the identity per request through the header
    client.cookies.clear()
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture()
def admin_headers(client):
    return login(client, "admin", ADMIN_PASSWORD)


@pytest.fixture()
def employee_headers(client):
    return login(client, "ali", EMPLOYEE_PASSWORD)


@pytest.fixture()
def product(db, seeded):
    p = Product(
        name="Hex Bolt M8",
        currency=Currency.TRY,
        list_price=100,
        discount_percent=10,
        kdv_percent=20,
        profit_percent=35,
        is_active=True,
    )
    db.add(p)
    db.commit()
    db.refresh(p)
    return p


@pytest.fixture()
def usd_product(db, seeded):
    p = Product(
        name="Drill Bit Set",
        currency=Currency.USD,
        list_price=10,
        discount_percent=0,
        kdv_percent=20,
        profit_percent=0,
        is_active=True,
    )
    db.add(p)
    db.commit()
    db.refresh(p)
    return p


@pytest.fixture()
def firm(db, seeded):
    f = Firm(name="Yildiz Insaat", is_locked=False)
    db.add(f)
    db.commit()
    db.refresh(f)
    return f
