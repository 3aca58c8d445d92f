import os
import tempfile

# Settings are cached on first use, so the test environment must be in place before any app import
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="tracking-uploads-"))
os.environ.setdefault("ADMIN_PASSWORD", "test-password")
os.environ.setdefault("SESSION_SECRET", "test-secret")

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tracking.api.deps import get_storage
from tracking.application.schemas import PackageDetails, RecipientInfo, SenderInfo, ShipmentCreate
from tracking.application.service import ShipmentService
from tracking.domain.models import Base
from tracking.infrastructure.db import enable_sqlite_foreign_keys, get_db
from tracking.infrastructure.storage import FileStorage
from tracking.infrastructure.store import ShipmentStore
from tracking.main import app

ADMIN_PASSWORD = os.environ["ADMIN_PASSWORD"]
FIXED_NOW = datetime(2024, 12, 20, 10, 30, tzinfo=timezone.utc)

@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()

@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)

@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    yield db
    db.close()

@pytest.fixture
def store(db_session):
    return ShipmentStore(db_session)

@pytest.fixture
def storage(tmp_path):
    return FileStorage(str(tmp_path / "uploads"), "/uploads")

@pytest.fixture
def service(store, storage):
    return ShipmentService(store, storage, now=lambda: FIXED_NOW)

@pytest.fixture
def shipment_form():
    return ShipmentCreate(
        sender=SenderInfo(name="Li Wei", email="li@example.com", country="China"),
        recipient=RecipientInfo(name="Jane Doe", address="12 Harbour Rd", country="USA"),
        origin="Shanghai, China",
        destination="Los Angeles, USA",
        package=PackageDetails(description="Machine parts", weight_kg=12.5),
    )

@pytest.fixture
def client(session_factory, storage):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()

@pytest.fixture
def admin_client(client):
    resp = client.post("/api/admin/login", json={"password": ADMIN_PASSWORD})
    assert resp.status_code == 200
    client.headers["Authorization"] = f"Bearer {resp.json()['access_token']}"
    return client
