import os
import tempfile
from datetime import datetime, timedelta, timezone
from decimal import Decimal

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BLOB_STORAGE_DIR"] = tempfile.mkdtemp(prefix="marketplace-blobs-")
os.environ["BLOB_BASE_URL"] = "http://testserver/blobs"

import pytest
import redis
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from marketplace.api.deps import get_blob_store, get_lock_service
from marketplace.celery_worker import celery_app
from marketplace.data.database import Base, get_db
from marketplace.data.models import CartEntryModel, ProductModel, UserModel
from marketplace.main import app
from marketplace.services.blob_store import BlobStore

celery_app.conf.task_always_eager = True

test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=test_engine, autoflush=False, expire_on_commit=False)


class FakeLockService:
    """In-memory stand-in for the redis checkout lock."""

    def __init__(self):
        self.held = {}
        self.released = []

    def acquire_checkout_lock(self, product_id, owner, ttl):
        if product_id in self.held:
            return False
        self.held[product_id] = owner
        return True

    def release_checkout_lock(self, product_id, owner):
        if self.held.get(product_id) != owner:
            return False
        del self.held[product_id]
        self.released.append(product_id)
        return True


class FlakyLockService(FakeLockService):
    """Lock whose redis connection drops on acquire or on release."""

    def __init__(self, fail_on):
        super().__init__()
        self.fail_on = fail_on

    def acquire_checkout_lock(self, product_id, owner, ttl):
        if self.fail_on == "acquire":
            raise redis.ConnectionError("Connection refused")
        return super().acquire_checkout_lock(product_id, owner, ttl)

    def release_checkout_lock(self, product_id, owner):
        if self.fail_on == "release":
            raise redis.ConnectionError("Connection reset by peer")
        return super().release_checkout_lock(product_id, owner)


class FailingBlobStore(BlobStore):
    def put(self, key, data):
        raise OSError("storage unreachable")


class FixedUrlBlobStore(BlobStore):
    """Stores nothing, answers with one known URL."""

    def __init__(self, url):
        super().__init__(root=tempfile.gettempdir(), base_url="http://unused")
        self.url = url
        self.keys = []
        self.deleted = []

    def put(self, key, data):
        self.keys.append(key)
        return self.url

    def delete(self, key):
        self.deleted.append(key)
        return True


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def lock_service():
    return FakeLockService()


@pytest.fixture
def blob_store(tmp_path):
    return BlobStore(root=str(tmp_path / "blobs"), base_url="http://testserver/blobs")


@pytest.fixture
def client(lock_service, blob_store):
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_lock_service] = lambda: lock_service
    app.dependency_overrides[get_blob_store] = lambda: blob_store

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def use_lock_service():
    def _use(locks):
        app.dependency_overrides[get_lock_service] = lambda: locks
        return locks

    return _use


@pytest.fixture
def use_blob_store():
    """Swap the blob store the API uses for the rest of the test."""

    def _use(store):
        app.dependency_overrides[get_blob_store] = lambda: store
        return store

    return _use


def make_user(db, user_id, role="Buyer", **fields):
    defaults = {
        "username": user_id.title(),
        "email": f"{user_id}@example.com",
        "address": f"{user_id} street 1, Bangkok",
        "phone": "0812345678",
    }
    defaults.update(fields)
    user = UserModel(id=user_id, role=role, **defaults)
    db.add(user)
    db.commit()
    return user


_clock = {"t": datetime(2024, 1, 1, tzinfo=timezone.utc)}


def make_product(db, seller, product_id=None, price="100.00", status="available", name="Vintage camera", **fields):
    # strictly increasing created_at keeps catalog ordering deterministic
    _clock["t"] += timedelta(minutes=1)
    detail = fields.pop("detail", "Works fine")
    product = ProductModel(
        seller_id=seller.id,
        seller_name=seller.username,
        name=name,
        price=Decimal(price),
        detail=detail,
        status=status,
        created_at=_clock["t"],
        **fields,
    )
    if product_id:
        product.id = product_id
    db.add(product)
    db.commit()
    return product


def put_in_cart(db, buyer, product):
    entry = CartEntryModel(
        buyer_id=buyer.id,
        product_id=product.id,
        name=product.name,
        price=product.price,
        detail=product.detail,
        image_url=product.image_url,
        seller_id=product.seller_id,
        seller_name=product.seller_name,
        status=product.status,
    )
    db.add(entry)
    db.commit()
    return entry


def slip_upload(content=b"\xff\xd8\xff slip bytes"):
    return {"slip": ("slip.jpg", content, "image/jpeg")}


@pytest.fixture
def seller(db):
    return make_user(db, "seller1", role="Seller", username="Shop One", promptpay_qr_url="http://testserver/blobs/promptPayQR/seller1.jpg")


@pytest.fixture
def buyer(db):
    return make_user(db, "buyer1", role="Buyer", username="Somchai")
