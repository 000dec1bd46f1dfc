"""Shared fixtures: in-memory database, mocked S3 and logged-in clients."""

import os

# settings are read on import of the app, so the environment goes first
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
os.environ["AWS_REGION"] = "us-east-1"
os.environ["AWS_DEFAULT_REGION"] = "us-east-1"
os.environ["AWS_S3_BUCKET_NAME"] = "mini-drive-test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "development"

import boto3
import pytest
from fastapi.testclient import TestClient
from moto import mock_aws
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import get_settings
from app.main import app
from app.models import file, folder, session, user  # noqa: F401
from app.models.database import Base, enable_sqlite_foreign_keys, get_db
from app.services import accounts
from app.services.storage import BlobStore, get_blob_store

TEST_BUCKET = "mini-drive-test"
TEST_PASSWORD = "s3cret-pass"


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
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
def alice(db):
    return accounts.register(db, "alice", TEST_PASSWORD)


@pytest.fixture
def bob(db):
    return accounts.register(db, "bob", TEST_PASSWORD)


@pytest.fixture
def blob_store():
    """BlobStore talking to a moto-mocked S3 with the test bucket created."""
    with mock_aws():
        client = boto3.client("s3", region_name="us-east-1")
        client.create_bucket(Bucket=TEST_BUCKET)
        yield BlobStore(get_settings(), client=client)


@pytest.fixture
def make_client(session_factory, blob_store):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_store] = lambda: blob_store

    def _make_client(username=None, password=TEST_PASSWORD):
        """New client; logged in as ``username`` (registered first) when given."""
        client = TestClient(app)
        if username:
            client.post("/register", data={"username": username, "password": password})
            response = client.post(
                "/login",
                data={"username": username, "password": password},
                follow_redirects=False,
            )
            assert response.status_code == 303
        return client

    yield _make_client
    app.dependency_overrides.clear()


@pytest.fixture
def client(make_client):
    """Anonymous client."""
    return make_client()


@pytest.fixture
def alice_client(make_client):
    return make_client("alice")


@pytest.fixture
def bob_client(make_client):
    return make_client("bob")
