import os
import tempfile

# Settings are read at import time, so the environment is prepared before any
# casedesk module is imported.
_DB_DIR = tempfile.mkdtemp(prefix="casedesk-tests-")
os.environ["DB_DRIVER_NAME"] = "sqlite"
os.environ["DB_DATABASE_NAME"] = os.path.join(_DB_DIR, "casedesk.sqlite3")
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["API_KEY"] = ""
for _name in ("DB_USERNAME", "DB_PASSWORD", "DB_HOST", "DB_PORT", "AWS_ACCESS_KEY", "AWS_SECRET_KEY"):
    os.environ.pop(_name, None)

from unittest.mock import MagicMock  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from langchain_core.messages import AIMessage  # noqa: E402

import casedesk.database.entities  # noqa: E402,F401  registers every table
from casedesk.api.fast_api import get_blob_store, get_reply_generator, get_text_extractor  # noqa: E402
from casedesk.api.llm_pipeline import CaseReplyGenerator, ContextAssembler  # noqa: E402
from casedesk.api.text_extraction import TextExtractor  # noqa: E402
from casedesk.database.config.connection_engine import connection_engine, metadata  # noqa: E402
from casedesk.database.core.funcs import check_create_user_instance  # noqa: E402

PASSWORD = "Str0ng!Pass"


class FakeBlobStore:
    """In-memory stand-in for the S3 blob store."""

    def __init__(self):
        self.objects = {}

    def put_bytes(self, key, data, content_type, filename):
        self.objects[key] = data
        return key

    def get_bytes(self, key):
        return self.objects[key]

    def presigned_url(self, key, expires=3600):
        return f"https://blobs.test/{key}?expires={expires}"

    def delete(self, key):
        self.objects.pop(key, None)


@pytest.fixture(autouse=True)
def db():
    metadata.create_all(connection_engine)
    yield
    metadata.drop_all(connection_engine)


@pytest.fixture
def make_user():
    counter = {"n": 0}

    def _make(username=None):
        counter["n"] += 1
        name = username or f"user{counter['n']}"
        return check_create_user_instance(username=name, password=PASSWORD, email=f"{name}@example.com")

    return _make


@pytest.fixture
def user(make_user):
    return make_user("owner")


@pytest.fixture
def other_user(make_user):
    return make_user("intruder")


@pytest.fixture
def blob_store():
    return FakeBlobStore()


@pytest.fixture
def chat_model():
    model = MagicMock()
    model.invoke.return_value = AIMessage(content="Grounded answer (Contract).")
    return model


@pytest.fixture
def generator(chat_model):
    return CaseReplyGenerator(chat_model, ContextAssembler(2000, 12000))


@pytest.fixture
def extractor():
    return TextExtractor()


@pytest.fixture
def client(blob_store, generator, extractor):
    from casedesk.main import app

    app.dependency_overrides[get_blob_store] = lambda: blob_store
    app.dependency_overrides[get_reply_generator] = lambda: generator
    app.dependency_overrides[get_text_extractor] = lambda: extractor
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def logged_in(client, user):
    response = client.post("/login", json={"username": "owner", "password": PASSWORD})
    assert response.status_code == 200
    return client
