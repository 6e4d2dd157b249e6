import base64
import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image as PILImage
from sqlalchemy.pool import StaticPool

from api.dependencies import get_blob_store, get_recognition_client
from db import DatabaseSessionManager, get_db_session
from main import app
from recognition import RecognitionClient
from upload_utils import LocalBlobStore


class FakeRecognitionClient(RecognitionClient):
    """Returns canned tags (or raises a canned error) and records every call"""

    def __init__(self, tags=None, error=None):
        self.tags = tags or []
        self.error = error
        self.calls = []

    def get_tags(self, source):
        self.calls.append(source)
        if self.error is not None:
            raise self.error
        return list(self.tags)


@pytest.fixture
def session_manager():
    manager = DatabaseSessionManager()
    manager.init("sqlite://", {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool})
    yield manager
    manager.close()


@pytest.fixture
def session(session_manager):
    with session_manager.session() as session:
        yield session


@pytest.fixture
def recognizer():
    return FakeRecognitionClient()


@pytest.fixture
def blob_store(tmp_path):
    return LocalBlobStore(tmp_path / "files", "http://testserver/files")


@pytest.fixture
def client(session_manager, recognizer, blob_store):
    def override_db_session():
        with session_manager.session() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session
    app.dependency_overrides[get_recognition_client] = lambda: recognizer
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    # not used as a context manager: the lifespan (settings, real database) stays off
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def png_base64():
    buffer = io.BytesIO()
    PILImage.new("RGB", (4, 4), (200, 30, 30)).save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("ascii")
