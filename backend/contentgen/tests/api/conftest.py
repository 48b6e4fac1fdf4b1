import pytest
from fastapi.testclient import TestClient

from contentgen.api.deps import get_db, get_feed
from contentgen.core.security import create_access_token
from contentgen.main import app


@pytest.fixture
def client(engine, session, feed):
    def override_get_db():
        yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_feed] = lambda: feed
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _auth_headers(user) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _auth_headers
