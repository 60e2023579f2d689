import pytest
from fastapi.testclient import TestClient

from clinic_scheduler.main import app
from clinic_scheduler.routes import common


@pytest.fixture
def client(session_factory, monkeypatch: pytest.MonkeyPatch):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[common.get_db] = override_get_db
    monkeypatch.setattr(common, 'ensure_database_ready', lambda: None)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
