import pytest
from fastapi.testclient import TestClient

from hapibara.api import create_app
from hapibara.data.database import get_db


@pytest.fixture()
def app(session_factory):
    app = create_app()

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    return app


@pytest.fixture()
def client(app):
    return TestClient(app)


@pytest.fixture()
def user(make_user):
    return make_user()


@pytest.fixture()
def auth(user):
    return {"X-User-Id": str(user.id)}
