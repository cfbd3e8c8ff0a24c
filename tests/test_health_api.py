from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from push_api.db.session import get_db
from push_api.main import app


def test_ping(client):
    response = client.get("/health/ping")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_ready_checks_the_store(client):
    response = client.get("/health/ready")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database": "ok"}


def test_ready_is_503_when_store_is_unreachable(client, tmp_path):
    unreachable = create_engine(f"sqlite:///{tmp_path / 'missing' / 'push.db'}")
    broken_session = sessionmaker(bind=unreachable)

    def _get_db():
        session = broken_session()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db

    response = client.get("/health/ready")

    assert response.status_code == 503
    assert response.json()["detail"] == {"status": "unavailable", "database": "error"}
    unreachable.dispose()
