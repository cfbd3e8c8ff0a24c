"""Shared fixtures: in-memory database, a scripted push gateway and an API client."""

from __future__ import annotations

import os
from typing import Any, Callable, List, Sequence

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("EXPO_MOCK_MODE", "true")

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from push_api.api import deps
from push_api.db.session import get_db
from push_api.main import app
from push_api.models import Base
from push_api.models.domain import Recipient
from push_api.services.expo_service import (
    TICKET_STATUS_OK,
    PushMessage,
    PushTicket,
    is_expo_push_token,
)

VALID_TOKEN = "ExponentPushToken[xxxxxxxxxxxxxxxxxxxxxx]"


def expo_token(index: int) -> str:
    return f"ExponentPushToken[device-{index:04d}]"


class FakeGateway:
    """Records every submitted chunk and answers with one ok ticket per message."""

    def __init__(
        self,
        max_chunk_size: int = 100,
        respond: Callable[[Sequence[PushMessage]], List[PushTicket]] | None = None,
    ) -> None:
        self.max_chunk_size = max_chunk_size
        self.submissions: List[List[PushMessage]] = []
        self._respond = respond

    def is_valid_endpoint(self, token: Any) -> bool:
        return is_expo_push_token(token)

    def submit(self, chunk: Sequence[PushMessage]) -> List[PushTicket]:
        assert len(chunk) <= self.max_chunk_size
        self.submissions.append(list(chunk))
        if self._respond is not None:
            return self._respond(chunk)
        return [
            PushTicket(status=TICKET_STATUS_OK, id=f"ticket-{message.data.get('userId', 'single')}-{message.to}")
            for message in chunk
        ]

    @property
    def sent_messages(self) -> List[PushMessage]:
        return [message for chunk in self.submissions for message in chunk]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def make_recipient(db) -> Callable[..., Recipient]:
    counter = {"n": 0}

    def _make(token: str | None = VALID_TOKEN, email: str | None = None) -> Recipient:
        counter["n"] += 1
        recipient = Recipient(
            email=email or f"user{counter['n']}@example.com",
            expo_push_token=token,
        )
        db.add(recipient)
        db.commit()
        db.refresh(recipient)
        return recipient

    return _make


@pytest.fixture
def caller(make_recipient) -> Recipient:
    return make_recipient(token=None, email="caller@example.com")


@pytest.fixture
def client(session_factory, gateway, caller):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    def _current_recipient(session: Session = Depends(get_db)):
        return session.get(Recipient, caller.id)

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[deps.get_gateway] = lambda: gateway
    app.dependency_overrides[deps.get_current_recipient] = _current_recipient
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
