from typing import Callable, Dict, Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlmodel import Session

from mediatracker.config import Settings
from mediatracker.db import Database
from mediatracker.main import create_app
from mediatracker.models import User


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        upload_dir=str(tmp_path / "uploads"),
        secret_key="test-secret",
        max_upload_bytes=1024,
    )


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    return create_app(settings)


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as c:
        yield c


@pytest.fixture
def database(settings: Settings) -> Iterator[Database]:
    db = Database(settings.database_url)
    db.init()
    yield db
    db.dispose()


@pytest.fixture
def session(database: Database) -> Iterator[Session]:
    with database.session() as s:
        yield s


@pytest.fixture
def make_user(session: Session) -> Callable[..., User]:
    def _make(username: str, picture: str | None = None) -> User:
        user = User(
            email=f"{username}@example.com",
            username=username,
            hashed_password="not-a-real-hash",
            profile_picture=picture,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make


@pytest.fixture
def register(client: TestClient) -> Callable[[str], Dict[str, str]]:
    """Register a user through the API and return its auth headers."""

    def _register(username: str) -> Dict[str, str]:
        resp = client.post(
            "/api/register",
            json={"email": f"{username}@example.com", "password": "secret123", "username": username},
        )
        assert resp.status_code == 200, resp.text
        return {"Authorization": f"Bearer {resp.json()['token']}"}

    return _register
