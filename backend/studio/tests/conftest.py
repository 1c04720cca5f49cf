from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from studio.api.deps import get_db
from studio.core.db import init_db
from studio.main import app


@pytest.fixture()
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture()
def session(engine) -> Generator[Session, None, None]:
    with Session(engine) as db:
        yield db


@pytest.fixture()
def client(engine) -> Generator[TestClient, None, None]:
    def override_get_db() -> Generator[Session, None, None]:
        with Session(engine) as db:
            yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def project(client: TestClient) -> dict:
    response = client.post("/api/projects", json={"name": "Skyfall Saga"})
    assert response.status_code == 201
    return response.json()


@pytest.fixture()
def character(client: TestClient, project: dict) -> dict:
    response = client.post(
        "/api/characters", json={"name": "Mira", "project_id": project["id"]}
    )
    assert response.status_code == 201
    return response.json()
