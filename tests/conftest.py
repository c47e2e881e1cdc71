from typing import Generator

import pytest
from fastapi.testclient import TestClient

from equipos_api.config import Settings
from equipos_api.db import Database
from equipos_api.main import create_app


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(db_dir=tmp_path, db_file="test.sqlite", db_pool_size=2)


@pytest.fixture()
def app(settings):
    return create_app(settings)


@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def database(tmp_path) -> Database:
    db = Database(tmp_path / "store.sqlite", pool_size=2)
    db.init_schema()
    return db
