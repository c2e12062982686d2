import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SEED_DEFAULT_CATEGORIES", "false")
os.environ.setdefault("GROCERY_TIMEZONE", "UTC")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.db import Base, BuildEngine, GetDb
from app.main import app
from app.modules.grocery import models as grocery_models  # noqa: F401
from app.modules.grocery.services import CreateCategory, CreateCouple, CreateUser


@pytest.fixture
def engine():
    test_engine = BuildEngine("sqlite://")
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    # Routes share the test session so fixtures and requests see the same rows.
    def _override_get_db():
        yield db

    app.dependency_overrides[GetDb] = _override_get_db
    test_client = TestClient(app)
    yield test_client
    test_client.close()
    app.dependency_overrides.clear()


@pytest.fixture
def household(db):
    alex = CreateUser(db, "Alex", "alex@example.com")
    sam = CreateUser(db, "Sam", "sam@example.com")
    couple = CreateCouple(db, alex.Id, sam.Id)
    produce = CreateCategory(db, "Produce")
    dairy = CreateCategory(db, "Dairy")
    return {
        "alex": alex,
        "sam": sam,
        "couple": couple,
        "produce": produce,
        "dairy": dairy,
    }
