import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from homecare.db.base import Base
from homecare.main import app
from homecare.routers import deps


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[deps.get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def poc_payload():
    return {
        "individualId": "IND-001",
        "pocNumber": "POC-2025-01",
        "startDate": "2025-01-01",
        "createdBy": "office",
        "duties": [
            {"category": "Personal Care", "taskNo": 1, "duty": "Bathing",
             "daysOfWeek": ["Mon", "Wed", "Fri"], "sortOrder": 1},
            {"category": "Meals", "taskNo": 2, "duty": "Prepare lunch",
             "daysOfWeek": None, "sortOrder": 2},
            {"category": "Household", "taskNo": 3, "duty": "Laundry",
             "daysOfWeek": {"0": True, "6": True}, "sortOrder": 3},
            {"category": "Meals", "taskNo": 4, "duty": "Grocery run",
             "daysOfWeek": "tue,thu", "sortOrder": 4},
        ],
    }


@pytest.fixture
def poc(client, poc_payload):
    res = client.post("/poc", json=poc_payload)
    assert res.status_code == 201
    poc_id = res.json()["id"]
    item = client.get(f"/poc/{poc_id}").json()["item"]
    item["dutyIds"] = {d["duty"]: d["id"] for d in item["duties"]}
    return item
