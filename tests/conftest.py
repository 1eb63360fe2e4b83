import os
from datetime import datetime

import pytest

# Must be set before the application is imported
os.environ["TESTING"] = "1"
os.environ["TEST_DATABASE_URL"] = "sqlite:///./test_clinic.db"

from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from clinic_api.main import app
from clinic_api.api.deps import get_booking_service, get_query_service
from clinic_api.core.database import Base, create_db_engine, get_db
from clinic_api.schemas.appointment import AppointmentCreate
from clinic_api.services.booking_service import BookingService
from clinic_api.services.query_service import AppointmentQueryService

SQLALCHEMY_DATABASE_URL = os.environ["TEST_DATABASE_URL"]
engine = create_db_engine(SQLALCHEMY_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Fixed "now" so the 2025 scenarios stay in the future
NOW = datetime(2025, 11, 1, 9, 0, 0)

def fixed_clock() -> datetime:
    return NOW

def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()

def override_get_booking_service():
    db = TestingSessionLocal()
    try:
        yield BookingService(db, clock=fixed_clock)
    finally:
        db.close()

def override_get_query_service():
    db = TestingSessionLocal()
    try:
        yield AppointmentQueryService(db, clock=fixed_clock)
    finally:
        db.close()

app.dependency_overrides[get_db] = override_get_db
app.dependency_overrides[get_booking_service] = override_get_booking_service
app.dependency_overrides[get_query_service] = override_get_query_service

@pytest.fixture(scope="function")
def test_db():
    # Create tables
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def db_session(test_db):
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()

@pytest.fixture
def booking_service(db_session):
    return BookingService(db_session, clock=fixed_clock)

@pytest.fixture
def query_service(db_session):
    return AppointmentQueryService(db_session, clock=fixed_clock)

@pytest.fixture
def client(test_db):
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client

def booking(clinician_id="C", patient_id="P", start="2025-12-01T10:00:00Z", end="2025-12-01T11:00:00Z"):
    return AppointmentCreate(clinician_id=clinician_id, patient_id=patient_id, start=start, end=end)
