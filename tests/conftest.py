import os
import uuid
from datetime import datetime, timezone

# Configure an in-memory database and a throwaway JWT secret before importing
# tutorlink modules: settings are read once, at import time.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "tutorlink-test-secret"
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("API_BASE_URL", "http://testserver/api")
os.environ.setdefault("DEBOUNCE_SECONDS", "0")

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import tutorlink.db.base  # noqa: E402,F401
from tutorlink.client.auth import StaticTokenProvider  # noqa: E402
from tutorlink.client.demo_classes import DemoClassService  # noqa: E402
from tutorlink.client.http import ApiClient  # noqa: E402
from tutorlink.client.tuition_jobs import TuitionJobsService  # noqa: E402
from tutorlink.client.tutor_applications import TutorApplicationService  # noqa: E402
from tutorlink.client.tutor_requests import TutorRequestService  # noqa: E402
from tutorlink.core.security import create_access_token  # noqa: E402
from tutorlink.db.base_class import Base  # noqa: E402
from tutorlink.db.session import SessionLocal, engine  # noqa: E402
from tutorlink.main import app  # noqa: E402
from tutorlink.models.application import TutorApplication  # noqa: E402
from tutorlink.models.demo_class import DemoClass  # noqa: E402
from tutorlink.models.tutor_request import TutorAssignment, TutorRequest  # noqa: E402
from tutorlink.models.user import User  # noqa: E402


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _schema():
    """Fresh tables for every test."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def _add_user(role: str, name: str) -> User:
    session = SessionLocal()
    try:
        user = User(
            id=uuid.uuid4(),
            email=f"{name.lower().replace(' ', '.')}@tutorlink.test",
            full_name=name,
            phone="01700000000",
            role=role,
            is_active=True,
        )
        session.add(user)
        session.commit()
        return user
    finally:
        session.close()


@pytest.fixture
def admin():
    return _add_user("admin", "Ada Admin")


@pytest.fixture
def manager():
    return _add_user("manager", "Mina Manager")


@pytest.fixture
def student():
    return _add_user("student", "Sami Student")


@pytest.fixture
def other_student():
    return _add_user("student", "Olu Other")


@pytest.fixture
def tutor():
    return _add_user("tutor", "Tara Tutor")


@pytest.fixture
def tutor2():
    return _add_user("tutor", "Theo Tutor")


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------

def request_payload(**overrides) -> dict:
    """A valid tutor request body in the camelCase wire format."""
    body = {
        "phoneNumber": "01711111111",
        "studentGender": "female",
        "district": "Dhaka",
        "area": "Mirpur",
        "detailedLocation": "Road 4, House 12",
        "category": "Bangla Medium",
        "selectedSubjects": ["Math", "Physics"],
        "selectedClasses": ["Class 9"],
        "tutorGenderPreference": "any",
        "salaryRange": {"min": 3000, "max": 5000},
        "tutoringDays": 3,
        "tutoringType": "Home Tutoring",
    }
    body.update(overrides)
    return body


@pytest.fixture
def make_request():
    """Insert a tutor request directly; returns its id."""

    def _make(student=None, status="Active", subjects=("Math",), district="Dhaka", **fields):
        session = SessionLocal()
        try:
            values = {
                "phone_number": "01711111111",
                "area": "Mirpur",
                "selected_classes": ["Class 8"],
                "salary_min": 3000,
                "salary_max": 5000,
                **fields,
            }
            req = TutorRequest(
                student_id=student.id if student else None,
                district=district,
                selected_subjects=list(subjects),
                status=status,
                **values,
            )
            session.add(req)
            session.commit()
            return req.id
        finally:
            session.close()

    return _make


@pytest.fixture
def make_assignment():
    def _make(request_id, tutor, status="pending", demo_class_id=None):
        session = SessionLocal()
        try:
            assignment = TutorAssignment(
                tutor_request_id=request_id,
                tutor_id=tutor.id,
                status=status,
                demo_class_id=demo_class_id,
            )
            session.add(assignment)
            session.commit()
            return assignment.id
        finally:
            session.close()

    return _make


@pytest.fixture
def make_application():
    def _make(request_id, tutor, status="pending"):
        session = SessionLocal()
        try:
            application = TutorApplication(
                tutor_request_id=request_id, tutor_id=tutor.id, status=status
            )
            session.add(application)
            session.commit()
            return application.id
        finally:
            session.close()

    return _make


@pytest.fixture
def make_demo_class():
    def _make(tutor, student=None, request_id=None, status="pending"):
        session = SessionLocal()
        try:
            demo = DemoClass(
                tutor_request_id=request_id,
                student_id=student.id if student else None,
                tutor_id=tutor.id,
                subject="Math",
                requested_date=datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc),
                duration=60,
                status=status,
            )
            session.add(demo)
            session.commit()
            return demo.id
        finally:
            session.close()

    return _make


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest_asyncio.fixture
async def api_factory():
    """Build ApiClients that talk to the app in-process, one per signed-in user."""
    clients = []

    def _make(user=None, **kwargs):
        token = create_access_token(user.id, user.role) if user else None
        api = ApiClient(
            base_url="http://testserver/api",
            token_provider=StaticTokenProvider(token),
            transport=httpx.ASGITransport(app=app),
            **kwargs,
        )
        clients.append(api)
        return api

    yield _make

    for api in clients:
        await api.aclose()


@pytest_asyncio.fixture
async def services(api_factory):
    """All four client services for one user."""

    def _make(user=None):
        api = api_factory(user)
        return {
            "requests": TutorRequestService(api),
            "jobs": TuitionJobsService(api),
            "applications": TutorApplicationService(api),
            "demos": DemoClassService(api),
        }

    return _make


@pytest.fixture
def headers():
    """headers(user) -> Authorization header for that user."""
    return auth_headers


@pytest.fixture
def payload():
    """payload(**overrides) -> valid camelCase tutor request body."""
    return request_payload
