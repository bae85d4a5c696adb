"""
Université Quiz - Test Configuration and Fixtures
"""
import os
from typing import Generator

import pytest

# Set testing environment before the app reads its settings
os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_ACCESS_SECRET"] = "test-access-secret-for-testing-only"
os.environ["JWT_REFRESH_SECRET"] = "test-refresh-secret-for-testing-only"
os.environ["ADMIN_CODE"] = "admin-code-for-tests"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_TO_FILE"] = "false"
os.environ["SENTRY_DSN"] = ""
os.environ["SMTP_HOST"] = ""

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_admin_token_store
from app.core.database import Base, get_db
from app.core.security import SecurityUtils
from app.main import app
from app.models import GradeRecord, Question, Quiz, User
from app.services.admin_tokens import InMemoryAdminTokenStore

ADMIN_CODE = "admin-code-for-tests"
STRONG_PASSWORD = "Vert!Soleil42"

# Test database setup: one shared in-memory connection
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(
    bind=test_engine, autocommit=False, autoflush=False, expire_on_commit=False
)


class FakeClock:
    """Manually advanced clock for the admin token store"""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database for each test"""
    Base.metadata.create_all(bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def admin_store(clock: FakeClock) -> InMemoryAdminTokenStore:
    return InMemoryAdminTokenStore(ttl_seconds=3600, clock=clock)


@pytest.fixture
def client(db_session: Session, admin_store: InMemoryAdminTokenStore) -> Generator[TestClient, None, None]:
    """Test client with database and admin store overrides; https so Secure cookies round-trip"""

    def override_get_db():
        session = TestSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_admin_token_store] = lambda: admin_store

    yield TestClient(app, base_url="https://testserver")

    app.dependency_overrides.clear()


@pytest.fixture
def raw_client(client: TestClient) -> TestClient:
    """Same app, but unhandled errors come back as 500 responses"""
    return TestClient(app, base_url="https://testserver", raise_server_exceptions=False)


@pytest.fixture
def make_user(db_session: Session):
    """Factory inserting a user with a known password"""

    def _make_user(
        email: str = "etudiant@example.com",
        name: str = "Awa Diop",
        password: str = STRONG_PASSWORD,
        option: str = None,
        xp: int = 0,
    ) -> User:
        user = User(
            name=name,
            email=email,
            password_hash=SecurityUtils.get_password_hash(password),
            option=option,
            xp=xp,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def test_user(make_user) -> User:
    return make_user()


@pytest.fixture
def logged_in_client(client: TestClient, test_user: User) -> TestClient:
    """Client holding the session cookies of test_user"""
    response = client.post(
        "/api/auth/connexion",
        json={"email": test_user.email, "motdepasse": STRONG_PASSWORD},
    )
    assert response.status_code == 200
    return client


@pytest.fixture
def admin_headers(admin_store: InMemoryAdminTokenStore) -> dict:
    return {"Authorization": f"Bearer {admin_store.issue()}"}


@pytest.fixture
def sample_quiz(db_session: Session) -> Quiz:
    """Three-question quiz; correct indexes 1, 0, 2"""
    quiz = Quiz(name="algebre-1", matiere="Mathématiques")
    quiz.questions = [
        Question(key_name="q1", question="2 + 2 ?", options=["3", "4", "5"], correct_index=1, explanation="2 + 2 = 4"),
        Question(key_name="q2", question="0 x 7 ?", options=["0", "7", "70"], correct_index=0, explanation="Absorbant"),
        Question(key_name="q3", question="10 / 2 ?", options=["2", "20", "5"], correct_index=2, explanation="10 / 2 = 5"),
    ]
    db_session.add(quiz)
    db_session.commit()
    db_session.refresh(quiz)
    return quiz


@pytest.fixture
def grade_records(db_session: Session):
    """Student E123: year 1 complete-ish, year 2 with a single graded period"""
    records = [
        GradeRecord(
            code_etudiant="E123", annee=1, periode=1, option="Informatique",
            academic_year="2023-2024", notes={"Maths": 50, "Physique": 70}, moyenne=0,
        ),
        GradeRecord(
            code_etudiant="E123", annee=1, periode=2, option="Informatique",
            academic_year="2023-2024", notes={"Maths": 60, "Physique": 60}, moyenne=61,
        ),
        GradeRecord(
            code_etudiant="E123", annee=2, periode=3, option="Informatique",
            academic_year="2024-2025", notes={"Maths": 60}, moyenne=60.005,
        ),
        GradeRecord(
            code_etudiant="E123", annee=3, periode=1, option="Informatique",
            academic_year="2025-2026", notes={}, moyenne=0,
        ),
    ]
    db_session.add_all(records)
    db_session.commit()
    return records
