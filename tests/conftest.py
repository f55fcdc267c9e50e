import os
import tempfile
import uuid

# Point the app at SQLite before anything imports app.core.config
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="school-portal-uploads-")
os.environ.pop("SMTP_HOST", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core import security
from app.core.database import Base, get_db
from app.main import app
from app.models import Class, Grade, Student, Subject, Teacher, User, UserRole

# Create in-memory SQLite database for testing
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def bearer(user: User) -> dict:
    return {"Authorization": f"Bearer {security.create_access_token(user.id)}"}


@pytest.fixture
def make_user(db):
    def _make(role=UserRole.admin, email=None, password="secret123", **kwargs):
        user = User(
            email=email or f"{role.value}-{uuid.uuid4().hex[:8]}@school.test",
            password_hash=security.get_password_hash(password),
            role=role,
            is_active=True,
            **kwargs,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def admin(make_user):
    return make_user(UserRole.admin, email="admin@school.test", first_name="Ada", last_name="Admin")


@pytest.fixture
def admin_headers(admin):
    return bearer(admin)


@pytest.fixture
def make_subjects(db):
    def _make(*names):
        subjects = [Subject(name=name) for name in names]
        db.add_all(subjects)
        db.commit()
        return {s.name: s for s in subjects}

    return _make


@pytest.fixture
def make_class(db):
    def _make(grade_name: str, name: str, academic_year: int = 2025, teacher_id=None):
        grade = db.query(Grade).filter(Grade.name == grade_name).first()
        if not grade:
            grade = Grade(name=grade_name)
            db.add(grade)
            db.flush()
        cls = Class(name=name, grade_id=grade.id, academic_year=academic_year, teacher_id=teacher_id)
        db.add(cls)
        db.commit()
        db.refresh(cls)
        return cls

    return _make


@pytest.fixture
def make_student(db):
    def _make(first_name="Thabo", last_name="Nkosi", class_id=None, user_id=None):
        student = Student(
            student_id=f"STU{uuid.uuid4().hex[:6]}",
            first_name=first_name,
            last_name=last_name,
            class_id=class_id,
            user_id=user_id,
        )
        db.add(student)
        db.commit()
        db.refresh(student)
        return student

    return _make


@pytest.fixture
def make_teacher(db):
    def _make(first_name="Lerato", last_name="Mokoena", user_id=None):
        teacher = Teacher(first_name=first_name, last_name=last_name, user_id=user_id)
        db.add(teacher)
        db.commit()
        db.refresh(teacher)
        return teacher

    return _make


@pytest.fixture
def headers_for():
    return bearer
