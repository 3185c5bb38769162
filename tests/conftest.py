import os
from datetime import datetime, timedelta

os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import app.models.all_models  # noqa: F401
from app.core.config import settings
from app.core.database import Base, get_db
from app.core.dependencies import get_attempt_engine, get_certificate_renderer
from app.models.quiz_db.seed_quiz import add_course
from app.models.user_db.user_db import User
from app.services.attempt_engine import AttemptEngine
from app.services.certificate_renderer import StaticLinkRenderer


def create_access_token(data, expires_delta=timedelta(minutes=30)):
    """Mint a token the way the auth service does."""
    claims = dict(data, exp=datetime.utcnow() + expires_delta)
    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


class FakeClock:
    def __init__(self, start=datetime(2026, 3, 1, 9, 0, 0)):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)
        return self.now


def mc_question(text="Pick one", points=1, correct="A", options=("A", "B", "C", "D")):
    return {
        "text": text,
        "type": "multiple_choice",
        "points": points,
        "answers": [{"text": option, "is_correct": option == correct} for option in options],
    }


def tf_question(text="True or false?", points=1, correct="True"):
    return {
        "text": text,
        "type": "true_false",
        "points": points,
        "answers": [
            {"text": "True", "is_correct": correct == "True"},
            {"text": "False", "is_correct": correct == "False"},
        ],
    }


def blank_question(text="Fill it", points=1, accepted=("Paris",), wrong=()):
    answers = [{"text": value, "is_correct": True} for value in accepted]
    answers += [{"text": value, "is_correct": False} for value in wrong]
    return {"text": text, "type": "fill_in_blank", "points": points, "answers": answers}


def quiz_data(title="Quiz", questions=None, passing_score=50, time_limit=None, is_active=True):
    return {
        "title": title,
        "passing_score": passing_score,
        "time_limit": time_limit,
        "is_active": is_active,
        "questions": questions if questions is not None else [mc_question()],
    }


class ContentFactory:
    def __init__(self, db: Session):
        self.db = db

    def user(self, name="Asha Patil", email=None) -> User:
        user = User(name=name, email=email or f"{name.lower().replace(' ', '.')}@example.com")
        self.db.add(user)
        self.db.commit()
        return user

    def course(self, title="Course", quizzes=None, subtopic=None):
        quizzes = quizzes if quizzes is not None else [quiz_data()]
        chapters = [
            {"title": f"{title} chapter {index + 1}", "quiz": quiz}
            for index, quiz in enumerate(quizzes)
        ]
        course = add_course(self.db, title, chapters, subtopic=subtopic)
        self.db.commit()
        return course

    def quizzes(self, course):
        return [chapter.quiz for chapter in course.chapters if chapter.quiz is not None]

    def quiz(self, **kwargs):
        course = self.course(quizzes=[quiz_data(**kwargs)])
        return self.quizzes(course)[0]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        dbapi_connection.execute("PRAGMA foreign_keys=ON")

    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def factory(db):
    return ContentFactory(db)


@pytest.fixture
def student(factory):
    return factory.user()


@pytest.fixture
def attempt_engine(db, clock):
    return AttemptEngine(db, clock=clock)


@pytest.fixture
def renderer():
    return StaticLinkRenderer("https://files.example.com/certificates")


@pytest.fixture
def client(session_factory, clock, renderer):
    from main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    def override_get_attempt_engine(db: Session = Depends(get_db)):
        return AttemptEngine(db, clock=clock, renderer=renderer)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_attempt_engine] = override_get_attempt_engine
    app.dependency_overrides[get_certificate_renderer] = lambda: renderer
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(student):
    token = create_access_token({"sub": str(student.id)})
    return {"Authorization": f"Bearer {token}"}
