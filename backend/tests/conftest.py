import os

# Must be set before the app is imported so the module-level engine is throwaway.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SENDGRID_API_KEY"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from interviewguru import main, notifier
from interviewguru.database import Base, get_db


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def sent_emails(monkeypatch):
    """Capture outgoing e-mail instead of calling SendGrid."""
    sent = []

    def fake_send(to, subject, text):
        sent.append({"to": to, "subject": subject, "text": text})
        return True

    monkeypatch.setattr(notifier, "send_email", fake_send)
    return sent


@pytest.fixture
def client(session_factory, sent_emails, monkeypatch, tmp_path):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    monkeypatch.setattr(main, "UPLOAD_DIR", str(tmp_path / "uploads"))
    main.app.dependency_overrides[get_db] = override_get_db
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()


@pytest.fixture
def make_candidate(client):
    def _make(**overrides):
        payload = {
            "name": "Ada Lovelace",
            "email": "ada@example.com",
            "phone": "+44 20 7946 0000",
            "position": "Backend Engineer",
            "experience": 7,
            "skills": ["Python", "SQL"],
            "notes": "Referred by Charles",
        }
        payload.update(overrides)
        response = client.post("/api/candidates", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _make


@pytest.fixture
def make_interview(client, make_candidate):
    def _make(candidate_id=None, **overrides):
        if candidate_id is None:
            candidate_id = make_candidate()["id"]
        payload = {
            "candidateId": candidate_id,
            "title": "Technical screen",
            "scheduledAt": "2026-03-10T14:00:00",
            "duration": 60,
            "type": "technical",
            "location": "Room 4",
            "interviewerEmail": "lead@example.com",
        }
        payload.update(overrides)
        response = client.post("/api/interviews", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _make
