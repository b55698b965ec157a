from datetime import datetime, timezone, timedelta

import pytest

from config import Config
from lifelessons import create_app
from lifelessons import firestore_dao as dao
from lifelessons.firestore_models import Lesson
from lifelessons.services.identity import issue_token
from tests.fakes import FakeFirestore


class TestingConfig(Config):
    TESTING = True
    AUTH_PROVIDER = 'signed'
    TOKEN_SECRET = 'test-token-secret'
    STRIPE_SECRET = 'sk_test_123'
    SITE_DOMAIN = 'http://localhost:5173'


@pytest.fixture
def db(monkeypatch):
    fake = FakeFirestore()
    monkeypatch.setattr(dao, 'get_db', lambda: fake)
    return fake


@pytest.fixture
def app(db):
    return create_app(TestingConfig)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(db):
    def _make_user(email, role='user', premium=False, name=None):
        dao.upsert_user(email, name=name or email.split('@')[0])
        if role != 'user':
            dao.update_user_role(email, role)
        if premium:
            dao.mark_premium(email, 'pi_test')
        return email
    return _make_user


@pytest.fixture
def auth(app):
    """Authorization headers carrying a signed token for ``email``."""
    def _auth(email):
        with app.app_context():
            token = issue_token(email)
        return {'Authorization': f'Bearer {token}'}
    return _auth


@pytest.fixture
def make_lesson(db):
    base = datetime(2026, 1, 1, tzinfo=timezone.utc)
    counter = {'n': 0}

    def _make_lesson(creator='writer@example.com', age_days=None, **fields):
        counter['n'] += 1
        created = base + timedelta(minutes=counter['n']) if age_days is None \
            else datetime.now(timezone.utc) - timedelta(days=age_days)
        flags = {k: fields.pop(k) for k in ('isFeatured', 'isDeleted', 'savedCount') if k in fields}
        lesson = Lesson(
            title=fields.pop('title', f"Lesson {counter['n']}"),
            shortDescription=fields.pop('shortDescription', 'A short lesson'),
            creatorEmail=creator,
            created_at=created,
            **fields,
        )
        lesson_id = dao.create_lesson(lesson)
        if flags:
            db.collection('lessons').document(lesson_id).update(flags)
        return lesson_id
    return _make_lesson
