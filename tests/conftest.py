"""Shared fixtures: in-memory database, test client and bearer tokens."""

import os
from datetime import datetime, timedelta, timezone

# Configure BEFORE importing habit_tracker; Config reads the environment at import
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hs256"

import jwt
import pytest

from habit_tracker import app as flask_app
from habit_tracker.models import db


def make_token(user_id="user-1", expires_in=timedelta(hours=1), secret=None, **claims):
    payload = {"sub": user_id, "exp": datetime.now(timezone.utc) + expires_in, **claims}
    return jwt.encode(payload, secret or flask_app.config["JWT_SECRET_KEY"], algorithm="HS256")


def auth_header(user_id="user-1"):
    return {"Authorization": f"Bearer {make_token(user_id)}"}


@pytest.fixture
def app():
    flask_app.config["TESTING"] = True
    with flask_app.app_context():
        db.create_all()
        yield flask_app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()
