import os
import sys
from pathlib import Path

# Ajoute la racine du projet au PYTHONPATH EN PREMIER
sys.path.insert(0, str(Path(__file__).parent.parent))

# Base SQLite de test AVANT d'importer l'app (le engine est créé à l'import)
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ.pop("ADMIN_EMAIL", None)
os.environ.pop("ADMIN_PASSWORD", None)

import pytest
from fastapi.testclient import TestClient

from tasktracker.core.database import Base, SessionLocal, engine
from tasktracker.core.security import create_access_token
from tasktracker.main import app
from tasktracker.models.role import Role
from tasktracker.models.user import User


@pytest.fixture(autouse=True)
def setup_teardown():
    """Crée et nettoie la DB avant/après chaque test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    """Client de test FastAPI"""
    return TestClient(app)


@pytest.fixture
def db():
    """Session DB pour les tests"""
    db = SessionLocal()
    yield db
    db.close()


def make_user(email: str, name: str = "Test", password: str = "pass123", role: Role = Role.USER) -> User:
    """Insère un utilisateur directement en base"""
    db = SessionLocal()
    user = User(email=email, name=name, role=role.value)
    user.set_password(password)
    db.add(user)
    db.commit()
    db.refresh(user)
    db.close()
    return user


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user():
    return make_user("user@example.com", name="Regular")


@pytest.fixture
def admin():
    return make_user("admin@example.com", name="Boss", role=Role.ADMIN)


@pytest.fixture
def user_token(user):
    return create_access_token(user.id, Role.USER)


@pytest.fixture
def admin_token(admin):
    return create_access_token(admin.id, Role.ADMIN)
