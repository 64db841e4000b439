from datetime import datetime, timedelta, timezone

import pytest
from starlette.requests import Request

from conftest import auth_header, make_user
from tasktracker.core.deps import check_role, get_current_user
from tasktracker.core.errors import Forbidden, Unauthenticated
from tasktracker.core.security import create_access_token
from tasktracker.models.role import Role
from tasktracker.models.task import Task
from tasktracker.models.user import User
from tasktracker.schemas.user import Principal


def make_request(path: str = "/api/profile") -> Request:
    return Request({
        "type": "http",
        "method": "GET",
        "scheme": "http",
        "server": ("testserver", 80),
        "path": path,
        "query_string": b"",
        "headers": [],
    })

def create_task_in_db(db, user_id: int) -> int:
    task = Task(title="A supprimer", user_id=user_id)
    db.add(task)
    db.commit()
    db.refresh(task)
    return task.id

# ========== AUTH MIDDLEWARE ==========
def test_missing_header_is_401(client):
    response = client.get("/api/profile")
    assert response.status_code == 401
    assert response.json() == {"error": "Missing token"}

@pytest.mark.parametrize("header", ["Basic dXNlcjpwYXNz", "Bearer", "Token abc", "Bearer a b"])
def test_wrong_scheme_is_401(client, header):
    response = client.get("/api/profile", headers={"Authorization": header})
    assert response.status_code == 401

def test_garbage_token_is_403(client, user):
    response = client.get("/api/profile", headers=auth_header("not-a-jwt"))
    assert response.status_code == 403
    assert "error" in response.json()

def test_expired_token_is_403(client, user):
    issued = datetime.now(timezone.utc) - timedelta(hours=2)
    token = create_access_token(user.id, Role.USER, now=issued)
    response = client.get("/api/profile", headers=auth_header(token))
    assert response.status_code == 403

def test_token_for_deleted_user_is_403(client):
    token = create_access_token(9999, Role.USER)
    response = client.get("/api/profile", headers=auth_header(token))
    assert response.status_code == 403

def test_valid_token_attaches_principal(db, user):
    token = create_access_token(user.id, Role.USER)
    request = make_request()
    principal = get_current_user(request, db, f"Bearer {token}")
    assert principal == Principal(id=user.id, name="Regular", email="user@example.com", role=Role.USER)
    assert request.state.principal == principal

def test_principal_role_comes_from_token(db):
    """Rôle ADMIN en base mais token USER : le principal est USER"""
    promoted = make_user("promoted@example.com", role=Role.ADMIN)
    token = create_access_token(promoted.id, Role.USER)
    principal = get_current_user(make_request(), db, f"Bearer {token}")
    assert principal.role == Role.USER

def test_store_role_change_ignored_until_reissue(client, db):
    demoted = make_user("demoted@example.com", role=Role.ADMIN)
    token = create_access_token(demoted.id, Role.ADMIN)

    # rétrogradé en base après émission du token
    stored = db.get(User, demoted.id)
    stored.role = Role.USER.value
    db.commit()

    task_id = create_task_in_db(db, demoted.id)
    response = client.delete(f"/api/tasks/{task_id}", headers=auth_header(token))
    assert response.status_code == 200

# ========== ROLE GUARD ==========
def test_check_role_without_principal():
    with pytest.raises(Unauthenticated):
        check_role(None, Role.ADMIN)

def test_check_role_wrong_role():
    principal = Principal(id=1, name="U", email="u@example.com", role=Role.USER)
    with pytest.raises(Forbidden):
        check_role(principal, Role.ADMIN)

def test_check_role_passes_through():
    principal = Principal(id=1, name="A", email="a@example.com", role=Role.ADMIN)
    assert check_role(principal, Role.ADMIN) is principal

def test_user_cannot_delete_task(client, db, user, user_token):
    task_id = create_task_in_db(db, user.id)
    response = client.delete(f"/api/tasks/{task_id}", headers=auth_header(user_token))
    assert response.status_code == 403
    assert response.json() == {"error": "Admin Access Required"}
    db.expire_all()
    assert db.get(Task, task_id) is not None

def test_admin_can_delete_task(client, db, user, admin_token):
    task_id = create_task_in_db(db, user.id)
    response = client.delete(f"/api/tasks/{task_id}", headers=auth_header(admin_token))
    assert response.status_code == 200
    assert response.json() == {"message": "Task deleted successfully"}

def test_guard_runs_after_authentication(client, db, user):
    task_id = create_task_in_db(db, user.id)
    response = client.delete(f"/api/tasks/{task_id}")
    assert response.status_code == 401
