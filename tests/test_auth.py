from conftest import auth_header, make_user
from tasktracker.core.security import verify_token
from tasktracker.models.role import Role
from tasktracker.models.user import User


def test_register_success(client):
    """Test : inscription -> 201 + token"""
    response = client.post("/api/auth/register", json={
        "email": "new@example.com",
        "password": "password123",
        "name": "New"
    })
    assert response.status_code == 201
    data = response.json()
    assert data["role"] == "USER"
    assert verify_token(data["token"]).role == Role.USER

def test_register_ignores_role_in_body(client):
    """Test : impossible de s'inscrire directement en ADMIN"""
    response = client.post("/api/auth/register", json={
        "email": "sneaky@example.com",
        "password": "password123",
        "name": "Sneaky",
        "role": "ADMIN"
    })
    assert response.status_code == 201
    assert response.json()["role"] == "USER"

def test_register_missing_fields(client):
    response = client.post("/api/auth/register", json={"email": "x@example.com", "password": "p"})
    assert response.status_code == 400
    assert "name" in response.json()["error"]

def test_register_invalid_email(client):
    response = client.post("/api/auth/register", json={"email": "nope", "password": "p", "name": "N"})
    assert response.status_code == 400

def test_register_duplicate_email(client):
    """Test : impossible de créer 2 users avec le même email"""
    body = {"email": "dup@example.com", "password": "password123", "name": "Dup"}
    client.post("/api/auth/register", json=body)
    response = client.post("/api/auth/register", json=body)
    assert response.status_code == 400
    assert response.json() == {"error": "Email already registered"}

def test_login_success(client):
    """Test : le token décodé correspond à l'utilisateur en base"""
    admin = make_user("boss@example.com", password="secret", role=Role.ADMIN)
    response = client.post("/api/auth/login", json={"email": "boss@example.com", "password": "secret"})
    assert response.status_code == 200
    data = response.json()
    assert data["role"] == "ADMIN"
    claims = verify_token(data["token"])
    assert claims.user_id == admin.id
    assert claims.role == Role.ADMIN

def test_login_wrong_password_and_unknown_email_look_the_same(client):
    make_user("known@example.com", password="correct")
    wrong_password = client.post("/api/auth/login", json={"email": "known@example.com", "password": "bad"})
    unknown_email = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "correct"})
    assert wrong_password.status_code == 401
    assert unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json() == {"error": "Invalid email or password"}

def test_login_missing_password(client):
    response = client.post("/api/auth/login", json={"email": "known@example.com"})
    assert response.status_code == 400

def test_refresh_picks_up_store_role(client, db, user, user_token):
    """Test : après promotion en base, /refresh émet un token ADMIN"""
    stored = db.get(User, user.id)
    stored.role = Role.ADMIN.value
    db.commit()

    response = client.post("/api/auth/refresh", headers=auth_header(user_token))
    assert response.status_code == 200
    assert response.json()["role"] == "ADMIN"
    assert verify_token(response.json()["token"]).role == Role.ADMIN

def test_refresh_requires_token(client):
    assert client.post("/api/auth/refresh").status_code == 401

def test_logout(client):
    response = client.post("/api/auth/logout")
    assert response.status_code == 200
    assert response.json() == {"message": "Logged out"}

def test_health_z(client):
    """Test : l'endpoint health fonctionne"""
    response = client.get("/health/z")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"

def test_unknown_route_uses_error_body(client):
    response = client.get("/api/nothing-here")
    assert response.status_code == 404
    assert "error" in response.json()

def test_health_ready(client):
    response = client.get("/health/ready")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database": "ok"}

def test_bootstrap_admin(db, monkeypatch):
    """L'admin défini par l'environnement est créé une seule fois"""
    from tasktracker.core.config import settings
    from tasktracker.services.user_service import bootstrap_admin_if_needed

    monkeypatch.setattr(settings, "ADMIN_EMAIL", "root@example.com")
    monkeypatch.setattr(settings, "ADMIN_PASSWORD", "rootpass")

    admin = bootstrap_admin_if_needed(db)
    assert admin.role == "ADMIN"
    assert bootstrap_admin_if_needed(db) is None

def test_bootstrap_admin_disabled_without_env(db):
    from tasktracker.services.user_service import bootstrap_admin_if_needed

    assert bootstrap_admin_if_needed(db) is None

def test_login_with_mixed_case_email(client):
    """Test : l'email saisi à l'inscription fonctionne tel quel au login"""
    body = {"email": "Alice@Example.COM", "password": "p", "name": "A"}
    assert client.post("/api/auth/register", json=body).status_code == 201

    same = client.post("/api/auth/login", json={"email": "Alice@Example.COM", "password": "p"})
    lower_domain = client.post("/api/auth/login", json={"email": "Alice@example.com", "password": "p"})
    assert same.status_code == 200
    assert lower_domain.status_code == 200

def test_register_duplicate_email_other_domain_case(client):
    client.post("/api/auth/register", json={"email": "carol@example.com", "password": "p", "name": "C"})
    response = client.post("/api/auth/register", json={"email": "carol@EXAMPLE.com", "password": "p", "name": "C2"})
    assert response.status_code == 400
