import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from tasktracker.core.database import get_db
from tasktracker.core.deps import get_current_user
from tasktracker.core.errors import Forbidden, Unauthenticated
from tasktracker.core.security import create_access_token
from tasktracker.models.role import Role
from tasktracker.schemas.task import MessageResponse
from tasktracker.schemas.user import LoginRequest, Principal, RegisterRequest, TokenResponse
from tasktracker.services.user_service import authenticate_user, get_user_by_id, register_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(user_data: RegisterRequest, db: Session = Depends(get_db)):
    """Créer un nouvel utilisateur et recevoir son token"""
    user = register_user(db, user_data)
    role = Role(user.role)
    return {"token": create_access_token(user.id, role), "role": role}

@router.post("/login", response_model=TokenResponse)
def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    """Se connecter et recevoir le token + rôle"""
    user = authenticate_user(db, credentials.email, credentials.password)
    if not user:
        logger.info("Failed login attempt")
        raise Unauthenticated("Invalid email or password")

    role = Role(user.role)
    return {"token": create_access_token(user.id, role), "role": role}

@router.post("/refresh", response_model=TokenResponse)
def refresh(principal: Principal = Depends(get_current_user), db: Session = Depends(get_db)):
    """Nouveau token avec le rôle actuellement en base"""
    user = get_user_by_id(db, principal.id)
    if not user:
        raise Forbidden("User not found")

    role = Role(user.role)
    return {"token": create_access_token(user.id, role), "role": role}

@router.post("/logout", response_model=MessageResponse)
def logout():
    # tokens sans état : rien à révoquer côté serveur, le client oublie son token
    return {"message": "Logged out"}
