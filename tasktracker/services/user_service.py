"""User service : lecture/écriture des utilisateurs"""

import logging
from typing import Optional

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.orm import Session

from tasktracker.core.config import settings
from tasktracker.core.errors import Forbidden, InvalidArgument, NotFound
from tasktracker.models.role import Role
from tasktracker.models.user import User
from tasktracker.schemas.user import ProfileUpdate, RegisterRequest

logger = logging.getLogger(__name__)


def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def normalize_email(email: str) -> str:
    """Même forme que EmailStr (domaine en minuscules), brute si invalide"""
    try:
        return validate_email(email, check_deliverability=False).normalized
    except EmailNotValidError:
        return email.strip()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def create_user(db: Session, email: str, password: str, name: str, role: Role = Role.USER) -> User:
    # Vérifie si l'email existe déjà
    if get_user_by_email(db, email):
        raise InvalidArgument("Email already registered")

    new_user = User(email=normalize_email(email), name=name, role=Role(role).value)
    new_user.set_password(password)

    db.add(new_user)
    db.commit()
    db.refresh(new_user)
    logger.info(f"User {new_user.id} created with role {new_user.role}")
    return new_user


def register_user(db: Session, data: RegisterRequest) -> User:
    return create_user(db, email=data.email, password=data.password, name=data.name)


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Retourne l'utilisateur si les identifiants sont bons, sinon None.

    Pas de distinction email inconnu / mauvais mot de passe pour l'appelant.
    """
    user = get_user_by_email(db, email)
    if not user or not user.verify_password(password):
        return None
    return user


def update_profile(db: Session, user_id: int, data: ProfileUpdate, caller_role: Role) -> User:
    changes = data.model_dump(exclude_unset=True, exclude_none=True)

    # Seul un ADMIN peut changer un rôle (pas d'auto-promotion)
    if "role" in changes and caller_role != Role.ADMIN:
        raise Forbidden("Admin Access Required")

    user = get_user_by_id(db, user_id)
    if not user:
        raise NotFound("User not found")

    if "email" in changes:
        new_email = normalize_email(changes["email"])
        if new_email != user.email:
            if get_user_by_email(db, new_email):
                raise InvalidArgument("Email already registered")
            user.email = new_email
    if "name" in changes:
        user.name = changes["name"]
    if "password" in changes:
        user.set_password(changes["password"])
    if "role" in changes:
        user.role = Role(changes["role"]).value

    db.commit()
    db.refresh(user)
    return user


def bootstrap_admin_if_needed(db: Session) -> Optional[User]:
    """Crée l'admin défini par ADMIN_EMAIL / ADMIN_PASSWORD s'il n'existe pas encore."""
    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        return None
    if get_user_by_email(db, settings.ADMIN_EMAIL):
        return None
    return create_user(
        db,
        email=settings.ADMIN_EMAIL,
        password=settings.ADMIN_PASSWORD,
        name=settings.ADMIN_NAME,
        role=Role.ADMIN,
    )
