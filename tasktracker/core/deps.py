"""Dépendances FastAPI d'authentification et d'autorisation.

- `get_current_user` : résout le bearer token en `Principal`
  (pas de token -> 401, token invalide/expiré ou user supprimé -> 403)
- `require_role` / `require_admin` : garde de rôle, toujours après
  `get_current_user`

Le rôle du Principal est celui du token, pas celui en base : un changement
de rôle ne prend effet qu'avec un nouveau token (/api/auth/refresh).
"""

import logging
from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from tasktracker.core.database import get_db
from tasktracker.core.errors import Forbidden, Unauthenticated
from tasktracker.core.security import TokenError, verify_token
from tasktracker.models.role import Role
from tasktracker.schemas.user import Principal
from tasktracker.services.user_service import get_user_by_id

logger = logging.getLogger(__name__)


def extract_bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise Unauthenticated("Missing token")

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise Unauthenticated("Invalid Authorization header format. Expected: Bearer <token>")

    return parts[1]


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    authorization: Optional[str] = Header(None)
) -> Principal:
    token = extract_bearer_token(authorization)

    try:
        claims = verify_token(token)
    except TokenError as e:
        logger.info(f"Rejected token ({type(e).__name__}) on {request.url.path}")
        raise Forbidden("Invalid or expired token")

    user = get_user_by_id(db, claims.user_id)
    if not user:
        logger.info(f"Token for missing user {claims.user_id}")
        raise Forbidden("User not found")

    principal = Principal(id=user.id, name=user.name, email=user.email, role=claims.role)
    request.state.principal = principal
    return principal


def check_role(principal: Optional[Principal], required: Role) -> Principal:
    if principal is None:
        # la garde a tourné sans get_current_user
        raise Unauthenticated("Authentication required")
    if principal.role != required:
        logger.warning(f"User {principal.id} with role {principal.role.value} denied, {required.value} required")
        raise Forbidden(f"{required.value.capitalize()} Access Required")
    return principal


def require_role(required: Role):
    def guard(request: Request, _: Principal = Depends(get_current_user)) -> Principal:
        return check_role(getattr(request.state, "principal", None), required)

    return guard


require_admin = require_role(Role.ADMIN)
