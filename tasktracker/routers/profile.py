from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from tasktracker.core.database import get_db
from tasktracker.core.deps import get_current_user
from tasktracker.core.errors import NotFound
from tasktracker.schemas.user import Principal, ProfileUpdate, UserResponse
from tasktracker.services.user_service import get_user_by_id, update_profile

router = APIRouter(prefix="/api/profile", tags=["profile"])

@router.get("", response_model=UserResponse)
def get_profile(db: Session = Depends(get_db), principal: Principal = Depends(get_current_user)):
    user = get_user_by_id(db, principal.id)
    if not user:
        raise NotFound("User not found")
    return user

@router.put("", response_model=UserResponse)
def put_profile(
    profile_data: ProfileUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_user)
):
    # Mise à jour partielle, le rôle n'est modifiable que par un ADMIN
    return update_profile(db, principal.id, profile_data, caller_role=principal.role)
