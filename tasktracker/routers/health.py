from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session
from tasktracker.core.database import get_db

router = APIRouter(tags=["health"])

@router.get("/z")
def healthz():
    # Check si l'API est up
    return {"status": "ok"}

@router.get("/ready")
def ready(db: Session = Depends(get_db)):
    # Check si la base répond (une erreur SQLAlchemy -> 500 générique)
    db.execute(text("SELECT 1"))
    return {"status": "ok", "database": "ok"}
