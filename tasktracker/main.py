import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from tasktracker.core.config import settings
from tasktracker.core.database import engine, Base, SessionLocal
from tasktracker.core.errors import register_exception_handlers
from tasktracker.routers import health, auth, profile, tasks
from tasktracker.services.user_service import bootstrap_admin_if_needed

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Init DB
Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    db = SessionLocal()
    try:
        admin = bootstrap_admin_if_needed(db)
        if admin:
            logger.info(f"Bootstrap admin created: {admin.email}")
    finally:
        db.close()
    yield


app = FastAPI(
    title="Task Tracker API",
    version="1.0.0",
    lifespan=lifespan,
)

register_exception_handlers(app)

# Routes
app.include_router(health.router, prefix="/health")
app.include_router(auth.router)
app.include_router(profile.router)
app.include_router(tasks.router)


@app.get("/")
def root():
    return {"message": "Task Tracker API is running"}
