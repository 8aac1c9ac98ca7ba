import fcntl
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskboard.config import settings
from taskboard.database import Base, engine
from taskboard.errors import register_exception_handlers
from taskboard.logging_setup import setup_logging
from taskboard.models import preferences, projects, tasks, user  # noqa: F401  (register mappers)
from taskboard.routers.auth import router as auth_router
from taskboard.routers.projects import router as projects_router
from taskboard.routers.tasks import router as tasks_router
from taskboard.routers.dashboard import router as dashboard_router
from taskboard.routers.preferences import router as preferences_router

logger = logging.getLogger("taskboard.main")


async def create_tables():
    # Every gunicorn worker runs the lifespan; the lock makes them take turns,
    # so only the first one actually issues CREATE TABLE.
    with open(settings.SCHEMA_LOCK_FILE, "w") as lock_fd:
        fcntl.flock(lock_fd, fcntl.LOCK_EX)
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("[PROCESS %s] Schema checked", os.getpid())
        finally:
            fcntl.flock(lock_fd, fcntl.LOCK_UN)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(log_dir=settings.LOG_DIR, console_level=settings.LOG_LEVEL)
    if settings.CREATE_TABLES:
        await create_tables()

    yield

    await engine.dispose()


app = FastAPI(
    lifespan=lifespan,
    title="Taskboard API",
    description="Projects, backlog and tasks with per-user visibility, dashboard statistics and preferences",
    version="1.0.0",
)

# Enable CORS for the frontend
app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=settings.CORS_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth_router)
app.include_router(projects_router)
app.include_router(tasks_router)
app.include_router(dashboard_router)
app.include_router(preferences_router)

@app.get("/")
def root():
    return {"message": "Taskboard API running"}
