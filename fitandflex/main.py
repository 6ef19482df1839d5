"""Entry point for the Fit & Flex back-office API."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fitandflex import models  # noqa: F401  registers every table on Base.metadata
from fitandflex.api.v1 import router as v1_router
from fitandflex.core.config import settings
from fitandflex.core.database import Base, SessionLocal, engine
from fitandflex.core.error_handlers import register_exception_handlers
from fitandflex.core.logging_config import setup_logging
from fitandflex.services.role_service import RoleService
from fitandflex.services.user_service import UserService

logger = logging.getLogger(__name__)


def bootstrap_database() -> None:
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        RoleService(db).seed_roles()
        if settings.ADMIN_EMAIL and settings.ADMIN_PASSWORD:
            UserService(db).ensure_super_admin(
                email=settings.ADMIN_EMAIL,
                password=settings.ADMIN_PASSWORD,
                name=settings.ADMIN_NAME,
            )
        else:
            logger.warning(
                "ADMIN_EMAIL/ADMIN_PASSWORD not set, no super admin account was created"
            )
    finally:
        db.close()


@asynccontextmanager
async def lifespan(_: FastAPI):
    setup_logging()
    bootstrap_database()
    logger.info("%s started", settings.PROJECT_NAME)
    yield


app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials="*" not in settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(v1_router, prefix=settings.API_PREFIX)


@app.get("/health")
def health_check():
    return {"status": "ok"}


__all__ = ["app"]
