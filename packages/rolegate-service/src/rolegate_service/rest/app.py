"""FastAPI application factory."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rolegate_service.db.engine import close_db, create_tables, init_db
from rolegate_service.rest.routes.auth import router as auth_router
from rolegate_service.rest.routes.health import router as health_router
from rolegate_service.rest.routes.projects import router as projects_router
from rolegate_service.rest.routes.roles import router as roles_router
from rolegate_service.settings import settings


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    await init_db()
    if settings.database_create_tables:
        await create_tables()
    yield
    await close_db()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Rolegate API",
        description="Credential provider, role-assignment store and project store for the workspace",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Public routes
    app.include_router(health_router, tags=["health"])

    # Auth routes (signup/login/refresh are public; /me is protected inside the router)
    app.include_router(auth_router, prefix="/api/v1", tags=["auth"])

    # Protected API routes
    app.include_router(roles_router, prefix="/api/v1", tags=["roles"])
    app.include_router(projects_router, prefix="/api/v1", tags=["projects"])

    return app
