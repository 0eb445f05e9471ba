import logging
from typing import Optional
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from nagrik.core.config import settings
from nagrik.core.components import Components, build_components
from nagrik.core.database import init_db
from nagrik.routers import complaints, health, notifications

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)


def create_app(components: Optional[Components] = None) -> FastAPI:
    """Build the API. Pass prebuilt components to run against other collaborators."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan event handler"""
        # Startup
        print("Starting Nagrik Seva API...")
        if getattr(app.state, "components", None) is None:
            await init_db()
            print("Database tables ensured (init_db)")
            app.state.components = build_components()

        await app.state.components.scheduler.start()
        print("Notification scheduler running")

        yield
        # Shutdown
        print("Shutting down Nagrik Seva API...")
        await app.state.components.scheduler.stop()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Nagrik Seva - civic complaint intake, routing and lifecycle notifications",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        openapi_tags=[
            {"name": "Complaints", "description": "Image check, complaint submission and status lookup"},
            {"name": "Notifications", "description": "Complaint lifecycle notifications"},
            {"name": "Health", "description": "Service health"},
        ],
        swagger_ui_parameters={
            "displayRequestDuration": True,
        },
    )
    app.state.components = components

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(complaints.router)
    app.include_router(notifications.router)

    return app


app = create_app()
