import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from resume_forge.app.api.errors import register_error_handlers
from resume_forge.app.api.routes.auth import router as auth_router
from resume_forge.app.api.routes.credits import router as credits_router
from resume_forge.app.api.routes.payments import router as payments_router
from resume_forge.app.api.routes.tailor import router as tailor_router

log = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        None

    Returns:
        FastAPI: The configured FastAPI application instance.

    Notes:
        1. Initialize the FastAPI application with the title "ResumeForge API".
        2. Add CORS middleware so the single-page front end can call the API.
        3. Install the application error handler.
        4. Include the auth, credits, tailor and payments routers.
        5. Define a health check endpoint at "/health" that returns {"status": "ok"}.

    """
    _msg = "Creating FastAPI application"
    log.debug(_msg)

    app = FastAPI(title="ResumeForge API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # TODO: Restrict to the front-end origin in production
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    app.include_router(auth_router)
    app.include_router(credits_router)
    app.include_router(tailor_router)
    app.include_router(payments_router)

    @app.get("/health")
    async def health_check() -> dict:
        """Liveness probe."""
        return {"status": "ok"}

    _msg = "FastAPI application created successfully"
    log.debug(_msg)
    return app


app = create_app()
