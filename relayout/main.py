import logging
from pathlib import Path

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI

# Load environment variables from .env before settings are read.
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path, override=True)

from relayout.api.v1.routes import router as api_v1_router  # noqa: E402
from relayout.config import get_settings  # noqa: E402


settings = get_settings()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

if env_path.exists():
    logger.info("Loaded environment from %s", env_path)
else:
    logger.info("No .env file at %s, using process environment", env_path)


def create_app() -> FastAPI:
    """
    Application factory for the layout resolution API.

    Keeping this as a separate function makes it easier to extend
    configuration and testing later.
    """
    app = FastAPI(
        title="Relayout API",
        version="0.1.0",
        description="Rule-based re-layout of labeled design layers for many aspect ratios and channels.",
    )

    # Infrastructure-level health check (non-versioned) primarily for ops.
    @app.get("/health", tags=["health"])
    async def root_health_check() -> dict:
        """Simple root health check endpoint."""
        return {"status": "ok"}

    # Public, versioned API routes.
    app.include_router(api_v1_router)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("relayout.main:app", host="127.0.0.1", port=8000)
