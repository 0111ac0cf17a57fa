"""FastAPI application entry point."""

from dotenv import load_dotenv

from fastapi import FastAPI

# Load environment variables from .env file
load_dotenv()

from app import models  # noqa: F401,E402
from app.api.routes import router  # noqa: E402
from app.core.config import settings  # noqa: E402
from app.core.errors import add_exception_handlers  # noqa: E402
from app.core.log import configure_logging  # noqa: E402
from app.db.init_db import init_db  # noqa: E402

configure_logging(settings.search_debug_logging)

app = FastAPI(title=settings.project_name)
add_exception_handlers(app)
app.include_router(router, prefix=settings.api_v1_prefix)


@app.on_event("startup")
def on_startup() -> None:
    """Initialize database artifacts."""
    init_db()


@app.get("/", tags=["root"])
async def root() -> dict[str, str]:
    """Basic sanity endpoint."""
    return {"message": "Recommendation Search API is running"}


@app.get("/health", tags=["health"])
async def health() -> dict[str, str]:
    """Health check endpoint for Docker."""
    return {"status": "healthy"}
