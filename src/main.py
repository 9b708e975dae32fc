"""FastAPI application entry point."""

from fastapi import FastAPI

from src.api import auth, devices, recipes
from src.config import get_settings

settings = get_settings()

app = FastAPI(
    title="ClipCook API",
    description="Turns cooking videos into structured, remixable recipes",
    version="0.1.0",
    # Interactive docs only outside production
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None,
)

app.include_router(auth.router)
app.include_router(recipes.router)
app.include_router(devices.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "environment": settings.environment}
