"""FastAPI application entry point."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import accounts, link, users
from api.errors import register_error_handlers
from config import settings
from logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)


app = FastAPI(
    title="Finale",
    description="Personal finance dashboard: bank linking and balance sync",
    version="0.1.0",
)

# CORS configuration for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Include API routers
app.include_router(users.router)
app.include_router(link.router)
app.include_router(accounts.router)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}
