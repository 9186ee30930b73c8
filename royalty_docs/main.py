"""
Royalty Docs - FastAPI Application

Serves signed and generated royalty split agreements for the label.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from royalty_docs import __version__
from royalty_docs.core.config import settings
from royalty_docs.core.database import engine
from royalty_docs.routers.documents import router as documents_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events."""
    yield
    # Cleanup on shutdown
    await engine.dispose()


app = FastAPI(
    title="Royalty Docs",
    description="Contract documents for royalty split agreements",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(documents_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
