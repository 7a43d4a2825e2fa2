"""
Users procedure backend
Typed list/create/delete procedures for the users table over a pooled PostgreSQL store
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import ALLOWED_ORIGINS, DB_AUTO_CREATE_SCHEMA
from database.connection import init_database, close_database
from database.schema import ensure_schema
from rpc.contracts.registry import get_all_contracts
from api.routes import health, procedures
from utils.error_handling import setup_error_handling

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager: the pool lives exactly as long as the process"""
    await init_database()
    try:
        if DB_AUTO_CREATE_SCHEMA:
            await ensure_schema(list(get_all_contracts().values()))
        yield
    finally:
        await close_database()


def create_app(manage_database: bool = True) -> FastAPI:
    """Build the FastAPI application"""
    app = FastAPI(
        title="Users Procedure Backend",
        description="Typed remote procedures for managing users",
        version="1.0.0",
        lifespan=lifespan if manage_database else None
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    # Setup centralized error handling
    setup_error_handling(app)

    # Include API routes
    app.include_router(health.router, tags=["Health"])
    app.include_router(procedures.router, prefix="/api/rpc", tags=["Procedures"])
    return app


# FastAPI app instance is exported for use by uvicorn
# Server startup is handled by main.py at the project root
app = create_app()
