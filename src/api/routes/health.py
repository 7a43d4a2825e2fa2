"""
Health check API route
"""

import logging
from datetime import datetime, timezone
import asyncpg
from fastapi import APIRouter, HTTPException

from database.connection import acquire
from rpc.errors import StoreConnectionError

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check():
    """Health check - reports unhealthy only when the database cannot be reached"""
    try:
        async with acquire() as conn:
            await conn.fetchval("SELECT 1")
    except StoreConnectionError as e:
        logger.warning(f"Health check failed: {e.message}")
        raise HTTPException(status_code=503, detail=f"Health check failed: {e.message}")
    except asyncpg.PostgresError as e:
        logger.warning(f"Health check query failed: {e}")
        raise HTTPException(status_code=503, detail="Health check failed: Database is unavailable")

    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": "connected"
    }
