"""
API handlers: call services and map results/errors to HTTP.

Responsibility: Bridge HTTP types and services. Exception-to-HTTP mapping lives here
so services stay free of FastAPI/HTTP types.
"""

import logging

from fastapi import HTTPException

from app.core.errors import ServiceUnavailableError
from app.schemas.knowledge import SetupRequest, SetupResponse, StatusResponse
from app.services.ingestion_service import InvalidEntryError, seed_knowledge_base
from app.services.vector_store import get_collection_stats

logger = logging.getLogger(__name__)


def handle_setup(body: SetupRequest) -> SetupResponse:
    """Seed the knowledge base with the sample entries; 503 if the store is unavailable."""
    logger.info("Setting up knowledge base (reset=%s)", body.reset)
    try:
        result = seed_knowledge_base(reset=body.reset)
    except ServiceUnavailableError as e:
        raise HTTPException(status_code=503, detail=e.message) from e
    except InvalidEntryError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except Exception as e:
        logger.exception("Setup failed")
        raise HTTPException(status_code=500, detail=str(e)) from e
    return SetupResponse(
        message="Knowledge base and agent system initialized successfully",
        entries_inserted=result.entries_inserted,
    )


def handle_status() -> StatusResponse:
    """Report knowledge-base stats; 503 if the store is unavailable."""
    try:
        stats = get_collection_stats()
    except ServiceUnavailableError as e:
        raise HTTPException(status_code=503, detail=e.message) from e
    except Exception as e:
        logger.exception("Status check failed")
        raise HTTPException(status_code=500, detail=str(e)) from e
    return StatusResponse(**stats)
