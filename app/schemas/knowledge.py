"""Schemas for the knowledge-base setup and status endpoints."""

from pydantic import BaseModel, Field


class SetupRequest(BaseModel):
    """Request body for POST /setup."""

    reset: bool = Field(False, description="Drop the collection before inserting the sample entries.")


class SetupResponse(BaseModel):
    """Response after seeding the knowledge base."""

    success: bool = True
    message: str = Field(..., description="Human-readable setup summary.")
    entries_inserted: int = Field(..., description="Number of sample entries written.")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "success": True,
                    "message": "Knowledge base and agent system initialized successfully",
                    "entries_inserted": 5,
                }
            ]
        }
    }


class StatusResponse(BaseModel):
    """Knowledge-base status for GET /status."""

    success: bool = True
    collection_name: str
    total_entries: int = Field(0, description="Number of entries stored in the collection.")
    agent: str = "initialized"
