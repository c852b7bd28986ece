"""
API Request/Response Schemas using Pydantic.

Session documents are opaque JSON objects on the wire and are not modelled
here; only the responses wrapped around them are.
"""
from pydantic import BaseModel, ConfigDict, Field

# Session schemas
class SessionSaveResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = Field(default=True, description="Whether the document was stored")
    session_id: str = Field(..., alias="sessionId", description="Sanitized id the document was stored under")
