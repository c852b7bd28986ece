import json
from fastapi import APIRouter, Body, Depends
from fastapi.responses import Response
from typing import Dict, Any

from simap.schemas.api_schemas import SessionSaveResponse
from simap.dependencies import get_session_access_service
from simap.application.session_access_service import SessionAccessService

router = APIRouter(prefix="/api/session")

@router.get("/{session_id}")
def get_session(
    session_id: str,
    access_svc: SessionAccessService = Depends(get_session_access_service),
) -> Dict[str, Any]:
    """
    Retrieve a stored session document.
    """
    return access_svc.require_session(session_id)

@router.post("/{session_id}", response_model=SessionSaveResponse)
def save_session(
    session_id: str,
    document: Dict[str, Any] = Body(...),
    access_svc: SessionAccessService = Depends(get_session_access_service),
):
    """
    Upsert a session document. The server stamps updatedAt (and createdAt on first save).
    """
    stored_id = access_svc.save(session_id, document)
    return SessionSaveResponse(success=True, session_id=stored_id)

@router.get("/{session_id}/download")
def download_session(
    session_id: str,
    access_svc: SessionAccessService = Depends(get_session_access_service),
):
    """
    Download a session document as a JSON attachment.
    """
    stored_id, document = access_svc.export(session_id)
    return Response(
        content=json.dumps(document, indent=2),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="session-{stored_id}.json"'},
    )
