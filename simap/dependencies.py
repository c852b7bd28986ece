from __future__ import annotations

from pathlib import Path

import httpx
from fastapi import Depends

from simap.config import settings
from simap.domain.events import event_publisher
from simap.storage.factory import get_session_store
from simap.storage.interface import SessionStore
from simap.application.session_access_service import SessionAccessService
from simap.services.sync import LocalSessionCache, RemoteSessionClient, SessionSync


def get_store() -> SessionStore:
    return get_session_store()


def get_session_access_service(store: SessionStore = Depends(get_store)) -> SessionAccessService:
    return SessionAccessService(store=store, publisher=event_publisher)


def get_session_sync(session_id: str, http_client: httpx.Client | None = None) -> SessionSync:
    """Client-side persistence for one session, wired from settings."""
    client = http_client or httpx.Client(base_url=settings.API_BASE_URL)
    return SessionSync(
        session_id=session_id,
        local_cache=LocalSessionCache(Path(settings.CLIENT_CACHE_DIR)),
        remote=RemoteSessionClient(client),
        debounce_seconds=settings.SAVE_DEBOUNCE_SECONDS,
    )
