from __future__ import annotations

import logging
import threading
from typing import Optional

from simap.domain.entities import Session
from simap.domain.errors import ValidationError
from simap.domain.migrations import upgrade_session

from .debounce import SaveDebouncer, TimerFactory
from .local_cache import LocalSessionCache
from .remote_client import RemoteSessionClient
from .sync_policy import SnapshotPolicy

logger = logging.getLogger(__name__)


class SessionSync:
    """Keeps one session eventually persisted to the local cache and the session API.

    Saves are debounced and carry the whole snapshot, so the last save wins.
    The local copy is written before the network call and survives any
    remote failure.
    """

    def __init__(
        self,
        session_id: str,
        local_cache: LocalSessionCache,
        remote: RemoteSessionClient | None,
        policy: SnapshotPolicy | None = None,
        debounce_seconds: float = 0.5,
        timer_factory: TimerFactory | None = None,
    ) -> None:
        self.session_id = session_id
        self._local = local_cache
        self._remote = remote
        self._policy = policy or SnapshotPolicy()
        self._session: Optional[Session] = None
        self._debouncer = SaveDebouncer(self.save_now, debounce_seconds, timer_factory or threading.Timer)

    # --------------- Internal helpers ---------------
    def _parse(self, document: Optional[dict], origin: str) -> Optional[Session]:
        if document is None:
            return None
        try:
            return Session.from_dict(document, session_id=self.session_id)
        except ValidationError as e:
            logger.error("Discarding malformed %s copy of session %s: %s", origin, self.session_id, e)
            return None

    # --------------- Public API ---------------
    @property
    def session(self) -> Optional[Session]:
        return self._session

    def load(self) -> Session:
        """Load the newer of the local and remote copies, or start empty.

        Legacy documents are upgraded here, once; an upgraded session is
        saved straight back.
        """
        local = self._local.read(self.session_id)
        remote = self._remote.fetch(self.session_id) if self._remote is not None else None
        chosen = self._policy.pick(local, remote)
        origin = "remote" if chosen is not None and chosen is remote else "local"

        session = self._parse(chosen, origin)
        if session is None and chosen is not None:
            other, other_origin = (local, "local") if chosen is remote else (remote, "remote")
            session = self._parse(other, other_origin)
        if session is None:
            logger.info("Starting new session %s", self.session_id)
            session = Session(session_id=self.session_id)

        upgraded = upgrade_session(session)
        self._session = upgraded
        if upgraded is not session:
            logger.info("Upgraded session %s to schema %s", self.session_id, upgraded.schema_version)
            self.request_save()
        return upgraded

    def request_save(self) -> None:
        """Schedule a debounced save of whatever the session looks like when it fires."""
        self._debouncer.request()

    def flush(self) -> bool:
        """Run a pending save immediately; returns False if none was pending."""
        return self._debouncer.flush()

    def cancel(self) -> None:
        self._debouncer.cancel()

    def save_now(self) -> None:
        """Stamp and write the current snapshot: local cache first, then the API."""
        session = self._session
        if session is None:
            return
        session.updated_at = self._policy.next_stamp(session.updated_at)
        if not session.created_at:
            session.created_at = session.updated_at

        document = session.to_dict()
        self._local.write(self.session_id, document)
        if self._remote is not None:
            self._remote.push(self.session_id, document)
