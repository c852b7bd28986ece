"""Client-side session persistence components."""
from .debounce import SaveDebouncer
from .local_cache import LocalSessionCache
from .remote_client import RemoteSessionClient
from .session_sync import SessionSync
from .sync_policy import SnapshotPolicy

__all__ = [
    "LocalSessionCache",
    "RemoteSessionClient",
    "SaveDebouncer",
    "SessionSync",
    "SnapshotPolicy",
]
