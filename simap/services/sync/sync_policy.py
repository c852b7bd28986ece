from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 ``updatedAt``; naive values are taken as UTC."""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class SnapshotPolicy:
    """Last-write-wins rules for two copies of the same session."""

    def __init__(self, clock: Any = datetime) -> None:
        self._clock = clock

    def now(self) -> datetime:
        return self._clock.now(timezone.utc)

    def pick(self, local: Optional[Dict[str, Any]], remote: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        """Choose the snapshot with the later ``updatedAt``.

        A local copy without a timestamp is always replaced by a remote one;
        ties keep the local copy.
        """
        if remote is None:
            return local
        if local is None:
            return remote
        local_time = parse_timestamp(local.get("updatedAt"))
        remote_time = parse_timestamp(remote.get("updatedAt"))
        if local_time is None:
            return remote
        if remote_time is not None and remote_time > local_time:
            return remote
        return local

    def next_stamp(self, previous: Optional[str]) -> str:
        """A timestamp strictly later than ``previous`` even if the clock stepped back."""
        stamp = self.now()
        last = parse_timestamp(previous)
        if last is not None and stamp <= last:
            stamp = last + timedelta(microseconds=1)
        return stamp.isoformat()
