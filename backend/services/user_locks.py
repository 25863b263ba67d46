"""Per-user mutual exclusion for link and sync operations."""

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator

from services.exceptions import SyncInProgressError

logger = logging.getLogger(__name__)


@dataclass
class _LockEntry:
    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0


class UserLockRegistry:
    """Registry of one ``threading.Lock`` per user id.

    An entry exists only while some caller is inside :meth:`hold` for that
    user, so the registry stays as small as the number of running
    operations. This works for single-process deployments. With several
    worker processes an advisory lock in the database would be required
    instead.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[str, _LockEntry] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    def _checkout(self, user_id: str) -> _LockEntry:
        with self._guard:
            entry = self._locks.get(user_id)
            if entry is None:
                entry = _LockEntry()
                self._locks[user_id] = entry
            entry.holders += 1
            return entry

    def _checkin(self, user_id: str, entry: _LockEntry) -> None:
        with self._guard:
            entry.holders -= 1
            if entry.holders == 0:
                del self._locks[user_id]

    def is_locked(self, user_id: str) -> bool:
        """Check whether an operation currently holds the user's lock."""
        with self._guard:
            entry = self._locks.get(user_id)
            return entry is not None and entry.lock.locked()

    @contextmanager
    def hold(self, user_id: str) -> Iterator[None]:
        """Hold the user's lock for the duration of the block.

        Raises:
            SyncInProgressError: Another operation already holds it.
        """
        entry = self._checkout(user_id)
        try:
            if not entry.lock.acquire(blocking=False):
                logger.info("Rejected concurrent link/sync for user %s", user_id)
                raise SyncInProgressError(
                    "A bank link or sync is already in progress for this user",
                    user_id=user_id,
                )
            try:
                yield
            finally:
                entry.lock.release()
        finally:
            self._checkin(user_id, entry)


_default_registry = UserLockRegistry()


def get_user_lock_registry() -> UserLockRegistry:
    """Return the process-wide lock registry."""
    return _default_registry
