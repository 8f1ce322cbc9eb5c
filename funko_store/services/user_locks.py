"""User Locks - optional per-user serialization of check-then-write sequences.

Invariants:
    - Disabled registry hands out a no-op context: concurrent add/update for one
      user may race between the existence check and the write
    - Enabled registry hands out one asyncio.Lock per user name; different users
      never wait on each other
    - Locks are only ever held by coroutines on the same event loop

Design Decisions:
    - Advisory, in-process only: a second server process on the same storage root
      is not coordinated
    - Locks are never evicted; the registry grows with the number of distinct users
"""

import asyncio
from contextlib import AbstractAsyncContextManager, nullcontext


class UserLocks:
    """Hands out the lock guarding one user's collection."""

    def __init__(self, enabled: bool = False):
        self.enabled = enabled
        self._locks: dict[str, asyncio.Lock] = {}

    def for_user(self, user: str) -> AbstractAsyncContextManager:
        if not self.enabled:
            return nullcontext()
        lock = self._locks.get(user)
        if lock is None:
            lock = self._locks[user] = asyncio.Lock()
        return lock
