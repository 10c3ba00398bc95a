"""
In-process presence registry.

Tracks which users have at least one live WebSocket connection in this
process. Multi-device users hold several connection ids; a user is online
while that set is non-empty.

State is volatile and per process: it is rebuilt from live connections
after a restart and is not shared between worker processes.

Usage:
    registry = PresenceRegistry()

    came_online = await registry.connect(user_id, channel_name)
    went_offline = await registry.disconnect(user_id, channel_name)
"""

from __future__ import annotations

import asyncio
import logging

logger = logging.getLogger(__name__)


class PresenceRegistry:
    """
    Map of user id -> set of connection ids, guarded by an asyncio lock.

    connect() and disconnect() report transitions so the gateway broadcasts
    online/offline exactly once per transition.
    """

    def __init__(self):
        self._connections: dict[int, set[str]] = {}
        self._lock = asyncio.Lock()

    async def connect(self, user_id: int, connection_id: str) -> bool:
        """
        Register a connection.

        Returns:
            True if this is the user's first live connection
        """
        async with self._lock:
            connections = self._connections.setdefault(user_id, set())
            came_online = not connections
            connections.add(connection_id)

        logger.debug(
            f"Presence connect user={user_id} connection={connection_id} "
            f"first={came_online}"
        )
        return came_online

    async def disconnect(self, user_id: int, connection_id: str) -> bool:
        """
        Remove a connection; drop the user entry when none remain.

        Unknown user/connection pairs are ignored.

        Returns:
            True if the user has no live connections left
        """
        async with self._lock:
            connections = self._connections.get(user_id)
            if connections is None:
                return False
            connections.discard(connection_id)
            went_offline = not connections
            if went_offline:
                del self._connections[user_id]

        logger.debug(
            f"Presence disconnect user={user_id} connection={connection_id} "
            f"last={went_offline}"
        )
        return went_offline

    def is_online(self, user_id: int) -> bool:
        return user_id in self._connections

    def list_online(self) -> list[int]:
        """Snapshot of online user ids."""
        return list(self._connections)

    def connection_count(self, user_id: int) -> int:
        return len(self._connections.get(user_id, ()))
