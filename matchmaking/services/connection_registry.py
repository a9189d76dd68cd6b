import logging
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class Connection(Protocol):
    async def send_json(self, data: Any) -> None:
        ...


class ConnectionRegistry:
    """Maps a user id to that user's live connection for push notifications."""

    def __init__(self):
        self._connections: dict[str, Connection] = {}

    def register(self, user_id: str, connection: Connection) -> None:
        previous = self._connections.get(user_id)
        if previous is not None and previous is not connection:
            logger.info("Replacing live connection for user %s", user_id)
        self._connections[user_id] = connection

    def unregister(self, user_id: str, connection: Connection | None = None) -> None:
        # A stale disconnect must not drop a newer connection for the same user
        current = self._connections.get(user_id)
        if current is None:
            return
        if connection is None or current is connection:
            del self._connections[user_id]

    def get(self, user_id: str) -> Connection | None:
        return self._connections.get(user_id)

    def __len__(self) -> int:
        return len(self._connections)

    async def notify(self, user_id: str, event: dict) -> bool:
        connection = self._connections.get(user_id)
        if connection is None:
            logger.debug("No live connection for user %s; skipping %s", user_id, event.get("type"))
            return False
        try:
            await connection.send_json(event)
        except Exception:
            logger.exception("Failed to notify user %s; dropping connection", user_id)
            self.unregister(user_id, connection)
            return False
        logger.info("Sent %s to user %s", event.get("type"), user_id)
        return True


connection_registry = ConnectionRegistry()
