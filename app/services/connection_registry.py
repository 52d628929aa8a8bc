# app/services/connection_registry.py
"""
Process-wide registry of open push channels.

One instance is created at startup and stored on app.state; handlers get it
injected. It tracks:
  - every open channel (broadcast fan-out target)
  - user_id → channel   (last connection wins)
  - channel → user_id   (reverse map, O(1) removal on close)

Channels are keyed by id(): Starlette WebSockets are Mappings and unhashable.
No lock — only the push handlers mutate it, all on the single event loop.
Entries are ephemeral: after a restart clients must re-identify.
"""

from typing import Any, Dict, List, Optional

from app.utils.logger import get_logger

logger = get_logger(__name__)


class ConnectionRegistry:
    def __init__(self):
        self._channels: Dict[int, Any] = {}
        self._by_user: Dict[int, Any] = {}
        self._by_channel: Dict[int, int] = {}

    def connect(self, channel) -> None:
        self._channels[id(channel)] = channel

    def identify(self, channel, user_id: int) -> None:
        key = id(channel)
        self._channels[key] = channel

        previous_user = self._by_channel.get(key)
        if previous_user is not None and previous_user != user_id:
            # Channel re-identified as someone else
            if self._by_user.get(previous_user) is channel:
                del self._by_user[previous_user]

        previous_channel = self._by_user.get(user_id)
        if previous_channel is not None and previous_channel is not channel:
            # Last connection wins; the old channel stays open but anonymous
            self._by_channel.pop(id(previous_channel), None)
            logger.info(f"User {user_id} re-identified on a new channel — replacing previous entry")

        self._by_user[user_id] = channel
        self._by_channel[key] = user_id

    def disconnect(self, channel) -> Optional[int]:
        """Forget *channel*. Returns the user it was bound to, if any."""
        key = id(channel)
        self._channels.pop(key, None)
        user_id = self._by_channel.pop(key, None)
        if user_id is not None and self._by_user.get(user_id) is channel:
            del self._by_user[user_id]
        return user_id

    def get(self, user_id: int):
        return self._by_user.get(user_id)

    def user_for(self, channel) -> Optional[int]:
        return self._by_channel.get(id(channel))

    def channels(self) -> List[Any]:
        """Snapshot of open channels; safe to iterate while handlers mutate the registry."""
        return list(self._channels.values())

    def identified_users(self) -> List[int]:
        return list(self._by_user.keys())

    def __len__(self) -> int:
        return len(self._channels)

    def __contains__(self, channel) -> bool:
        return id(channel) in self._channels
