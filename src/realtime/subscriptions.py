"""
Ludo Arena - Channel Subscription Management

Manages Supabase Realtime broadcast channels, one per game room. Inbound
``request`` broadcasts are handed to a callback; outward events are sent as
``event`` broadcasts and direct answers as ``reply`` broadcasts.

Uses a background thread with an asyncio event loop since the sync
Realtime client in supabase 2.x is not implemented.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Callable

from supabase import Client

logger = logging.getLogger(__name__)

# Broadcast event names on a game channel
REQUEST_EVENT = "request"
OUTWARD_EVENT = "event"
REPLY_EVENT = "reply"


class ChannelManager:
    """Manages Supabase Realtime broadcast channels for game rooms.

    Bridges async Realtime API with sync code by running an asyncio
    event loop in a daemon thread. Callbacks are invoked from that
    background thread; callers should handle thread safety.
    """

    def __init__(self, client: Client, prefix: str = "game") -> None:
        self._client = client
        self._prefix = prefix
        self._channels: dict[str, Any] = {}
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

    def channel_name(self, game_id: str) -> str:
        return f"{self._prefix}:{game_id}"

    def _ensure_loop(self) -> asyncio.AbstractEventLoop:
        """Start the background event loop if not running."""
        with self._lock:
            if self._loop is None or not self._loop.is_running():
                self._loop = asyncio.new_event_loop()
                self._thread = threading.Thread(
                    target=self._run_loop, daemon=True, name="realtime-loop"
                )
                self._thread.start()
            return self._loop

    def _run_loop(self) -> None:
        """Run the asyncio event loop in the background thread."""
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    def subscribe(
        self,
        game_id: str,
        on_message: Callable[[dict[str, Any]], None],
    ) -> None:
        """Join the broadcast channel of a game room.

        Args:
            game_id: Id of the game whose room to join.
            on_message: Callback receiving every inbound request body.
        """
        if game_id in self._channels:
            logger.warning("Already subscribed to game %s", game_id)
            return

        loop = self._ensure_loop()
        future = asyncio.run_coroutine_threadsafe(
            self._subscribe_async(game_id, on_message), loop
        )
        future.result(timeout=10)

    async def _subscribe_async(
        self,
        game_id: str,
        on_message: Callable[[dict[str, Any]], None],
    ) -> None:
        """Set up the async channel subscription for a game."""
        channel_name = self.channel_name(game_id)
        channel = self._client.realtime.channel(channel_name)

        channel.on_broadcast(
            REQUEST_EVENT,
            callback=lambda payload: self._handle_message(payload, game_id, on_message),
        )

        await channel.subscribe(
            callback=lambda state, err: self._on_subscribe_state(state, err, game_id)
        )

        self._channels[game_id] = channel
        logger.info("Subscribed to %s", channel_name)

    def _handle_message(
        self,
        payload: dict[str, Any],
        game_id: str,
        on_message: Callable[[dict[str, Any]], None],
    ) -> None:
        """Unwrap a broadcast envelope and pass the body on."""
        try:
            body = payload.get("payload", payload)
            if not isinstance(body, dict):
                logger.warning("Ignoring non-object broadcast on game %s", game_id)
                return
            on_message(body)
        except Exception:
            logger.exception("Error handling broadcast for game %s", game_id)

    def _on_subscribe_state(
        self, state: Any, error: Exception | None, game_id: str
    ) -> None:
        """Log subscription state changes."""
        if error:
            logger.error("Subscription error for game %s: %s", game_id, error)
        else:
            logger.debug("Channel for game %s state: %s", game_id, state)

    def publish(self, game_id: str, message: dict[str, Any], event: str = OUTWARD_EVENT) -> None:
        """Queue a broadcast on a game's channel.

        Does not wait for the send: publishing also happens from inside
        ``on_message``, which runs on the loop thread itself. Sends are
        scheduled in call order.
        """
        channel = self._channels.get(game_id)
        if channel is None:
            raise KeyError(f"Not subscribed to game {game_id}")

        loop = self._ensure_loop()
        future = asyncio.run_coroutine_threadsafe(
            channel.send_broadcast(event, message), loop
        )
        future.add_done_callback(lambda f: self._on_sent(f, game_id, event))

    def _on_sent(self, future: Any, game_id: str, event: str) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error("Broadcast %r to game %s failed: %s", event, game_id, error)

    def unsubscribe(self, game_id: str) -> None:
        """Leave a game's channel."""
        channel = self._channels.pop(game_id, None)
        if channel is None:
            return

        loop = self._ensure_loop()
        future = asyncio.run_coroutine_threadsafe(
            self._unsubscribe_async(channel), loop
        )
        try:
            future.result(timeout=10)
        except Exception:
            logger.exception("Error unsubscribing from game %s", game_id)

        logger.info("Unsubscribed from game %s", game_id)

    async def _unsubscribe_async(self, channel: Any) -> None:
        """Unsubscribe and remove a channel."""
        try:
            await channel.unsubscribe()
            await self._client.realtime.remove_channel(channel)
        except Exception:
            logger.exception("Error removing channel")

    def unsubscribe_all(self) -> None:
        """Leave every game channel."""
        for game_id in list(self._channels.keys()):
            self.unsubscribe(game_id)

    @property
    def active_subscriptions(self) -> list[str]:
        """Return list of game IDs with active subscriptions."""
        return list(self._channels.keys())

    def shutdown(self) -> None:
        """Stop the background event loop and clean up."""
        self.unsubscribe_all()
        if self._loop and self._loop.is_running():
            self._loop.call_soon_threadsafe(self._loop.stop)
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5)
        self._loop = None
        self._thread = None
