"""
Ludo Arena - Game Rooms

Hosts GameAuthority instances on Supabase broadcast channels. Every room has
one channel: requests come in as ``request`` broadcasts, sequenced events go
out as ``event`` broadcasts and snapshots or rejections as ``reply``
broadcasts.

An optional inactivity watchdog skips the active player when a room has not
moved for ``turn_timeout_seconds``.
"""

from __future__ import annotations

import logging
import random
import threading
from typing import Any

from pydantic import ValidationError
from supabase import Client

from src.config.settings import Settings, get_settings
from src.engine.base import GameConfig
from src.realtime.events import EventPayload
from src.realtime.requests import parse_request
from src.realtime.subscriptions import OUTWARD_EVENT, REPLY_EVENT, ChannelManager
from src.realtime.sync_manager import GameAuthority

logger = logging.getLogger(__name__)


class RoomManager:
    """Runs game authorities on realtime channels.

    Usage:
        manager = RoomManager(client)
        authority = manager.host(config=GameConfig(num_players=2))
        ...
        manager.close(authority.game_id)
    """

    def __init__(self, client: Client, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        self._channel_mgr = ChannelManager(client, prefix=self._settings.channel_prefix)
        self._rooms: dict[str, GameAuthority] = {}
        self._watchdogs: dict[str, threading.Event] = {}
        self._lock = threading.Lock()

    @property
    def rooms(self) -> list[str]:
        return list(self._rooms.keys())

    def get(self, game_id: str) -> GameAuthority | None:
        return self._rooms.get(game_id)

    def host(
        self,
        game_id: str | None = None,
        config: GameConfig | None = None,
        *,
        rng: random.Random | None = None,
    ) -> GameAuthority:
        """Create a game and start serving its channel.

        Args:
            game_id: Room id; a fresh uuid when omitted.
            config: Game configuration; built from settings when omitted.
            rng: Optional random source for the authority's dice.

        Returns:
            The authority owning the new game.
        """
        if config is None:
            config = GameConfig(
                num_players=self._settings.default_player_count,
                auto_move=self._settings.auto_move,
            )
        authority = GameAuthority(game_id, config, rng=rng)

        with self._lock:
            if authority.game_id in self._rooms:
                raise ValueError(f"Game {authority.game_id} is already hosted")
            self._rooms[authority.game_id] = authority

        authority.sync.add_listener(
            lambda payload: self._broadcast(authority, payload, OUTWARD_EVENT)
        )
        try:
            self._channel_mgr.subscribe(
                authority.game_id,
                lambda message: self._on_message(authority, message),
            )
        except Exception:
            with self._lock:
                self._rooms.pop(authority.game_id, None)
            raise

        if self._settings.turn_timeout_seconds > 0:
            self._start_watchdog(authority, self._settings.turn_timeout_seconds)

        logger.info(
            "Hosting game %s for %d players", authority.game_id, config.num_players
        )
        return authority

    def _on_message(self, authority: GameAuthority, message: dict[str, Any]) -> None:
        """Validate an inbound broadcast and submit it to the authority."""
        if message.get("kind", "request") != "request":
            return
        if message.get("origin") == authority.game_id:
            return

        try:
            request = parse_request(message)
        except ValidationError as exc:
            logger.warning(
                "Dropping malformed request on game %s: %s",
                authority.game_id, exc.errors(include_url=False),
            )
            return

        for payload in authority.submit(request):
            if payload.is_reply:
                self._broadcast(authority, payload, REPLY_EVENT)

    def _broadcast(self, authority: GameAuthority, payload: EventPayload, event: str) -> None:
        try:
            self._channel_mgr.publish(
                authority.game_id, payload.to_message(origin=authority.game_id), event
            )
        except KeyError:
            logger.debug("Game %s has no channel; %s not sent", authority.game_id, payload.event.value)

    def close(self, game_id: str) -> None:
        """Stop serving a game and leave its channel."""
        self._stop_watchdog(game_id)
        with self._lock:
            self._rooms.pop(game_id, None)
        self._channel_mgr.unsubscribe(game_id)

    def shutdown(self) -> None:
        """Close every room and stop the background loop."""
        for game_id in list(self._rooms.keys()):
            self.close(game_id)
        self._channel_mgr.shutdown()

    # -- Inactivity watchdog ---------------------------------------------

    def _start_watchdog(self, authority: GameAuthority, interval: float) -> None:
        if authority.game_id in self._watchdogs:
            return

        stop_event = threading.Event()
        self._watchdogs[authority.game_id] = stop_event

        thread = threading.Thread(
            target=self._watch_loop,
            args=(authority, interval, stop_event),
            daemon=True,
            name=f"watchdog-{authority.game_id[:8]}",
        )
        thread.start()

    def _stop_watchdog(self, game_id: str) -> None:
        stop_event = self._watchdogs.pop(game_id, None)
        if stop_event:
            stop_event.set()

    def _watch_loop(
        self,
        authority: GameAuthority,
        interval: float,
        stop_event: threading.Event,
    ) -> None:
        """Skip the active player whenever a full interval passes idle."""
        last_sequence = authority.sync.sequence

        while not stop_event.wait(interval):
            try:
                last_sequence = self._check_idle(authority, last_sequence)
            except Exception:
                logger.exception("Watchdog error for game %s", authority.game_id)
            if authority.state.is_over:
                break

    def _check_idle(self, authority: GameAuthority, last_sequence: int) -> int:
        """Skip the active player when nothing was published since ``last_sequence``.

        Returns:
            The sequence to compare against on the next check.
        """
        authority.skip_if_idle(last_sequence)
        return authority.sync.sequence


# -- Module-level convenience functions ----------------------------------

_manager_instance: RoomManager | None = None
_manager_lock = threading.Lock()


def _get_manager(client: Client) -> RoomManager:
    """Get or create the singleton RoomManager."""
    global _manager_instance
    with _manager_lock:
        if _manager_instance is None:
            _manager_instance = RoomManager(client)
        return _manager_instance


def host_game(
    client: Client,
    config: GameConfig | None = None,
    game_id: str | None = None,
) -> GameAuthority:
    """Host a new game room on the shared RoomManager."""
    return _get_manager(client).host(game_id, config)


def close_game(client: Client, game_id: str) -> None:
    """Close a game room on the shared RoomManager."""
    _get_manager(client).close(game_id)
