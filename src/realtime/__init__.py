"""
Ludo Arena Real-time Sync.

Authority/observer synchronization and broadcast channels for game rooms.
"""

from src.realtime.events import EventPayload, GameEvent
from src.realtime.requests import (
    ActionRequest,
    RollRequest,
    SkipRequest,
    SnapshotRequest,
    parse_request,
)
from src.realtime.rooms import RoomManager, close_game, host_game
from src.realtime.snapshot import GameSnapshot
from src.realtime.subscriptions import ChannelManager
from src.realtime.sync_manager import GameAuthority, ObserverReplica, SyncAdapter

__all__ = [
    "ActionRequest",
    "ChannelManager",
    "EventPayload",
    "GameAuthority",
    "GameEvent",
    "GameSnapshot",
    "ObserverReplica",
    "RollRequest",
    "RoomManager",
    "SkipRequest",
    "SnapshotRequest",
    "SyncAdapter",
    "close_game",
    "host_game",
    "parse_request",
]
