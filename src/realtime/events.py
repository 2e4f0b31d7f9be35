"""
Ludo Arena - Realtime Event Definitions

Event types and payloads broadcast to every participant of a game room, and
the translation from engine effects to those payloads.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from src.engine.effects import (
    BonusGranted,
    DiceRolled,
    Effect,
    GameOver,
    PawnCaptured,
    PawnFinished,
    PawnMoved,
    PawnOpened,
    SixStreakForfeited,
    TurnChanged,
)


class GameEvent(Enum):
    """Events that can occur during a game."""

    TURN_CHANGED = "turn_changed"
    DICE_ROLLED = "dice_rolled"
    PAWN_OPENED = "pawn_opened"
    PAWN_MOVED = "pawn_moved"
    PAWN_CAPTURED = "pawn_captured"
    PAWN_FINISHED = "pawn_finished"
    BONUS_GRANTED = "bonus_granted"
    SIX_STREAK_FORFEITED = "six_streak_forfeited"
    GAME_OVER = "game_over"
    STATE_SNAPSHOT = "state_snapshot"
    ACTION_REJECTED = "action_rejected"


# Sent only to the requester, never sequenced into the game stream.
REPLY_EVENTS = frozenset({GameEvent.STATE_SNAPSHOT, GameEvent.ACTION_REJECTED})


@dataclass
class EventPayload:
    """Wrapper for realtime event data."""

    event: GameEvent
    game_id: str
    sequence: int = 0
    player: str | None = None
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def is_reply(self) -> bool:
        return self.event in REPLY_EVENTS

    def to_message(self, origin: str | None = None) -> dict[str, Any]:
        """JSON-ready broadcast body."""
        return {
            "kind": "event",
            "origin": origin,
            "event": self.event.value,
            "game_id": self.game_id,
            "sequence": self.sequence,
            "player": self.player,
            "data": self.data,
        }

    @classmethod
    def from_message(cls, message: dict[str, Any]) -> "EventPayload":
        return cls(
            event=GameEvent(message["event"]),
            game_id=message["game_id"],
            sequence=int(message.get("sequence", 0)),
            player=message.get("player"),
            data=dict(message.get("data") or {}),
        )


def _dice_rolled(effect: DiceRolled) -> dict[str, Any]:
    return {
        "player": effect.player.value,
        "value": effect.value,
        "six_streak": effect.six_streak,
        "roll_serial": effect.roll_serial,
        "legal_pawns": list(effect.legal_pawns),
        "turn": effect.turn.to_dict(),
    }


def _pawn_opened(effect: PawnOpened) -> dict[str, Any]:
    return {
        "player": effect.player.value,
        "pawn_id": effect.pawn_id,
        "square": effect.square.to_dict(),
    }


def _pawn_moved(effect: PawnMoved) -> dict[str, Any]:
    return {
        "player": effect.player.value,
        "pawn_id": effect.pawn_id,
        "from_square": effect.from_square.to_dict(),
        "to_square": effect.to_square.to_dict(),
        "move_type": effect.move_type.value,
        "steps": [square.to_dict() for square in effect.steps],
    }


def _pawn_captured(effect: PawnCaptured) -> dict[str, Any]:
    return {"pawn_id": effect.pawn_id, "at_square": effect.at_square.to_dict()}


def _pawn_finished(effect: PawnFinished) -> dict[str, Any]:
    return {"player": effect.player.value, "pawn_id": effect.pawn_id}


def _bonus_granted(effect: BonusGranted) -> dict[str, Any]:
    return {
        "player": effect.player.value,
        "reason": effect.reason.value,
        "turn": effect.turn.to_dict(),
    }


def _six_streak_forfeited(effect: SixStreakForfeited) -> dict[str, Any]:
    return {"player": effect.player.value}


def _turn_changed(effect: TurnChanged) -> dict[str, Any]:
    return {"player": effect.player.value, "turn": effect.turn.to_dict()}


def _game_over(effect: GameOver) -> dict[str, Any]:
    return {
        "order": [c.value for c in effect.order],
        "standings": [c.value for c in effect.standings],
        "turn": effect.turn.to_dict(),
    }


# Effect type -> (event, payload builder)
_EFFECT_EVENTS: dict[type, tuple[GameEvent, Callable[[Any], dict[str, Any]]]] = {
    DiceRolled: (GameEvent.DICE_ROLLED, _dice_rolled),
    PawnOpened: (GameEvent.PAWN_OPENED, _pawn_opened),
    PawnMoved: (GameEvent.PAWN_MOVED, _pawn_moved),
    PawnCaptured: (GameEvent.PAWN_CAPTURED, _pawn_captured),
    PawnFinished: (GameEvent.PAWN_FINISHED, _pawn_finished),
    BonusGranted: (GameEvent.BONUS_GRANTED, _bonus_granted),
    SixStreakForfeited: (GameEvent.SIX_STREAK_FORFEITED, _six_streak_forfeited),
    TurnChanged: (GameEvent.TURN_CHANGED, _turn_changed),
    GameOver: (GameEvent.GAME_OVER, _game_over),
}


def describe_effect(effect: Effect) -> tuple[GameEvent, dict[str, Any]]:
    """Map an engine effect to its outward event and payload."""
    try:
        event, build = _EFFECT_EVENTS[type(effect)]
    except KeyError:
        raise TypeError(f"No outward event for {type(effect).__name__}") from None
    return event, build(effect)
