"""
Ludo Arena - Realtime Sync Manager

The authority side and the observer side of a game:

- ``SyncAdapter`` turns committed engine transitions into sequenced outward
  events and produces full snapshots.
- ``GameAuthority`` owns one game's state, serializes every request behind a
  lock, answers duplicate deliveries from a cache and reports rejections.
- ``ObserverReplica`` rebuilds the state from the event stream, ignoring
  duplicates and falling back to a snapshot after any gap.
"""

from __future__ import annotations

import logging
import random
import threading
from collections import OrderedDict
from typing import Any, Callable
from uuid import uuid4

from src.engine.base import Color, GameConfig, GameResult, PawnState, Square, TurnState
from src.engine.effects import Transition
from src.engine.errors import EngineError
from src.engine.game import LudoEngine
from src.engine.results import WinOrderTracker
from src.engine.state import GameState
from src.realtime.events import EventPayload, GameEvent, describe_effect
from src.realtime.requests import (
    ActionRequest,
    InwardRequest,
    RollRequest,
    SkipRequest,
    SnapshotRequest,
    parse_request,
)
from src.realtime.snapshot import GameSnapshot

logger = logging.getLogger(__name__)


def _player_name(player: str | Color) -> str:
    return player.value if isinstance(player, Color) else str(player)


class SyncAdapter:
    """Sequences outward events for one game and fans them out to listeners."""

    def __init__(self, game_id: str) -> None:
        self.game_id = game_id
        self._sequence = 0
        self._listeners: list[Callable[[EventPayload], None]] = []

    @property
    def sequence(self) -> int:
        """Sequence number of the last published event."""
        return self._sequence

    def add_listener(self, listener: Callable[[EventPayload], None]) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Callable[[EventPayload], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def publish(self, transition: Transition) -> list[EventPayload]:
        """Stamp each effect of a committed transition and dispatch it."""
        payloads = []
        for effect in transition.effects:
            event, data = describe_effect(effect)
            self._sequence += 1
            payload = EventPayload(
                event=event,
                game_id=self.game_id,
                sequence=self._sequence,
                player=data.get("player"),
                data=data,
            )
            payloads.append(payload)
            self._dispatch(payload)
        return payloads

    def _dispatch(self, payload: EventPayload) -> None:
        for listener in list(self._listeners):
            try:
                listener(payload)
            except Exception:
                logger.exception("Listener failed on %s #%d", payload.event.value, payload.sequence)

    def snapshot(self, state: GameState, player: str | None = None) -> EventPayload:
        """Full-state reply, stamped with the last published sequence."""
        snapshot = GameSnapshot.from_state(self.game_id, self._sequence, state)
        return EventPayload(
            event=GameEvent.STATE_SNAPSHOT,
            game_id=self.game_id,
            sequence=self._sequence,
            player=player,
            data=snapshot.model_dump(mode="json"),
        )

    def rejection(self, request: InwardRequest, error: EngineError) -> EventPayload:
        return EventPayload(
            event=GameEvent.ACTION_REJECTED,
            game_id=self.game_id,
            sequence=self._sequence,
            player=request.player,
            data={
                "player": request.player,
                "request": request.type,
                "request_id": request.request_id,
                **error.to_dict(),
            },
        )


class GameAuthority:
    """The single component allowed to mutate one game's state.

    Requests are applied one at a time under a lock, so a multi-step move
    always commits completely before the next request is looked at.
    """

    def __init__(
        self,
        game_id: str | None = None,
        config: GameConfig | None = None,
        *,
        state: GameState | None = None,
        rng: random.Random | None = None,
        cache_size: int = 256,
    ) -> None:
        self.game_id = game_id or str(uuid4())
        self.sync = SyncAdapter(self.game_id)
        self._state = state or LudoEngine.new_game(config)
        self._rng = rng
        self._lock = threading.Lock()
        self._replies: OrderedDict[tuple[str, str], list[EventPayload]] = OrderedDict()
        self._cache_size = cache_size

    @property
    def state(self) -> GameState:
        return self._state

    def submit(self, request: InwardRequest | dict[str, Any]) -> list[EventPayload]:
        """Apply one request and return the payloads it produced.

        A request whose ``request_id`` was already processed for the same
        player is answered with the original payloads and changes nothing.
        """
        if isinstance(request, dict):
            request = parse_request(request)

        with self._lock:
            return self._submit_locked(request)

    def skip_if_idle(self, expected_sequence: int) -> list[EventPayload]:
        """Skip the active player only if nothing was published since ``expected_sequence``.

        The comparison and the skip happen under the same lock, so a request
        committed in between always wins over the timeout.
        """
        with self._lock:
            if self.sync.sequence != expected_sequence or self._state.is_over:
                return []
            current = self._state.turn.current
            logger.info("Game %s idle; skipping %s", self.game_id, current.value)
            return self._submit_locked(
                SkipRequest(player=current.value, request_id=f"timeout-{expected_sequence}")
            )

    def _submit_locked(self, request: InwardRequest) -> list[EventPayload]:
        key = (request.player, request.request_id) if request.request_id is not None else None
        if key is not None and key in self._replies:
            logger.debug("Duplicate request %s from %s ignored", request.request_id, request.player)
            return list(self._replies[key])

        try:
            payloads = self._apply(request)
        except EngineError as exc:
            logger.info("Rejected %s from %s: %s", request.type, request.player, exc.message)
            payloads = [self.sync.rejection(request, exc)]

        if key is not None:
            self._remember(key, payloads)
        return payloads

    def _apply(self, request: InwardRequest) -> list[EventPayload]:
        if isinstance(request, SnapshotRequest):
            self._state.player(request.player)
            return [self.sync.snapshot(self._state, request.player)]

        if isinstance(request, RollRequest):
            transition = LudoEngine.roll(self._state, request.player, rng=self._rng)
        elif isinstance(request, ActionRequest):
            transition = LudoEngine.act(
                self._state, request.player, request.pawn_id, roll_serial=request.roll_serial
            )
        elif isinstance(request, SkipRequest):
            transition = LudoEngine.skip(self._state, request.player)
        else:
            raise TypeError(f"Unsupported request {type(request).__name__}")

        self._state = transition.state
        return self.sync.publish(transition)

    def _remember(self, key: tuple[str, str], payloads: list[EventPayload]) -> None:
        self._replies[key] = payloads
        while len(self._replies) > self._cache_size:
            self._replies.popitem(last=False)

    def snapshot(self, player: str | None = None) -> EventPayload:
        with self._lock:
            return self.sync.snapshot(self._state, player)

    # -- Convenience -----------------------------------------------------

    def roll(self, player: str | Color, request_id: str | None = None) -> list[EventPayload]:
        return self.submit(RollRequest(player=_player_name(player), request_id=request_id))

    def act(
        self,
        player: str | Color,
        pawn_id: str | None = None,
        roll_serial: int | None = None,
        request_id: str | None = None,
    ) -> list[EventPayload]:
        return self.submit(ActionRequest(
            player=_player_name(player),
            pawn_id=pawn_id,
            roll_serial=roll_serial,
            request_id=request_id,
        ))

    def skip(self, player: str | Color, request_id: str | None = None) -> list[EventPayload]:
        return self.submit(SkipRequest(player=_player_name(player), request_id=request_id))


# -- Replica side --------------------------------------------------------


def _with_turn(state: GameState, data: dict[str, Any]) -> GameState:
    return state.with_turn(TurnState.from_dict(data["turn"]))


def _pawn_opened(state: GameState, data: dict[str, Any]) -> GameState:
    pawn = state.find_pawn(data["pawn_id"])
    return state.with_pawn(pawn.moved_to(PawnState.ON_BOARD, Square.from_dict(data["square"])))


def _pawn_moved(state: GameState, data: dict[str, Any]) -> GameState:
    pawn = state.find_pawn(data["pawn_id"])
    square = Square.from_dict(data["to_square"])
    new_state = PawnState.IN_STRETCH if square.is_stretch else PawnState.ON_BOARD
    return state.with_pawn(pawn.moved_to(new_state, square))


def _pawn_captured(state: GameState, data: dict[str, Any]) -> GameState:
    pawn = state.find_pawn(data["pawn_id"])
    return state.with_pawn(pawn.moved_to(PawnState.AT_HOME))


def _pawn_finished(state: GameState, data: dict[str, Any]) -> GameState:
    pawn = state.find_pawn(data["pawn_id"])
    state = state.with_pawn(pawn.moved_to(PawnState.FINISHED))
    return state.with_result(WinOrderTracker.record_finish(state.result, state.player(pawn.color)))


def _game_over(state: GameState, data: dict[str, Any]) -> GameState:
    state = _with_turn(state, data)
    return state.with_result(GameResult(order=tuple(Color.parse(c) for c in data["order"])))


_EVENT_APPLIERS: dict[GameEvent, Callable[[GameState, dict[str, Any]], GameState]] = {
    GameEvent.DICE_ROLLED: _with_turn,
    GameEvent.BONUS_GRANTED: _with_turn,
    GameEvent.TURN_CHANGED: _with_turn,
    GameEvent.SIX_STREAK_FORFEITED: lambda state, data: state,
    GameEvent.PAWN_OPENED: _pawn_opened,
    GameEvent.PAWN_MOVED: _pawn_moved,
    GameEvent.PAWN_CAPTURED: _pawn_captured,
    GameEvent.PAWN_FINISHED: _pawn_finished,
    GameEvent.GAME_OVER: _game_over,
}


def apply_event(state: GameState, payload: EventPayload) -> GameState:
    """Apply one sequenced outward event to a replica's state."""
    try:
        applier = _EVENT_APPLIERS[payload.event]
    except KeyError:
        raise ValueError(f"{payload.event.value} does not change game state") from None
    return applier(state, payload.data)


class ObserverReplica:
    """Read-only copy of a game driven by the authority's event stream.

    Starts desynchronized and becomes usable after the first snapshot.
    """

    def __init__(self, game_id: str) -> None:
        self.game_id = game_id
        self.state: GameState | None = None
        self.last_sequence = 0
        self.desynced = True

    @property
    def needs_snapshot(self) -> bool:
        return self.desynced or self.state is None

    def apply(self, payload: EventPayload) -> bool:
        """Apply a payload if it is the next one expected.

        Returns:
            True when the replica state changed
        """
        if payload.game_id != self.game_id:
            return False

        if payload.event == GameEvent.STATE_SNAPSHOT:
            return self.restore(payload)
        if payload.event == GameEvent.ACTION_REJECTED or self.needs_snapshot:
            return False

        if payload.sequence <= self.last_sequence:
            logger.debug("Replica %s dropped duplicate #%d", self.game_id, payload.sequence)
            return False
        if payload.sequence != self.last_sequence + 1:
            logger.warning(
                "Replica %s missed events %d-%d; waiting for a snapshot",
                self.game_id, self.last_sequence + 1, payload.sequence - 1,
            )
            self.desynced = True
            return False

        self.state = apply_event(self.state, payload)
        self.last_sequence = payload.sequence
        return True

    def restore(self, payload: EventPayload) -> bool:
        """Replace the whole state with a snapshot (never a partial repair)."""
        if not self.desynced and payload.sequence < self.last_sequence:
            return False
        snapshot = GameSnapshot.model_validate(payload.data)
        self.state = snapshot.to_state()
        self.last_sequence = snapshot.sequence
        self.desynced = False
        return True
