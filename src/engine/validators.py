"""
Ludo Arena - Input Validation Utilities

Provides validation functions for game engine inputs and the invariant check
used by the test-suite. Input validators either return validated data or
raise descriptive ValueError exceptions.
"""

from typing import TYPE_CHECKING, Sequence

from src.engine.base import (
    DIE_FACES,
    MAX_CONSECUTIVE_SIXES,
    PAWNS_PER_PLAYER,
    Color,
    PawnState,
)

if TYPE_CHECKING:
    from src.engine.state import GameState


def validate_roll_value(value: int) -> int:
    """
    Validate a die face.

    Args:
        value: Face value to validate

    Returns:
        Validated value

    Raises:
        ValueError: If value is not an integer 1-6
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Die value must be an integer, got {type(value).__name__}.")
    if not (1 <= value <= DIE_FACES):
        raise ValueError(f"Die value is {value}, must be between 1 and {DIE_FACES}.")
    return value


def validate_player_count(count: int) -> int:
    """
    Validate number of players.

    Args:
        count: Number of players

    Returns:
        Validated count

    Raises:
        ValueError: If count is not 2-4
    """
    if not isinstance(count, int):
        raise ValueError(f"Player count must be an integer, got {type(count).__name__}.")

    if not (2 <= count <= 4):
        raise ValueError(f"Player count must be between 2 and 4, got {count}.")

    return count


def validate_rotation(colors: Sequence[str | Color]) -> tuple[Color, ...]:
    """
    Validate a custom turn rotation.

    Args:
        colors: Color names or Color members, in turn order

    Returns:
        Validated rotation as a tuple of Color

    Raises:
        ValueError: If a color is unknown, repeated, or the count is not 2-4
    """
    rotation = []
    for value in colors:
        try:
            rotation.append(value if isinstance(value, Color) else Color(str(value).lower()))
        except ValueError:
            raise ValueError(f"Unknown color {value!r}.") from None
    validate_player_count(len(rotation))
    if len(set(rotation)) != len(rotation):
        raise ValueError(f"Rotation repeats a color: {[c.value for c in rotation]}.")
    return tuple(rotation)


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise AssertionError(message)


def check_invariants(state: "GameState") -> None:
    """
    Assert every invariant that must hold at an observable state.

    A failure here is a programming defect, never a runtime condition.

    Raises:
        AssertionError: Describing the first broken invariant
    """
    board = state.board

    for player in state.players:
        counts = sum(player.count(s) for s in PawnState)
        _require(counts == PAWNS_PER_PLAYER, f"{player.color.value} owns {counts} pawns")

    for square, pawn_ids in state.occupancy.cells.items():
        if board.is_safe(square):
            continue
        colors = state.occupancy.colors_at(square)
        _require(len(colors) == 1, f"Mixed-color stack on {square}: {pawn_ids}")

    seated = set(state.rotation)
    _require(state.turn.current in seated, f"{state.turn.current} holds the turn but is not seated")
    _require(
        0 <= state.turn.six_streak <= MAX_CONSECUTIVE_SIXES - 1,
        f"Six streak {state.turn.six_streak} survived to an observable state",
    )
    if state.turn.awaiting_action:
        _require(state.turn.last_roll is not None, "Awaiting action without a pending roll")
    else:
        _require(state.turn.last_roll is None, "Roll pending outside the action phase")

    order = state.result.order
    _require(len(order) == len(set(order)), f"Duplicate color in result {order}")
    _require(len(order) <= state.config.places_to_award, f"Result {order} is too long")
    for color in order:
        _require(state.player(color).has_completed, f"{color.value} ranked before finishing")
    if state.is_over:
        _require(len(order) == state.config.places_to_award, "Game over before all places were awarded")
    else:
        _require(len(order) < state.config.places_to_award, "Game still running after all places were awarded")
        _require(not state.player(state.turn.current).has_completed, "A completed player holds the turn")

    for pawn in state.pawns():
        if pawn.state == PawnState.ON_BOARD:
            board.progress_of(pawn.color, pawn.square)
        if pawn.state == PawnState.IN_STRETCH:
            _require(not board.is_final(pawn.square), f"{pawn.pawn_id} rests on the final cell unfinished")
