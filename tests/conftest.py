"""
Ludo Arena - Test Configuration and Fixtures

Common fixtures and board positions for all test modules.
"""

import random
from typing import Callable

import pytest

from src.engine.base import (
    Color,
    GameConfig,
    PawnState,
    Square,
    TurnPhase,
    TurnState,
    parse_pawn_id,
)
from src.engine.game import LudoEngine
from src.engine.state import GameState


# =============================================================================
# POSITION BUILDING
# =============================================================================

FINISHED = "finished"


def build_state(
    config: GameConfig | None = None,
    placements: dict[str, Square | str] | None = None,
    turn: TurnState | None = None,
) -> GameState:
    """
    Build a GameState from a fresh game plus pawn placements.

    Args:
        config: Game configuration (4 players by default)
        placements: pawn id -> Square, or FINISHED; unnamed pawns stay home
        turn: TurnState to install (first rotation color awaiting a roll
            by default)
    """
    state = LudoEngine.new_game(config)
    for pawn_id, where in (placements or {}).items():
        color, index = parse_pawn_id(pawn_id)
        pawn = state.player(color).pawn(index)
        if where == FINISHED:
            pawn = pawn.moved_to(PawnState.FINISHED)
        elif where.is_stretch:
            pawn = pawn.moved_to(PawnState.IN_STRETCH, where)
        else:
            pawn = pawn.moved_to(PawnState.ON_BOARD, where)
        state = state.with_pawn(pawn)
    if turn is not None:
        state = state.with_turn(turn)
    return state


def awaiting_action(color: Color, roll: int, serial: int = 1, streak: int | None = None) -> TurnState:
    """TurnState with ``roll`` pending for ``color``."""
    if streak is None:
        streak = 1 if roll == 6 else 0
    return TurnState(
        current=color,
        phase=TurnPhase.AWAITING_ACTION,
        last_roll=roll,
        six_streak=streak,
        roll_serial=serial,
    )


# =============================================================================
# GAME STATE FIXTURES
# =============================================================================

@pytest.fixture
def make_state() -> Callable[..., GameState]:
    """Factory fixture around build_state."""
    return build_state


@pytest.fixture
def two_player_game() -> GameState:
    """Fresh RED vs YELLOW game."""
    return LudoEngine.new_game(GameConfig(num_players=2))


@pytest.fixture
def four_player_game() -> GameState:
    """Fresh four-player game."""
    return LudoEngine.new_game(GameConfig(num_players=4))


@pytest.fixture
def manual_config() -> GameConfig:
    """Four players, the engine never picks a pawn on its own."""
    return GameConfig(num_players=4, auto_move=False)


@pytest.fixture
def seeded_rng() -> random.Random:
    """Deterministic dice for simulations."""
    return random.Random(20240611)


@pytest.fixture
def pending_roll() -> Callable[..., TurnState]:
    """Factory fixture around awaiting_action."""
    return awaiting_action
