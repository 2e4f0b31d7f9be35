"""Tests for src/realtime/snapshot.py: full-state snapshots."""

import pytest
from pydantic import ValidationError

from src.engine.base import Color, GameConfig, GameResult, Square, TurnState
from src.engine.game import LudoEngine
from src.realtime.snapshot import GameSnapshot


class TestGameSnapshot:
    def test_fresh_game(self, four_player_game):
        snapshot = GameSnapshot.from_state("g-1", 0, four_player_game)
        assert snapshot.game_id == "g-1"
        assert snapshot.sequence == 0
        assert snapshot.rotation == ["red", "green", "yellow", "blue"]
        assert len(snapshot.pawns) == 16
        assert snapshot.turn_state.current == "red"
        assert snapshot.result == []

    def test_restores_equal_state(self, make_state):
        state = make_state(
            placements={
                "red-1": Square.track(10),
                "green-2": Square.stretch(Color.GREEN, 3),
                "yellow-4": "finished",
            },
            turn=TurnState(current=Color.GREEN, six_streak=1, must_reroll=True, roll_serial=12),
        )
        assert GameSnapshot.from_state("g", 5, state).to_state() == state

    def test_restores_through_json(self, make_state):
        state = make_state(placements={"blue-1": Square.track(44)})
        data = GameSnapshot.from_state("g", 3, state).model_dump(mode="json")
        assert GameSnapshot.model_validate(data).to_state() == state

    def test_custom_rotation_survives(self):
        config = GameConfig(num_players=2, colors=(Color.BLUE, Color.GREEN), auto_move=False)
        state = LudoEngine.new_game(config)
        restored = GameSnapshot.from_state("g", 0, state).to_state()
        assert restored.config == config
        assert restored.rotation == (Color.BLUE, Color.GREEN)

    def test_result_survives(self, make_state):
        state = make_state(placements={f"red-{i}": "finished" for i in range(1, 5)})
        state = state.with_result(GameResult(order=(Color.RED,)))
        restored = GameSnapshot.from_state("g", 1, state).to_state()
        assert restored.result.order == (Color.RED,)

    def test_board_is_included(self, four_player_game):
        snapshot = GameSnapshot.from_state("g", 0, four_player_game)
        assert snapshot.board.entry_cells["green"] == 12
        assert 48 in snapshot.board.safe_squares

    def test_missing_pawn_rejected(self, four_player_game):
        data = GameSnapshot.from_state("g", 0, four_player_game).model_dump(mode="json")
        data["pawns"] = data["pawns"][1:]
        with pytest.raises(ValidationError, match="3 pawns"):
            GameSnapshot.model_validate(data)

    def test_negative_sequence_rejected(self, four_player_game):
        data = GameSnapshot.from_state("g", 0, four_player_game).model_dump(mode="json")
        data["sequence"] = -1
        with pytest.raises(ValidationError):
            GameSnapshot.model_validate(data)

    def test_occupancy_not_serialized(self, four_player_game):
        data = GameSnapshot.from_state("g", 0, four_player_game).model_dump()
        assert "occupancy" not in data
