"""
Ludo Arena - Position Index Tests
"""

from src.engine.base import Color, Square
from src.engine.positions import PositionIndex


class TestPositionIndex:
    """Tests for PositionIndex."""

    def test_fresh_game_is_empty(self, four_player_game):
        assert four_player_game.occupancy.cells == {}

    def test_from_players(self, make_state):
        state = make_state(placements={
            "red-1": Square.track(10),
            "red-2": Square.track(10),
            "green-1": Square.track(20),
        })
        index = state.occupancy
        assert index.occupants(Square.track(10)) == ("red-1", "red-2")
        assert index.occupants(Square.track(20)) == ("green-1",)
        assert index.occupants(Square.track(11)) == ()

    def test_home_and_finished_pawns_not_indexed(self, make_state):
        state = make_state(placements={"red-1": "finished"})
        assert state.occupancy.cells == {}

    def test_opponents(self, make_state):
        state = make_state(placements={
            "red-1": Square.track(10),
            "red-2": Square.track(10),
        })
        assert state.occupancy.opponents(Square.track(10), Color.GREEN) == ("red-1", "red-2")
        assert state.occupancy.opponents(Square.track(10), Color.RED) == ()

    def test_colors_at(self, make_state):
        state = make_state(placements={"blue-3": Square.track(30)})
        assert state.occupancy.colors_at(Square.track(30)) == {Color.BLUE}
        assert state.occupancy.colors_at(Square.track(31)) == set()
