"""
Ludo Arena - Move Resolver Tests

Opening, track traversal, the turn into the lane, captures, finishing and
legal-target enumeration.
"""

import pytest
from src.engine.base import Color, MoveType, PawnState, Square
from src.engine.moves import MovePlan, MoveResolver


def plan_for(state, pawn_id, roll):
    return MoveResolver.plan(state.board, state.occupancy, state.find_pawn(pawn_id), roll)


class TestOpening:
    """Tests for leaving the home yard."""

    def test_six_opens_to_start_cell(self, four_player_game):
        plan = plan_for(four_player_game, "green-1", 6)
        assert plan.move_type == MoveType.OPEN
        assert plan.is_open
        assert plan.origin is None
        assert plan.destination == Square.track(14)
        assert plan.steps == (Square.track(14),)
        assert plan.final_state == PawnState.ON_BOARD

    @pytest.mark.parametrize("roll", [1, 2, 3, 4, 5])
    def test_other_rolls_cannot_open(self, four_player_game, roll):
        assert plan_for(four_player_game, "red-1", roll) is None

    def test_opening_never_captures_on_safe_start(self, make_state):
        state = make_state(placements={"blue-1": Square.track(1)})
        plan = plan_for(state, "red-1", 6)
        assert plan.captures == ()


class TestTrackMoves:
    """Tests for ON_BOARD pawns."""

    def test_simple_advance(self, make_state):
        state = make_state(placements={"red-1": Square.track(3)})
        plan = plan_for(state, "red-1", 4)
        assert plan.move_type == MoveType.BOARD
        assert plan.origin == Square.track(3)
        assert plan.destination == Square.track(7)
        assert len(plan.steps) == 4
        assert not plan.grants_bonus

    def test_wraps_from_52_to_1(self, make_state):
        state = make_state(placements={"yellow-1": Square.track(50)})
        plan = plan_for(state, "yellow-1", 5)
        assert plan.destination == Square.track(3)
        assert plan.steps[1] == Square.track(52)
        assert plan.steps[2] == Square.track(1)

    def test_enters_lane_after_entry_cell(self, make_state):
        state = make_state(placements={"green-1": Square.track(10)})
        plan = plan_for(state, "green-1", 5)
        assert plan.move_type == MoveType.STRETCH
        assert plan.steps[:2] == (Square.track(11), Square.track(12))
        assert plan.destination == Square.stretch(Color.GREEN, 3)
        assert plan.final_state == PawnState.IN_STRETCH

    def test_track_pawn_can_overshoot(self, make_state):
        # progress 50, five lane cells left
        state = make_state(placements={"red-1": Square.track(51)})
        assert plan_for(state, "red-1", 6) is None
        assert plan_for(state, "red-1", 5).finishes


class TestStretchMoves:
    """Tests for IN_STRETCH pawns."""

    def test_advance_in_lane(self, make_state):
        state = make_state(placements={"blue-1": Square.stretch(Color.BLUE, 1)})
        plan = plan_for(state, "blue-1", 2)
        assert plan.destination == Square.stretch(Color.BLUE, 3)
        assert not plan.finishes

    def test_overshoot_is_illegal(self, make_state):
        state = make_state(placements={"yellow-1": Square.stretch(Color.YELLOW, 4)})
        assert plan_for(state, "yellow-1", 2) is None

    def test_exact_roll_finishes(self, make_state):
        state = make_state(placements={"yellow-1": Square.stretch(Color.YELLOW, 4)})
        plan = plan_for(state, "yellow-1", 1)
        assert plan.finishes
        assert plan.grants_bonus
        assert plan.final_state == PawnState.FINISHED

    def test_finished_pawn_cannot_move(self, make_state):
        state = make_state(placements={"yellow-1": "finished"})
        assert plan_for(state, "yellow-1", 3) is None


class TestCaptures:
    """Tests for capture detection."""

    def test_capture_on_plain_cell(self, make_state):
        state = make_state(placements={
            "red-1": Square.track(10),
            "green-1": Square.track(7),
        })
        plan = plan_for(state, "green-1", 3)
        assert plan.captures == ("red-1",)
        assert plan.is_capture
        assert plan.grants_bonus

    def test_no_capture_on_safe_square(self, make_state):
        state = make_state(placements={
            "red-1": Square.track(9),
            "green-1": Square.track(6),
        })
        assert plan_for(state, "green-1", 3).captures == ()

    def test_no_capture_of_own_pawn(self, make_state):
        state = make_state(placements={
            "red-1": Square.track(10),
            "red-2": Square.track(7),
        })
        assert plan_for(state, "red-2", 3).captures == ()

    def test_stack_is_captured_whole(self, make_state):
        state = make_state(placements={
            "blue-1": Square.track(30),
            "blue-2": Square.track(30),
            "yellow-1": Square.track(28),
        })
        assert plan_for(state, "yellow-1", 2).captures == ("blue-1", "blue-2")

    def test_passing_over_does_not_capture(self, make_state):
        state = make_state(placements={
            "red-1": Square.track(10),
            "green-1": Square.track(7),
        })
        assert plan_for(state, "green-1", 4).captures == ()


class TestApply:
    """Tests for MoveResolver.apply()."""

    def test_apply_moves_pawn(self, make_state):
        state = make_state(placements={"red-1": Square.track(3)})
        after = MoveResolver.apply(state, plan_for(state, "red-1", 4))
        assert after.find_pawn("red-1").square == Square.track(7)
        assert state.find_pawn("red-1").square == Square.track(3)

    def test_apply_capture_sends_home(self, make_state):
        state = make_state(placements={
            "red-1": Square.track(10),
            "green-1": Square.track(7),
        })
        after = MoveResolver.apply(state, plan_for(state, "green-1", 3))
        assert after.find_pawn("red-1").state == PawnState.AT_HOME
        assert after.find_pawn("red-1").square is None
        assert after.occupancy.occupants(Square.track(10)) == ("green-1",)

    def test_apply_finish_clears_square(self, make_state):
        state = make_state(placements={"red-1": Square.stretch(Color.RED, 3)})
        after = MoveResolver.apply(state, plan_for(state, "red-1", 2))
        pawn = after.find_pawn("red-1")
        assert pawn.state == PawnState.FINISHED
        assert pawn.square is None

    def test_apply_stale_plan_raises(self, make_state):
        state = make_state(placements={"red-1": Square.track(3)})
        plan = plan_for(state, "red-1", 4)
        moved = MoveResolver.apply(state, plan)
        with pytest.raises(ValueError, match="expects"):
            MoveResolver.apply(moved, plan)


class TestLegalMoves:
    """Tests for legal-target enumeration and automatic choice."""

    def test_all_home_non_six(self, four_player_game):
        player = four_player_game.player(Color.RED)
        assert MoveResolver.legal_moves(four_player_game.board, four_player_game.occupancy, player, 4) == ()

    def test_all_home_six(self, four_player_game):
        player = four_player_game.player(Color.RED)
        plans = MoveResolver.legal_moves(four_player_game.board, four_player_game.occupancy, player, 6)
        assert [p.pawn_id for p in plans] == ["red-1", "red-2", "red-3", "red-4"]

    def test_automatic_when_opening_with_none_out(self, four_player_game):
        player = four_player_game.player(Color.RED)
        plans = MoveResolver.legal_moves(four_player_game.board, four_player_game.occupancy, player, 6)
        assert MoveResolver.automatic_choice(plans).pawn_id == "red-1"

    def test_manual_when_pawn_out_and_six(self, make_state):
        state = make_state(placements={"red-2": Square.track(20)})
        plans = MoveResolver.legal_moves(state.board, state.occupancy, state.player(Color.RED), 6)
        assert len(plans) == 4
        assert MoveResolver.automatic_choice(plans) is None

    def test_automatic_single_pawn(self, make_state):
        state = make_state(placements={"red-2": Square.track(20)})
        plans = MoveResolver.legal_moves(state.board, state.occupancy, state.player(Color.RED), 3)
        assert MoveResolver.automatic_choice(plans).pawn_id == "red-2"

    def test_automatic_for_stack(self, make_state):
        state = make_state(placements={
            "red-2": Square.track(20),
            "red-3": Square.track(20),
        })
        plans = MoveResolver.legal_moves(state.board, state.occupancy, state.player(Color.RED), 3)
        assert MoveResolver.automatic_choice(plans).pawn_id == "red-2"

    def test_no_plans_no_choice(self):
        assert MoveResolver.automatic_choice(()) is None


class TestDescribeIllegal:
    """Tests for rejection messages."""

    def test_home_pawn(self, four_player_game):
        pawn = four_player_game.find_pawn("red-1")
        assert "needs a 6" in MoveResolver.describe_illegal(four_player_game.board, pawn, 3)

    def test_finished_pawn(self, make_state):
        state = make_state(placements={"red-1": "finished"})
        assert "already finished" in MoveResolver.describe_illegal(state.board, state.find_pawn("red-1"), 3)

    def test_overshoot(self, make_state):
        state = make_state(placements={"red-1": Square.stretch(Color.RED, 4)})
        message = MoveResolver.describe_illegal(state.board, state.find_pawn("red-1"), 2)
        assert "1 from home" in message


class TestMovePlan:
    """Tests for MovePlan properties."""

    def test_origin_key(self):
        plan = MovePlan(
            pawn_id="red-1",
            color=Color.RED,
            move_type=MoveType.BOARD,
            origin=Square.track(4),
            destination=Square.track(6),
            steps=(Square.track(5), Square.track(6)),
        )
        assert plan.origin_key == Square.track(4)
        assert not plan.is_capture
        assert not plan.finishes
