"""
Ludo Arena - Dice Roller Tests
"""

import random

import pytest
from src.engine.base import Color, TurnPhase, TurnState
from src.engine.dice import DiceRoller, RollOutcome


class TestRollDie:
    """Tests for DiceRoller.roll_die()."""

    def test_value_range(self):
        """Roll 300 times; every value should be 1-6."""
        for _ in range(300):
            assert 1 <= DiceRoller.roll_die() <= 6

    def test_randomness(self):
        values = {DiceRoller.roll_die() for _ in range(200)}
        assert len(values) > 1

    def test_seeded_rng_is_deterministic(self):
        first = [DiceRoller.roll_die(random.Random(7)) for _ in range(5)]
        second = [DiceRoller.roll_die(random.Random(7)) for _ in range(5)]
        assert first == second

    def test_every_face_appears(self):
        rng = random.Random(1)
        assert {DiceRoller.roll_die(rng) for _ in range(500)} == {1, 2, 3, 4, 5, 6}


class TestSixStreak:
    """Tests for the consecutive-six counter."""

    def test_six_starts_run(self):
        assert DiceRoller.next_streak(0, 6) == 1

    def test_six_extends_run(self):
        assert DiceRoller.next_streak(2, 6) == 3

    @pytest.mark.parametrize("value", [1, 2, 3, 4, 5])
    def test_non_six_resets(self, value):
        assert DiceRoller.next_streak(2, value) == 0


class TestRoll:
    """Tests for DiceRoller.roll()."""

    def test_returns_outcome(self):
        outcome = DiceRoller.roll(TurnState(current=Color.RED), value=4)
        assert isinstance(outcome, RollOutcome)
        assert outcome.value == 4

    def test_enters_action_phase(self):
        outcome = DiceRoller.roll(TurnState(current=Color.RED), value=3)
        assert outcome.turn.phase == TurnPhase.AWAITING_ACTION
        assert outcome.turn.last_roll == 3
        assert outcome.turn.current == Color.RED

    def test_increments_serial(self):
        outcome = DiceRoller.roll(TurnState(current=Color.RED, roll_serial=4), value=2)
        assert outcome.turn.roll_serial == 5

    def test_clears_bonus_flags(self):
        turn = TurnState(current=Color.RED, bonus_pending=True, must_reroll=True)
        outcome = DiceRoller.roll(turn, value=2)
        assert outcome.turn.bonus_pending is False
        assert outcome.turn.must_reroll is False

    def test_first_six(self):
        outcome = DiceRoller.roll(TurnState(current=Color.RED), value=6)
        assert outcome.six_streak == 1
        assert not outcome.forfeited

    def test_second_six_keeps_counting(self):
        outcome = DiceRoller.roll(TurnState(current=Color.RED, six_streak=1), value=6)
        assert outcome.six_streak == 2
        assert not outcome.forfeited

    def test_third_six_forfeits(self):
        outcome = DiceRoller.roll(TurnState(current=Color.RED, six_streak=2), value=6)
        assert outcome.six_streak == 3
        assert outcome.forfeited

    def test_non_six_breaks_run(self):
        outcome = DiceRoller.roll(TurnState(current=Color.RED, six_streak=2), value=5)
        assert outcome.six_streak == 0
        assert not outcome.forfeited

    def test_invalid_forced_value(self):
        with pytest.raises(ValueError):
            DiceRoller.roll(TurnState(current=Color.RED), value=7)

    def test_uses_rng(self):
        rng = random.Random(99)
        expected = random.Random(99).randint(1, 6)
        assert DiceRoller.roll(TurnState(current=Color.RED), rng=rng).value == expected

    def test_does_not_mutate_input(self):
        turn = TurnState(current=Color.RED)
        DiceRoller.roll(turn, value=6)
        assert turn.awaiting_roll
        assert turn.six_streak == 0
