"""Tests for src/realtime/requests.py: inward request validation."""

import pytest
from pydantic import ValidationError

from src.realtime.requests import (
    ActionRequest,
    RollRequest,
    SkipRequest,
    SnapshotRequest,
    parse_request,
    request_message,
)


class TestParseRequest:
    def test_roll(self):
        request = parse_request({"type": "request_roll", "player": "red"})
        assert isinstance(request, RollRequest)
        assert request.player == "red"
        assert request.request_id is None

    def test_action_with_pawn(self):
        request = parse_request({
            "type": "request_action",
            "player": "green",
            "pawn_id": "green-2",
            "roll_serial": 4,
            "request_id": "abc",
        })
        assert isinstance(request, ActionRequest)
        assert request.pawn_id == "green-2"
        assert request.roll_serial == 4
        assert request.request_id == "abc"

    def test_action_without_pawn(self):
        request = parse_request({"type": "request_action", "player": "green"})
        assert request.pawn_id is None

    def test_skip(self):
        assert isinstance(parse_request({"type": "request_skip", "player": "blue"}), SkipRequest)

    def test_snapshot(self):
        assert isinstance(parse_request({"type": "request_snapshot", "player": "blue"}), SnapshotRequest)

    def test_extra_fields_ignored(self):
        request = parse_request({"kind": "request", "type": "request_roll", "player": "red", "x": 1})
        assert request == RollRequest(player="red")

    def test_unknown_type(self):
        with pytest.raises(ValidationError):
            parse_request({"type": "request_teleport", "player": "red"})

    def test_missing_player(self):
        with pytest.raises(ValidationError):
            parse_request({"type": "request_roll"})

    def test_empty_player(self):
        with pytest.raises(ValidationError):
            parse_request({"type": "request_roll", "player": ""})

    def test_roll_serial_must_be_positive(self):
        with pytest.raises(ValidationError):
            parse_request({"type": "request_action", "player": "red", "roll_serial": 0})

    def test_requests_are_frozen(self):
        request = RollRequest(player="red")
        with pytest.raises(ValidationError):
            request.player = "green"


class TestRequestMessage:
    def test_message_shape(self):
        message = request_message(SkipRequest(player="yellow", request_id="r-1"))
        assert message == {
            "kind": "request",
            "type": "request_skip",
            "player": "yellow",
            "request_id": "r-1",
        }

    def test_parse_accepts_message(self):
        request = ActionRequest(player="red", pawn_id="red-1", roll_serial=2)
        assert parse_request(request_message(request)) == request
