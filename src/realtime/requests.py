"""
Ludo Arena - Inward Requests

Pydantic models for the requests a participant can send to the authority.
Incoming broadcast bodies are validated here before they reach the engine.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter


class _Request(BaseModel):
    """Fields shared by every request."""

    player: str = Field(min_length=1)
    request_id: str | None = Field(default=None, max_length=128)

    model_config = {"extra": "ignore", "frozen": True}


class RollRequest(_Request):
    type: Literal["request_roll"] = "request_roll"


class ActionRequest(_Request):
    type: Literal["request_action"] = "request_action"
    pawn_id: str | None = None
    roll_serial: int | None = Field(default=None, ge=1)


class SkipRequest(_Request):
    type: Literal["request_skip"] = "request_skip"


class SnapshotRequest(_Request):
    type: Literal["request_snapshot"] = "request_snapshot"


InwardRequest = Annotated[
    Union[RollRequest, ActionRequest, SkipRequest, SnapshotRequest],
    Field(discriminator="type"),
]

_request_adapter: TypeAdapter[InwardRequest] = TypeAdapter(InwardRequest)


def parse_request(message: dict[str, Any]) -> InwardRequest:
    """Validate a raw request body.

    Raises:
        pydantic.ValidationError: If the body is not a known request
    """
    return _request_adapter.validate_python(message)


def request_message(request: InwardRequest) -> dict[str, Any]:
    """Broadcast body for a request (the inverse of parse_request)."""
    return {"kind": "request", **request.model_dump()}
