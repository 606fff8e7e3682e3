from uuid import UUID, uuid4

import pytest

from ttt_online.api.models import (
    CreateGameRequest,
    GameResponse,
    MoveIntentRequest,
)
from ttt_online.core.exceptions import InvalidRequestError
from ttt_online.core.models import MoveIntent
from ttt_online.core.shared_types import Mark, Status

from conftest import make_game


@pytest.fixture
def mock_id() -> UUID:
    return uuid4()


# -- Validation - CreateGameRequest --
def test_size_is_optional() -> None:
    request = CreateGameRequest(caller_id="someone")
    assert request.size is None


@pytest.mark.parametrize("size", [0, -1])
def test_invalid_size(size: int) -> None:
    with pytest.raises(InvalidRequestError):
        _ = CreateGameRequest(caller_id="someone", size=size)


def test_identity_is_optional_at_the_boundary() -> None:
    """Missing identity is the service's call (UnauthenticatedError), not a validation error."""
    request = CreateGameRequest(size=3)
    assert request.caller_id is None


# -- Validation - MoveIntentRequest --
def test_valid_coordinates(mock_id: UUID) -> None:
    request = MoveIntentRequest(caller_id="p", game_id=mock_id, row=2, col=0)
    assert (request.row, request.col) == (2, 0)


@pytest.mark.parametrize("row, col", [(-1, 0), (0, -1)])
def test_negative_coordinates(mock_id: UUID, row: int, col: int) -> None:
    with pytest.raises(InvalidRequestError):
        _ = MoveIntentRequest(caller_id="p", game_id=mock_id, row=row, col=col)


# -- GameResponse --
def test_response_hides_server_side_fields(mock_id: UUID) -> None:
    model = make_game(
        board=["X", None, None, None, "O", None, None, None, None],
        pending_intent=MoveIntent(caller_id="alice", row=0, col=1),
        version=7,
    )
    response = GameResponse.from_model(mock_id, model)

    assert response.board[0] == Mark.X
    assert response.board[4] == Mark.O
    assert response.status == Status.ACTIVE
    dumped = response.model_dump()
    assert "pending_intent" not in dumped
    assert "version" not in dumped
