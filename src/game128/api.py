from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel, Field
from typing import List, Optional
import logging

from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

import game128.core as core
import game128.session as session
from game128.config import HISTORY_LIMIT, RATE_LIMIT, WIN_TILE

logger = logging.getLogger(__name__)

# Initialize the rate limiter
limiter = Limiter(key_func=get_remote_address)
app = FastAPI(
    title="128 Game API",
    description="A stateless API for playing 2048 up to the 128 tile. "\
                "Keep the game state and undo history on the client side and send them with each call.",
    version="1.0.0"
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# --- Pydantic Models for API requests and responses ---

class GameData(BaseModel):
    """The game state plus its undo history, as carried by the client."""
    state: session.GameState = Field(..., description="Current board, score and terminal flags.")
    history: List[session.HistoryEntry] = Field(
        default_factory=list,
        max_length=HISTORY_LIMIT,
        description=f"Undo snapshots, oldest first (at most {HISTORY_LIMIT})."
    )

class GameResponseData(GameData):
    """Game data returned by every endpoint."""
    progress: session.GameProgressState = Field(
        ...,
        description="Current progress state of the game (PLAYING, WON, OVER)."
    )

class MoveRequestData(GameData):
    """Data required to make a move."""
    direction: str = Field(
        ...,
        description="Direction of the move (UP, DOWN, LEFT, RIGHT). Unrecognized values are ignored."
    )

class TransitionResponseData(GameResponseData):
    """Response after a move or undo, including whether anything changed."""
    move_was_effective: bool = Field(
        ...,
        description="True if the request changed the game state, False otherwise."
    )
    message: Optional[str] = Field(
        default=None,
        description="An optional message, e.g. if a move was ignored, the game was won or ended."
    )


def _progress_message(state: session.GameState) -> Optional[str]:
    if state.progress is session.GameProgressState.WON:
        return f"Congratulations! You made the {WIN_TILE} tile!"
    if state.progress is session.GameProgressState.OVER:
        return "Game Over. No more valid moves."
    return None


def _transition_response(state, history, effective: bool, message: Optional[str]) -> TransitionResponseData:
    return TransitionResponseData(
        state=state,
        history=list(history),
        progress=state.progress,
        move_was_effective=effective,
        message=message if message is not None else _progress_message(state),
    )

# --- API Endpoints ---

@app.post("/game/new", response_model=GameResponseData, summary="Start a New Game")
@limiter.limit(RATE_LIMIT)
async def start_new_game(request: Request):
    """
    Starts a new game: a 4x4 board with two random tiles, score 0,
    progress PLAYING and an empty undo history.
    """
    try:
        state, history = session.start_new_game()
        return GameResponseData(state=state, history=list(history), progress=state.progress)
    except Exception as e:
        logger.exception("Unexpected error in /game/new")
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred during game creation: {str(e)}")


@app.post("/game/move", response_model=TransitionResponseData, summary="Make a Move in the Game")
@limiter.limit(RATE_LIMIT)
async def make_move(request: Request, request_data: MoveRequestData):
    """
    Processes a player's move in the game.

    The API will:
    1. Ignore the move if the direction is unrecognized or the game is already won or over.
    2. Slide and merge the tiles; if nothing moved, return the game unchanged.
    3. Otherwise record the previous board in the history, add a new random tile (2 or 4)
       and determine the new progress state (PLAYING, WON, OVER).
    """
    state = request_data.state
    history = tuple(request_data.history)

    direction = core.parse_direction(request_data.direction)
    if direction is None:
        return _transition_response(
            state, history, False,
            f"Unrecognized direction {request_data.direction!r}; move ignored."
        )
    if state.is_terminal:
        return _transition_response(state, history, False, None)

    try:
        new_state, new_history = session.apply_move(state, history, direction)
    except Exception as e:
        logger.exception("Unexpected error in /game/move")
        raise HTTPException(status_code=500, detail=f"An unexpected server error occurred while processing the move: {str(e)}")

    if new_state is state:
        return _transition_response(
            state, history, False,
            "Move was not effective; board state unchanged by slide."
        )
    return _transition_response(new_state, new_history, True, None)


@app.post("/game/undo", response_model=TransitionResponseData, summary="Undo the Last Move")
@limiter.limit(RATE_LIMIT)
async def undo_move(request: Request, request_data: GameData):
    """
    Restores the newest history entry. The restored game is always PLAYING,
    even if the undone state had been won or lost.
    """
    history = tuple(request_data.history)
    if not history:
        return _transition_response(request_data.state, history, False, "Nothing to undo.")

    try:
        new_state, new_history = session.undo(request_data.state, history)
    except Exception as e:
        logger.exception("Unexpected error in /game/undo")
        raise HTTPException(status_code=500, detail=f"An unexpected server error occurred while undoing the move: {str(e)}")

    return _transition_response(new_state, new_history, True, None)
