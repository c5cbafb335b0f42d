# session.py
# Game session controller. Every transition is a pure function taking the
# current state and history and returning new ones; GameSession is the thin
# mutable holder the presentation layers drive.

from enum import Enum
from typing import Tuple
import logging

from pydantic import BaseModel, ConfigDict, Field, field_validator

import game128.core as core
from game128.config import HISTORY_LIMIT, WIN_TILE

logger = logging.getLogger(__name__)


class GameProgressState(Enum):
    """Represents the current progress state of the game."""
    PLAYING = "PLAYING"
    WON = "WON"
    OVER = "OVER"  # Lost


class HistoryEntry(BaseModel):
    """Snapshot of the board and score before an accepted move."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    board: core.Board = Field(..., description="4x4 board before the move.")
    score: int = Field(..., ge=0, description="Score before the move.")

    @field_validator("board")
    @classmethod
    def _check_board(cls, board: core.Board) -> core.Board:
        return core.validate_board(board)


class GameState(BaseModel):
    """Complete state of one game; replaced, never mutated, on each transition."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    board: core.Board = Field(..., description="The 4x4 game board, 0 for empty cells.")
    score: int = Field(default=0, ge=0, description="Sum of all merge values so far.")
    is_game_over: bool = Field(default=False, alias="isGameOver")
    is_win: bool = Field(default=False, alias="isWin")

    @field_validator("board")
    @classmethod
    def _check_board(cls, board: core.Board) -> core.Board:
        return core.validate_board(board)

    @property
    def progress(self) -> GameProgressState:
        if self.is_win:
            return GameProgressState.WON
        if self.is_game_over:
            return GameProgressState.OVER
        return GameProgressState.PLAYING

    @property
    def is_terminal(self) -> bool:
        return self.progress is not GameProgressState.PLAYING


History = Tuple[HistoryEntry, ...]


def create_initial_game_state(rng=None) -> GameState:
    """Creates a fresh game: an empty board seeded with two random tiles."""
    board = core.create_empty_board()
    board = core.add_random_tile(board, rng)
    board = core.add_random_tile(board, rng)
    return GameState(board=board, score=0, is_game_over=False, is_win=False)


def start_new_game(rng=None) -> Tuple[GameState, History]:
    """Starts an independent session with a fresh state and empty history."""
    return create_initial_game_state(rng), ()


def push_history(history: History, entry: HistoryEntry, limit: int = HISTORY_LIMIT) -> History:
    """
    Appends an entry, keeping only the newest `limit` entries.
    Args:
        history (History): Existing entries, oldest first.
        entry (HistoryEntry): The snapshot to append.
        limit (int): Maximum number of entries kept.
    Returns:
        History: A new tuple; the oldest entries are dropped on overflow.
    """
    return (tuple(history) + (entry,))[-limit:]


def apply_move(state: GameState, history: History, direction, rng=None) -> Tuple[GameState, History]:
    """
    Applies one directional move.
    Args:
        state (GameState): The current game state.
        history (History): Undo history, oldest first.
        direction: A Direction or anything parse_direction understands.
        rng: Random source for the spawned tile.
    Returns:
        Tuple[GameState, History]: The new state and history. Unrecognized
            directions and moves that leave the board unchanged return the
            inputs as they are.
    """
    chosen_direction = core.parse_direction(direction)
    if chosen_direction is None:
        logger.debug("Ignoring unrecognized direction %r", direction)
        return state, history

    moved_board, score_gained = core.move_board(state.board, chosen_direction)
    if core.are_boards_equal(state.board, moved_board):
        return state, history

    snapshot = HistoryEntry(board=core.copy_board(state.board), score=state.score)
    new_history = push_history(history, snapshot)

    new_board = core.add_random_tile(moved_board, rng)
    new_state = GameState(
        board=new_board,
        score=state.score + score_gained,
        is_game_over=not core.can_move(new_board),
        is_win=core.has_winning_tile(new_board, WIN_TILE),
    )
    logger.debug(
        "Moved %s: +%d points, progress %s",
        chosen_direction.name, score_gained, new_state.progress.name,
    )
    return new_state, new_history


def undo(state: GameState, history: History) -> Tuple[GameState, History]:
    """
    Restores the most recent history entry.
    The restored state is always playable: both terminal flags are cleared.
    Undo on an empty history returns the inputs unchanged.
    """
    if not history:
        return state, history

    previous = history[-1]
    restored = GameState(
        board=core.copy_board(previous.board),
        score=previous.score,
        is_game_over=False,
        is_win=False,
    )
    logger.debug("Undo to score %d, %d entries left", previous.score, len(history) - 1)
    return restored, tuple(history[:-1])


class GameSession:
    """
    Holds the current state and history for one player and keeps a store
    in sync with them. Directional input is refused once the game is won or
    over; undo and new game are always accepted.
    """

    def __init__(self, state: GameState, history: History = (), store=None, rng=None):
        self.state = state
        self.history = tuple(history)
        self.store = store
        self.rng = rng

    @classmethod
    def resume(cls, store=None, rng=None) -> "GameSession":
        """Continues the saved game in store, or starts a new one."""
        saved_state, saved_history = (None, ())
        if store is not None:
            saved_state, saved_history = store.load()
        if saved_state is None:
            session = cls(*start_new_game(rng), store=store, rng=rng)
        else:
            session = cls(saved_state, saved_history, store=store, rng=rng)
        session._save()
        return session

    @property
    def can_undo(self) -> bool:
        return bool(self.history)

    def move(self, direction) -> bool:
        """Applies a move; returns True if the state changed."""
        if self.state.is_terminal:
            return False
        new_state, new_history = apply_move(self.state, self.history, direction, self.rng)
        if new_state is self.state:
            return False
        self._commit(new_state, new_history)
        return True

    def undo(self) -> bool:
        if not self.history:
            return False
        self._commit(*undo(self.state, self.history))
        return True

    def new_game(self) -> None:
        if self.store is not None:
            self.store.clear()
        logger.debug("Starting a new game")
        self._commit(*start_new_game(self.rng))

    def _commit(self, state: GameState, history: History) -> None:
        self.state = state
        self.history = history
        self._save()

    def _save(self) -> None:
        if self.store is not None:
            self.store.save(self.state, self.history)
