# core.py
# Stateless board logic for the 128 game: board primitives, the row reducer,
# the rotation-based directional transform and the terminal-state checks.

from enum import Enum
from typing import List, Optional, Tuple
import random

from game128.config import BOARD_SIZE, NEW_TILE_FOUR_PROBABILITY, WIN_TILE

Board = List[List[int]]


class Direction(Enum):
    """Represents the possible move directions."""
    UP = "UP"
    DOWN = "DOWN"
    LEFT = "LEFT"
    RIGHT = "RIGHT"


# Input aliases accepted by parse_direction, besides the member names.
_DIRECTION_ALIASES = {
    "ARROWUP": Direction.UP,
    "ARROWDOWN": Direction.DOWN,
    "ARROWLEFT": Direction.LEFT,
    "ARROWRIGHT": Direction.RIGHT,
    "W": Direction.UP,
    "S": Direction.DOWN,
    "A": Direction.LEFT,
    "D": Direction.RIGHT,
}


def parse_direction(value) -> Optional[Direction]:
    """
    Maps user input to a Direction.
    Args:
        value: A Direction, a direction name ("up", "LEFT"), an arrow key name
               ("ArrowUp") or a WASD key.
    Returns:
        Optional[Direction]: The matching direction, or None if unrecognized.
    """
    if isinstance(value, Direction):
        return value
    if not isinstance(value, str):
        return None
    key = value.strip().upper()
    if key in Direction.__members__:
        return Direction[key]
    return _DIRECTION_ALIASES.get(key)


# --- Board Primitives ---

def create_empty_board() -> Board:
    """Creates a new 4x4 board with every cell empty."""
    return [[0] * BOARD_SIZE for _ in range(BOARD_SIZE)]


def copy_board(board: Board) -> Board:
    return [list(row) for row in board]


def _is_tile_value(value) -> bool:
    if not isinstance(value, int) or isinstance(value, bool):
        return False
    return value == 0 or (value >= 2 and value & (value - 1) == 0)


def validate_board(board: Board) -> Board:
    """
    Checks that a board is 4x4 and holds only 0 or powers of two from 2 up.
    Args:
        board (Board): The board to check.
    Returns:
        Board: The same board, for chaining.
    Raises:
        ValueError: If the board has the wrong shape or an invalid cell value.
    """
    if not isinstance(board, list) or len(board) != BOARD_SIZE:
        raise ValueError(f"Board must have exactly {BOARD_SIZE} rows.")
    for row in board:
        if not isinstance(row, list) or len(row) != BOARD_SIZE:
            raise ValueError(f"Every board row must have exactly {BOARD_SIZE} cells.")
        for value in row:
            if not _is_tile_value(value):
                raise ValueError(f"Invalid tile value {value!r}; expected 0 or a power of two.")
    return board


def get_empty_cells(board: Board) -> List[Tuple[int, int]]:
    """
    Get coordinates of empty (0-value) cells in row-major order.
    Args:
        board (Board): The board to check.
    Returns:
        List[Tuple[int, int]]: List of (row, col) tuples for empty cells.
    """
    return [
        (row, col)
        for row in range(BOARD_SIZE)
        for col in range(BOARD_SIZE)
        if board[row][col] == 0
    ]


def add_random_tile(board: Board, rng=None) -> Board:
    """
    Places a new tile (90% chance of 2, 10% chance of 4) in a uniformly chosen
    empty cell of a copy of the board.
    Args:
        board (Board): The current game board. It is not modified.
        rng: Random source exposing choice() and random(); defaults to the
             random module.
    Returns:
        Board: A new board with the added tile, or an unmodified copy when
               the board has no empty cell.
    """
    rng = rng or random
    new_board = copy_board(board)
    empty_cells = get_empty_cells(new_board)
    if not empty_cells:
        return new_board

    row, col = rng.choice(empty_cells)
    new_board[row][col] = 4 if rng.random() < NEW_TILE_FOUR_PROBABILITY else 2
    return new_board


def are_boards_equal(board_a: Board, board_b: Board) -> bool:
    """Returns True iff every corresponding cell of the two boards matches."""
    for row in range(BOARD_SIZE):
        for col in range(BOARD_SIZE):
            if board_a[row][col] != board_b[row][col]:
                return False
    return True


# --- Row Reducer ---

def slide_and_merge_row(row: List[int]) -> Tuple[List[int], int]:
    """
    Slides a single line toward index 0 and merges equal neighbours once.
    Args:
        row (List[int]): Four cell values, compaction is toward the start.
    Returns:
        Tuple[List[int], int]: The resulting line and the score gained from
                               its merges.
    """
    compacted = [value for value in row if value != 0]
    score_gained = 0

    # A merged tile is not compared again: its partner is zeroed and the
    # scan moves on to that zero.
    for i in range(len(compacted) - 1):
        if compacted[i] != 0 and compacted[i] == compacted[i + 1]:
            compacted[i] *= 2
            score_gained += compacted[i]
            compacted[i + 1] = 0

    merged = [value for value in compacted if value != 0]
    merged += [0] * (BOARD_SIZE - len(merged))
    return merged, score_gained


# --- Board Transformations ---

def rotate_clockwise(board: Board) -> Board:
    """Rotates a board 90 degrees clockwise: (i, j) moves to (j, 3 - i)."""
    last = BOARD_SIZE - 1
    new_board = create_empty_board()
    for i in range(BOARD_SIZE):
        for j in range(BOARD_SIZE):
            new_board[j][last - i] = board[i][j]
    return new_board


def rotate_counter_clockwise(board: Board) -> Board:
    """Rotates a board 90 degrees counter-clockwise: (i, j) moves to (3 - j, i)."""
    last = BOARD_SIZE - 1
    new_board = create_empty_board()
    for i in range(BOARD_SIZE):
        for j in range(BOARD_SIZE):
            new_board[last - j][i] = board[i][j]
    return new_board


def _rotate_half_turn(board: Board) -> Board:
    return rotate_clockwise(rotate_clockwise(board))


# Rotation that turns each direction into a left move, and the one undoing it.
_NORMALIZE = {
    Direction.LEFT: (copy_board, copy_board),
    Direction.RIGHT: (_rotate_half_turn, _rotate_half_turn),
    Direction.UP: (rotate_counter_clockwise, rotate_clockwise),
    Direction.DOWN: (rotate_clockwise, rotate_counter_clockwise),
}


def move_board(board: Board, direction: Direction) -> Tuple[Board, int]:
    """
    Slides and merges the whole board in the given direction.
    Every direction is rotated into a left move, reduced row by row and
    rotated back, so all four share slide_and_merge_row.
    Args:
        board (Board): The current game board. It is not modified.
        direction (Direction): The direction to move.
    Returns:
        Tuple[Board, int]: The board after the move (no new tile added) and
                           the score gained across all rows.
    Raises:
        ValueError: If direction is not a Direction member.
    """
    if not isinstance(direction, Direction):
        raise ValueError(f"Invalid direction specified for move_board: {direction!r}")

    to_left, from_left = _NORMALIZE[direction]
    working_board = to_left(board)

    score_gained = 0
    for i in range(BOARD_SIZE):
        working_board[i], row_score = slide_and_merge_row(working_board[i])
        score_gained += row_score

    return from_left(working_board), score_gained


# --- Game State Checks ---

def can_move(board: Board) -> bool:
    """
    Checks whether any move could still change the board.
    Only right and lower neighbours are compared since adjacency is symmetric.
    Args:
        board (Board): The game board.
    Returns:
        bool: True if a cell is empty or has an equal neighbour.
    """
    if get_empty_cells(board):
        return True

    for row in range(BOARD_SIZE):
        for col in range(BOARD_SIZE):
            current = board[row][col]
            if col < BOARD_SIZE - 1 and board[row][col + 1] == current:
                return True
            if row < BOARD_SIZE - 1 and board[row + 1][col] == current:
                return True
    return False


def has_winning_tile(board: Board, win_tile: int = WIN_TILE) -> bool:
    """
    Check if the board holds a tile of exactly win_tile.
    Args:
        board (Board): The game board.
        win_tile (int): The tile value that signifies a win. Default is 128.
    Returns:
        bool: True if the game is won. Larger tiles alone do not count.
    """
    return any(value == win_tile for row in board for value in row)


def max_tile(board: Board) -> int:
    return max(value for row in board for value in row)
