# cli_driver.py
# Terminal front end: reads keys, renders the board and keeps the saved game
# in sync after every change.

import argparse
import logging
from typing import List, Optional

from game128 import config
from game128.core import max_tile, parse_direction
from game128.persistence import GameStore, JsonFileStorage
from game128.session import GameProgressState, GameSession, GameState

logger = logging.getLogger(__name__)

CELL_WIDTH = 6
PROMPT = "Move with W/A/S/D, U to undo, N for a new game, Q to quit: "


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description=f"Play 2048 up to the {config.WIN_TILE} tile.")
    parser.add_argument(
        "--save-file",
        default=config.SAVE_PATH,
        help="JSON file the game is saved to (default: %(default)s)",
    )
    parser.add_argument("--log-level", default=config.LOG_LEVEL, help="Logging level")
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    # 1. Resume the saved game, or start a fresh one
    game = GameSession.resume(GameStore(JsonFileStorage(args.save_file)))
    display_board_state(game.state)

    # 2. Game loop
    while True:
        try:
            command = input(PROMPT).strip().upper()
        except EOFError:
            command = "Q"

        if command == "Q":
            print("Quitting game. Your progress is saved.")
            break
        if command == "N":
            game.new_game()
        elif command == "U":
            if not game.undo():
                print("Nothing to undo.")
                continue
        elif game.state.is_terminal:
            print("The game has ended. Press U to undo or N for a new game.")
            continue
        elif parse_direction(command) is None:
            print("Invalid input. Use W, A, S, D, U, N or Q.")
            continue
        elif not game.move(command):
            print("Move did not change the board. Try a different direction.")
            continue

        display_board_state(game.state)


# --- Display Function ---

def render_board(board) -> str:
    """Renders the board as text, one line per row and '.' for empty cells."""
    lines = []
    for row in board:
        lines.append("".join(f"{value if value else '.':>{CELL_WIDTH}}" for value in row))
    return "\n".join(lines)


def display_board_state(state: GameState):
    """Prints the board, score and game status to the console."""
    print(f"\nScore: {state.score}    Best tile: {max_tile(state.board)}")
    print(render_board(state.board))
    print("-" * (len(state.board) * CELL_WIDTH))

    # Win takes precedence over game over
    if state.progress is GameProgressState.WON:
        print(f"You made the {config.WIN_TILE} tile!")
    elif state.progress is GameProgressState.OVER:
        print("No more moves.")


if __name__ == "__main__":
    main()
