import json
import logging

import pytest

from tests.helpers import make_board
from game128.config import HISTORY_KEY, STATE_KEY
from game128.persistence import GameStore, JsonFileStorage, MemoryStorage
from game128.session import GameState, HistoryEntry


@pytest.fixture
def saved_game():
    state = GameState(board=make_board((0, 0, 4), (3, 3, 2)), score=4, is_win=False)
    history = (
        HistoryEntry(board=make_board((0, 0, 2), (0, 1, 2)), score=0),
    )
    return state, history


def test_save_writes_both_keys_as_json(saved_game):
    storage = MemoryStorage()
    GameStore(storage).save(*saved_game)

    state_data = json.loads(storage.get_item(STATE_KEY))
    assert state_data == {
        "board": [[4, 0, 0, 0], [0] * 4, [0] * 4, [0, 0, 0, 2]],
        "score": 4,
        "isGameOver": False,
        "isWin": False,
    }
    history_data = json.loads(storage.get_item(HISTORY_KEY))
    assert history_data == [{"board": [[2, 2, 0, 0], [0] * 4, [0] * 4, [0] * 4], "score": 0}]


def test_load_returns_saved_game(saved_game):
    store = GameStore(MemoryStorage())
    store.save(*saved_game)
    assert store.load() == saved_game


def test_load_with_nothing_saved():
    assert GameStore(MemoryStorage()).load() == (None, ())


def test_load_without_history_key(saved_game):
    storage = MemoryStorage()
    store = GameStore(storage)
    store.save(*saved_game)
    storage.remove_item(HISTORY_KEY)
    assert store.load() == (saved_game[0], ())


@pytest.mark.parametrize("items", [
    {STATE_KEY: "{not json"},
    {STATE_KEY: json.dumps({"board": [[0] * 4] * 3, "score": 0})},
    {STATE_KEY: json.dumps({"board": [[0] * 4] * 4, "score": -5})},
    {STATE_KEY: json.dumps({"board": [[0] * 4] * 4, "score": 0}), HISTORY_KEY: "[{]"},
    {STATE_KEY: json.dumps({"board": [[0] * 4] * 4, "score": 0}), HISTORY_KEY: json.dumps({"board": 1})},
])
def test_corrupt_data_loads_as_nothing(items, caplog):
    store = GameStore(MemoryStorage(items))
    with caplog.at_level(logging.ERROR, logger="game128.persistence"):
        assert store.load() == (None, ())
    assert "Failed to load game state" in caplog.text


def test_load_keeps_newest_ten_history_entries():
    board = make_board((0, 0, 2))
    entries = [{"board": board, "score": score} for score in range(12)]
    store = GameStore(MemoryStorage({
        STATE_KEY: json.dumps({"board": board, "score": 12, "isGameOver": False, "isWin": False}),
        HISTORY_KEY: json.dumps(entries),
    }))
    _, history = store.load()
    assert [entry.score for entry in history] == list(range(2, 12))


def test_clear_removes_both_keys(saved_game):
    storage = MemoryStorage({"unrelated": "1"})
    store = GameStore(storage)
    store.save(*saved_game)
    store.clear()
    assert storage.items == {"unrelated": "1"}
    assert store.load() == (None, ())


# --- JsonFileStorage ---

def test_file_storage_round_trip(tmp_path, saved_game):
    path = tmp_path / "nested" / "save.json"
    store = GameStore(JsonFileStorage(str(path)))
    store.save(*saved_game)
    assert path.exists()

    assert GameStore(JsonFileStorage(str(path))).load() == saved_game
    store.clear()
    assert json.loads(path.read_text()) == {}


def test_file_storage_missing_file(tmp_path):
    storage = JsonFileStorage(str(tmp_path / "absent.json"))
    assert storage.get_item(STATE_KEY) is None
    storage.remove_item(STATE_KEY)
    assert not (tmp_path / "absent.json").exists()


def test_file_storage_corrupt_file(tmp_path, saved_game):
    path = tmp_path / "save.json"
    path.write_text("[1, 2, 3]")
    storage = JsonFileStorage(str(path))
    with pytest.raises(ValueError):
        storage.get_item(STATE_KEY)
    assert GameStore(storage).load() == (None, ())

    # Saving over a corrupt file replaces it
    GameStore(storage).save(*saved_game)
    assert GameStore(storage).load() == saved_game
