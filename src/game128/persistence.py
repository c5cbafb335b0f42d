# persistence.py
# Saves a game under two fixed keys of a string key-value store, the same
# layout a browser's local storage would hold.

from typing import Dict, List, Optional, Protocol, Tuple
import json
import logging
import os

from pydantic import TypeAdapter, ValidationError

from game128.config import HISTORY_KEY, HISTORY_LIMIT, STATE_KEY
from game128.session import GameState, History, HistoryEntry

logger = logging.getLogger(__name__)

_HISTORY_ADAPTER = TypeAdapter(List[HistoryEntry])


class KeyValueStorage(Protocol):
    """Minimal string key-value store."""

    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    """Dict-backed storage, mostly for tests and throwaway sessions."""

    def __init__(self, items: Optional[Dict[str, str]] = None):
        self.items: Dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


class JsonFileStorage:
    """
    Keeps all keys in one JSON object on disk.
    A missing file reads as empty. A file that is not a JSON object makes
    get_item raise ValueError; writing replaces it.
    """

    def __init__(self, path: str):
        self.path = path

    def _read(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as handle:
            items = json.load(handle)  # json.JSONDecodeError is a ValueError
        if not isinstance(items, dict):
            raise ValueError(f"Storage file {self.path} does not hold a JSON object.")
        return items

    def _read_for_update(self) -> Dict[str, str]:
        try:
            return self._read()
        except (OSError, ValueError) as e:
            logger.warning("Discarding unreadable storage file %s: %s", self.path, e)
            return {}

    def _write(self, items: Dict[str, str]) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp_path = self.path + ".tmp"
        with open(tmp_path, "w", encoding="utf-8") as handle:
            json.dump(items, handle)
        os.replace(tmp_path, self.path)

    def get_item(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._read_for_update()
        items[key] = value
        self._write(items)

    def remove_item(self, key: str) -> None:
        items = self._read_for_update()
        if key in items:
            del items[key]
            self._write(items)


class GameStore:
    """Persists a game's state and undo history."""

    def __init__(self, storage: KeyValueStorage):
        self.storage = storage

    def save(self, state: GameState, history: History) -> None:
        self.storage.set_item(STATE_KEY, state.model_dump_json(by_alias=True))
        self.storage.set_item(
            HISTORY_KEY,
            _HISTORY_ADAPTER.dump_json(list(history), by_alias=True).decode("utf-8"),
        )

    def load(self) -> Tuple[Optional[GameState], History]:
        """
        Reads the saved game.
        Returns:
            Tuple[Optional[GameState], History]: The saved state and history,
                or (None, ()) when nothing usable is stored. Corrupt data is
                logged and treated as absent.
        """
        try:
            saved_state = self.storage.get_item(STATE_KEY)
            saved_history = self.storage.get_item(HISTORY_KEY)
            if saved_state is None:
                return None, ()

            state = GameState.model_validate_json(saved_state)
            history: History = ()
            if saved_history is not None:
                history = tuple(_HISTORY_ADAPTER.validate_json(saved_history))[-HISTORY_LIMIT:]
            return state, history
        except (OSError, ValueError, ValidationError) as e:
            logger.error("Failed to load game state: %s", e)
            return None, ()

    def clear(self) -> None:
        self.storage.remove_item(STATE_KEY)
        self.storage.remove_item(HISTORY_KEY)
