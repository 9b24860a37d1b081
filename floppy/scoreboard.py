from __future__ import annotations

import json
import logging
import os
import secrets
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path

from floppy.config import DEFAULT_NAME, LEADERBOARD_SIZE, NAME_MAX_LEN

logger = logging.getLogger(__name__)

BEST_KEY = "flappy_best"
BOARD_KEY = "flappy_leaderboard"


class KeyValueStore:
    """
    Small JSON-backed key-value blob.

    A missing or unreadable file behaves as an empty store. Pass `path=None`
    for a store that only lives in memory.
    """

    def __init__(self, path: Path | None):
        self.path = path
        self._data = self._read()

    def _read(self) -> dict:
        if self.path is None or not self.path.exists():
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable store %s: %s", self.path, exc)
            return {}
        if not isinstance(payload, dict):
            logger.warning("Ignoring store %s: expected an object, got %s", self.path, type(payload).__name__)
            return {}
        return payload

    def get(self, key, default=None):
        return self._data.get(key, default)

    def set(self, key, value):
        self._data[key] = value
        self._flush()

    def _flush(self):
        if self.path is None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_name(f"{self.path.name}.{os.getpid()}.{secrets.token_hex(6)}.tmp")
            tmp.write_text(json.dumps(self._data, indent=2, sort_keys=True) + "\n", encoding="utf-8")
            tmp.replace(self.path)
        except OSError as exc:
            logger.warning("Could not save store %s: %s", self.path, exc)


@dataclass(frozen=True)
class Entry:
    name: str
    score: int
    date: str

    @property
    def when(self) -> datetime:
        try:
            # Browser toISOString() writes a trailing Z
            ts = datetime.fromisoformat(self.date[:-1] + "+00:00" if self.date.endswith("Z") else self.date)
        except ValueError:
            return datetime.min.replace(tzinfo=timezone.utc)
        return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


def clean_name(name) -> str:
    name = (name or "").strip()
    return name[:NAME_MAX_LEN] if name else DEFAULT_NAME


def _utcnow():
    return datetime.now(timezone.utc)


def _parse_entry(row):
    if not isinstance(row, dict):
        return None
    name, score, date = row.get("name"), row.get("score"), row.get("date")
    if not isinstance(name, str) or isinstance(score, bool) or not isinstance(score, int):
        return None
    return Entry(name=name, score=score, date=date if isinstance(date, str) else "")


def sort_entries(entries):
    # Score descending, then newest first
    return sorted(entries, key=lambda e: (e.score, e.when), reverse=True)


class Scoreboard:
    """Best score and the top-N leaderboard, both kept in one key-value store."""

    def __init__(self, store: KeyValueStore, size=LEADERBOARD_SIZE, clock=_utcnow):
        self.store = store
        self.size = size
        self.clock = clock
        self._best = self._load_best()
        self._board = self._load_board()

    def _load_best(self):
        raw = self.store.get(BEST_KEY, 0)
        try:
            if not isinstance(raw, bool):
                return max(0, int(raw))
        except (TypeError, ValueError, OverflowError):
            pass
        logger.warning("Ignoring stored best score %r", raw)
        return 0

    def _load_board(self):
        raw = self.store.get(BOARD_KEY, [])
        if not isinstance(raw, list):
            logger.warning("Ignoring stored leaderboard of type %s", type(raw).__name__)
            return []
        parsed = [e for e in map(_parse_entry, raw) if e is not None]
        if len(parsed) != len(raw):
            logger.warning("Dropped %d malformed leaderboard rows", len(raw) - len(parsed))
        return sort_entries(parsed)[: self.size]

    # --- Best score ---

    @property
    def best(self) -> int:
        return self._best

    def record_best(self, score) -> bool:
        """Persist `score` if it beats the stored best. Returns True on a new record."""
        if score <= self._best:
            return False
        self._best = int(score)
        self.store.set(BEST_KEY, self._best)
        return True

    # --- Leaderboard ---

    def entries(self) -> list[Entry]:
        return list(self._board)

    def top(self, n) -> list[Entry]:
        return self._board[:n]

    def qualifies(self, score) -> bool:
        return len(self._board) < self.size or score > self._board[-1].score

    def add(self, name, score) -> Entry:
        entry = Entry(name=clean_name(name), score=int(score), date=self.clock().isoformat())
        self._board = sort_entries(self._board + [entry])[: self.size]
        self.store.set(BOARD_KEY, [asdict(e) for e in self._board])
        return entry


def open_scoreboard(directory: Path | None) -> Scoreboard:
    path = None if directory is None else Path(directory) / "store.json"
    return Scoreboard(KeyValueStore(path))
