#!/usr/bin/env python3
"""
Two-slot snapshot store for purity rates.

Holds exactly two generations, "current" and "previous". A rotation moves
the stored current into previous and writes the new current inside a single
backend transaction, so a failed write never leaves the store without the
snapshot it held before.
"""

import copy
import json
import os
import sqlite3
import tempfile
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple
import logging

from goldrate_tracker.config import Config
from goldrate_tracker.constants import (
    SLOT_CURRENT,
    SLOT_PREVIOUS,
    SLOTS,
    BACKEND_SQLITE,
    BACKEND_JSON,
    BACKEND_MEMORY,
)
from goldrate_tracker.exceptions import ConfigurationError, StorageError
from goldrate_tracker.models import RateEntry, RotationOutcome, Snapshot
from goldrate_tracker.utils.comparison import needs_update, unique_by_code

logger = logging.getLogger(__name__)


def _check_slot(slot: str) -> None:
    if slot not in SLOTS:
        raise ValueError(f"Unknown snapshot slot: {slot!r} (expected one of {SLOTS})")


class SnapshotBackend(ABC):
    """
    Key-value persistence for snapshots.

    Writes made inside ``transaction()`` apply together or not at all.
    """

    @abstractmethod
    def get(self, slot: str) -> Optional[Snapshot]:
        """Return the snapshot in a slot, or None if the slot is empty."""

    @abstractmethod
    def set(self, slot: str, snapshot: Snapshot) -> None:
        """Store a snapshot in a slot. Raises StorageError on failure."""

    @abstractmethod
    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Group writes; commit on normal exit, roll back on any exception."""

    def close(self) -> None:
        """Release backend resources."""

    def __enter__(self) -> 'SnapshotBackend':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class InMemorySnapshotBackend(SnapshotBackend):
    """Dict-backed store, used for tests and ephemeral runs."""

    def __init__(self):
        self._slots: Dict[str, Snapshot] = {}

    def get(self, slot: str) -> Optional[Snapshot]:
        _check_slot(slot)
        return self._slots.get(slot)

    def set(self, slot: str, snapshot: Snapshot) -> None:
        _check_slot(slot)
        self._slots[slot] = snapshot

    @contextmanager
    def transaction(self) -> Iterator[None]:
        saved = dict(self._slots)
        try:
            yield
        except BaseException:
            self._slots = saved
            raise


class SqliteSnapshotBackend(SnapshotBackend):
    """Stores both slots in an SQLite table keyed by slot name."""

    def __init__(self, db_path: str):
        """
        Initialize database connection and create the table.

        Args:
            db_path: Path to SQLite database file (":memory:" allowed)
        """
        self.db_path = db_path
        if db_path != ':memory:':
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._in_transaction = False
        try:
            self.conn = sqlite3.connect(db_path, check_same_thread=False)
            self.conn.row_factory = sqlite3.Row
            self._create_tables()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to open snapshot database {db_path}: {e}") from e

    def _create_tables(self) -> None:
        """Create the snapshots table if it doesn't exist."""
        self.conn.executescript("""
            CREATE TABLE IF NOT EXISTS snapshots (
                slot TEXT PRIMARY KEY CHECK(slot IN ('current', 'previous')),
                entries TEXT NOT NULL,
                captured_at TEXT NOT NULL
            );
        """)
        self.conn.commit()

    def get(self, slot: str) -> Optional[Snapshot]:
        _check_slot(slot)
        try:
            cursor = self.conn.execute(
                "SELECT entries, captured_at FROM snapshots WHERE slot = ?",
                (slot,)
            )
            row = cursor.fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read {slot} snapshot: {e}") from e

        if row is None:
            return None

        try:
            return Snapshot.from_dict({
                "entries": json.loads(row['entries']),
                "captured_at": row['captured_at'],
            })
        except (ValueError, KeyError, TypeError) as e:
            raise StorageError(f"Corrupt {slot} snapshot in {self.db_path}: {e}") from e

    def set(self, slot: str, snapshot: Snapshot) -> None:
        _check_slot(slot)
        data = snapshot.to_dict()
        try:
            self.conn.execute("""
                INSERT INTO snapshots (slot, entries, captured_at)
                VALUES (?, ?, ?)
                ON CONFLICT(slot) DO UPDATE SET
                    entries = excluded.entries,
                    captured_at = excluded.captured_at
            """, (slot, json.dumps(data['entries'], ensure_ascii=False), data['captured_at']))
            if not self._in_transaction:
                self.conn.commit()
        except sqlite3.Error as e:
            if not self._in_transaction:
                self.conn.rollback()
            raise StorageError(f"Failed to write {slot} snapshot: {e}") from e

    @contextmanager
    def transaction(self) -> Iterator[None]:
        self._in_transaction = True
        try:
            yield
            self.conn.commit()
        except BaseException:
            self.conn.rollback()
            logger.warning("Snapshot transaction rolled back")
            raise
        finally:
            self._in_transaction = False

    def close(self) -> None:
        """Close database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None


class JsonFileSnapshotBackend(SnapshotBackend):
    """
    Stores both slots in one JSON document.

    Every commit writes a temporary file next to the target and swaps it in
    with os.replace, so readers see either the old or the new document.
    """

    def __init__(self, path: str):
        self.path = Path(path)
        self._staged: Optional[Dict[str, Any]] = None

    def _load(self) -> Dict[str, Any]:
        if self._staged is not None:
            return self._staged
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to read snapshot file {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"Corrupt snapshot file {self.path}: expected object")
        return data

    def _dump(self, data: Dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=str(self.path.parent), suffix='.tmp')
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(data, f, ensure_ascii=False, indent=2)
                os.replace(tmp_name, self.path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.remove(tmp_name)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write snapshot file {self.path}: {e}") from e

    def get(self, slot: str) -> Optional[Snapshot]:
        _check_slot(slot)
        raw = self._load().get(slot)
        if raw is None:
            return None
        try:
            return Snapshot.from_dict(raw)
        except (ValueError, KeyError, TypeError) as e:
            raise StorageError(f"Corrupt {slot} snapshot in {self.path}: {e}") from e

    def set(self, slot: str, snapshot: Snapshot) -> None:
        _check_slot(slot)
        if self._staged is not None:
            self._staged[slot] = snapshot.to_dict()
            return
        data = self._load()
        data[slot] = snapshot.to_dict()
        self._dump(data)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        self._staged = copy.deepcopy(self._load())
        try:
            yield
            staged = self._staged
            self._staged = None
            self._dump(staged)
        finally:
            self._staged = None


def create_backend(config: Config) -> SnapshotBackend:
    """
    Build the backend selected by STORAGE_BACKEND.

    Args:
        config: Application configuration

    Returns:
        SnapshotBackend instance
    """
    if config.STORAGE_BACKEND == BACKEND_SQLITE:
        return SqliteSnapshotBackend(config.DB_PATH)
    if config.STORAGE_BACKEND == BACKEND_JSON:
        return JsonFileSnapshotBackend(config.JSON_STORE_PATH)
    if config.STORAGE_BACKEND == BACKEND_MEMORY:
        return InMemorySnapshotBackend()
    raise ConfigurationError(f"Unknown storage backend: {config.STORAGE_BACKEND}")


class SnapshotStore:
    """Two-generation snapshot store with an atomic rotate operation."""

    def __init__(self, backend: SnapshotBackend):
        """
        Args:
            backend: Persistence backend (injected; no shared global client)
        """
        self.backend = backend
        self._lock = threading.RLock()

    def read(self, slot: str) -> Optional[Snapshot]:
        """
        Read a slot.

        Args:
            slot: 'current' or 'previous'

        Returns:
            Snapshot or None if the slot is empty
        """
        with self._lock:
            return self.backend.get(slot)

    def read_pair(self) -> Tuple[Optional[Snapshot], Optional[Snapshot]]:
        """Read (current, previous) together, consistent with any concurrent rotation."""
        with self._lock:
            return self.backend.get(SLOT_CURRENT), self.backend.get(SLOT_PREVIOUS)

    def write(self, slot: str, snapshot: Snapshot) -> None:
        """
        Write a slot directly, bypassing rotation.

        Raises:
            StorageError: If the backend fails
        """
        with self._lock:
            self.backend.set(slot, snapshot)

    def rotate_and_store(
        self,
        new_entries: Iterable[RateEntry],
        captured_at: Optional[datetime] = None
    ) -> RotationOutcome:
        """
        Store new entries as current, moving the old current into previous.

        Does nothing when the entries match the stored current. The
        read-compare-write sequence runs under the store lock so two
        concurrent callers cannot both rotate on the same change.

        Args:
            new_entries: Freshly fetched entries
            captured_at: Timestamp for the new snapshot (defaults to now)

        Returns:
            RotationOutcome describing the resulting slots

        Raises:
            StorageError: If the backend fails; the store keeps its prior state
        """
        entries = tuple(unique_by_code(new_entries))

        with self._lock:
            current = self.backend.get(SLOT_CURRENT)

            if not needs_update(entries, current):
                logger.debug("Rates unchanged since %s, store not touched", current.captured_at.isoformat())
                return RotationOutcome(
                    rotated=False,
                    current=current,
                    previous=self.backend.get(SLOT_PREVIOUS),
                )

            staged = Snapshot.capture(entries, captured_at)

            try:
                with self.backend.transaction():
                    if current is not None:
                        self.backend.set(SLOT_PREVIOUS, current)
                    self.backend.set(SLOT_CURRENT, staged)
            except StorageError:
                logger.exception("Rotation failed, snapshots left unchanged")
                raise

            if current is None:
                logger.info("Stored first snapshot with %d entries", len(entries))
            else:
                logger.info("Rates changed, rotated snapshot from %s to %s",
                            current.captured_at.isoformat(), staged.captured_at.isoformat())

            previous = current if current is not None else self.backend.get(SLOT_PREVIOUS)
            return RotationOutcome(rotated=True, current=staged, previous=previous)

    def close(self) -> None:
        self.backend.close()

    def __enter__(self) -> 'SnapshotStore':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
