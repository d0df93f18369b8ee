# src/taskprefs/prefs/prefs_store.py

from __future__ import annotations

import asyncio
import contextlib
import logging
import sqlite3
import time
from collections.abc import AsyncIterator, Callable, Iterable
from pathlib import Path

from ..core.ports import DataMigration, PreferencesTransform
from ..core.stream import StateStream
from .errors import (
    ConcurrentUpdateConflict,
    MigrationParseError,
    PreferencesError,
    StorageReadError,
    StorageWriteError,
)
from .prefs_models import SortOrder, UserPreferences

logger = logging.getLogger(__name__)

ReadErrorHandler = Callable[[PreferencesError], UserPreferences]


class PreferenceStore:
    """
    SQLite store for the single UserPreferences record.

    Storage:
    - one table, one row (id = 1); no row means "all defaults"
    - a version column is bumped on every write; writes are compare-and-swap on it,
      so two writers (even two processes) can never both commit from the same read
    - each method opens its own SQLite connection

    Concurrency:
    - update_data() is the only way to change the record
    - in-process writers queue on an asyncio.Lock; the version check handles other processes
    - blocking SQLite calls run in a worker thread (asyncio.to_thread)

    Migrations run once, lazily, on the first read/update/subscribe, before any
    transform sees the record.

    A commit that has reached the worker thread is finished and published even if the
    awaiting caller is cancelled; the caller then sees CancelledError for a write that landed.
    """

    def __init__(
        self,
        db_path: str | Path = "user_prefs.sqlite3",
        *,
        migrations: Iterable[DataMigration] = (),
        strict_migration: bool = False,
        max_update_retries: int = 16,
    ) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._migrations = list(migrations)
        self._strict_migration = bool(strict_migration)
        self._max_update_retries = max(1, int(max_update_retries))

        self._lock = asyncio.Lock()
        self._migrated = False
        self._data: StateStream[UserPreferences] = StateStream()
        self._published_version = -1
        self._inflight: set[asyncio.Task[int | None]] = set()

        self._ensure_schema()
        logger.info(
            "PreferenceStore ready db=%s migrations=%s strict=%s",
            self._db_path,
            [m.name for m in self._migrations],
            self._strict_migration,
        )

    def close(self) -> None:
        """End every live subscription. There are no persistent connections to close."""
        self._data.close()

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS user_preferences (
                    id INTEGER PRIMARY KEY CHECK (id = 1),
                    show_completed INTEGER NOT NULL DEFAULT 0,
                    sort_order TEXT NOT NULL DEFAULT 'UNSPECIFIED',
                    counter INTEGER NOT NULL DEFAULT 0,
                    version INTEGER NOT NULL DEFAULT 1,
                    updated_at REAL NOT NULL DEFAULT 0
                )
                """
            )

            # Migrations (safe): add missing columns.
            cur.execute("PRAGMA table_info(user_preferences)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE user_preferences ADD COLUMN {name} {decl}")
                logger.info("PreferenceStore migration: added column %s", name)

            add_col("show_completed", "INTEGER NOT NULL DEFAULT 0")
            add_col("sort_order", "TEXT NOT NULL DEFAULT 'UNSPECIFIED'")
            add_col("counter", "INTEGER NOT NULL DEFAULT 0")
            add_col("version", "INTEGER NOT NULL DEFAULT 1")
            add_col("updated_at", "REAL NOT NULL DEFAULT 0")

            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _row_to_prefs(row: sqlite3.Row) -> UserPreferences:
        return UserPreferences(
            show_completed=bool(row["show_completed"]),
            sort_order=SortOrder.from_db(row["sort_order"]),
            counter=max(0, int(row["counter"] or 0)),
        )

    def _read_row(self) -> tuple[UserPreferences, int]:
        """Return (record, version). Version 0 means nothing has been persisted yet."""
        try:
            conn = self._get_conn()
            try:
                row = conn.execute(
                    "SELECT show_completed, sort_order, counter, version "
                    "FROM user_preferences WHERE id = 1"
                ).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageReadError(f"Failed to read preferences from {self._db_path}") from e

        if row is None:
            return UserPreferences.DEFAULT, 0
        return self._row_to_prefs(row), int(row["version"])

    def _compare_and_set(self, expected_version: int, prefs: UserPreferences) -> int | None:
        """
        Write prefs only if the stored version is still expected_version.

        Returns the new version, or None if another writer got there first.
        """
        now = time.time()
        try:
            conn = self._get_conn()
            try:
                cur = conn.cursor()
                if expected_version == 0:
                    cur.execute(
                        """
                        INSERT OR IGNORE INTO user_preferences(
                            id, show_completed, sort_order, counter, version, updated_at
                        )
                        VALUES (1, ?, ?, ?, 1, ?)
                        """,
                        (int(prefs.show_completed), prefs.sort_order.value, prefs.counter, now),
                    )
                else:
                    cur.execute(
                        """
                        UPDATE user_preferences
                        SET show_completed = ?,
                            sort_order = ?,
                            counter = ?,
                            version = version + 1,
                            updated_at = ?
                        WHERE id = 1
                          AND version = ?
                        """,
                        (
                            int(prefs.show_completed),
                            prefs.sort_order.value,
                            prefs.counter,
                            now,
                            int(expected_version),
                        ),
                    )
                conn.commit()
                if cur.rowcount != 1:
                    return None
                return expected_version + 1
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageWriteError(f"Failed to write preferences to {self._db_path}") from e

    def _publish(self, prefs: UserPreferences, version: int) -> None:
        if self._data.closed:
            return
        # A slow read may return after a newer commit was already published.
        if self._data.has_value and version <= self._published_version:
            return
        self._published_version = version
        self._data.emit(prefs)

    async def _commit_and_publish(self, expected_version: int, prefs: UserPreferences) -> int | None:
        new_version = await asyncio.to_thread(self._compare_and_set, expected_version, prefs)
        if new_version is not None:
            self._publish(prefs, new_version)
        return new_version

    async def _commit(self, expected_version: int, prefs: UserPreferences) -> int | None:
        """CAS write plus publish, shielded from cancellation of the caller."""
        task = asyncio.create_task(self._commit_and_publish(expected_version, prefs))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return await asyncio.shield(task)

    # ---- migrations ----

    def _apply_migrations(self, current: UserPreferences) -> UserPreferences:
        out = current
        for migration in self._migrations:
            if not migration.should_migrate(out):
                continue
            try:
                out = migration.migrate(out)
            except MigrationParseError as e:
                if self._strict_migration:
                    logger.error("Migration %s failed: %s", migration.name, e)
                    raise
                logger.warning("Migration %s failed (%s); using fallback value", migration.name, e)
                out = migration.fallback(out)
        return out

    async def _ensure_migrated(self) -> None:
        """Caller must hold self._lock."""
        if self._migrated:
            return

        for attempt in range(1, self._max_update_retries + 1):
            current, version = await asyncio.to_thread(self._read_row)
            migrated = self._apply_migrations(current)

            if migrated == current:
                self._migrated = True
                self._publish(current, version)
                return

            new_version = await self._commit(version, migrated)
            if new_version is not None:
                logger.info(
                    "Preferences migrated: sort_order %s -> %s",
                    current.sort_order.value,
                    migrated.sort_order.value,
                )
                self._migrated = True
                return

            logger.debug("Migration lost a write race (attempt %d); retrying", attempt)

        raise ConcurrentUpdateConflict(
            f"Migration did not commit after {self._max_update_retries} attempts"
        )

    async def _ensure_ready(self) -> None:
        if self._migrated:
            return
        async with self._lock:
            await self._ensure_migrated()

    # ---- public API ----

    async def read(self) -> UserPreferences:
        """
        Point-in-time read of the persisted record.

        Raises StorageReadError on I/O failure (callers that want defaults use the repository).
        """
        await self._ensure_ready()
        prefs, version = await asyncio.to_thread(self._read_row)
        self._publish(prefs, version)
        return prefs

    async def update_data(self, transform: PreferencesTransform) -> UserPreferences:
        """
        Atomically replace the record with transform(current).

        - transform always receives the record as stored at the time of this attempt
        - if another writer commits between our read and write, we re-read and re-apply
        - if transform raises, nothing is written and the exception propagates
        - returning an equal record is a no-op (no write, no emission)
        """
        async with self._lock:
            await self._ensure_migrated()

            for attempt in range(1, self._max_update_retries + 1):
                current, version = await asyncio.to_thread(self._read_row)
                updated = transform(current)
                if not isinstance(updated, UserPreferences):
                    raise TypeError(
                        f"transform must return UserPreferences, got {type(updated).__name__}"
                    )

                if updated == current:
                    self._publish(current, version)
                    return current

                new_version = await self._commit(version, updated)
                if new_version is not None:
                    logger.debug("Preferences committed version=%s value=%s", new_version, updated)
                    return updated

                logger.debug("update_data lost a write race (attempt %d); retrying", attempt)

        raise ConcurrentUpdateConflict(
            f"update_data did not commit after {self._max_update_retries} attempts"
        )

    async def subscribe(
        self, on_read_error: ReadErrorHandler | None = None
    ) -> AsyncIterator[UserPreferences]:
        """
        Current record first, then every committed record.

        A storage failure on the initial read (including the first-access migration write)
        does not end the stream: the value from on_read_error (default:
        UserPreferences.DEFAULT) is emitted instead. MigrationParseError under the strict
        policy still propagates.
        """
        try:
            await self.read()
        except MigrationParseError:
            raise
        except PreferencesError as e:
            if on_read_error is None:
                logger.error("Error reading preferences; using defaults.", exc_info=e)
                fallback = UserPreferences.DEFAULT
            else:
                fallback = on_read_error(e)
            if not self._data.has_value:
                yield fallback

        async for prefs in self._data.subscribe():
            yield prefs
