"""PersistenceSynchronizer -- load once, autosave on a debounce.

Bridges the in-memory DecisionStore and a DecisionRecordStore:
  - activate() fetches the latest open record for a project and hydrates
    the store with it (or leaves the store empty)
  - every user mutation restarts the autosave window; when it closes the
    latest snapshot is upserted
  - failures are kept as SyncError values, never raised to the caller

Writes are serialized and each one reads the snapshot only after acquiring
the write lock, so an older snapshot can never land after a newer one.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

import structlog

from pivot_workflow.core.config import get_settings
from pivot_workflow.db.record_store import DecisionRecordStore, UpsertResult
from pivot_workflow.schemas.decision_record import DecisionRecord
from pivot_workflow.services.debounce import DebouncedTask
from pivot_workflow.services.decision_store import DecisionStore, StoreChange

logger = structlog.get_logger(__name__)

LOAD_ERROR_MESSAGE = "Failed to load pivot decision data"
SAVE_ERROR_MESSAGE = "Failed to save pivot decision data"


class SyncErrorKind(StrEnum):
    LOAD = "load"  # blocking: nothing renders until retry_load()
    SAVE = "save"  # non-blocking and dismissible


@dataclass(frozen=True)
class SyncError:
    kind: SyncErrorKind
    message: str
    detail: str | None = None


class PersistenceSynchronizer:
    def __init__(
        self,
        store: DecisionStore,
        record_store: DecisionRecordStore,
        debounce_seconds: float | None = None,
    ):
        self.store = store
        self.record_store = record_store
        if debounce_seconds is None:
            debounce_seconds = get_settings().autosave_debounce_seconds
        self.debounce_seconds = debounce_seconds

        self.project_id: str | None = None
        self.loading = False
        self.loaded = False
        self.load_error: SyncError | None = None
        self.save_error: SyncError | None = None
        self.last_saved_at: datetime | None = None
        self.save_count = 0

        self._debouncer: DebouncedTask | None = None
        self._unsubscribe: Callable[[], None] | None = None
        self._write_lock = asyncio.Lock()
        self._log = logger.bind()

    @property
    def active(self) -> bool:
        return self._unsubscribe is not None

    @property
    def save_pending(self) -> bool:
        return self._debouncer is not None and self._debouncer.pending

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    async def activate(self, project_id: str) -> bool:
        """Load the project's open decision and start autosaving.

        Loads at most once per project: calling again for the same project
        after a successful load is a no-op. Switching projects drops the
        current record first. Returns False when the load failed.
        """
        if self.loaded and self.project_id == project_id:
            return True
        if self.project_id is not None and self.project_id != project_id:
            self.deactivate()
            self.store.reset()

        self.project_id = project_id
        self._log = logger.bind(project_id=project_id)
        self.loading = True
        self.load_error = None

        try:
            record = await self.record_store.fetch_latest_open_decision(project_id)
        except Exception as exc:
            self._log.error("decision_load_failed", error=str(exc), error_type=type(exc).__name__)
            self.load_error = SyncError(SyncErrorKind.LOAD, LOAD_ERROR_MESSAGE, str(exc))
            self.loading = False
            return False

        if record is not None:
            self.store.hydrate(record)

        if self._debouncer is None:
            self._debouncer = DebouncedTask(
                self.debounce_seconds, self._save_latest, loop=asyncio.get_running_loop()
            )
        if self._unsubscribe is None:
            self._unsubscribe = self.store.subscribe(self._on_store_change)

        self.loaded = True
        self.loading = False
        self._log.info("decision_loaded", found=record is not None, record_id=record.id if record else None)
        return True

    async def retry_load(self) -> bool:
        """Re-run a failed load. Without a load error this is a no-op, so
        unsaved in-memory edits are never replaced by the stored copy."""
        if self.project_id is None:
            return False
        if self.load_error is None:
            return self.loaded
        self.loaded = False
        return await self.activate(self.project_id)

    def deactivate(self) -> None:
        """Stop autosaving. A pending write is dropped; an in-flight one finishes."""
        if self._debouncer is not None and self._debouncer.cancel():
            self._log.info("decision_pending_save_dropped")
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.loaded = False

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    def _on_store_change(self, record: DecisionRecord | None, change: StoreChange) -> None:
        if change != StoreChange.MUTATION or record is None or self._debouncer is None:
            return
        self._debouncer.schedule()

    async def _save_latest(self) -> None:
        async with self._write_lock:
            record = self.store.current
            if record is None:
                return

            try:
                result = await self.record_store.upsert_decision(record.id, record.to_store_fields())
            except Exception as exc:
                result = UpsertResult.failure(str(exc))

            if not result.ok:
                self._log.error("decision_save_failed", record_id=record.id, reason=result.reason)
                self.save_error = SyncError(SyncErrorKind.SAVE, SAVE_ERROR_MESSAGE, result.reason)
                return

            self.save_error = None
            self.save_count += 1
            self.last_saved_at = record.updated_at
            self._log.debug("decision_saved", record_id=record.id, updated_at=record.updated_at.isoformat())

    async def flush(self) -> None:
        """Write the current snapshot now instead of waiting for the window."""
        if self._debouncer is not None:
            self._debouncer.cancel()
        await self._save_latest()

    async def wait_idle(self) -> None:
        if self._debouncer is not None:
            await self._debouncer.wait_idle()

    def dismiss_save_error(self) -> None:
        self.save_error = None
