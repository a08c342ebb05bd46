"""PivotWorkflowSession -- one proceed / patch / pivot decision session.

Constructed once per session and handed to every step. It wires the
DecisionStore, StepNavigator and PersistenceSynchronizer together:

    async with PivotWorkflowSession(record_store) as session:
        if not await session.open(project_id):
            ...  # render session.view().load_error, offer retry_load()
        session.begin(DecisionMode.EASY)
        session.store.update_pre_mortem_insights([...])
        session.navigator.complete_step()
"""

import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

import structlog

from pivot_workflow.core.config import Settings, get_settings
from pivot_workflow.db.record_store import DecisionRecordStore
from pivot_workflow.domain.scoring import DecisionInsights, compute_decision_insights
from pivot_workflow.domain.steps import GuardResult, Step, step_number
from pivot_workflow.schemas.decision_record import DecisionMode, DecisionRecord
from pivot_workflow.services.decision_store import DecisionStore
from pivot_workflow.services.navigator import StepNavigator
from pivot_workflow.services.sync_service import PersistenceSynchronizer, SyncError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class WorkflowView:
    """Everything a step needs to render, captured at one point in time."""

    record: DecisionRecord | None
    current_step: Step
    step_position: int | None
    total_steps: int | None
    guard: GuardResult
    loading: bool
    load_error: SyncError | None
    save_error: SyncError | None
    insights: DecisionInsights

    @property
    def needs_mode_selection(self) -> bool:
        return self.record is None and not self.loading and self.load_error is None


class PivotWorkflowSession:
    def __init__(
        self,
        record_store: DecisionRecordStore,
        settings: Settings | None = None,
        clock: Callable[[], datetime] | None = None,
        session_id: str | None = None,
    ):
        self.settings = settings or get_settings()
        self.session_id = session_id or str(uuid.uuid4())
        self.project_id: str | None = None

        self.store = DecisionStore(clock=clock, default_confidence_level=self.settings.default_confidence_level)
        self.navigator = StepNavigator(self.store)
        self.sync = PersistenceSynchronizer(
            self.store,
            record_store,
            debounce_seconds=self.settings.autosave_debounce_seconds,
        )
        self._log = logger.bind(workflow_session_id=self.session_id)

    async def open(self, project_id: str) -> bool:
        """Load the project's open decision, if any. Returns False on load failure."""
        self.project_id = project_id
        self._log = logger.bind(workflow_session_id=self.session_id, project_id=project_id)
        self._log.info("workflow_session_opened")
        return await self.sync.activate(project_id)

    async def retry_load(self) -> bool:
        return await self.sync.retry_load()

    def begin(self, mode: DecisionMode) -> DecisionRecord | None:
        """Start a decision in the chosen mode. No-op if one is already open."""
        if self.project_id is None:
            self._log.warning("workflow_begin_without_project")
            return None
        record = self.store.start_decision(self.project_id, mode)
        if record is not None:
            self.navigator.reset()
        return record

    async def close(self) -> None:
        """Tear down the session. A pending autosave is dropped, as on unmount."""
        self.sync.deactivate()
        self.navigator.close()
        await self.sync.wait_idle()
        self._log.info("workflow_session_closed", saves=self.sync.save_count)

    def view(self) -> WorkflowView:
        record = self.store.current
        position: int | None = None
        total: int | None = None
        if record is not None:
            position, total = step_number(self.navigator.current_step, record.mode)

        return WorkflowView(
            record=record,
            current_step=self.navigator.current_step,
            step_position=position,
            total_steps=total,
            guard=self.navigator.guard(),
            loading=self.sync.loading,
            load_error=self.sync.load_error,
            save_error=self.sync.save_error,
            insights=compute_decision_insights(record),
        )

    async def __aenter__(self) -> "PivotWorkflowSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
