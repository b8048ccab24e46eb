"""
Optimistic Update Controller - speculative apply, then commit or roll back

Holds the presentation layer's shadow copy (the displayed job page and
the candidate board) and runs each mutation through

    Idle -> Pending -> Committed | RolledBack -> Idle

    1. capture snapshot S0 of the affected state
    2. present speculative state S1 immediately
    3. call the DomainService
    4. success: keep S1 (status toggle, stage move) or replace it with
       the service's canonical renumbered list (reorder)
       failure: restore S0 verbatim and emit a failure notification;
       a store write error after the simulated call counts as failure

No retries. Several mutations may be pending at once; each rollback
restores its own S0, whatever else happened meanwhile.

Slots:
    job-status:<job id>         status toggle of one job
    candidate-stage:<cand id>   stage move of one candidate
    job-order                   the job list ordering
"""

import logging
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Union

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError

from talentflow.errors import NetworkError, NotFoundError, TalentFlowError, ValidationError
from talentflow.schemas import (
    Candidate,
    CandidateStage,
    CANDIDATE_STAGES,
    Job,
    JobFilters,
    JobStatus,
    parse_tags,
)
from talentflow.services.domain import DomainService, filter_jobs

logger = logging.getLogger(__name__)


TOGGLE_FAILED = "Failed to update job status. Please try again."
REORDER_FAILED = "Failed to reorder jobs. The server might be busy. Please try again."
MOVE_FAILED = "Failed to move candidate. Please try again."

JOB_ORDER_SLOT = "job-order"


def job_status_slot(job_id: str) -> str:
    return f"job-status:{job_id}"


def candidate_stage_slot(candidate_id: str) -> str:
    return f"candidate-stage:{candidate_id}"


class MutationState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


@dataclass
class MutationOutcome:
    """Result of one optimistic mutation attempt."""
    slot: str
    state: MutationState
    error: Optional[Exception] = None

    @property
    def committed(self) -> bool:
        return self.state is MutationState.COMMITTED


class OptimisticUpdateController:
    """
    Shadow state plus the optimistic mutation protocol.

    Attributes:
        jobs: Displayed job page (never authoritative)
        total: Filtered job count reported by the last read
        filters: Active job filters
        jobs_error: Message of the last failed job read, else None
        candidates: Displayed candidate collection
        candidates_error: Message of the last failed candidate read
        notifications: User-visible failure messages, oldest first
        transitions: (slot, state) history of every mutation
    """

    def __init__(
        self,
        service: DomainService,
        filters: Optional[JobFilters] = None,
        notify: Optional[Callable[[str], None]] = None,
    ):
        self.service = service
        self.filters = filters or JobFilters(status=JobStatus.ACTIVE)
        self.jobs: List[Job] = []
        self.total = 0
        self.jobs_error: Optional[str] = None
        self.candidates: List[Candidate] = []
        self.candidates_error: Optional[str] = None
        self.notifications: List[str] = []
        self.transitions: List[Tuple[str, MutationState]] = []
        self.disposed = False
        self._notify = notify
        self._pending: Counter = Counter()

    # ==================== Slot bookkeeping ====================

    def slot_state(self, slot: str) -> MutationState:
        return MutationState.PENDING if self._pending[slot] > 0 else MutationState.IDLE

    def _record(self, slot: str, state: MutationState) -> None:
        self.transitions.append((slot, state))

    def _signal(self, message: str) -> None:
        self.notifications.append(message)
        if self._notify is not None:
            self._notify(message)

    async def _attempt(
        self,
        slot: str,
        call: Awaitable[Any],
        restore: Callable[[], None],
        failure_message: str,
        reconcile: Optional[Callable[[Any], None]] = None,
    ) -> MutationOutcome:
        self._pending[slot] += 1
        self._record(slot, MutationState.PENDING)
        try:
            result = await call
        except (TalentFlowError, SQLAlchemyError) as e:
            logger.warning(f"Rolling back {slot}: {e}")
            if not self.disposed:
                restore()
                self._signal(failure_message)
            self._record(slot, MutationState.ROLLED_BACK)
            return MutationOutcome(slot, MutationState.ROLLED_BACK, e)
        else:
            if reconcile is not None and not self.disposed:
                reconcile(result)
            self._record(slot, MutationState.COMMITTED)
            return MutationOutcome(slot, MutationState.COMMITTED)
        finally:
            self._pending[slot] -= 1
            self._record(slot, MutationState.IDLE)

    def dispose(self) -> None:
        """Stop applying results; pending calls still run to completion."""
        self.disposed = True

    # ==================== Reads ====================

    async def refresh_jobs(self) -> bool:
        try:
            page = await self.service.get_jobs(self.filters)
        except NetworkError as e:
            if not self.disposed:
                self.jobs, self.total = [], 0
                self.jobs_error = str(e) or "Failed to fetch jobs."
            return False

        if not self.disposed:
            self.jobs, self.total, self.jobs_error = page.jobs, page.total, None
        return True

    async def set_filters(self, **changes: Any) -> bool:
        """Apply filter changes; anything but a page change returns to page 1."""
        data = self.filters.model_dump()
        data.update(changes)
        if "page" not in changes:
            data["page"] = 1
        try:
            self.filters = JobFilters.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(str(e)) from e
        return await self.refresh_jobs()

    async def load_candidates(self) -> bool:
        try:
            candidates = await self.service.get_candidates()
        except NetworkError as e:
            if not self.disposed:
                self.candidates = []
                self.candidates_error = str(e) or "Failed to load candidates."
            return False

        if not self.disposed:
            self.candidates, self.candidates_error = candidates, None
        return True

    def visible_candidates(self, search: str = "") -> List[Candidate]:
        needle = search.lower()
        return [
            c for c in self.candidates
            if needle in c.name.lower() or needle in c.email.lower()
        ]

    def candidates_by_stage(self, search: str = "") -> Dict[str, List[Candidate]]:
        visible = self.visible_candidates(search)
        return {stage: [c for c in visible if c.stage == stage] for stage in CANDIDATE_STAGES}

    # ==================== Mutations ====================

    async def toggle_job_status(self, job_id: str) -> MutationOutcome:
        """
        Flip a displayed job between active and archived.

        On success the speculative state stands; the list is refreshed
        only when the new status no longer matches the status filter.
        """
        job = next((j for j in self.jobs if j.id == job_id), None)
        if job is None:
            raise NotFoundError("Job", job_id)

        new_status = JobStatus.ARCHIVED if job.status == JobStatus.ACTIVE else JobStatus.ACTIVE
        snapshot = [j.model_copy(deep=True) for j in self.jobs]

        def restore() -> None:
            self.jobs = snapshot

        self.jobs = [
            j.model_copy(update={"status": new_status}) if j.id == job_id else j
            for j in self.jobs
        ]

        outcome = await self._attempt(
            job_status_slot(job_id),
            self.service.update_job(job_id, {"status": new_status}),
            restore,
            TOGGLE_FAILED,
        )
        if outcome.committed and not self.disposed:
            if self.filters.status and self.filters.status != new_status:
                await self.refresh_jobs()
        return outcome

    async def move_job(self, from_order: int, to_order: int) -> Optional[MutationOutcome]:
        """
        Drag the displayed job at from_order onto the one at to_order.

        Returns None when the drop is a no-op.
        """
        if from_order == to_order:
            return None

        orders = [j.order for j in self.jobs]
        for value in (from_order, to_order):
            if value not in orders:
                raise ValidationError(f"No displayed job at order {value}")

        snapshot = [j.model_copy(deep=True) for j in self.jobs]

        def restore() -> None:
            self.jobs = snapshot

        def reconcile(canonical: List[Job]) -> None:
            page = filter_jobs(canonical, self.filters)
            self.jobs, self.total, self.jobs_error = page.jobs, page.total, None

        speculative = list(self.jobs)
        dragged = speculative.pop(orders.index(from_order))
        speculative.insert(orders.index(to_order), dragged)
        self.jobs = speculative

        return await self._attempt(
            JOB_ORDER_SLOT,
            self.service.reorder_job(from_order, to_order),
            restore,
            REORDER_FAILED,
            reconcile=reconcile,
        )

    async def move_candidate(
        self, candidate_id: str, stage: Union[CandidateStage, str]
    ) -> MutationOutcome:
        """Drop a candidate card on a stage column. Any stage is allowed."""
        try:
            new_stage = CandidateStage(stage)
        except ValueError as e:
            raise ValidationError(f"Unknown stage: {stage!r}") from e

        if not any(c.id == candidate_id for c in self.candidates):
            raise NotFoundError("Candidate", candidate_id)

        snapshot = [c.model_copy() for c in self.candidates]

        def restore() -> None:
            self.candidates = snapshot

        self.candidates = [
            c.model_copy(update={"stage": new_stage}) if c.id == candidate_id else c
            for c in self.candidates
        ]

        return await self._attempt(
            candidate_stage_slot(candidate_id),
            self.service.update_candidate_stage(candidate_id, new_stage),
            restore,
            MOVE_FAILED,
        )

    # ==================== Job editor ====================

    async def save_job(self, data: Dict[str, Any]) -> Job:
        """
        Submit the job editor form: update when data has an id, else create.

        Tags may be a list or the editor's comma-separated text. Errors
        propagate to the form; the list is refreshed after a save.
        """
        tags = data.get("tags") or []
        if isinstance(tags, str):
            tags = parse_tags(tags)
        fields = {"title": data.get("title") or "", "tags": tags}

        if data.get("id"):
            job = await self.service.update_job(data["id"], fields)
        else:
            job = await self.service.create_job(fields)

        await self.refresh_jobs()
        return job
