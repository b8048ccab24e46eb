"""
Domain Service - jobs, candidates and assessments over the durable store

Operates on the single in-process snapshot held by DurableStore. Every
call goes through UnreliableServiceSimulator; mutations compute their
new collection from the snapshot first and persist it only after the
simulated call succeeds, so a simulated failure leaves storage intact.

There is no lock around the read-modify-write: two mutations of the
same collection that are pending at the same time both start from the
same snapshot, and whichever resolves last overwrites the other.

Operations:
    get_jobs(filters)                 -> JobPage
    create_job(data)                  -> Job
    update_job(job_id, patch)         -> Job
    reorder_job(from_order, to_order) -> List[Job] (whole renumbered list)
    get_candidates()                  -> List[Candidate]
    update_candidate_stage(id, stage) -> Candidate
    get_assessment(job_id)            -> Assessment | None
    save_assessment(job_id, data)     -> Assessment
"""

import logging
import random
import uuid
from typing import Any, Iterable, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from talentflow.config import Settings, get_settings
from talentflow.database import ensure_sqlite_directory
from talentflow.errors import NotFoundError, ValidationError
from talentflow.schemas import (
    Assessment,
    Candidate,
    CandidateStage,
    Dataset,
    Job,
    JobCreate,
    JobFilters,
    JobPage,
    JobStatus,
    JobUpdate,
    slugify,
)
from talentflow.services.simulator import UnreliableServiceSimulator
from talentflow.services.store import DurableStore

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def validate_input(model: Type[M], data: Any) -> M:
    """Validate caller input, raising the data layer's ValidationError."""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(str(e)) from e


def filter_jobs(jobs: Iterable[Job], filters: JobFilters) -> JobPage:
    """
    Search, status filter, stable sort and paginate.

    Args:
        jobs: Working set
        filters: Search text (case-insensitive title substring), status,
            1-based page, page size and sort field

    Returns:
        JobPage with the requested slice and the pre-pagination total
    """
    result = list(jobs)

    if filters.search:
        needle = filters.search.lower()
        result = [job for job in result if needle in job.title.lower()]

    if filters.status:
        result = [job for job in result if job.status == filters.status]

    result.sort(key=lambda job: getattr(job, filters.sort))

    start = (filters.page - 1) * filters.page_size
    return JobPage(
        jobs=result[start:start + filters.page_size],
        total=len(result),
        page=filters.page,
        page_size=filters.page_size,
    )


class DomainService:
    """
    Recruiting operations backed by a DurableStore.

    Usage:
        service = await create_service(settings)
        page = await service.get_jobs({"search": "engineer", "status": "active"})
        job = await service.create_job({"title": "Backend Engineer"})
        jobs = await service.reorder_job(from_order=1, to_order=3)
    """

    def __init__(
        self,
        store: DurableStore,
        simulator: UnreliableServiceSimulator,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
    ):
        self.store = store
        self.simulator = simulator
        self.settings = settings or get_settings()
        self.rng = rng or random.Random()

    @property
    def data(self) -> Dataset:
        if self.store.snapshot is None:
            raise RuntimeError("Store has not been loaded; call load() first")
        return self.store.snapshot

    async def load(self) -> Dataset:
        """Load the snapshot from the store, seeding it on first run."""
        return await self.store.load_dataset()

    def _new_id(self, prefix: str, taken: Iterable[str]) -> str:
        taken = set(taken)
        while True:
            candidate = f"{prefix}-{uuid.UUID(int=self.rng.getrandbits(128), version=4).hex[:12]}"
            if candidate not in taken:
                return candidate

    # ==================== Jobs ====================

    async def get_jobs(self, filters: Union[JobFilters, dict, None] = None) -> JobPage:
        filters = validate_input(JobFilters, filters if filters is not None else {})
        page = filter_jobs(self.data.jobs, filters)
        page = page.model_copy(update={"jobs": [job.model_copy(deep=True) for job in page.jobs]})
        return await self.simulator.simulate(page)

    async def create_job(self, data: Union[JobCreate, dict]) -> Job:
        payload = validate_input(JobCreate, data)
        jobs = self.data.jobs

        job = Job(
            id=self._new_id("job", (j.id for j in jobs)),
            title=payload.title,
            slug=slugify(payload.title),
            status=JobStatus.ACTIVE,
            tags=list(payload.tags),
            order=len(jobs) + 1,
        )
        updated = [*jobs, job]

        await self.simulator.simulate(job)
        await self.store.save("jobs", updated)
        logger.info(f"Created job {job.id} at order {job.order}")
        return job.model_copy(deep=True)

    async def update_job(self, job_id: str, patch: Union[JobUpdate, dict]) -> Job:
        changes = validate_input(JobUpdate, patch).model_dump(exclude_unset=True, exclude_none=True)
        jobs = self.data.jobs

        current = next((job for job in jobs if job.id == job_id), None)
        if current is None:
            raise NotFoundError("Job", job_id)

        updated_job = current.model_copy(update=changes, deep=True)
        updated = [updated_job if job.id == job_id else job for job in jobs]

        await self.simulator.simulate(updated_job, error_rate=self.settings.update_error_rate)
        await self.store.save("jobs", updated)
        return updated_job.model_copy(deep=True)

    async def reorder_job(self, from_order: int, to_order: int) -> List[Job]:
        """
        Move the job at from_order to position to_order.

        Every job is renumbered to its 1-based index afterwards, so order
        values stay a contiguous permutation of 1..N.

        Returns:
            The whole job list in its new order
        """
        ordered = sorted(self.data.jobs, key=lambda job: job.order)
        count = len(ordered)
        for name, value in (("from_order", from_order), ("to_order", to_order)):
            if not isinstance(value, int) or not 1 <= value <= count:
                raise ValidationError(f"{name} must be between 1 and {count}, got {value!r}")

        moved = ordered.pop(from_order - 1)
        ordered.insert(to_order - 1, moved)
        renumbered = [
            job.model_copy(update={"order": index}, deep=True)
            for index, job in enumerate(ordered, start=1)
        ]

        await self.simulator.simulate(renumbered, error_rate=self.settings.reorder_error_rate)
        await self.store.save("jobs", renumbered)
        logger.info(f"Moved job {moved.id} from {from_order} to {to_order}")
        return [job.model_copy(deep=True) for job in renumbered]

    # ==================== Candidates ====================

    async def get_candidates(self) -> List[Candidate]:
        return await self.simulator.simulate([c.model_copy() for c in self.data.candidates])

    async def update_candidate_stage(
        self, candidate_id: str, stage: Union[CandidateStage, str]
    ) -> Candidate:
        try:
            new_stage = CandidateStage(stage)
        except ValueError as e:
            raise ValidationError(f"Unknown stage: {stage!r}") from e

        candidates = self.data.candidates
        current = next((c for c in candidates if c.id == candidate_id), None)
        if current is None:
            raise NotFoundError("Candidate", candidate_id)

        moved = current.model_copy(update={"stage": new_stage})
        updated = [moved if c.id == candidate_id else c for c in candidates]

        await self.simulator.simulate({"success": True}, error_rate=self.settings.update_error_rate)
        await self.store.save("candidates", updated)
        return moved.model_copy()

    # ==================== Assessments ====================

    async def get_assessment(self, job_id: str) -> Optional[Assessment]:
        """Return the job's assessment, or None when it has none."""
        assessment = self.data.assessments.get(job_id)
        if assessment is not None:
            assessment = assessment.model_copy(deep=True)
        return await self.simulator.simulate(assessment)

    async def save_assessment(self, job_id: str, data: Union[Assessment, dict]) -> Assessment:
        """Create or replace the assessment keyed by job_id."""
        if isinstance(data, Assessment):
            data = data.model_dump(by_alias=True)
        payload = {key: value for key, value in dict(data).items() if key != "job_id"}
        payload["jobId"] = job_id
        assessment = validate_input(Assessment, payload)

        updated = {**self.data.assessments, job_id: assessment}

        await self.simulator.simulate({"success": True})
        await self.store.save("assessments", updated)
        return assessment.model_copy(deep=True)


async def create_service(settings: Optional[Settings] = None) -> DomainService:
    """
    Build the store, simulator and service from settings and load the
    snapshot (seeding on first run).
    """
    settings = settings or get_settings()
    rng = random.Random(settings.random_seed)

    ensure_sqlite_directory(settings.database_url)
    store = DurableStore.from_settings(settings, rng=rng)
    await store.init()

    simulator = UnreliableServiceSimulator.from_settings(settings, rng=rng)
    service = DomainService(store, simulator, settings=settings, rng=rng)
    await service.load()
    return service
