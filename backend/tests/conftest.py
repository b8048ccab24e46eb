"""
Shared fixtures.

Every test gets its own SQLite file, zero simulated latency and
zero error rates; tests that need failures or a particular
interleaving switch them on explicitly.
"""

import asyncio
import random
from typing import List

import pytest

from talentflow.config import Settings
from talentflow.schemas import Job, JobStatus
from talentflow.services.domain import create_service
from talentflow.services.simulator import SimulationOptions


class ScriptedRandom(random.Random):
    """Random source whose latencies and failure rolls are given up front."""

    def __init__(self, latencies=(), rolls=()):
        super().__init__(0)
        self.latencies = list(latencies)
        self.rolls = list(rolls)

    def uniform(self, a, b):
        return self.latencies.pop(0) if self.latencies else a

    def random(self):
        return self.rolls.pop(0) if self.rolls else 0.99


class GatedSleep:
    """Sleep replacement that blocks each simulated call until released."""

    def __init__(self):
        self.gates: List[asyncio.Event] = []

    async def __call__(self, seconds: float) -> None:
        gate = asyncio.Event()
        self.gates.append(gate)
        await gate.wait()

    async def wait_for(self, count: int) -> None:
        while len(self.gates) < count:
            await asyncio.sleep(0)

    def release(self, index: int) -> None:
        self.gates[index].set()


def make_jobs(statuses: List[str]) -> List[Job]:
    return [
        Job(
            id=f"job-{i}",
            title=f"Software Engineer {i}",
            slug=f"software-engineer-{i}",
            status=JobStatus(status),
            tags=["React"],
            order=i,
        )
        for i, status in enumerate(statuses, start=1)
    ]


def fail_every_call(service) -> None:
    service.settings = service.settings.model_copy(
        update={"update_error_rate": 1.0, "reorder_error_rate": 1.0}
    )
    service.simulator.defaults = SimulationOptions(error_rate=1.0, min_latency=0, max_latency=0)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'talentflow.db'}",
        default_error_rate=0.0,
        update_error_rate=0.0,
        reorder_error_rate=0.0,
        latency_time_scale=0.0,
        seed_job_count=25,
        seed_candidate_count=60,
        random_seed=7,
    )


@pytest.fixture
async def service(settings):
    service = await create_service(settings)
    yield service
    await service.store.close()


@pytest.fixture
def scripted_random():
    return ScriptedRandom


@pytest.fixture
def gated_sleep():
    return GatedSleep()


@pytest.fixture
def jobs_factory():
    return make_jobs


@pytest.fixture
def fail_all():
    return fail_every_call
