"""
Durable Store - JSON collections in a local key-value table

Three independent named entries, each one JSON document:

    jobs         list of Job
    candidates   list of Candidate
    assessments  mapping jobId -> Assessment

Keys are stored with a prefix (default "talentflow_"). Every save
replaces the whole collection and updates the in-memory snapshot, so
later reads observe the write.

An entry that cannot be parsed, or does not validate against its
collection schema, is treated exactly like a missing one: it is logged
and reported as absent, and load_dataset() reseeds.

Usage:
    store = DurableStore(create_engine(settings.database_url))
    await store.init()
    dataset = await store.load_dataset()  # seeds on first run

    await store.save("jobs", updated_jobs)
"""

import logging
import random
from typing import Any, Dict, Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from talentflow.config import Settings
from talentflow.database import create_engine, init_db
from talentflow.errors import CorruptStateError
from talentflow.models import StoreEntry
from talentflow.schemas import Assessment, Candidate, Dataset, Job
from talentflow.services.seed import generate_seed_data

logger = logging.getLogger(__name__)


COLLECTIONS: Dict[str, TypeAdapter] = {
    "jobs": TypeAdapter(list[Job]),
    "candidates": TypeAdapter(list[Candidate]),
    "assessments": TypeAdapter(dict[str, Assessment]),
}


class DurableStore:
    """
    Load/save of the named collections.

    Attributes:
        snapshot: Dataset shared with the service, None until loaded
        seed_count: Number of times seed() has run on this store
    """

    def __init__(
        self,
        engine: AsyncEngine,
        key_prefix: str = "talentflow_",
        rng: Optional[random.Random] = None,
        seed_job_count: int = 25,
        seed_candidate_count: int = 1000,
    ):
        self.engine = engine
        self.key_prefix = key_prefix
        self.rng = rng or random.Random()
        self.seed_job_count = seed_job_count
        self.seed_candidate_count = seed_candidate_count
        self.snapshot: Optional[Dataset] = None
        self.seed_count = 0
        self._sessions = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    @classmethod
    def from_settings(cls, settings: Settings, rng: Optional[random.Random] = None) -> "DurableStore":
        return cls(
            create_engine(settings.database_url),
            key_prefix=settings.store_key_prefix,
            rng=rng,
            seed_job_count=settings.seed_job_count,
            seed_candidate_count=settings.seed_candidate_count,
        )

    async def init(self) -> None:
        """Create the backing table if needed."""
        await init_db(self.engine)

    def storage_key(self, key: str) -> str:
        if key not in COLLECTIONS:
            raise KeyError(f"Unknown collection: {key}")
        return f"{self.key_prefix}{key}"

    async def read_raw(self, key: str) -> Optional[str]:
        """Return the stored JSON text for a collection, or None."""
        async with self._sessions() as session:
            entry = await session.get(StoreEntry, self.storage_key(key))
            return entry.value if entry is not None else None

    async def write_raw(self, key: str, payload: str) -> None:
        """Store text as-is without validation or snapshot update."""
        storage_key = self.storage_key(key)
        async with self._sessions() as session:
            entry = await session.get(StoreEntry, storage_key)
            if entry is None:
                session.add(StoreEntry(key=storage_key, value=payload))
            else:
                entry.value = payload
            await session.commit()

    async def load(self, key: str) -> Optional[Any]:
        """
        Deserialize a collection.

        Returns:
            Typed collection, or None when absent or unreadable
        """
        raw = await self.read_raw(key)
        if raw is None:
            return None

        try:
            return COLLECTIONS[key].validate_json(raw)
        except PydanticValidationError as e:
            error = CorruptStateError(self.storage_key(key), f"{e.error_count()} validation error(s)")
            logger.warning(f"{error}; treating as absent")
            return None

    async def save(self, key: str, value: Any) -> None:
        """
        Serialize and persist a whole collection.

        Args:
            key: Collection name ("jobs", "candidates" or "assessments")
            value: Full collection (models or plain dicts)
        """
        adapter = COLLECTIONS[key]
        value = adapter.validate_python(value)
        await self.write_raw(key, adapter.dump_json(value, by_alias=True).decode())

        if self.snapshot is not None:
            setattr(self.snapshot, key, value)

    async def seed(self) -> Dataset:
        """Generate and persist a complete dataset."""
        logger.info("Generating new seed data...")
        dataset = generate_seed_data(
            self.rng,
            job_count=self.seed_job_count,
            candidate_count=self.seed_candidate_count,
        )
        self.snapshot = dataset
        for key in COLLECTIONS:
            await self.save(key, getattr(dataset, key))
        self.seed_count += 1
        return dataset

    async def load_dataset(self) -> Dataset:
        """
        Reconstruct the snapshot from storage, seeding when any
        collection is missing or unreadable.
        """
        loaded = {key: await self.load(key) for key in COLLECTIONS}

        if any(value is None for value in loaded.values()):
            missing = [key for key, value in loaded.items() if value is None]
            logger.info(f"Store missing {', '.join(missing)}; reseeding")
            return await self.seed()

        self.snapshot = Dataset(**loaded)
        return self.snapshot

    async def reset(self) -> Dataset:
        """Drop every collection and reseed."""
        async with self._sessions() as session:
            await session.execute(
                delete(StoreEntry).where(StoreEntry.key.in_([self.storage_key(k) for k in COLLECTIONS]))
            )
            await session.commit()
        return await self.seed()

    async def close(self) -> None:
        await self.engine.dispose()
