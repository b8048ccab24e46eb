"""
Tests for the durable store

Tests cover:
- Seeding an empty store exactly once
- Seed data shape (contiguous order, valid stages, example assessment)
- Reload without mutation returns identical collections
- Corrupt or schema-invalid entries are treated as absent and reseeded
- Saves persist camelCase JSON and update the snapshot
- Reset
"""

import json
import logging
import random

import pytest

from talentflow.database import create_engine, ensure_sqlite_directory, to_async_url
from talentflow.schemas import CANDIDATE_STAGES, JobStatus
from talentflow.services.store import COLLECTIONS, DurableStore


@pytest.fixture
async def store(tmp_path):
    store = DurableStore(
        create_engine(f"sqlite:///{tmp_path / 'store.db'}"),
        rng=random.Random(5),
        seed_job_count=25,
        seed_candidate_count=40,
    )
    await store.init()
    yield store
    await store.close()


async def reopen(store: DurableStore, tmp_path) -> DurableStore:
    """A second store over the same file, as after an application restart."""
    other = DurableStore(
        create_engine(f"sqlite:///{tmp_path / 'store.db'}"),
        rng=random.Random(123),
        seed_job_count=25,
        seed_candidate_count=40,
    )
    await other.init()
    return other


class TestDatabaseUrl:
    def test_sqlite_url_uses_aiosqlite(self):
        """SQLite URL should use aiosqlite."""
        assert to_async_url("sqlite:///./data/x.db") == "sqlite+aiosqlite:///./data/x.db"

    def test_creates_parent_directory(self, tmp_path):
        """Should create missing parent directories of the database file."""
        path = tmp_path / "nested" / "data" / "store.db"

        ensure_sqlite_directory(f"sqlite:///{path}")

        assert path.parent.is_dir()
        assert not path.exists()

    def test_ignores_memory_and_non_sqlite_urls(self, tmp_path, monkeypatch):
        """In-memory and non-SQLite URLs should create nothing."""
        monkeypatch.chdir(tmp_path)

        ensure_sqlite_directory("sqlite:///:memory:")
        ensure_sqlite_directory("postgresql://localhost/talentflow")

        assert list(tmp_path.iterdir()) == []


class TestSeeding:
    """Test first-run seeding."""

    @pytest.mark.asyncio
    async def test_empty_store_is_seeded(self, store):
        """Empty store should be seeded."""
        dataset = await store.load_dataset()

        assert store.seed_count == 1
        assert len(dataset.jobs) == 25
        assert len(dataset.candidates) == 40
        assert list(dataset.assessments) == ["job-1"]

    @pytest.mark.asyncio
    async def test_seeded_jobs_have_contiguous_order(self, store):
        """Seeded jobs should have contiguous orders."""
        dataset = await store.load_dataset()

        assert sorted(job.order for job in dataset.jobs) == list(range(1, 26))
        assert dataset.jobs[4].slug == "software-engineer-5"
        assert all(job.status in (JobStatus.ACTIVE, JobStatus.ARCHIVED) for job in dataset.jobs)
        assert all(1 <= len(job.tags) <= 3 for job in dataset.jobs)

    @pytest.mark.asyncio
    async def test_seeded_candidates_reference_jobs_and_stages(self, store):
        """Seeded candidates should reference jobs and stages."""
        dataset = await store.load_dataset()
        job_ids = {job.id for job in dataset.jobs}

        assert all(c.job_id in job_ids for c in dataset.candidates)
        assert all(c.stage in CANDIDATE_STAGES for c in dataset.candidates)
        assert dataset.candidates[0].email == "candidate1@example.com"

    @pytest.mark.asyncio
    async def test_example_assessment_covers_every_kind(self, store):
        """Example assessment should cover every kind."""
        dataset = await store.load_dataset()
        assessment = dataset.assessments["job-1"]

        assert assessment.id == "assess-1"
        assert [q.type for q in assessment.questions] == [
            "single-choice", "multi-choice", "short-text",
            "long-text", "numeric", "file-upload",
        ]

    @pytest.mark.asyncio
    async def test_all_collections_persisted(self, store):
        """Every collection should be persisted."""
        await store.load_dataset()

        for key in COLLECTIONS:
            assert await store.read_raw(key) is not None

    @pytest.mark.asyncio
    async def test_seeding_happens_once(self, store, tmp_path):
        """Seeding should happen only once."""
        await store.load_dataset()
        other = await reopen(store, tmp_path)
        try:
            await other.load_dataset()
            assert other.seed_count == 0
        finally:
            await other.close()

    @pytest.mark.asyncio
    async def test_any_missing_collection_triggers_seed(self, store):
        """Any missing collection should trigger a seed."""
        await store.write_raw("jobs", "[]")
        await store.write_raw("candidates", "[]")

        await store.load_dataset()

        assert store.seed_count == 1

    @pytest.mark.asyncio
    async def test_empty_collections_are_not_missing(self, store):
        """Empty collections should not count as missing."""
        for key, payload in (("jobs", "[]"), ("candidates", "[]"), ("assessments", "{}")):
            await store.write_raw(key, payload)

        dataset = await store.load_dataset()

        assert store.seed_count == 0
        assert dataset.jobs == []


class TestReload:
    """Test that loading without mutation is stable."""

    @pytest.mark.asyncio
    async def test_reload_returns_identical_collections(self, store, tmp_path):
        """Reload should return identical collections."""
        first = await store.load_dataset()
        other = await reopen(store, tmp_path)
        try:
            second = await other.load_dataset()
            third = await other.load_dataset()
        finally:
            await other.close()

        assert first == second == third

    @pytest.mark.asyncio
    async def test_raw_text_stable_across_loads(self, store):
        """Stored text should be stable across loads."""
        await store.load_dataset()
        before = {key: await store.read_raw(key) for key in COLLECTIONS}

        await store.load_dataset()

        assert {key: await store.read_raw(key) for key in COLLECTIONS} == before


class TestCorruptState:
    """Test unreadable entries."""

    @pytest.mark.asyncio
    async def test_invalid_json_loads_as_absent(self, store, caplog):
        """Invalid JSON should load as absent."""
        await store.write_raw("jobs", "{not json")

        with caplog.at_level(logging.WARNING, logger="talentflow.services.store"):
            assert await store.load("jobs") is None

        assert "treating as absent" in caplog.text

    @pytest.mark.asyncio
    async def test_schema_mismatch_loads_as_absent(self, store):
        """Schema mismatch should load as absent."""
        await store.write_raw("candidates", json.dumps([{"id": "cand-1", "stage": "phone"}]))

        assert await store.load("candidates") is None

    @pytest.mark.asyncio
    async def test_corrupt_entry_triggers_reseed(self, store):
        """A corrupt entry should trigger a reseed."""
        await store.load_dataset()
        await store.write_raw("assessments", "<<garbage>>")

        dataset = await store.load_dataset()

        assert store.seed_count == 2
        assert "job-1" in dataset.assessments
        assert await store.load("assessments") is not None

    @pytest.mark.asyncio
    async def test_absent_entry_loads_as_none(self, store):
        """Absent entry should load as None."""
        assert await store.load("jobs") is None

    @pytest.mark.asyncio
    async def test_unknown_collection(self, store):
        """Should reject an unknown collection."""
        with pytest.raises(KeyError):
            store.storage_key("users")


class TestSave:
    """Test persisting collections."""

    @pytest.mark.asyncio
    async def test_save_updates_snapshot(self, store):
        """Save should update the snapshot."""
        dataset = await store.load_dataset()
        trimmed = dataset.candidates[:3]

        await store.save("candidates", trimmed)

        assert store.snapshot.candidates == trimmed
        assert await store.load("candidates") == trimmed

    @pytest.mark.asyncio
    async def test_save_uses_wire_names(self, store):
        """Save should use wire names."""
        dataset = await store.load_dataset()

        await store.save("candidates", dataset.candidates[:1])

        stored = json.loads(await store.read_raw("candidates"))
        assert set(stored[0]) == {"id", "name", "email", "jobId", "stage"}

    @pytest.mark.asyncio
    async def test_save_accepts_plain_dicts(self, store):
        """Save should accept plain dicts."""
        await store.load_dataset()

        await store.save("assessments", {
            "job-2": {"id": "assess-2", "jobId": "job-2", "questions": []},
        })

        assert store.snapshot.assessments["job-2"].id == "assess-2"

    @pytest.mark.asyncio
    async def test_storage_keys_are_prefixed(self, store):
        """Storage keys should be prefixed."""
        assert store.storage_key("jobs") == "talentflow_jobs"


class TestReset:
    """Test wiping and reseeding."""

    @pytest.mark.asyncio
    async def test_reset_reseeds(self, store):
        """Reset should reseed."""
        await store.load_dataset()
        await store.save("jobs", [])

        dataset = await store.reset()

        assert store.seed_count == 2
        assert len(dataset.jobs) == 25
        assert len(await store.load("jobs")) == 25
