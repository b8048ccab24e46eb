"""
Seed Data - synthetic jobs, candidates and an example assessment

Produces a complete, self-consistent dataset the first time the store
is opened (or after its contents are found unreadable):
    - jobs job-1..job-N with contiguous order 1..N
    - candidates randomly spread over jobs and stages
    - one fully populated assessment for job-1 covering every question kind
"""

import random
from typing import List

from talentflow.schemas import (
    Assessment,
    Candidate,
    CANDIDATE_STAGES,
    Dataset,
    Job,
    JobStatus,
)

SEED_TAGS = ["React", "Node.js", "TypeScript"]

EXAMPLE_QUESTIONS = [
    {"id": "q1", "type": "single-choice", "label": "Years of React experience?",
     "options": ["0-1", "1-3", "3-5", "5+"], "required": True},
    {"id": "q2", "type": "multi-choice", "label": "Which state management libraries have you used?",
     "options": ["Redux", "MobX", "Zustand", "Context API"], "required": True},
    {"id": "q3", "type": "short-text", "label": "Link to your GitHub profile.", "required": True},
    {"id": "q4", "type": "long-text", "label": "Describe a challenging technical problem you solved.",
     "required": False},
    {"id": "q5", "type": "numeric", "label": "On a scale of 1-10, how proficient are you with TypeScript?",
     "min": 1, "max": 10, "required": True},
    {"id": "q6", "type": "file-upload", "label": "Upload your resume.", "required": True},
]


def seed_jobs(rng: random.Random, count: int) -> List[Job]:
    return [
        Job(
            id=f"job-{i}",
            title=f"Software Engineer {i}",
            slug=f"software-engineer-{i}",
            status=JobStatus.ACTIVE if rng.random() > 0.3 else JobStatus.ARCHIVED,
            tags=SEED_TAGS[: rng.randint(1, len(SEED_TAGS))],
            order=i,
        )
        for i in range(1, count + 1)
    ]


def seed_candidates(rng: random.Random, count: int, job_count: int) -> List[Candidate]:
    return [
        Candidate(
            id=f"cand-{i}",
            name=f"Candidate {i}",
            email=f"candidate{i}@example.com",
            job_id=f"job-{rng.randint(1, max(job_count, 1))}",
            stage=rng.choice(CANDIDATE_STAGES),
        )
        for i in range(1, count + 1)
    ]


def generate_seed_data(
    rng: random.Random,
    job_count: int = 25,
    candidate_count: int = 1000,
) -> Dataset:
    """
    Build a fresh dataset.

    Args:
        rng: Random source (seed it for reproducible data)
        job_count: Number of jobs to create
        candidate_count: Number of candidates to create

    Returns:
        Dataset with contiguous job order and one example assessment
    """
    return Dataset(
        jobs=seed_jobs(rng, job_count),
        candidates=seed_candidates(rng, candidate_count, job_count),
        assessments={
            "job-1": Assessment(id="assess-1", job_id="job-1", questions=EXAMPLE_QUESTIONS),
        },
    )
