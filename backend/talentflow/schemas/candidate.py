from enum import Enum

from pydantic import BaseModel, Field


class CandidateStage(str, Enum):
    APPLIED = "applied"
    SCREEN = "screen"
    TECH = "tech"
    OFFER = "offer"
    HIRED = "hired"
    REJECTED = "rejected"


# Kanban column order
CANDIDATE_STAGES = [stage.value for stage in CandidateStage]


class Candidate(BaseModel):
    id: str
    name: str
    email: str
    job_id: str = Field(alias="jobId")
    stage: CandidateStage

    class Config:
        populate_by_name = True
