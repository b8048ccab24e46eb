from dataclasses import dataclass, field
from typing import Dict, List

from talentflow.schemas.assessment import Assessment
from talentflow.schemas.candidate import Candidate
from talentflow.schemas.job import Job


@dataclass
class Dataset:
    """In-process snapshot of the three persisted collections."""

    jobs: List[Job] = field(default_factory=list)
    candidates: List[Candidate] = field(default_factory=list)
    assessments: Dict[str, Assessment] = field(default_factory=dict)
