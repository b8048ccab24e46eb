from talentflow.schemas.job import (
    Job,
    JobCreate,
    JobFilters,
    JobPage,
    JobStatus,
    JobUpdate,
    parse_tags,
    slugify,
)
from talentflow.schemas.candidate import Candidate, CandidateStage, CANDIDATE_STAGES
from talentflow.schemas.dataset import Dataset
from talentflow.schemas.assessment import (
    Assessment,
    ChoiceQuestion,
    FileUploadQuestion,
    NumericQuestion,
    Question,
    QUESTION_KINDS,
    TextQuestion,
    new_question,
)

__all__ = [
    "Job",
    "JobCreate",
    "JobFilters",
    "JobPage",
    "JobStatus",
    "JobUpdate",
    "parse_tags",
    "slugify",
    "Candidate",
    "CandidateStage",
    "CANDIDATE_STAGES",
    "Assessment",
    "ChoiceQuestion",
    "FileUploadQuestion",
    "NumericQuestion",
    "Question",
    "QUESTION_KINDS",
    "TextQuestion",
    "new_question",
    "Dataset",
]
