"""
Assessment schemas.

An assessment belongs to exactly one job and holds an ordered list of
questions. Questions are a tagged union on ``type``:

    short-text, long-text         TextQuestion
    single-choice, multi-choice   ChoiceQuestion (options)
    numeric                       NumericQuestion (min, max)
    file-upload                   FileUploadQuestion
"""

from typing import Annotated, List, Literal, Union

from pydantic import BaseModel, Field, model_validator


QUESTION_KINDS = (
    "short-text",
    "long-text",
    "single-choice",
    "multi-choice",
    "numeric",
    "file-upload",
)


class QuestionBase(BaseModel):
    id: str
    label: str
    required: bool = False


class TextQuestion(QuestionBase):
    type: Literal["short-text", "long-text"]


class ChoiceQuestion(QuestionBase):
    type: Literal["single-choice", "multi-choice"]
    options: List[str] = Field(default_factory=list)


class NumericQuestion(QuestionBase):
    type: Literal["numeric"]
    min: Union[int, float] = 0
    max: Union[int, float] = 10

    @model_validator(mode="after")
    def bounds_ordered(self) -> "NumericQuestion":
        if self.min > self.max:
            raise ValueError(f"min ({self.min}) must not exceed max ({self.max})")
        return self


class FileUploadQuestion(QuestionBase):
    type: Literal["file-upload"]


Question = Annotated[
    Union[TextQuestion, ChoiceQuestion, NumericQuestion, FileUploadQuestion],
    Field(discriminator="type"),
]


class Assessment(BaseModel):
    id: str
    job_id: str = Field(alias="jobId")
    questions: List[Question] = Field(default_factory=list)

    class Config:
        populate_by_name = True

    @classmethod
    def blank(cls, job_id: str) -> "Assessment":
        """Starting point for the builder when a job has no assessment yet."""
        return cls(id=f"assess-{job_id}", job_id=job_id, questions=[])


def new_question(kind: str, question_id: str) -> Question:
    """
    Build a question with the builder's defaults.

    Choice questions start with two placeholder options and numeric
    questions with a 0..10 range.
    """
    data = {
        "id": question_id,
        "type": kind,
        "label": f"New {kind.replace('-', ' ', 1)} question",
        "required": False,
    }
    if kind in ("single-choice", "multi-choice"):
        data["options"] = ["Option 1", "Option 2"]
        return ChoiceQuestion(**data)
    if kind == "numeric":
        return NumericQuestion(**data, min=0, max=10)
    if kind in ("short-text", "long-text"):
        return TextQuestion(**data)
    if kind == "file-upload":
        return FileUploadQuestion(**data)
    raise ValueError(f"Unknown question kind: {kind!r}")
