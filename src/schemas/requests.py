"""Request bodies for the classroom and kids APIs."""

from pydantic import BaseModel, Field


class JoinClassroomRequest(BaseModel):
    code: str = Field(min_length=1)
    student_name: str = Field(min_length=1)


class SessionRequest(BaseModel):
    code: str = Field(min_length=1)
    student_name: str = Field(min_length=1)


class SwapWordsRequest(BaseModel):
    code: str = Field(min_length=1)
    student_a: str = Field(min_length=1)
    word_a: str = Field(min_length=1)
    student_b: str = Field(min_length=1)
    word_b: str = Field(min_length=1)


class PracticeRequest(BaseModel):
    code: str = Field(min_length=1)
    student_name: str = Field(min_length=1)
    word: str = Field(min_length=1)
    correct: bool


class RemoveWordRequest(BaseModel):
    code: str = Field(min_length=1)
    target_student: str = Field(min_length=1)
    word: str = Field(min_length=1)
    requested_by: str = Field(min_length=1)


class VoteRemoveRequest(BaseModel):
    code: str = Field(min_length=1)
    request_id: str = Field(min_length=1)
    voter_name: str = Field(min_length=1)


class RejectRemoveRequest(BaseModel):
    code: str = Field(min_length=1)
    request_id: str = Field(min_length=1)


class ImageReportRequest(BaseModel):
    word: str = Field(min_length=1, description="Word whose generated image is reported.")
