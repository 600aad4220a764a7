"""Classroom schema definitions.

This module defines the in-memory classroom records and the identity passed
along with every classroom operation.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Set

from pydantic import BaseModel, Field


class StorageSource(str, Enum):
    """Backend a classroom lives in."""

    MEMORY = "memory"
    DATABASE = "database"


class RemoveRequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AuthUser(BaseModel):
    """Identity of an authenticated caller."""

    uid: str = Field(description="Stable user identifier (token subject).")
    email: Optional[str] = Field(default=None, description="User email, if known.")


class MemoryStudent(BaseModel):
    name: str
    words: List[str] = Field(
        default_factory=list,
        description="Personal deck, copied from the classroom at join time.",
    )
    word_stats: Dict[str, Dict[str, int]] = Field(default_factory=dict)
    total_time: int = Field(default=0, description="Accumulated seconds.")
    session_start: Optional[datetime] = None
    last_active: datetime
    joined_at: datetime


class RemoveRequest(BaseModel):
    """A classmate-voted proposal to drop a word from a student's deck."""

    request_id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    target_student: str
    word: str
    requested_by: str
    votes: Set[str] = Field(default_factory=set)
    status: RemoveRequestStatus = RemoveRequestStatus.PENDING
    created_at: datetime
    resolved_at: Optional[datetime] = None


class MemoryClassroom(BaseModel):
    code: str
    name: str
    words: List[str]
    word_count: int
    created_at: datetime
    expires_at: datetime
    mode: str = "anonymous"
    is_public: bool = True
    students: List[MemoryStudent] = Field(default_factory=list)
    remove_requests: Dict[str, RemoveRequest] = Field(default_factory=dict)

    def find_student(self, name: str) -> Optional[MemoryStudent]:
        for student in self.students:
            if student.name == name:
                return student
        return None
