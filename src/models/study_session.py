from sqlalchemy import JSON, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from .base import Base


class StudySessionModel(Base):
    """Finished learning session; written once when the session ends."""

    __tablename__ = "study_sessions"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(
        Integer,
        ForeignKey("students.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    start_time = Column(String, index=True, nullable=False)
    end_time = Column(String, nullable=False)
    duration = Column(Integer, nullable=False)
    words_studied = Column(JSON, nullable=False, default=list)

    student = relationship("StudentModel", back_populates="sessions")
