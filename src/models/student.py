from sqlalchemy import JSON, Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import Base


class StudentModel(Base):
    __tablename__ = "students"
    __table_args__ = (
        UniqueConstraint("classroom_id", "name", name="uq_students_classroom_name"),
    )

    id = Column(Integer, primary_key=True, index=True)
    classroom_id = Column(
        String,
        ForeignKey("classrooms.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    name = Column(String, nullable=False)
    user_id = Column(String, index=True, nullable=True)  # None for anonymous students
    email = Column(String, nullable=True)
    words = Column(JSON, nullable=False, default=list)
    word_stats = Column(JSON, nullable=False, default=dict)
    total_time = Column(Integer, nullable=False, default=0)  # seconds
    session_start = Column(String, nullable=True)
    last_active = Column(String, nullable=False)
    joined_at = Column(String, nullable=False)

    classroom = relationship("ClassroomModel", back_populates="students")
    sessions = relationship(
        "StudySessionModel",
        back_populates="student",
        cascade="all, delete-orphan",
    )
