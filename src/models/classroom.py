"""Classroom database model.

This module defines the durable Classroom model using SQLAlchemy.
"""

from sqlalchemy import JSON, Boolean, Column, Integer, String
from sqlalchemy.orm import relationship

from .base import Base


class ClassroomModel(Base):
    """Classroom owned by an authenticated teacher."""

    __tablename__ = "classrooms"

    id = Column(String, primary_key=True, index=True)
    code = Column(String(8), unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    words = Column(JSON, nullable=False, default=list)
    word_count = Column(Integer, nullable=False, default=0)
    owner_id = Column(String, index=True, nullable=False)
    owner_email = Column(String, nullable=True)
    mode = Column(String, nullable=False, default="authenticated")
    is_public = Column(Boolean, nullable=False, default=True)
    created_at = Column(String, nullable=False)  # ISO format string
    updated_at = Column(String, nullable=False)

    students = relationship(
        "StudentModel",
        back_populates="classroom",
        cascade="all, delete-orphan",
    )
