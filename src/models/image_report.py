"""Image report database model.

Tracks community reports against generated kids-vocabulary images.
"""

from sqlalchemy import JSON, Column, Integer, String

from .base import Base


class ImageReportModel(Base):
    """Report tally for one word's generated image."""

    __tablename__ = "banned_images"

    word_hash = Column(String(64), primary_key=True, index=True)
    word = Column(String, nullable=False)
    votes = Column(Integer, nullable=False, default=0)
    reporters = Column(JSON, nullable=False, default=list)  # md5 of reporter ids
    version = Column(Integer, nullable=False, default=0)
    created_at = Column(String, nullable=False)
    last_updated = Column(String, nullable=False)
    last_banned_at = Column(String, nullable=True)
