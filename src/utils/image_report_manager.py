"""Community reporting of generated kids-vocabulary images.

Each word has a report row keyed by the SHA-256 of the normalized word. When
enough distinct reporters flag the current image, the word's version is bumped
so the image generator produces a fresh picture, and the tally starts over.
"""

import hashlib
import logging
from typing import Any, Callable, Dict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import IMAGE_REPORT_BAN_THRESHOLD
from models.image_report import ImageReportModel
from utils.classroom_rules import to_iso, utc_now

logger = logging.getLogger(__name__)


def word_hash(word: str) -> str:
    normalized = word.strip().lower()
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()


def reporter_hash(reporter_id: str) -> str:
    # Reporter ids are client IPs; only a digest is stored.
    return hashlib.md5((reporter_id or "unknown").encode("utf-8")).hexdigest()


class ImageReportManager:
    """Manages image report votes using SQLAlchemy."""

    def __init__(
        self,
        db: Session,
        ban_threshold: int = IMAGE_REPORT_BAN_THRESHOLD,
        clock: Callable = utc_now,
    ):
        self.db = db
        self.ban_threshold = ban_threshold
        self._clock = clock

    def get_word_version(self, word: str) -> int:
        """Current image version for ``word``; 0 if never banned or on database error."""
        try:
            model = self.db.get(ImageReportModel, word_hash(word))
        except SQLAlchemyError as e:
            logger.error("Error fetching word version: %s", e)
            return 0
        return model.version if model else 0

    def report_image(self, word: str, reporter_id: str) -> Dict[str, Any]:
        """Record one report against the current image of ``word``.

        Args:
            word: The word whose image is reported.
            reporter_id: Identifier used to stop repeat reports (client IP).

        Returns:
            Dictionary with ``status`` (``voted``, ``banned``, ``already_voted``
            or ``error``), ``message``, and for recorded votes
            ``current_votes``, ``threshold`` and ``new_version``.
        """
        key = word_hash(word)
        reporter = reporter_hash(reporter_id)
        now = to_iso(self._clock())

        try:
            model = (
                self.db.query(ImageReportModel)
                .filter(ImageReportModel.word_hash == key)
                .with_for_update()
                .first()
            )
            if model is None:
                model = ImageReportModel(
                    word_hash=key,
                    word=word,
                    votes=0,
                    reporters=[],
                    version=0,
                    created_at=now,
                    last_updated=now,
                )
                self.db.add(model)

            if reporter in (model.reporters or []):
                self.db.rollback()
                return {
                    "status": "already_voted",
                    "message": "You have already reported this image",
                }

            model.votes = (model.votes or 0) + 1
            model.reporters = list(model.reporters or []) + [reporter]
            model.last_updated = now

            status = "voted"
            if model.votes >= self.ban_threshold:
                status = "banned"
                # The old image is retired; the new version starts with a clean tally.
                model.version = (model.version or 0) + 1
                model.votes = 0
                model.reporters = []
                model.last_banned_at = now

            result = {
                "status": status,
                "message": (
                    "Image removed and will be regenerated"
                    if status == "banned"
                    else "Thanks for the report, we will review it"
                ),
                "current_votes": model.votes,
                "threshold": self.ban_threshold,
                "new_version": model.version,
            }
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Report transaction failed: %s", e)
            return {"status": "error", "message": "The system is busy, please try again later"}

        if status == "banned":
            logger.info("Image for '%s' banned, now version %d", word, result["new_version"])
        return result
