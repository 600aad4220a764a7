"""Database-backed classroom store.

Classrooms created by signed-in teachers are stored permanently in the
``classrooms`` table, students in ``students`` and finished learning sessions
in ``study_sessions``. The external contract matches
:class:`utils.classroom_store.MemoryClassroomStore`; checks that guard a write
(word still owned, session still running) happen inside the same transaction
with the affected rows locked.
"""

import logging
import secrets
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Iterator, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import ACTIVE_STUDENT_WINDOW_HOURS, CLASSROOM_CODE_MAX_ATTEMPTS
from core.exceptions import (
    ClassroomCodeGenerationError,
    ClassroomNotFoundError,
    StudentNotFoundError,
)
from models.classroom import ClassroomModel
from models.student import StudentModel
from models.study_session import StudySessionModel
from utils.classroom_rules import (
    add_practice_result,
    build_leaderboard,
    check_swap,
    compute_mastery,
    count_study_days,
    elapsed_seconds,
    find_rank,
    from_iso,
    generate_code,
    swap_decks,
    to_iso,
    utc_now,
)

logger = logging.getLogger(__name__)


def classroom_to_dict(model: ClassroomModel, include_owner: bool = False) -> Dict[str, Any]:
    """Serialize a durable classroom for API responses.

    Owner identity is only included for the owner's own view.
    """
    result = {
        "id": model.id,
        "code": model.code,
        "name": model.name,
        "words": list(model.words or []),
        "word_count": model.word_count,
        "mode": model.mode,
        "is_public": model.is_public,
        "created_at": model.created_at,
        "updated_at": model.updated_at,
        "expires_at": None,
    }
    if include_owner:
        result["owner_id"] = model.owner_id
        result["owner_email"] = model.owner_email
    return result


class DurableClassroomStore:
    """Classroom operations on top of a request-scoped SQLAlchemy session."""

    def __init__(self, db: Session, clock: Callable[[], datetime] = utc_now):
        """Initialize DurableClassroomStore.

        Args:
            db: SQLAlchemy Session.
            clock: Returns the current aware UTC time.
        """
        self.db = db
        self._clock = clock

    @contextmanager
    def _transaction(self) -> Iterator[None]:
        """Commit the enclosed work, or roll it back if anything raises."""
        try:
            yield
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def _now_iso(self) -> str:
        return to_iso(self._clock())

    def _students_query(self, classroom_id: str):
        return self.db.query(StudentModel).filter(
            StudentModel.classroom_id == classroom_id
        )

    def _find_student(
        self, classroom_id: str, name: str, for_update: bool = False
    ) -> Optional[StudentModel]:
        query = self._students_query(classroom_id).filter(StudentModel.name == name)
        if for_update:
            query = query.with_for_update()
        return query.first()

    # --- Classrooms ---

    def generate_unique_code(self, is_taken: Optional[Callable[[str], bool]] = None) -> str:
        """Draw codes until one is unused, giving up after a bounded number of tries.

        Args:
            is_taken: Extra check for codes used outside the database.

        Raises:
            ClassroomCodeGenerationError: If every attempt collided.
        """
        for _ in range(CLASSROOM_CODE_MAX_ATTEMPTS):
            code = generate_code()
            taken = (
                self.db.query(ClassroomModel.id)
                .filter(ClassroomModel.code == code)
                .first()
            )
            if taken is None and not (is_taken and is_taken(code)):
                return code
        raise ClassroomCodeGenerationError(CLASSROOM_CODE_MAX_ATTEMPTS)

    def create_classroom(
        self,
        name: str,
        words: List[str],
        owner_id: str,
        owner_email: Optional[str] = None,
        is_taken: Optional[Callable[[str], bool]] = None,
    ) -> ClassroomModel:
        now = self._now_iso()
        with self._transaction():
            model = ClassroomModel(
                id=secrets.token_hex(8),
                code=self.generate_unique_code(is_taken),
                name=name,
                words=list(words or []),
                word_count=len(words or []),
                owner_id=owner_id,
                owner_email=owner_email,
                mode="authenticated",
                is_public=True,
                created_at=now,
                updated_at=now,
            )
            self.db.add(model)
        self.db.refresh(model)
        logger.info("Created classroom %s (%s) for owner %s", model.code, model.id, owner_id)
        return model

    def get_classroom_by_code(self, code: str) -> Optional[ClassroomModel]:
        return (
            self.db.query(ClassroomModel)
            .filter(ClassroomModel.code == code)
            .first()
        )

    def get_classroom_by_id(self, classroom_id: str) -> Optional[ClassroomModel]:
        return (
            self.db.query(ClassroomModel)
            .filter(ClassroomModel.id == classroom_id)
            .first()
        )

    # --- Students and sessions ---

    def add_student(
        self,
        classroom_id: str,
        name: str,
        user_id: Optional[str] = None,
        email: Optional[str] = None,
    ) -> StudentModel:
        """Join a student, returning the existing record on a repeat join.

        A student matches by name first, then by ``user_id`` when one is given.

        Raises:
            ClassroomNotFoundError: If the classroom does not exist.
        """
        existing = self._find_student(classroom_id, name)
        if existing is None and user_id:
            existing = (
                self._students_query(classroom_id)
                .filter(StudentModel.user_id == user_id)
                .first()
            )
        if existing is not None:
            return existing

        classroom = self.get_classroom_by_id(classroom_id)
        if classroom is None:
            raise ClassroomNotFoundError(classroom_id)

        now = self._now_iso()
        student = StudentModel(
            classroom_id=classroom_id,
            name=name,
            user_id=user_id,
            email=email,
            words=list(classroom.words or []),
            word_stats={},
            total_time=0,
            session_start=None,
            last_active=now,
            joined_at=now,
        )
        try:
            with self._transaction():
                self.db.add(student)
        except IntegrityError:
            # Lost a race with a concurrent join under the same name.
            existing = self._find_student(classroom_id, name)
            if existing is None:
                raise
            return existing
        logger.info("Student %s joined classroom %s", name, classroom_id)
        return student

    def start_session(self, classroom_id: str, name: str) -> bool:
        with self._transaction():
            student = self._find_student(classroom_id, name, for_update=True)
            if student is None:
                return False
            now = self._now_iso()
            student.session_start = now
            student.last_active = now
        return True

    def end_session(self, classroom_id: str, name: str) -> Optional[int]:
        """End the running session, credit it, and record it in the history.

        Returns:
            Session length in seconds, or None when no session was running.
        """
        with self._transaction():
            student = self._find_student(classroom_id, name, for_update=True)
            if student is None or student.session_start is None:
                return None

            now = self._clock()
            duration = elapsed_seconds(student.session_start, now)
            self.db.add(
                StudySessionModel(
                    student_id=student.id,
                    start_time=student.session_start,
                    end_time=to_iso(now),
                    duration=duration,
                    words_studied=list(student.words or []),
                )
            )
            student.total_time = (student.total_time or 0) + duration
            student.session_start = None
            student.last_active = to_iso(now)
        return duration

    def get_leaderboard(self, classroom_id: str) -> List[Dict[str, Any]]:
        students = (
            self._students_query(classroom_id)
            .order_by(
                StudentModel.total_time.desc(),
                StudentModel.joined_at.asc(),
                StudentModel.id.asc(),
            )
            .all()
        )
        return build_leaderboard(students)

    def get_student_status(self, classroom_id: str, name: str) -> Optional[Dict[str, Any]]:
        student = self._find_student(classroom_id, name)
        if student is None:
            return None

        leaderboard = self.get_leaderboard(classroom_id)
        return {
            "name": student.name,
            "total_time": student.total_time or 0,
            "is_active": student.session_start is not None,
            "rank": find_rank(leaderboard, name),
            "total_students": len(leaderboard),
        }

    def get_student_words(self, classroom_id: str, name: str) -> Optional[List[str]]:
        student = self._find_student(classroom_id, name)
        if student is None:
            return None
        return list(student.words or [])

    def swap_words(
        self,
        classroom_id: str,
        student_a: str,
        word_a: str,
        student_b: str,
        word_b: str,
    ) -> Dict[str, Any]:
        """Trade ``word_a`` from A's deck for ``word_b`` from B's deck atomically."""
        with self._transaction():
            # Lock both rows in primary-key order.
            rows = (
                self._students_query(classroom_id)
                .filter(StudentModel.name.in_([student_a, student_b]))
                .order_by(StudentModel.id)
                .with_for_update()
                .all()
            )
            by_name = {row.name: row for row in rows}
            a = by_name.get(student_a)
            b = by_name.get(student_b)
            error = check_swap(
                student_a,
                list(a.words or []) if a else None,
                word_a,
                student_b,
                list(b.words or []) if b else None,
                word_b,
            )
            if error:
                return {"success": False, "error": error}

            a.words, b.words = swap_decks(list(a.words), word_a, list(b.words), word_b)
            now = self._now_iso()
            a.last_active = now
            b.last_active = now

        logger.info(
            "Swapped '%s' (%s) for '%s' (%s) in %s",
            word_a, student_a, word_b, student_b, classroom_id,
        )
        return {"success": True}

    def record_practice(
        self, classroom_id: str, name: str, word: str, correct: bool
    ) -> Dict[str, Any]:
        with self._transaction():
            student = self._find_student(classroom_id, name, for_update=True)
            if student is None:
                return {"success": False, "error": "Student not found"}
            if word not in (student.words or []):
                return {"success": False, "error": "Student does not have that word"}

            student.word_stats = add_practice_result(student.word_stats, word, correct)
            student.last_active = self._now_iso()
            stats = dict(student.word_stats[word])
        return {"success": True, "stats": stats}

    # --- Owner and participant views ---

    def get_my_classrooms(self, owner_id: str) -> List[Dict[str, Any]]:
        """List an owner's classrooms, newest first, with student counts."""
        models = (
            self.db.query(ClassroomModel)
            .filter(ClassroomModel.owner_id == owner_id)
            .order_by(ClassroomModel.created_at.desc())
            .all()
        )
        active_since = self._clock() - timedelta(hours=ACTIVE_STUDENT_WINDOW_HOURS)

        classrooms = []
        for model in models:
            students = self._students_query(model.id).all()
            active = [s for s in students if from_iso(s.last_active) > active_since]
            classrooms.append(
                {
                    "id": model.id,
                    "code": model.code,
                    "name": model.name,
                    "word_count": model.word_count,
                    "student_count": len(students),
                    "active_student_count": len(active),
                    "created_at": model.created_at,
                    "updated_at": model.updated_at,
                }
            )
        return classrooms

    def get_my_participations(self, user_id: str) -> List[Dict[str, Any]]:
        """List every classroom the user joined as a student, newest join first."""
        students = (
            self.db.query(StudentModel)
            .filter(StudentModel.user_id == user_id)
            .order_by(StudentModel.joined_at.desc())
            .all()
        )

        participations = []
        for student in students:
            classroom = student.classroom
            if classroom is None:
                continue
            leaderboard = self.get_leaderboard(classroom.id)
            participations.append(
                {
                    "classroom_id": classroom.id,
                    "classroom_code": classroom.code,
                    "classroom_name": classroom.name,
                    "student_name": student.name,
                    "total_time": student.total_time or 0,
                    "rank": find_rank(leaderboard, student.name),
                    "total_students": len(leaderboard),
                    "joined_at": student.joined_at,
                    "last_active": student.last_active,
                }
            )
        return participations

    def get_student_progress(self, classroom_id: str, user_id: str) -> Dict[str, Any]:
        """Collect a signed-in student's history and word accuracy in one classroom.

        Args:
            classroom_id: Classroom ID.
            user_id: The student's user ID.

        Returns:
            Dictionary with ``classroom``, ``student``, ``word_stats`` and
            ``sessions`` (newest first).

        Raises:
            ClassroomNotFoundError: If the classroom does not exist.
            StudentNotFoundError: If the user never joined the classroom.
        """
        classroom = self.get_classroom_by_id(classroom_id)
        if classroom is None:
            raise ClassroomNotFoundError(classroom_id)

        student = (
            self._students_query(classroom_id)
            .filter(StudentModel.user_id == user_id)
            .first()
        )
        if student is None:
            raise StudentNotFoundError(user_id)

        session_models = (
            self.db.query(StudySessionModel)
            .filter(StudySessionModel.student_id == student.id)
            .order_by(StudySessionModel.start_time.desc(), StudySessionModel.id.desc())
            .all()
        )
        sessions = [
            {
                "id": s.id,
                "start_time": s.start_time,
                "end_time": s.end_time,
                "duration": s.duration,
                "words_studied": list(s.words_studied or []),
            }
            for s in session_models
        ]

        leaderboard = self.get_leaderboard(classroom_id)
        word_stats = dict(student.word_stats or {})
        return {
            "classroom": {
                "id": classroom.id,
                "code": classroom.code,
                "name": classroom.name,
                "word_count": classroom.word_count,
            },
            "student": {
                "name": student.name,
                "total_time": student.total_time or 0,
                "rank": find_rank(leaderboard, student.name),
                "total_students": len(leaderboard),
                "mastery": compute_mastery(word_stats),
                "study_days": count_study_days(s["start_time"] for s in sessions),
                "joined_at": student.joined_at,
            },
            "word_stats": word_stats,
            "sessions": sessions,
        }
