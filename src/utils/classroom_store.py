"""In-memory classroom store.

Holds classrooms for anonymous teachers. Everything lives in one owned
``MemoryClassroomStore`` object and is lost on restart; classrooms expire
``CLASSROOM_TTL_HOURS`` after creation.
"""

import logging
import threading
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from config import CLASSROOM_TTL_HOURS, REMOVE_WORD_VOTE_THRESHOLD
from schemas.classroom import (
    MemoryClassroom,
    MemoryStudent,
    RemoveRequest,
    RemoveRequestStatus,
)
from utils.classroom_rules import (
    add_practice_result,
    build_leaderboard,
    check_swap,
    elapsed_seconds,
    find_rank,
    generate_code,
    swap_decks,
    to_iso,
    utc_now,
)

logger = logging.getLogger(__name__)


def classroom_to_dict(classroom: MemoryClassroom) -> Dict[str, Any]:
    """Serialize a memory classroom for API responses."""
    return {
        "code": classroom.code,
        "name": classroom.name,
        "words": list(classroom.words),
        "word_count": classroom.word_count,
        "mode": classroom.mode,
        "is_public": classroom.is_public,
        "created_at": to_iso(classroom.created_at),
        "expires_at": to_iso(classroom.expires_at),
        "student_count": len(classroom.students),
    }


def remove_request_to_dict(request: RemoveRequest) -> Dict[str, Any]:
    return {
        "request_id": request.request_id,
        "target_student": request.target_student,
        "word": request.word,
        "requested_by": request.requested_by,
        "votes": sorted(request.votes),
        "vote_count": len(request.votes),
        "threshold": REMOVE_WORD_VOTE_THRESHOLD,
        "status": request.status.value,
        "created_at": to_iso(request.created_at),
        "resolved_at": to_iso(request.resolved_at),
    }


class MemoryClassroomStore:
    """Process-wide classroom store for anonymous use.

    Thread-safe: FastAPI runs sync endpoints in a worker pool, so every
    read-check-write sequence (join, swap, vote, expiry sweep) runs under one
    re-entrant lock.
    """

    def __init__(
        self,
        ttl: timedelta = timedelta(hours=CLASSROOM_TTL_HOURS),
        vote_threshold: int = REMOVE_WORD_VOTE_THRESHOLD,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize MemoryClassroomStore.

        Args:
            ttl: Lifetime of a classroom.
            vote_threshold: Distinct votes needed to approve a word removal.
            clock: Returns the current aware UTC time.
        """
        self._classrooms: Dict[str, MemoryClassroom] = {}
        self._lock = threading.RLock()
        self._ttl = ttl
        self._vote_threshold = vote_threshold
        self._clock = clock

    def _live(self, code: str) -> Optional[MemoryClassroom]:
        classroom = self._classrooms.get(code)
        if classroom is None:
            return None
        if classroom.expires_at <= self._clock():
            return None
        return classroom

    def create_classroom(
        self,
        name: str,
        words: List[str],
        is_taken: Optional[Callable[[str], bool]] = None,
    ) -> MemoryClassroom:
        """Create a classroom under a fresh code.

        Args:
            name: Classroom name.
            words: Vocabulary words in upload order.
            is_taken: Extra check for codes used outside this store.
        """
        with self._lock:
            code = generate_code()
            while self._live(code) is not None or (is_taken and is_taken(code)):
                code = generate_code()

            now = self._clock()
            classroom = MemoryClassroom(
                code=code,
                name=name,
                words=list(words),
                word_count=len(words),
                created_at=now,
                expires_at=now + self._ttl,
            )
            self._classrooms[code] = classroom
        logger.info("Created memory classroom %s (%d words)", code, len(words))
        return classroom

    def get_classroom(self, code: str) -> Optional[MemoryClassroom]:
        """Return a live classroom, or None when unknown or expired."""
        with self._lock:
            return self._live(code)

    def add_student(self, code: str, name: str) -> Optional[MemoryStudent]:
        """Join a student; joining again under the same name returns the existing record."""
        with self._lock:
            classroom = self._live(code)
            if classroom is None:
                return None

            existing = classroom.find_student(name)
            if existing is not None:
                return existing

            now = self._clock()
            student = MemoryStudent(
                name=name,
                words=list(classroom.words),
                last_active=now,
                joined_at=now,
            )
            classroom.students.append(student)
        logger.info("Student %s joined memory classroom %s", name, code)
        return student

    def start_session(self, code: str, name: str) -> bool:
        with self._lock:
            classroom = self._live(code)
            student = classroom.find_student(name) if classroom else None
            if student is None:
                return False
            # A restart discards the running interval; time is only credited on end.
            now = self._clock()
            student.session_start = now
            student.last_active = now
            return True

    def end_session(self, code: str, name: str) -> Optional[int]:
        """End the running session and credit its duration.

        Returns:
            Session length in seconds, or None when no session was running.
        """
        with self._lock:
            classroom = self._live(code)
            student = classroom.find_student(name) if classroom else None
            if student is None or student.session_start is None:
                return None

            now = self._clock()
            duration = elapsed_seconds(student.session_start, now)
            student.total_time += duration
            student.session_start = None
            student.last_active = now
            return duration

    def get_leaderboard(self, code: str) -> Optional[List[Dict[str, Any]]]:
        with self._lock:
            classroom = self._live(code)
            if classroom is None:
                return None
            return build_leaderboard(classroom.students)

    def get_student_status(self, code: str, name: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            classroom = self._live(code)
            student = classroom.find_student(name) if classroom else None
            if student is None:
                return None

            leaderboard = build_leaderboard(classroom.students)
            return {
                "name": student.name,
                "total_time": student.total_time,
                "is_active": student.session_start is not None,
                "rank": find_rank(leaderboard, name),
                "total_students": len(leaderboard),
            }

    def get_student_words(self, code: str, name: str) -> Optional[List[str]]:
        with self._lock:
            classroom = self._live(code)
            student = classroom.find_student(name) if classroom else None
            if student is None:
                return None
            return list(student.words)

    def swap_words(
        self, code: str, student_a: str, word_a: str, student_b: str, word_b: str
    ) -> Dict[str, Any]:
        """Trade ``word_a`` from A's deck for ``word_b`` from B's deck."""
        with self._lock:
            classroom = self._live(code)
            if classroom is None:
                return {"success": False, "error": "Classroom not found"}

            a = classroom.find_student(student_a)
            b = classroom.find_student(student_b)
            error = check_swap(
                student_a,
                a.words if a else None,
                word_a,
                student_b,
                b.words if b else None,
                word_b,
            )
            if error:
                return {"success": False, "error": error}

            a.words, b.words = swap_decks(a.words, word_a, b.words, word_b)
            now = self._clock()
            a.last_active = now
            b.last_active = now

        logger.info(
            "Swapped '%s' (%s) for '%s' (%s) in %s",
            word_a, student_a, word_b, student_b, code,
        )
        return {"success": True}

    def record_practice_result(
        self, code: str, name: str, word: str, correct: bool
    ) -> Dict[str, Any]:
        with self._lock:
            classroom = self._live(code)
            if classroom is None:
                return {"success": False, "error": "Classroom not found"}
            student = classroom.find_student(name)
            if student is None:
                return {"success": False, "error": "Student not found"}
            if word not in student.words:
                return {"success": False, "error": "Student does not have that word"}

            student.word_stats = add_practice_result(student.word_stats, word, correct)
            student.last_active = self._clock()
            return {"success": True, "stats": dict(student.word_stats[word])}

    # --- Word removal voting ---

    def request_remove_word(
        self, code: str, target_student: str, word: str, requested_by: str
    ) -> Dict[str, Any]:
        with self._lock:
            classroom = self._live(code)
            if classroom is None:
                return {"success": False, "error": "Classroom not found"}
            target = classroom.find_student(target_student)
            if target is None:
                return {"success": False, "error": "Target student not found"}
            if word not in target.words:
                return {"success": False, "error": "Target student does not have that word"}
            if classroom.find_student(requested_by) is None:
                return {"success": False, "error": "Requester not found"}

            for request in classroom.remove_requests.values():
                if (
                    request.status == RemoveRequestStatus.PENDING
                    and request.target_student == target_student
                    and request.word == word
                ):
                    return {
                        "success": False,
                        "error": "A removal request for this word is already pending",
                    }

            request = RemoveRequest(
                target_student=target_student,
                word=word,
                requested_by=requested_by,
                created_at=self._clock(),
            )
            classroom.remove_requests[request.request_id] = request

        logger.info(
            "%s asked to remove '%s' from %s in %s (request %s)",
            requested_by, word, target_student, code, request.request_id,
        )
        return {"success": True, "request_id": request.request_id}

    def vote_remove_request(
        self, code: str, request_id: str, voter_name: str
    ) -> Dict[str, Any]:
        """Add one approval vote; the threshold-reaching vote removes the word."""
        with self._lock:
            classroom = self._live(code)
            if classroom is None:
                return {"success": False, "error": "Classroom not found"}
            request = classroom.remove_requests.get(request_id)
            if request is None:
                return {"success": False, "error": "Request not found"}
            if request.status != RemoveRequestStatus.PENDING:
                return {"success": False, "error": "Request is no longer pending"}
            if classroom.find_student(voter_name) is None:
                return {"success": False, "error": "Voter not found"}
            if voter_name in request.votes:
                return {"success": False, "error": "Already voted"}

            request.votes.add(voter_name)
            if len(request.votes) >= self._vote_threshold:
                request.status = RemoveRequestStatus.APPROVED
                request.resolved_at = self._clock()
                target = classroom.find_student(request.target_student)
                if target is not None and request.word in target.words:
                    target.words = [w for w in target.words if w != request.word]
                    target.word_stats = {
                        w: s for w, s in target.word_stats.items() if w != request.word
                    }
                logger.info(
                    "Removal of '%s' from %s approved in %s",
                    request.word, request.target_student, code,
                )
            return {"success": True, "request": remove_request_to_dict(request)}

    def reject_remove_request(self, code: str, request_id: str) -> Dict[str, Any]:
        with self._lock:
            classroom = self._live(code)
            if classroom is None:
                return {"success": False, "error": "Classroom not found"}
            request = classroom.remove_requests.get(request_id)
            if request is None:
                return {"success": False, "error": "Request not found"}
            if request.status != RemoveRequestStatus.PENDING:
                return {"success": False, "error": "Request is no longer pending"}

            request.status = RemoveRequestStatus.REJECTED
            request.resolved_at = self._clock()
            return {"success": True, "request": remove_request_to_dict(request)}

    def get_remove_request(self, code: str, request_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            classroom = self._live(code)
            if classroom is None:
                return None
            request = classroom.remove_requests.get(request_id)
            return remove_request_to_dict(request) if request else None

    def get_all_remove_requests(self, code: str) -> List[Dict[str, Any]]:
        with self._lock:
            classroom = self._live(code)
            if classroom is None:
                return []
            return [remove_request_to_dict(r) for r in classroom.remove_requests.values()]

    # --- Expiry ---

    def purge_expired(self) -> int:
        """Drop every expired classroom.

        Returns:
            Number of classrooms removed.
        """
        with self._lock:
            now = self._clock()
            expired = [
                code
                for code, classroom in self._classrooms.items()
                if classroom.expires_at <= now
            ]
            for code in expired:
                del self._classrooms[code]
        if expired:
            logger.info("Purged %d expired classrooms", len(expired))
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return sum(1 for code in self._classrooms if self._live(code) is not None)
