"""Classroom manager.

Routes every classroom operation to the in-memory store (anonymous callers)
or the database store (signed-in callers), falling back to memory when the
database cannot create a classroom. Results are plain dictionaries with a
``success`` flag; storage exceptions never escape this module.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from core.exceptions import (
    ClassroomNotFoundError,
    StudentNotFoundError,
    ValidationError,
    VocabClassroomError,
)
from schemas.classroom import AuthUser, StorageSource
from utils import classroom_store, durable_classroom_store
from utils.classroom_store import MemoryClassroomStore
from utils.durable_classroom_store import DurableClassroomStore

logger = logging.getLogger(__name__)

CLASSROOM_NOT_FOUND = {"success": False, "error": "Classroom not found"}
VOTING_UNAVAILABLE = {
    "success": False,
    "error": "Word removal voting is only available for temporary classrooms",
}

StorageErrors = (SQLAlchemyError, VocabClassroomError)


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


class ClassroomManager:
    """Facade over the memory and database classroom stores."""

    def __init__(
        self,
        memory_store: MemoryClassroomStore,
        durable_store: Optional[DurableClassroomStore] = None,
    ):
        """Initialize ClassroomManager.

        Args:
            memory_store: Process-wide in-memory store.
            durable_store: Database store, or None when persistence is disabled.
        """
        self.memory_store = memory_store
        self.durable_store = durable_store

    def _run_durable(
        self, action: str, failure: Any, func: Callable[..., Any], *args: Any
    ) -> Any:
        """Call a database operation, converting storage errors into ``failure``."""
        try:
            return func(*args)
        except StorageErrors as e:
            logger.error("[ClassroomManager] Failed to %s in database: %s", action, e)
            return failure

    # --- Classrooms ---

    def _code_in_memory(self, code: str) -> bool:
        return self.memory_store.get_classroom(code) is not None

    def _code_in_database(self, code: str) -> bool:
        # Lookups resolve database classrooms first, so memory codes must avoid them.
        if self.durable_store is None:
            return False
        try:
            return self.durable_store.get_classroom_by_code(code) is not None
        except SQLAlchemyError as e:
            logger.error("[ClassroomManager] Failed to check classroom code: %s", e)
            return False

    def create_classroom(
        self, name: str, words: List[str], user: Optional[AuthUser]
    ) -> Dict[str, Any]:
        """Create a classroom in the database for signed-in users, otherwise in memory.

        Args:
            name: Classroom name.
            words: Vocabulary words in upload order.
            user: Authenticated user, or None for anonymous teachers.

        Returns:
            Classroom dictionary tagged with ``source``.

        Raises:
            ValidationError: If the name is blank or there are no words.
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Classroom name is required")
        if not words:
            raise ValidationError("No words found in the file")

        if user is not None and self.durable_store is not None:
            try:
                model = self.durable_store.create_classroom(
                    name=name,
                    words=words,
                    owner_id=user.uid,
                    owner_email=user.email,
                    is_taken=self._code_in_memory,
                )
                result = durable_classroom_store.classroom_to_dict(model, include_owner=True)
                result["source"] = StorageSource.DATABASE.value
                return result
            except Exception as e:
                logger.warning(
                    "[ClassroomManager] Failed to create classroom in database, "
                    "falling back to memory: %s",
                    e,
                    exc_info=True,
                )

        classroom = self.memory_store.create_classroom(
            name, words, is_taken=self._code_in_database
        )
        result = classroom_store.classroom_to_dict(classroom)
        result["source"] = StorageSource.MEMORY.value
        return result

    def get_classroom(
        self, code: str, user: Optional[AuthUser]
    ) -> Optional[Dict[str, Any]]:
        """Look a classroom up by code, database first.

        A private database classroom is reported as missing to anyone but its
        owner. Returns None when the code is unknown to both stores.
        """
        code = normalize_code(code)
        if self.durable_store is not None:
            try:
                model = self.durable_store.get_classroom_by_code(code)
            except SQLAlchemyError as e:
                logger.error(
                    "[ClassroomManager] Failed to get classroom from database: %s", e
                )
                model = None
            if model is not None:
                is_owner = user is not None and model.owner_id == user.uid
                if model.is_public or is_owner:
                    result = durable_classroom_store.classroom_to_dict(
                        model, include_owner=is_owner
                    )
                    result["source"] = StorageSource.DATABASE.value
                    return result
                return None

        classroom = self.memory_store.get_classroom(code)
        if classroom is None:
            return None
        result = classroom_store.classroom_to_dict(classroom)
        result["source"] = StorageSource.MEMORY.value
        return result

    @staticmethod
    def _is_durable(classroom: Dict[str, Any]) -> bool:
        return classroom["source"] == StorageSource.DATABASE.value

    # --- Students ---

    def join_classroom(
        self, code: str, student_name: str, user: Optional[AuthUser]
    ) -> Dict[str, Any]:
        classroom = self.get_classroom(code, user)
        if classroom is None:
            return dict(CLASSROOM_NOT_FOUND)

        failure = {"success": False, "error": "Failed to join classroom"}
        if self._is_durable(classroom):
            student = self._run_durable(
                "join classroom",
                None,
                self.durable_store.add_student,
                classroom["id"],
                student_name,
                user.uid if user else None,
                user.email if user else None,
            )
            if student is None:
                return failure
            return {
                "success": True,
                "code": classroom["code"],
                "student_name": student.name,
                "words": list(student.words or []),
            }

        student = self.memory_store.add_student(classroom["code"], student_name)
        if student is None:
            return failure
        return {
            "success": True,
            "code": classroom["code"],
            "student_name": student.name,
            "words": list(student.words),
        }

    def get_student_words(
        self, code: str, student_name: str, user: Optional[AuthUser]
    ) -> Optional[List[str]]:
        classroom = self.get_classroom(code, user)
        if classroom is None:
            return None
        if self._is_durable(classroom):
            return self._run_durable(
                "get student words",
                None,
                self.durable_store.get_student_words,
                classroom["id"],
                student_name,
            )
        return self.memory_store.get_student_words(classroom["code"], student_name)

    # --- Sessions and ranking ---

    def start_session(
        self, code: str, student_name: str, user: Optional[AuthUser]
    ) -> Dict[str, Any]:
        classroom = self.get_classroom(code, user)
        if classroom is None:
            return dict(CLASSROOM_NOT_FOUND)

        if self._is_durable(classroom):
            started = self._run_durable(
                "start session",
                None,
                self.durable_store.start_session,
                classroom["id"],
                student_name,
            )
            if started is None:
                return {"success": False, "error": "Failed to start session"}
        else:
            started = self.memory_store.start_session(classroom["code"], student_name)

        if not started:
            return {"success": False, "error": "Student not found"}
        return {"success": True}

    def end_session(
        self, code: str, student_name: str, user: Optional[AuthUser]
    ) -> Dict[str, Any]:
        classroom = self.get_classroom(code, user)
        if classroom is None:
            return dict(CLASSROOM_NOT_FOUND)

        if self._is_durable(classroom):
            try:
                duration = self.durable_store.end_session(classroom["id"], student_name)
            except StorageErrors as e:
                logger.error("[ClassroomManager] Failed to end session in database: %s", e)
                return {"success": False, "error": "Failed to end session"}
        else:
            duration = self.memory_store.end_session(classroom["code"], student_name)

        if duration is None:
            return {"success": False, "error": "No active session"}
        return {"success": True, "duration": duration}

    def get_leaderboard(
        self, code: str, user: Optional[AuthUser]
    ) -> Optional[List[Dict[str, Any]]]:
        classroom = self.get_classroom(code, user)
        if classroom is None:
            return None
        if self._is_durable(classroom):
            return self._run_durable(
                "get leaderboard", None, self.durable_store.get_leaderboard, classroom["id"]
            )
        return self.memory_store.get_leaderboard(classroom["code"])

    def get_student_status(
        self, code: str, student_name: str, user: Optional[AuthUser]
    ) -> Optional[Dict[str, Any]]:
        classroom = self.get_classroom(code, user)
        if classroom is None:
            return None
        if self._is_durable(classroom):
            return self._run_durable(
                "get student status",
                None,
                self.durable_store.get_student_status,
                classroom["id"],
                student_name,
            )
        return self.memory_store.get_student_status(classroom["code"], student_name)

    # --- Words ---

    def swap_words(
        self,
        code: str,
        student_a: str,
        word_a: str,
        student_b: str,
        word_b: str,
        user: Optional[AuthUser],
    ) -> Dict[str, Any]:
        classroom = self.get_classroom(code, user)
        if classroom is None:
            return dict(CLASSROOM_NOT_FOUND)
        if self._is_durable(classroom):
            return self._run_durable(
                "swap words",
                {"success": False, "error": "Failed to swap words"},
                self.durable_store.swap_words,
                classroom["id"],
                student_a,
                word_a,
                student_b,
                word_b,
            )
        return self.memory_store.swap_words(
            classroom["code"], student_a, word_a, student_b, word_b
        )

    def record_practice(
        self,
        code: str,
        student_name: str,
        word: str,
        correct: bool,
        user: Optional[AuthUser],
    ) -> Dict[str, Any]:
        classroom = self.get_classroom(code, user)
        if classroom is None:
            return dict(CLASSROOM_NOT_FOUND)
        if self._is_durable(classroom):
            return self._run_durable(
                "record practice",
                {"success": False, "error": "Failed to record practice"},
                self.durable_store.record_practice,
                classroom["id"],
                student_name,
                word,
                correct,
            )
        return self.memory_store.record_practice_result(
            classroom["code"], student_name, word, correct
        )

    # --- Word removal voting (temporary classrooms) ---

    def request_remove_word(
        self,
        code: str,
        target_student: str,
        word: str,
        requested_by: str,
        user: Optional[AuthUser],
    ) -> Dict[str, Any]:
        classroom = self.get_classroom(code, user)
        if classroom is None:
            return dict(CLASSROOM_NOT_FOUND)
        if self._is_durable(classroom):
            return dict(VOTING_UNAVAILABLE)
        return self.memory_store.request_remove_word(
            classroom["code"], target_student, word, requested_by
        )

    def vote_remove_request(
        self, code: str, request_id: str, voter_name: str, user: Optional[AuthUser]
    ) -> Dict[str, Any]:
        classroom = self.get_classroom(code, user)
        if classroom is None:
            return dict(CLASSROOM_NOT_FOUND)
        if self._is_durable(classroom):
            return dict(VOTING_UNAVAILABLE)
        return self.memory_store.vote_remove_request(
            classroom["code"], request_id, voter_name
        )

    def reject_remove_request(
        self, code: str, request_id: str, user: Optional[AuthUser]
    ) -> Dict[str, Any]:
        classroom = self.get_classroom(code, user)
        if classroom is None:
            return dict(CLASSROOM_NOT_FOUND)
        if self._is_durable(classroom):
            return dict(VOTING_UNAVAILABLE)
        return self.memory_store.reject_remove_request(classroom["code"], request_id)

    def get_remove_request(
        self, code: str, request_id: str, user: Optional[AuthUser]
    ) -> Optional[Dict[str, Any]]:
        classroom = self.get_classroom(code, user)
        if classroom is None or self._is_durable(classroom):
            return None
        return self.memory_store.get_remove_request(classroom["code"], request_id)

    def list_remove_requests(
        self, code: str, user: Optional[AuthUser]
    ) -> Optional[List[Dict[str, Any]]]:
        classroom = self.get_classroom(code, user)
        if classroom is None:
            return None
        if self._is_durable(classroom):
            return []
        return self.memory_store.get_all_remove_requests(classroom["code"])

    # --- Signed-in views ---

    def _durable_unavailable(self, user: Optional[AuthUser]) -> Optional[Dict[str, Any]]:
        if user is None:
            return {"success": False, "error": "Authentication required"}
        if self.durable_store is None:
            return {"success": False, "error": "Persistent storage is not configured"}
        return None

    def get_my_classrooms(self, user: Optional[AuthUser]) -> Dict[str, Any]:
        unavailable = self._durable_unavailable(user)
        if unavailable:
            return unavailable
        classrooms = self._run_durable(
            "list classrooms", None, self.durable_store.get_my_classrooms, user.uid
        )
        if classrooms is None:
            return {"success": False, "error": "Failed to list classrooms"}
        return {"success": True, "classrooms": classrooms}

    def get_my_participations(self, user: Optional[AuthUser]) -> Dict[str, Any]:
        unavailable = self._durable_unavailable(user)
        if unavailable:
            return unavailable
        participations = self._run_durable(
            "list participations", None, self.durable_store.get_my_participations, user.uid
        )
        if participations is None:
            return {"success": False, "error": "Failed to list participations"}
        return {"success": True, "participations": participations}

    def get_student_progress(
        self, classroom_id: str, user: Optional[AuthUser]
    ) -> Dict[str, Any]:
        unavailable = self._durable_unavailable(user)
        if unavailable:
            return unavailable
        try:
            progress = self.durable_store.get_student_progress(classroom_id, user.uid)
        except (ClassroomNotFoundError, StudentNotFoundError) as e:
            return {"success": False, "error": str(e)}
        except SQLAlchemyError as e:
            logger.error("[ClassroomManager] Failed to load progress: %s", e)
            return {"success": False, "error": "Failed to load progress"}
        return {"success": True, **progress}
