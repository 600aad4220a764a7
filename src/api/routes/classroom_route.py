"""Classroom routes.

This module exposes the classroom manager over HTTP. Manager results carry a
``success`` flag; failed results are returned as-is with a 4xx status so the
client can show ``error`` verbatim.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.responses import JSONResponse

from api.routes.auth import get_current_user, get_optional_user
from config import MAX_UPLOAD_SIZE
from core.dependencies import ClassroomManagerDep
from core.exceptions import ValidationError, WordExtractionError
from schemas.classroom import AuthUser
from schemas.requests import (
    JoinClassroomRequest,
    PracticeRequest,
    RejectRemoveRequest,
    RemoveWordRequest,
    SessionRequest,
    SwapWordsRequest,
    VoteRemoveRequest,
)
from utils.word_extractor import extract_words

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/classrooms", tags=["Classroom"])


def _respond(result: Dict[str, Any], failure_status: int = status.HTTP_400_BAD_REQUEST):
    """Pass successful results through; send failures with a 4xx status."""
    if result.get("success"):
        return result
    error = result.get("error") or ""
    if "not found" in error.lower():
        failure_status = status.HTTP_404_NOT_FOUND
    return JSONResponse(status_code=failure_status, content=result)


def _not_found(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"success": False, "error": message},
    )


@router.post("", summary="Create a classroom from an uploaded word list")
def create_classroom(
    classroom_manager: ClassroomManagerDep,
    classroom_name: str = Form(..., description="Classroom name"),
    file: UploadFile = File(..., description="Word list (txt, md, csv or pdf)"),
    current_user: Optional[AuthUser] = Depends(get_optional_user),
):
    content = file.file.read(MAX_UPLOAD_SIZE + 1)
    if len(content) > MAX_UPLOAD_SIZE:
        return JSONResponse(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            content={"success": False, "error": "File is too large"},
        )

    try:
        words = extract_words(file.filename, content)
        classroom = classroom_manager.create_classroom(classroom_name, words, current_user)
    except (WordExtractionError, ValidationError) as e:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "error": str(e)},
        )
    except Exception as e:
        logger.error("Error creating classroom: %s", e, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create classroom",
        )

    return {
        "success": True,
        "code": classroom["code"],
        "name": classroom["name"],
        "word_count": classroom["word_count"],
        "mode": classroom["source"],
    }


@router.get("/mine", summary="Classrooms owned by the current user")
def list_my_classrooms(
    classroom_manager: ClassroomManagerDep,
    current_user: AuthUser = Depends(get_current_user),
):
    return _respond(classroom_manager.get_my_classrooms(current_user))


@router.get("/participations", summary="Classrooms the current user joined")
def list_my_participations(
    classroom_manager: ClassroomManagerDep,
    current_user: AuthUser = Depends(get_current_user),
):
    return _respond(classroom_manager.get_my_participations(current_user))


@router.get("/progress/{classroom_id}", summary="Learning progress in one classroom")
def get_progress(
    classroom_id: str,
    classroom_manager: ClassroomManagerDep,
    current_user: AuthUser = Depends(get_current_user),
):
    if not classroom_id.replace("_", "").replace("-", "").isalnum() or len(classroom_id) > 100:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "error": "Invalid classroom ID format"},
        )
    return _respond(classroom_manager.get_student_progress(classroom_id, current_user))


@router.post("/join", summary="Join a classroom")
def join_classroom(
    req: JoinClassroomRequest,
    classroom_manager: ClassroomManagerDep,
    current_user: Optional[AuthUser] = Depends(get_optional_user),
):
    result = classroom_manager.join_classroom(
        req.code, req.student_name.strip(), current_user
    )
    return _respond(result, failure_status=status.HTTP_404_NOT_FOUND)


@router.post("/session/start", summary="Start a learning session")
def start_session(
    req: SessionRequest,
    classroom_manager: ClassroomManagerDep,
    current_user: Optional[AuthUser] = Depends(get_optional_user),
):
    return _respond(
        classroom_manager.start_session(req.code, req.student_name, current_user)
    )


@router.post("/session/end", summary="End a learning session")
def end_session(
    req: SessionRequest,
    classroom_manager: ClassroomManagerDep,
    current_user: Optional[AuthUser] = Depends(get_optional_user),
):
    return _respond(
        classroom_manager.end_session(req.code, req.student_name, current_user)
    )


@router.post("/words/swap", summary="Swap words between two students")
def swap_words(
    req: SwapWordsRequest,
    classroom_manager: ClassroomManagerDep,
    current_user: Optional[AuthUser] = Depends(get_optional_user),
):
    result = classroom_manager.swap_words(
        req.code, req.student_a, req.word_a, req.student_b, req.word_b, current_user
    )
    return _respond(result)


@router.post("/words/practice", summary="Record a practice attempt")
def record_practice(
    req: PracticeRequest,
    classroom_manager: ClassroomManagerDep,
    current_user: Optional[AuthUser] = Depends(get_optional_user),
):
    result = classroom_manager.record_practice(
        req.code, req.student_name, req.word, req.correct, current_user
    )
    return _respond(result)


@router.post("/words/remove/request", summary="Ask classmates to remove a word")
def request_remove_word(
    req: RemoveWordRequest,
    classroom_manager: ClassroomManagerDep,
    current_user: Optional[AuthUser] = Depends(get_optional_user),
):
    result = classroom_manager.request_remove_word(
        req.code, req.target_student, req.word, req.requested_by, current_user
    )
    return _respond(result)


@router.post("/words/remove/vote", summary="Approve a word removal request")
def vote_remove_request(
    req: VoteRemoveRequest,
    classroom_manager: ClassroomManagerDep,
    current_user: Optional[AuthUser] = Depends(get_optional_user),
):
    result = classroom_manager.vote_remove_request(
        req.code, req.request_id, req.voter_name, current_user
    )
    return _respond(result)


@router.post("/words/remove/reject", summary="Reject a word removal request")
def reject_remove_request(
    req: RejectRemoveRequest,
    classroom_manager: ClassroomManagerDep,
    current_user: Optional[AuthUser] = Depends(get_optional_user),
):
    result = classroom_manager.reject_remove_request(
        req.code, req.request_id, current_user
    )
    return _respond(result)


@router.get("/{code}", summary="Get a classroom")
def get_classroom(
    code: str,
    classroom_manager: ClassroomManagerDep,
    current_user: Optional[AuthUser] = Depends(get_optional_user),
):
    classroom = classroom_manager.get_classroom(code, current_user)
    if classroom is None:
        return _not_found("Classroom not found")
    return {"success": True, "classroom": classroom}


@router.get("/{code}/leaderboard", summary="Get the classroom leaderboard")
def get_leaderboard(
    code: str,
    classroom_manager: ClassroomManagerDep,
    current_user: Optional[AuthUser] = Depends(get_optional_user),
):
    leaderboard = classroom_manager.get_leaderboard(code, current_user)
    if leaderboard is None:
        return _not_found("Classroom not found")
    return {"success": True, "leaderboard": leaderboard}


@router.get("/{code}/students/{name}/status", summary="Get a student's status")
def get_student_status(
    code: str,
    name: str,
    classroom_manager: ClassroomManagerDep,
    current_user: Optional[AuthUser] = Depends(get_optional_user),
):
    student_status = classroom_manager.get_student_status(code, name, current_user)
    if student_status is None:
        return _not_found("Student or classroom not found")
    return {"success": True, "status": student_status}


@router.get("/{code}/students/{name}/words", summary="Get a student's deck")
def get_student_words(
    code: str,
    name: str,
    classroom_manager: ClassroomManagerDep,
    current_user: Optional[AuthUser] = Depends(get_optional_user),
):
    words = classroom_manager.get_student_words(code, name, current_user)
    if words is None:
        return _not_found("Student or classroom not found")
    return {"success": True, "words": words}


@router.get("/{code}/remove-requests", summary="List word removal requests")
def list_remove_requests(
    code: str,
    classroom_manager: ClassroomManagerDep,
    current_user: Optional[AuthUser] = Depends(get_optional_user),
):
    requests = classroom_manager.list_remove_requests(code, current_user)
    if requests is None:
        return _not_found("Classroom not found")
    return {"success": True, "requests": requests}


@router.get("/{code}/remove-requests/{request_id}", summary="Get a word removal request")
def get_remove_request(
    code: str,
    request_id: str,
    classroom_manager: ClassroomManagerDep,
    current_user: Optional[AuthUser] = Depends(get_optional_user),
):
    request = classroom_manager.get_remove_request(code, request_id, current_user)
    if request is None:
        return _not_found("Request not found")
    return {"success": True, "request": request}
