"""Kids vocabulary routes: example words, image reports and image versions."""

from fastapi import APIRouter, Query, Request, status
from fastapi.responses import JSONResponse

from core.dependencies import ImageReportManagerDep
from schemas.requests import ImageReportRequest
from utils.kids_words import KIDS_WORDS, random_word

router = APIRouter(prefix="/api/kids", tags=["Kids"])


@router.post("/images/report", summary="Report an inappropriate image")
def report_image(
    req: ImageReportRequest,
    request: Request,
    report_manager: ImageReportManagerDep,
):
    reporter_id = request.client.host if request.client else "unknown"
    result = report_manager.report_image(req.word.strip(), reporter_id)
    if result["status"] == "error":
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=result)
    if result["status"] == "already_voted":
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=result)
    return result


@router.get("/words", summary="Example words grouped by topic")
def list_kids_words() -> dict:
    return {"success": True, "words": KIDS_WORDS}


@router.get("/words/random", summary="A random example word")
def get_random_word() -> dict:
    return {"success": True, "word": random_word()}


@router.get("/images/version", summary="Current image version of a word")
def get_image_version(
    report_manager: ImageReportManagerDep,
    word: str = Query(..., min_length=1),
) -> dict:
    return {"word": word, "version": report_manager.get_word_version(word)}
