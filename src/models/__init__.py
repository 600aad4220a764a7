from .classroom import ClassroomModel
from .image_report import ImageReportModel
from .student import StudentModel
from .study_session import StudySessionModel

__all__ = [
    "ClassroomModel",
    "ImageReportModel",
    "StudentModel",
    "StudySessionModel",
]
