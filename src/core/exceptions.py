"""Custom exception classes for the Vocabulary Classroom service.

This module defines application-specific exceptions following Google Python
Style Guide.
"""


class VocabClassroomError(Exception):
    """Base exception for all Vocabulary Classroom errors."""

    pass


class ClassroomNotFoundError(VocabClassroomError):
    """Raised when a requested classroom cannot be found."""

    def __init__(self, classroom_ref: str):
        """Initialize the exception.

        Args:
            classroom_ref: The code or ID of the classroom that was not found.
        """
        self.classroom_ref = classroom_ref
        super().__init__(f"Classroom '{classroom_ref}' not found")


class StudentNotFoundError(VocabClassroomError):
    """Raised when a student is not part of a classroom."""

    def __init__(self, student_ref: str):
        self.student_ref = student_ref
        super().__init__("Student not found in this classroom")


class ClassroomCodeGenerationError(VocabClassroomError):
    """Raised when no unused classroom code was found within the attempt limit."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(
            f"Failed to generate unique classroom code after {attempts} attempts"
        )


class WordExtractionError(VocabClassroomError):
    """Raised when an uploaded word list cannot be read."""

    pass


class ValidationError(VocabClassroomError):
    """Raised when data validation fails."""

    pass
