"""Dependency injection module for FastAPI.

This module provides dependency injection functions for FastAPI routes,
following Google Python Style Guide and FastAPI best practices.
"""

from typing import Annotated, Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from config import DURABLE_STORE_ENABLED
from core.database import get_db
from utils import classroom_manager
from utils import classroom_store
from utils import durable_classroom_store
from utils import image_report_manager

# Singleton for the in-memory classroom store (lives as long as the process)
_memory_store_instance: Optional[classroom_store.MemoryClassroomStore] = None


def get_memory_store() -> classroom_store.MemoryClassroomStore:
    """Get MemoryClassroomStore singleton instance.

    Returns:
        MemoryClassroomStore instance (singleton).
    """
    global _memory_store_instance
    if _memory_store_instance is None:
        _memory_store_instance = classroom_store.MemoryClassroomStore()
    return _memory_store_instance


def get_classroom_manager(
    db: Session = Depends(get_db),
    memory_store: classroom_store.MemoryClassroomStore = Depends(get_memory_store),
) -> classroom_manager.ClassroomManager:
    """Get ClassroomManager instance with request-scoped DB session.

    Args:
        db: Database session.
        memory_store: Process-wide in-memory store.

    Returns:
        ClassroomManager instance.
    """
    durable_store = (
        durable_classroom_store.DurableClassroomStore(db)
        if DURABLE_STORE_ENABLED
        else None
    )
    return classroom_manager.ClassroomManager(memory_store, durable_store)


def get_image_report_manager(
    db: Session = Depends(get_db),
) -> image_report_manager.ImageReportManager:
    """Get ImageReportManager instance with request-scoped DB session."""
    return image_report_manager.ImageReportManager(db)


# Type aliases for dependency injection
ClassroomManagerDep = Annotated[
    classroom_manager.ClassroomManager, Depends(get_classroom_manager)
]
ImageReportManagerDep = Annotated[
    image_report_manager.ImageReportManager, Depends(get_image_report_manager)
]
