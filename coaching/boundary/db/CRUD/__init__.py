"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from coaching.boundary.db.CRUD import class_session_crud, course_crud

    # Use singleton instances
    session = await class_session_crud.get_aggregate(db, session_id)
"""

from coaching.boundary.db.CRUD.base_crud import BaseCRUD
from coaching.boundary.db.CRUD.class_session_crud import (
    ClassSessionCRUD,
    ClassSessionFilters,
    class_session_crud,
)
from coaching.boundary.db.CRUD.course_crud import CourseCRUD, course_crud

__all__ = [
    "BaseCRUD",
    "ClassSessionCRUD",
    "ClassSessionFilters",
    "class_session_crud",
    "CourseCRUD",
    "course_crud",
]
