from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import services
from ..auth import get_db


router = APIRouter(prefix="/courses", tags=["courses"])


@router.get("")
def list_courses(db: Session = Depends(get_db)):
    """Return all courses with their teachers, newest first."""
    return services.list_courses(db)


@router.get("/search/{query}")
def search_courses(query: str, db: Session = Depends(get_db)):
    """Case-insensitive search across course names and descriptions."""
    return services.search_courses(db, query)


@router.get("/{course_id}")
def get_course(course_id: int, db: Session = Depends(get_db)):
    return services.get_course(db, course_id)
