"""SQLAlchemy models for the data store."""

from .member import Member, User
from .course import Course, CourseTeacher
from .gallery import GalleryItem

__all__ = ["Member", "User", "Course", "CourseTeacher", "GalleryItem"]
