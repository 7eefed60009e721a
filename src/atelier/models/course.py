from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from ..database import Base, utcnow


class CourseTeacher(Base):
    """Join table linking courses to the members teaching them."""

    __tablename__ = "course_teachers"

    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), primary_key=True)
    teacher_id = Column(String, ForeignKey("members.id", ondelete="CASCADE"), primary_key=True)


class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    name_he = Column(String)
    name_en = Column(String)
    description_he = Column(Text)
    description_en = Column(Text)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    teachers = relationship(
        "Member",
        secondary="course_teachers",
        back_populates="courses",
        order_by="Member.id",
        viewonly=True,
    )
