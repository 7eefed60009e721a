from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from ..database import Base, utcnow


class User(Base):
    """Login account identified by email; owns one or more members."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    members = relationship("Member", back_populates="user")


class Member(Base):
    """A teacher or artist shown on the site."""

    __tablename__ = "members"

    id = Column(String, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    name_he = Column(String)
    name_en = Column(String)
    role_he = Column(String)
    role_en = Column(String)
    bio_he = Column(Text)
    bio_en = Column(Text)
    image_url = Column(String)
    password_hash = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="members")
    courses = relationship(
        "Course",
        secondary="course_teachers",
        back_populates="teachers",
        order_by="Course.created_at.desc()",
        viewonly=True,
    )
    gallery_items = relationship(
        "GalleryItem", back_populates="artist", order_by="GalleryItem.created_at.desc()"
    )

    @property
    def credential(self):
        """Record holding the password hash this member logs in with."""
        return self.user if self.user_id is not None else self
