from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from ..database import Base, utcnow


class GalleryItem(Base):
    """An artwork published by a member."""

    __tablename__ = "gallery_items"

    id = Column(Integer, primary_key=True, index=True)
    artist_id = Column(String, ForeignKey("members.id", ondelete="CASCADE"), index=True, nullable=False)
    title_he = Column(String)
    title_en = Column(String)
    description_he = Column(Text)
    description_en = Column(Text)
    image_url = Column(String)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    artist = relationship("Member", back_populates="gallery_items")
