from sqlalchemy import (
    Column,
    String,
    Integer,
    Float,
    Boolean,
    ForeignKey,
    Text,
    CheckConstraint,
    Index,
)
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class Video(BaseModel, Base):
    __tablename__ = "videos"

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    # Hosted media URLs; the files themselves live on the media host
    video_file = Column(String(1024), nullable=False)
    thumbnail = Column(String(1024), nullable=False)
    duration = Column(Float, nullable=False, default=0)
    views = Column(Integer, nullable=False, default=0)
    is_published = Column(Boolean, nullable=False, default=True)

    owner_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    owner = relationship("User", back_populates="videos")

    __table_args__ = (
        CheckConstraint("duration >= 0", name="ck_videos_duration_nonnegative"),
        CheckConstraint("views >= 0", name="ck_videos_views_nonnegative"),
        Index("ix_videos_owner_id", "owner_id"),
    )
