from models.base_model import Base, BaseModel
from sqlalchemy import Column, String, Text
from sqlalchemy.orm import relationship


class User(BaseModel, Base):
    __tablename__ = "users"
    # username and email are normalized to lower case by the schemas before they get here
    username = Column(String(64), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    full_name = Column(String(255), nullable=False)
    avatar = Column(String(1024), nullable=False)
    cover_image = Column(String(1024), nullable=True, default="")
    password_hash = Column(String(255), nullable=False)
    # Single active refresh token slot; overwritten on rotation, cleared on logout
    refresh_token = Column(Text, nullable=True)

    videos = relationship(
        "Video",
        back_populates="owner",
        passive_deletes=True
    )
