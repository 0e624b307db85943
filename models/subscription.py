"""
Subscription model: a user (subscriber) following another user's channel.
Only read by the channel profile counts.
"""
from sqlalchemy import Column, String, ForeignKey, UniqueConstraint
from models.base_model import BaseModel, Base


class Subscription(BaseModel, Base):
    __tablename__ = "subscriptions"

    subscriber_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    channel_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("subscriber_id", "channel_id", name="uq_subscriptions_pair"),
    )

    def __repr__(self):
        return f"<Subscription {self.subscriber_id} -> {self.channel_id}>"
