"""ORM model for per-user topic subscriptions."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint

from runners_api.models.base import Base, created_at_column, updated_at_column


class TopicSubscription(Base):
    """Subscription flag for (user, topic). Unsubscribing flips is_subscribed; rows are kept."""

    __tablename__ = "topic_subscriptions"
    __table_args__ = (UniqueConstraint("user_id", "topic", name="uq_topic_subscriptions_user_topic"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    topic = Column(String(100), nullable=False, index=True)
    is_subscribed = Column(Boolean, nullable=False, default=True)
    subscribed_at = Column(DateTime(timezone=True), nullable=True)
    unsubscribed_at = Column(DateTime(timezone=True), nullable=True)
    notification_count = Column(Integer, nullable=False, default=0)
    last_notification_sent = Column(DateTime(timezone=True), nullable=True)

    created_at = created_at_column()
    updated_at = updated_at_column()
