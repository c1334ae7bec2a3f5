"""SQLAlchemy ORM models."""

from runners_api.models.base import Base
from runners_api.models.case import Case
from runners_api.models.device import Device
from runners_api.models.runner import Runner
from runners_api.models.topic_subscription import TopicSubscription
from runners_api.models.user import User

__all__ = ["Base", "Case", "Device", "Runner", "TopicSubscription", "User"]
