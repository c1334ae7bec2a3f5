"""ORM model for push-notification devices."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint

from runners_api.models.base import Base, created_at_column, updated_at_column

PLATFORMS = ("ios", "android")


class Device(Base):
    """One row per (user, platform); re-registration updates the row in place."""

    __tablename__ = "devices"
    __table_args__ = (UniqueConstraint("user_id", "platform", name="uq_devices_user_platform"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    platform = Column(String(16), nullable=False)
    push_token = Column(String(500), nullable=False)
    app_version = Column(String(50), nullable=True)
    app_build_number = Column(String(50), nullable=True)
    device_model = Column(String(100), nullable=True)
    os_version = Column(String(50), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    last_seen_at = Column(DateTime(timezone=True), nullable=True)

    created_at = created_at_column()
    updated_at = updated_at_column()
