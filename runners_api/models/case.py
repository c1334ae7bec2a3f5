"""ORM model for cases (incident reports about a runner)."""

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text

from runners_api.models.base import Base, created_at_column, updated_at_column

CASE_STATUSES = ("Open", "Active", "Missing", "Found", "Resolved", "Closed")
# Moving a case into one of these stamps resolved_at / resolved_by.
RESOLVED_STATUSES = frozenset({"Found", "Resolved", "Closed"})
CASE_PRIORITIES = ("Low", "Medium", "High", "Critical")


class Case(Base):
    """Incident report referencing a runner; reported_by_user_id is the owning user."""

    __tablename__ = "cases"

    id = Column(Integer, primary_key=True, autoincrement=True)
    runner_id = Column(Integer, ForeignKey("runners.id"), nullable=False, index=True)
    reported_by_user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(32), nullable=False, default="Open", index=True)
    priority = Column(String(32), nullable=False, default="Medium", index=True)

    last_seen_date = Column(DateTime(timezone=True), nullable=True)
    last_seen_location = Column(String(500), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    circumstances = Column(Text, nullable=True)
    clothing_description = Column(Text, nullable=True)
    additional_info = Column(Text, nullable=True)

    contact_person = Column(String(100), nullable=True)
    contact_phone = Column(String(20), nullable=True)
    contact_email = Column(String(255), nullable=True)

    is_public = Column(Boolean, nullable=False, default=False)
    is_approved = Column(Boolean, nullable=False, default=False)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    approved_by = Column(String(255), nullable=True)
    is_verified = Column(Boolean, nullable=False, default=False)
    verified_at = Column(DateTime(timezone=True), nullable=True)
    verified_by = Column(String(255), nullable=True)
    resolved_at = Column(DateTime(timezone=True), nullable=True)
    resolved_by = Column(String(255), nullable=True)

    view_count = Column(Integer, nullable=False, default=0)
    share_count = Column(Integer, nullable=False, default=0)
    tip_count = Column(Integer, nullable=False, default=0)

    created_at = created_at_column()
    updated_at = updated_at_column()
