"""ORM model for runner profiles (the registered missing-person subject)."""

from sqlalchemy import JSON, Boolean, Column, Date, DateTime, ForeignKey, Integer, String, Text

from runners_api.models.base import Base, created_at_column, updated_at_column

# Photo reminders recur on this cadence after every photo update.
PHOTO_REMINDER_MONTHS = 6

GENDERS = ("Male", "Female", "Other", "Prefer not to say")


class Runner(Base):
    """
    Runner profile owned by one user.

    Each photo upload resets next_photo_reminder to now + 6 months and clears
    photo_update_reminder_sent. is_active=False marks a soft-deleted profile.
    """

    __tablename__ = "runners"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False, index=True)
    date_of_birth = Column(Date, nullable=False)
    gender = Column(String(20), nullable=False)

    height = Column(String(20), nullable=True)
    weight = Column(String(20), nullable=True)
    eye_color = Column(String(50), nullable=True)
    hair_color = Column(String(50), nullable=True)
    identifying_marks = Column(Text, nullable=True)
    physical_description = Column(Text, nullable=True)

    medical_conditions = Column(Text, nullable=True)
    medications = Column(Text, nullable=True)
    allergies = Column(Text, nullable=True)
    emergency_instructions = Column(Text, nullable=True)
    preferred_language = Column(String(50), nullable=True)
    additional_notes = Column(Text, nullable=True)
    last_known_location = Column(String(500), nullable=True)

    profile_image_url = Column(String(1000), nullable=True)
    additional_image_urls = Column(JSON, nullable=False, default=list)
    last_photo_update = Column(DateTime(timezone=True), nullable=True)
    next_photo_reminder = Column(DateTime(timezone=True), nullable=True, index=True)
    photo_update_reminder_sent = Column(Boolean, nullable=False, default=False)
    photo_update_reminder_count = Column(Integer, nullable=False, default=0)

    is_profile_complete = Column(Boolean, nullable=False, default=False)
    is_verified = Column(Boolean, nullable=False, default=False)
    verified_at = Column(DateTime(timezone=True), nullable=True)
    verified_by = Column(String(255), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    created_at = created_at_column()
    updated_at = updated_at_column()
