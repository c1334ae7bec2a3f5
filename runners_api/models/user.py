"""ORM model for user accounts (auth, profile and RBAC)."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from runners_api.models.base import Base, created_at_column, updated_at_column

ROLE_USER = "user"
ROLE_PARENT = "parent"
ROLE_CAREGIVER = "caregiver"
ROLE_THERAPIST = "therapist"
ROLE_ADOPTIVE_PARENT = "adoptiveparent"
ROLE_STAFF = "staff"
ROLE_ADMIN = "admin"

ALLOWED_ROLES = (
    ROLE_USER,
    ROLE_PARENT,
    ROLE_CAREGIVER,
    ROLE_THERAPIST,
    ROLE_ADOPTIVE_PARENT,
    ROLE_STAFF,
    ROLE_ADMIN,
)
# Privileged roles bypass per-resource ownership checks.
PRIVILEGED_ROLES = frozenset({ROLE_ADMIN, ROLE_STAFF})


class User(Base):
    """
    Registered account.

    role is one of ALLOWED_ROLES (lower-case). Accounts with related rows are
    deactivated instead of deleted.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    role = Column(String(32), nullable=False, default=ROLE_USER, index=True)
    is_active = Column(Boolean, nullable=False, default=True)

    phone_number = Column(String(20), nullable=True)
    address = Column(String(500), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(50), nullable=True)
    zip_code = Column(String(20), nullable=True)

    organization = Column(String(200), nullable=True)
    title = Column(String(100), nullable=True)
    credentials = Column(String(500), nullable=True)
    specialization = Column(String(500), nullable=True)
    years_of_experience = Column(String(50), nullable=True)
    profile_image_url = Column(String(500), nullable=True)

    emergency_contact_name = Column(String(100), nullable=True)
    emergency_contact_phone = Column(String(20), nullable=True)
    emergency_contact_relationship = Column(String(50), nullable=True)

    is_email_verified = Column(Boolean, nullable=False, default=False)
    email_verified_at = Column(DateTime(timezone=True), nullable=True)
    email_verification_token = Column(String(255), nullable=True, index=True)
    is_phone_verified = Column(Boolean, nullable=False, default=False)
    phone_verified_at = Column(DateTime(timezone=True), nullable=True)
    password_reset_token = Column(String(255), nullable=True, index=True)
    password_reset_expires_at = Column(DateTime(timezone=True), nullable=True)

    failed_login_attempts = Column(Integer, nullable=False, default=0)
    locked_until = Column(DateTime(timezone=True), nullable=True)
    last_login_at = Column(DateTime(timezone=True), nullable=True)

    created_at = created_at_column()
    updated_at = updated_at_column()

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_privileged(self) -> bool:
        return self.role in PRIVILEGED_ROLES
