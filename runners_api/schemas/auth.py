"""Request/response schemas for auth and account endpoints."""

from pydantic import EmailStr, Field, field_validator, model_validator

from runners_api.core.security import PASSWORD_MAX_LEN, password_policy_errors
from runners_api.models.user import ALLOWED_ROLES, ROLE_USER
from runners_api.schemas.common import CamelModel, UtcDateTime, clean_name, clean_phone, one_of


def _validate_password(value: str) -> str:
    missing = password_policy_errors(value)
    if missing:
        raise ValueError("Password must contain " + ", ".join(missing))
    return value


class ProfileFields(CamelModel):
    """Optional contact/profile fields shared by registration and profile updates."""

    phone_number: str | None = Field(default=None, max_length=20)
    address: str | None = Field(default=None, max_length=500)
    city: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=50)
    zip_code: str | None = Field(default=None, max_length=20)
    organization: str | None = Field(default=None, max_length=200)
    title: str | None = Field(default=None, max_length=100)
    credentials: str | None = Field(default=None, max_length=500)
    specialization: str | None = Field(default=None, max_length=500)
    years_of_experience: str | None = Field(default=None, max_length=50)
    profile_image_url: str | None = Field(default=None, max_length=500)
    emergency_contact_name: str | None = Field(default=None, max_length=100)
    emergency_contact_phone: str | None = Field(default=None, max_length=20)
    emergency_contact_relationship: str | None = Field(default=None, max_length=50)

    @field_validator("phone_number", "emergency_contact_phone")
    @classmethod
    def validate_phone(cls, v: str | None) -> str | None:
        return clean_phone(v)


class RegisterRequest(ProfileFields):
    """Self-service registration. Privileged roles need an admin caller unless configured otherwise."""

    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., max_length=PASSWORD_MAX_LEN)
    confirm_password: str | None = None
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    role: str = ROLE_USER

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _validate_password(v)

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return clean_name(v)

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: str) -> str:
        return one_of(v, ALLOWED_ROLES)

    @model_validator(mode="after")
    def passwords_match(self) -> "RegisterRequest":
        if self.confirm_password is not None and self.confirm_password != self.password:
            raise ValueError("Passwords do not match")
        return self


class LoginRequest(CamelModel):
    """Credentials for login."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class UserResponse(CamelModel):
    """Public view of a user. Never carries the password hash or one-time tokens."""

    id: int
    email: str
    first_name: str
    last_name: str
    full_name: str
    role: str
    is_active: bool
    phone_number: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    organization: str | None = None
    title: str | None = None
    credentials: str | None = None
    specialization: str | None = None
    years_of_experience: str | None = None
    profile_image_url: str | None = None
    emergency_contact_name: str | None = None
    emergency_contact_phone: str | None = None
    emergency_contact_relationship: str | None = None
    is_email_verified: bool
    email_verified_at: UtcDateTime | None = None
    is_phone_verified: bool
    last_login_at: UtcDateTime | None = None
    created_at: UtcDateTime
    updated_at: UtcDateTime | None = None


class AuthResponse(CamelModel):
    """Bearer token plus the authenticated user."""

    token: str
    token_type: str = "Bearer"
    expires_at: UtcDateTime
    user: UserResponse


class ProfileUpdateRequest(ProfileFields):
    """Partial profile update; omitted, null or blank fields leave the stored value untouched."""

    first_name: str | None = Field(default=None, max_length=50)
    last_name: str | None = Field(default=None, max_length=50)

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return clean_name(v)


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)
    new_password: str = Field(..., max_length=PASSWORD_MAX_LEN)
    confirm_new_password: str

    @field_validator("new_password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _validate_password(v)

    @model_validator(mode="after")
    def passwords_match(self) -> "ChangePasswordRequest":
        if self.confirm_new_password != self.new_password:
            raise ValueError("Passwords do not match")
        return self


class ForgotPasswordRequest(CamelModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class ResetPasswordRequest(CamelModel):
    token: str = Field(..., min_length=1, max_length=255)
    new_password: str = Field(..., max_length=PASSWORD_MAX_LEN)
    confirm_new_password: str

    @field_validator("new_password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _validate_password(v)

    @model_validator(mode="after")
    def passwords_match(self) -> "ResetPasswordRequest":
        if self.confirm_new_password != self.new_password:
            raise ValueError("Passwords do not match")
        return self


class VerifyEmailRequest(CamelModel):
    token: str = Field(..., min_length=1, max_length=255)
