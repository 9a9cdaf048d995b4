from pydantic import BaseModel, EmailStr, Field, field_validator
from zxcvbn import zxcvbn

from src.portal.models.enums import Role, parse_role
from src.portal.schemas.profile import ProfileRead

# Minimum zxcvbn score (0-4 scale): 3 = "safely unguessable"
MIN_PASSWORD_SCORE = 3

# Roles that can be chosen at self-registration; the rest are granted by an administrator
SELF_REGISTRATION_ROLES = frozenset({Role.HOME_OWNER, Role.ARTISAN, Role.TENANT})


def check_password_strength(v: str) -> str:
    """Validate password strength using zxcvbn entropy estimation."""
    result = zxcvbn(v)
    score = result["score"]

    if score < MIN_PASSWORD_SCORE:
        feedback = result.get("feedback", {})
        warning = feedback.get("warning", "")
        suggestions = feedback.get("suggestions", [])

        if warning:
            raise ValueError(f"Weak password: {warning}")
        elif suggestions:
            raise ValueError(f"Weak password: {suggestions[0]}")
        else:
            raise ValueError("Password is too weak. Use a longer password with a mix of characters.")

    return v


class SignInRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class IdentityRead(BaseModel):
    id: str
    email: str
    display_name: str
    email_verified: bool


class SignInResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    identity: IdentityRead
    profile: ProfileRead | None = None


class SignUpRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=100)
    display_name: str = Field(min_length=1, max_length=100)
    role: Role = Role.HOME_OWNER
    phone: str | None = Field(None, max_length=50)
    location: str | None = Field(None, max_length=255)

    @field_validator("role", mode="before")
    @classmethod
    def normalize_role(cls, v: object) -> Role:
        if isinstance(v, Role | str):
            return parse_role(v)
        raise ValueError("Role must be a string")

    @field_validator("role")
    @classmethod
    def validate_self_registration_role(cls, v: Role) -> Role:
        if v not in SELF_REGISTRATION_ROLES:
            raise ValueError(f"Role '{v.value}' cannot be chosen at sign-up")
        return v

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        return check_password_strength(v)


class CredentialResetConfirm(BaseModel):
    token: str = Field(min_length=1)
    new_password: str = Field(min_length=8, max_length=100)

    @field_validator("new_password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        return check_password_strength(v)
