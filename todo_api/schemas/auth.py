from pydantic import BaseModel, EmailStr, field_validator


# ─── Helpers ──────────────────────────────────────────────────────────────────
# Width of users.name.
NAME_MAX_LENGTH = 150


def validate_password_length(v: str) -> str:
    if len(v) < 6:
        raise ValueError("Password must be at least 6 characters")
    return v


# ─── Request Schemas ──────────────────────────────────────────────────────────
class RegisterRequest(BaseModel):
    name:     str
    email:    EmailStr
    password: str

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str) -> str:
        return validate_password_length(v)

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name cannot be empty")
        if len(v.strip()) > NAME_MAX_LENGTH:
            raise ValueError(f"Name must be at most {NAME_MAX_LENGTH} characters")
        return v.strip()


class LoginRequest(BaseModel):
    email:    EmailStr
    password: str


class GoogleSignInRequest(BaseModel):
    idToken: str

    @field_validator("idToken")
    @classmethod
    def id_token_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("idToken cannot be empty")
        return v.strip()


class RefreshTokenRequest(BaseModel):
    # Both may be missing or empty; the renewal check rejects them uniformly.
    token:        str | None = None
    refreshToken: str | None = None


# ─── Response Schemas ─────────────────────────────────────────────────────────
class UserSummary(BaseModel):
    id:    int
    name:  str
    email: str

    model_config = {"from_attributes": True}


class TokenPair(UserSummary):
    token:        str
    refreshToken: str
