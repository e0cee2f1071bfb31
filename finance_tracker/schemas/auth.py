"""Pydantic schemas for authentication endpoints."""

from pydantic import AliasChoices, BaseModel, Field, field_validator

from finance_tracker.services.auth import PASSWORD_TOO_LONG, password_too_long


def _check_password(value: str) -> str:
    if password_too_long(value):
        raise ValueError(PASSWORD_TOO_LONG)
    return value


class LoginRequest(BaseModel):
    username: str
    password: str


class RegisterRequest(BaseModel):
    username: str = Field(min_length=1, max_length=64)
    email: str
    mobile: str
    password: str = Field(min_length=1)

    @field_validator("password")
    @classmethod
    def check_password_bytes(cls, value: str) -> str:
        return _check_password(value)


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    mobile: str
    is_verified: bool

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    message: str
    username: str
    token: str


class SessionStatus(BaseModel):
    logged_in: bool = Field(alias="loggedIn")
    username: str | None = None

    model_config = {"populate_by_name": True}


class MessageResponse(BaseModel):
    message: str


class ForgotPasswordRequest(BaseModel):
    identifier: str


class VerifyOtpRequest(BaseModel):
    identifier: str
    otp_code: str = Field(validation_alias=AliasChoices("otpCode", "otp_code"))


class VerifyOtpResponse(BaseModel):
    message: str
    reset_token: str = Field(alias="resetToken")
    expires_in: int = Field(alias="expiresIn")

    model_config = {"populate_by_name": True}


class ResetPasswordRequest(BaseModel):
    password: str = Field(min_length=1)
    reset_token: str | None = Field(default=None, validation_alias=AliasChoices("resetToken", "reset_token"))

    @field_validator("password")
    @classmethod
    def check_password_bytes(cls, value: str) -> str:
        return _check_password(value)
