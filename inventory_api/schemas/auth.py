from pydantic import BaseModel, Field, field_validator


class UserCredentials(BaseModel):
    """Login and password sent to the register and login endpoints."""
    login: str = Field(..., min_length=5, max_length=50, description="Username")
    password: str = Field(..., min_length=8, max_length=255, description="Plain-text password")

    @field_validator("login", mode="before")
    @classmethod
    def strip_login(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value


class UserRegister(UserCredentials):
    pass


class UserLogin(UserCredentials):
    pass


class AuthResponse(BaseModel):
    login: str
