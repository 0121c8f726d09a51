from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, field_validator

PASSWORD_MIN_LENGTH = 8


class UserCreate(BaseModel):
    name: str
    email: EmailStr
    password: str
    # сверка с password делается в validation.validate_registration,
    # чтобы ошибка попала на поле password
    password_confirmation: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("The name field is required.")
        if len(value) > 255:
            raise ValueError("The name field must not be greater than 255 characters.")
        return value

    @field_validator("password")
    @classmethod
    def password_min_length(cls, value: str) -> str:
        if len(value) < PASSWORD_MIN_LENGTH:
            raise ValueError(
                f"The password field must be at least {PASSWORD_MIN_LENGTH} characters."
            )
        return value


class UserLogin(BaseModel):
    # формат email здесь не проверяем: неверный email — это 401, а не 422
    email: str
    password: str

    @field_validator("email", "password")
    @classmethod
    def present(cls, value: str, info) -> str:
        if not value:
            raise ValueError(f"The {info.field_name} field is required.")
        return value


class UserOut(BaseModel):
    id: int
    name: str
    email: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TokenOut(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserOut


class RegisterOut(TokenOut):
    message: str = "User successfully registered"


class MessageOut(BaseModel):
    message: str
