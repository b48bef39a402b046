from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

UserType = Literal["buyer", "seller"]


def _lower_email(value: str) -> str:
    # Lookups compare against the lowercased address.
    return value.lower()


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    name: str = Field(min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=32)
    address: Optional[str] = Field(None, max_length=255)
    user_type: UserType = "buyer"
    store_name: Optional[str] = Field(None, max_length=255)
    license_number: Optional[str] = Field(None, max_length=64)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return _lower_email(v)

    @model_validator(mode="after")
    def require_shop_fields(self) -> "RegisterRequest":
        if self.user_type == "seller" and not (self.store_name and self.license_number and self.phone):
            raise ValueError("Sellers must provide store_name, license_number and phone")
        return self


class LoginRequest(BaseModel):
    email: EmailStr
    password: str
    user_type: UserType = "buyer"

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return _lower_email(v)


class OtpRequest(BaseModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return _lower_email(v)


class OtpVerifyRequest(OtpRequest):
    code: str = Field(pattern=r"^\d{4,10}$")


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_type: UserType


class MeResponse(BaseModel):
    id: UUID
    email: str
    user_type: UserType


class ProfileSchema(BaseModel):
    id: UUID
    user_id: UUID
    user_type: UserType
    display_name: Optional[str]
    phone: Optional[str]
    address: Optional[str]
    city: Optional[str]
    state: Optional[str]
    postal_code: Optional[str]
    latitude: Optional[float]
    longitude: Optional[float]
    avatar_url: Optional[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProfileUpdate(BaseModel):
    display_name: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=32)
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=128)
    state: Optional[str] = Field(None, max_length=128)
    postal_code: Optional[str] = Field(None, max_length=16)
    avatar_url: Optional[str] = Field(None, max_length=512)


class LocationUpdate(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=128)
    state: Optional[str] = Field(None, max_length=128)
    postal_code: Optional[str] = Field(None, max_length=16)


__all__ = [
    "UserType",
    "RegisterRequest",
    "LoginRequest",
    "OtpRequest",
    "OtpVerifyRequest",
    "TokenResponse",
    "MeResponse",
    "ProfileSchema",
    "ProfileUpdate",
    "LocationUpdate",
]
