from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

DAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

StockStatus = Literal["in_stock", "low_stock", "out_of_stock"]


class DayHours(BaseModel):
    open: str = Field(pattern=r"^\d{2}:\d{2}$")
    close: str = Field(pattern=r"^\d{2}:\d{2}$")
    closed: bool = False


def default_operating_hours() -> dict[str, DayHours]:
    hours = {day: DayHours(open="09:00", close="20:00") for day in DAYS[:5]}
    hours["saturday"] = DayHours(open="09:00", close="18:00")
    hours["sunday"] = DayHours(open="10:00", close="16:00")
    return hours


def default_services() -> list[str]:
    return ["prescription_medicines", "otc_medicines", "health_consultations"]


class ShopRegistration(BaseModel):
    shop_name: str = Field(min_length=1, max_length=255)
    license_number: str = Field(min_length=1, max_length=64)
    owner_name: str = Field(min_length=1, max_length=255)
    phone: str = Field(min_length=1, max_length=32)
    email: Optional[str] = Field(None, max_length=255)
    address: str = Field(min_length=1, max_length=255)
    city: Optional[str] = Field(None, max_length=128)
    state: Optional[str] = Field(None, max_length=128)
    postal_code: Optional[str] = Field(None, max_length=16)
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    operating_hours: dict[str, DayHours] = Field(default_factory=default_operating_hours)
    services: list[str] = Field(default_factory=default_services)

    @field_validator("operating_hours")
    @classmethod
    def validate_days(cls, v: dict[str, DayHours]) -> dict[str, DayHours]:
        unknown = set(v) - set(DAYS)
        if unknown:
            raise ValueError(f"Unknown days in operating_hours: {', '.join(sorted(unknown))}")
        return v


class ShopSchema(BaseModel):
    id: UUID
    shop_name: str
    owner_name: str
    license_number: str
    phone: str
    email: Optional[str]
    address: str
    city: Optional[str]
    state: Optional[str]
    postal_code: Optional[str]
    latitude: Optional[float]
    longitude: Optional[float]
    operating_hours: Optional[dict[str, DayHours]]
    services: Optional[list[str]]
    created_at: datetime
    distance_km: Optional[float] = None
    hours_today: str = "Hours not specified"
    directions_url: Optional[str] = None


class ShopListResponse(BaseModel):
    items: list[ShopSchema]
    radius_km: float


class InventoryItemCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    price: float = Field(ge=0)
    stock: int = Field(ge=0)
    category: Optional[str] = Field(None, max_length=64)
    expiry_date: Optional[date] = None


class InventoryItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)
    category: Optional[str] = Field(None, max_length=64)
    expiry_date: Optional[date] = None


class InventoryItemSchema(BaseModel):
    id: UUID
    shop_id: UUID
    name: str
    description: Optional[str]
    price: float
    stock: int
    category: Optional[str]
    expiry_date: Optional[date]
    stock_status: StockStatus


class InventoryListResponse(BaseModel):
    items: list[InventoryItemSchema]
    total: int


class MedicineSchema(BaseModel):
    id: UUID
    name: str
    description: Optional[str]
    price: float
    category: Optional[str]
    in_stock: bool
    stock_status: StockStatus
    shop_id: UUID
    pharmacy: str
    distance_km: Optional[float] = None
    distance_label: str = ""


class MedicineListResponse(BaseModel):
    items: list[MedicineSchema]
    total: int


__all__ = [
    "DAYS",
    "DayHours",
    "InventoryItemCreate",
    "InventoryItemSchema",
    "InventoryItemUpdate",
    "InventoryListResponse",
    "MedicineListResponse",
    "MedicineSchema",
    "ShopListResponse",
    "ShopRegistration",
    "ShopSchema",
    "StockStatus",
    "default_operating_hours",
    "default_services",
]
