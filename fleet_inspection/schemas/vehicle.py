from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class VehicleCreate(BaseModel):
    plate: str
    chassis: str
    model: str
    brand: str
    year: int
    type: str                 # legacy label, e.g. "Caminhão Baú"
    category: str             # tractor | trailer | dolly


class VehicleUpdate(BaseModel):
    """Patch: only the fields actually sent are applied."""
    plate: Optional[str] = None
    chassis: Optional[str] = None
    model: Optional[str] = None
    brand: Optional[str] = None
    year: Optional[int] = None
    type: Optional[str] = None
    category: Optional[str] = None


class VehicleBrief(BaseModel):
    id: int
    plate: str
    model: str
    brand: str
    category: str

    class Config:
        from_attributes = True


class VehicleOut(BaseModel):
    id: int
    plate: str
    chassis: str
    model: str
    brand: str
    year: int
    type: str
    category: str
    photo: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True
