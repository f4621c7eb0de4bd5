from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class DriverCreate(BaseModel):
    name: str
    national_id: str          # 11 digits; punctuation is stripped


class DriverUpdate(BaseModel):
    name: Optional[str] = None
    national_id: Optional[str] = None


class DriverBrief(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class DriverOut(BaseModel):
    id: int
    name: str
    national_id: str
    photo: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True
