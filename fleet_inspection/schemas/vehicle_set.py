from pydantic import AliasChoices, BaseModel, Field
from datetime import datetime
from typing import Optional
from fleet_inspection.schemas.vehicle import VehicleBrief


class VehicleSetCreate(BaseModel):
    name: str
    type: str                 # tractor | trailer | combined | bitrain | dolly_trailer
    tractor_id: Optional[int] = Field(None, validation_alias=AliasChoices("tractor_id", "cavalo_id"))
    trailer_id: Optional[int] = Field(None, validation_alias=AliasChoices("trailer_id", "carreta_id"))
    dolly_id: Optional[int] = None
    description: Optional[str] = None


class VehicleSetUpdate(BaseModel):
    """Patch: send a slot as null to clear it."""
    name: Optional[str] = None
    type: Optional[str] = None
    tractor_id: Optional[int] = Field(None, validation_alias=AliasChoices("tractor_id", "cavalo_id"))
    trailer_id: Optional[int] = Field(None, validation_alias=AliasChoices("trailer_id", "carreta_id"))
    dolly_id: Optional[int] = None
    description: Optional[str] = None


class VehicleSetBrief(BaseModel):
    id: int
    name: str
    type: str
    tractor: Optional[VehicleBrief]
    trailer: Optional[VehicleBrief]
    dolly: Optional[VehicleBrief]

    class Config:
        from_attributes = True


class VehicleSetOut(BaseModel):
    id: int
    name: str
    type: str
    type_description: str
    tractor_id: Optional[int]
    trailer_id: Optional[int]
    dolly_id: Optional[int]
    description: Optional[str]
    tractor: Optional[VehicleBrief] = None
    trailer: Optional[VehicleBrief] = None
    dolly: Optional[VehicleBrief] = None
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True
