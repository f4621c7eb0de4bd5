from pydantic import AliasChoices, BaseModel, Field
from datetime import datetime
from typing import Optional
from fleet_inspection.schemas.driver import DriverBrief
from fleet_inspection.schemas.vehicle import VehicleBrief
from fleet_inspection.schemas.vehicle_set import VehicleSetBrief


class InspectionRequestCreate(BaseModel):
    driver_id: int
    vehicle_set_id: Optional[int] = None
    truck_id: Optional[int] = Field(None, validation_alias=AliasChoices("truck_id", "vehicle_id"))


class InspectionSubmission(BaseModel):
    """What the driver fills in on the public form."""
    mileage: Optional[int] = None
    fuel_level: Optional[float] = None
    brake_condition: Optional[str] = None
    general_condition: Optional[str] = None
    observations: Optional[str] = None


class StatusUpdate(BaseModel):
    status: str               # approved | rejected


class InspectionRequestOut(BaseModel):
    id: int
    token: str
    status: str               # pending | approved | rejected
    state: str                # awaiting_submission | awaiting_review | approved | rejected
    driver_id: int
    vehicle_id: Optional[int]
    vehicle_set_id: Optional[int]
    driver: Optional[DriverBrief]
    vehicle: Optional[VehicleBrief]
    vehicle_set: Optional[VehicleSetBrief]
    inspection_date: Optional[datetime]
    mileage: Optional[int]
    fuel_level: Optional[float]
    brake_condition: Optional[str]
    general_condition: Optional[str]
    observations: Optional[str]
    photos: list[str] = []
    reviewed_at: Optional[datetime]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class InspectionRequestCreated(BaseModel):
    message: str
    inspection_url: str
    request: InspectionRequestOut
