# fleet_inspection/models/inspection_request.py
"""
Inspection requests and their photos.

A request targets exactly one of: a single vehicle (vehicle_id) or a vehicle set
(vehicle_set_id). The token is the public capability key for the driver form.

Lifecycle (column `state`):
    awaiting_submission --submit--> awaiting_review --approve--> approved
                                                    --reject---> rejected
The public `status` collapses both awaiting states into "pending".
"""

import enum
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, DateTime, Text, Float, ForeignKey, CheckConstraint,
)
from sqlalchemy.orm import relationship
from fleet_inspection.database import Base


class InspectionState(str, enum.Enum):
    AWAITING_SUBMISSION = "awaiting_submission"
    AWAITING_REVIEW = "awaiting_review"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def status(self) -> "InspectionStatus":
        if self in (InspectionState.AWAITING_SUBMISSION, InspectionState.AWAITING_REVIEW):
            return InspectionStatus.PENDING
        return InspectionStatus(self.value)

    @property
    def is_terminal(self) -> bool:
        return self in (InspectionState.APPROVED, InspectionState.REJECTED)


class InspectionStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


_STATE_VALUES = ", ".join(f"'{s.value}'" for s in InspectionState)


class InspectionRequest(Base):
    __tablename__ = "inspection_requests"
    __table_args__ = (
        CheckConstraint(f"state IN ({_STATE_VALUES})", name="ck_inspection_requests_state"),
        CheckConstraint(
            "(vehicle_id IS NULL AND vehicle_set_id IS NOT NULL) OR "
            "(vehicle_id IS NOT NULL AND vehicle_set_id IS NULL)",
            name="ck_inspection_requests_single_target",
        ),
        CheckConstraint("fuel_level IS NULL OR (fuel_level >= 0 AND fuel_level <= 100)",
                        name="ck_inspection_requests_fuel_level"),
        CheckConstraint("mileage IS NULL OR mileage > 0", name="ck_inspection_requests_mileage"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), index=True)          # legacy single-truck path
    vehicle_set_id = Column(Integer, ForeignKey("vehicle_sets.id"), index=True)
    driver_id = Column(Integer, ForeignKey("drivers.id"), nullable=False, index=True)
    token = Column(String(64), unique=True, nullable=False, index=True)
    state = Column(String(30), nullable=False, default=InspectionState.AWAITING_SUBMISSION.value, index=True)

    # Filled by the driver on submission
    inspection_date = Column(DateTime)
    mileage = Column(Integer)
    fuel_level = Column(Float)
    brake_condition = Column(String(50))
    general_condition = Column(String(50))
    observations = Column(Text)

    reviewed_at = Column(DateTime)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    vehicle = relationship("Vehicle", lazy="joined")
    vehicle_set = relationship("VehicleSet", lazy="joined")
    driver = relationship("Driver", lazy="joined")
    photo_rows = relationship(
        "InspectionPhoto",
        order_by="InspectionPhoto.id",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def status(self) -> str:
        return InspectionState(self.state).status.value

    @property
    def photos(self) -> list:
        return [row.photo_path for row in self.photo_rows]

    def __repr__(self):
        return f"<InspectionRequest {self.id} state={self.state}>"


class InspectionPhoto(Base):
    __tablename__ = "inspection_photos"

    id = Column(Integer, primary_key=True, autoincrement=True)
    inspection_id = Column(Integer, ForeignKey("inspection_requests.id", ondelete="CASCADE"),
                           nullable=False, index=True)
    photo_path = Column(String(500), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        return f"<InspectionPhoto {self.id} request={self.inspection_id}>"
