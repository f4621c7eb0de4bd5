# fleet_inspection/models/vehicle_set.py
"""
Vehicle sets: named combinations of 1 to 3 registry vehicles.

vehicle_sets        one row per set, with a tractor/trailer/dolly slot column each
vehicle_set_slots   one row per occupied slot; vehicle_id is UNIQUE here, which is
                    what stops a vehicle from belonging to two sets at the storage level.
                    Kept in sync with the slot columns by vehicle_set_service.

Slot rules per set type:

    type           tractor    trailer    dolly
    tractor        required   forbidden  forbidden
    trailer        forbidden  required   forbidden
    combined       required   required   forbidden
    bitrain        required   required   required
    dolly_trailer  forbidden  required   required
"""

import enum
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, DateTime, Text, ForeignKey, CheckConstraint, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from fleet_inspection.database import Base
from fleet_inspection.models.vehicle import VehicleCategory


class VehicleSetType(str, enum.Enum):
    TRACTOR = "tractor"                 # solo tractor (cavalo)
    TRAILER = "trailer"                 # solo trailer (carreta)
    COMBINED = "combined"               # tractor + trailer (conjugado)
    BITRAIN = "bitrain"                 # tractor + trailer + dolly (bitrem)
    DOLLY_TRAILER = "dolly_trailer"     # dolly + trailer (dolly_semi_reboque)

    @property
    def description(self) -> str:
        return {
            VehicleSetType.TRACTOR: "Tractor only",
            VehicleSetType.TRAILER: "Trailer only",
            VehicleSetType.COMBINED: "Tractor + trailer",
            VehicleSetType.BITRAIN: "Bitrain (tractor + trailer + dolly)",
            VehicleSetType.DOLLY_TRAILER: "Dolly + trailer",
        }[self]


LEGACY_SET_TYPE_LABELS = {
    "cavalo": VehicleSetType.TRACTOR,
    "carreta": VehicleSetType.TRAILER,
    "conjugado": VehicleSetType.COMBINED,
    "bitrem": VehicleSetType.BITRAIN,
    "dolly_semi_reboque": VehicleSetType.DOLLY_TRAILER,
}


class Slot(str, enum.Enum):
    TRACTOR = "tractor"
    TRAILER = "trailer"
    DOLLY = "dolly"

    @property
    def column(self) -> str:
        return f"{self.value}_id"

    @property
    def category(self) -> VehicleCategory:
        return VehicleCategory(self.value)


REQUIRED = "required"
FORBIDDEN = "forbidden"

SLOT_RULES = {
    VehicleSetType.TRACTOR:       {Slot.TRACTOR: REQUIRED,  Slot.TRAILER: FORBIDDEN, Slot.DOLLY: FORBIDDEN},
    VehicleSetType.TRAILER:       {Slot.TRACTOR: FORBIDDEN, Slot.TRAILER: REQUIRED,  Slot.DOLLY: FORBIDDEN},
    VehicleSetType.COMBINED:      {Slot.TRACTOR: REQUIRED,  Slot.TRAILER: REQUIRED,  Slot.DOLLY: FORBIDDEN},
    VehicleSetType.BITRAIN:       {Slot.TRACTOR: REQUIRED,  Slot.TRAILER: REQUIRED,  Slot.DOLLY: REQUIRED},
    VehicleSetType.DOLLY_TRAILER: {Slot.TRACTOR: FORBIDDEN, Slot.TRAILER: REQUIRED,  Slot.DOLLY: REQUIRED},
}

_TYPE_VALUES = ", ".join(f"'{t.value}'" for t in VehicleSetType)
_SLOT_VALUES = ", ".join(f"'{s.value}'" for s in Slot)


class VehicleSet(Base):
    __tablename__ = "vehicle_sets"
    __table_args__ = (
        CheckConstraint(f"type IN ({_TYPE_VALUES})", name="ck_vehicle_sets_type"),
        CheckConstraint("tractor_id IS NULL OR trailer_id IS NULL OR tractor_id != trailer_id",
                        name="ck_vehicle_sets_tractor_trailer_distinct"),
        CheckConstraint("tractor_id IS NULL OR dolly_id IS NULL OR tractor_id != dolly_id",
                        name="ck_vehicle_sets_tractor_dolly_distinct"),
        CheckConstraint("trailer_id IS NULL OR dolly_id IS NULL OR trailer_id != dolly_id",
                        name="ck_vehicle_sets_trailer_dolly_distinct"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False, index=True)
    type = Column(String(20), nullable=False, index=True)
    tractor_id = Column(Integer, ForeignKey("vehicles.id"), unique=True)
    trailer_id = Column(Integer, ForeignKey("vehicles.id"), unique=True)
    dolly_id = Column(Integer, ForeignKey("vehicles.id"), unique=True)
    description = Column(Text)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    tractor = relationship("Vehicle", foreign_keys=[tractor_id])
    trailer = relationship("Vehicle", foreign_keys=[trailer_id])
    dolly = relationship("Vehicle", foreign_keys=[dolly_id])

    @property
    def type_description(self) -> str:
        return VehicleSetType(self.type).description

    def slot_vehicle_ids(self) -> dict:
        """{Slot: vehicle_id} for the occupied slots only."""
        return {slot: getattr(self, slot.column) for slot in Slot if getattr(self, slot.column)}

    def __repr__(self):
        return f"<VehicleSet {self.id} {self.name!r} type={self.type}>"


class VehicleSetSlot(Base):
    __tablename__ = "vehicle_set_slots"
    __table_args__ = (
        UniqueConstraint("vehicle_set_id", "slot", name="uq_vehicle_set_slots_set_slot"),
        CheckConstraint(f"slot IN ({_SLOT_VALUES})", name="ck_vehicle_set_slots_slot"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_set_id = Column(Integer, ForeignKey("vehicle_sets.id", ondelete="CASCADE"), nullable=False, index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), unique=True, nullable=False)
    slot = Column(String(20), nullable=False)

    def __repr__(self):
        return f"<VehicleSetSlot set={self.vehicle_set_id} {self.slot}={self.vehicle_id}>"
