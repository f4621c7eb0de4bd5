# fleet_inspection/models/vehicle.py
"""
Vehicles table (trucks, tractors, trailers, dollies).
Plate and chassis are unique across the registry.
The category tag decides which vehicle-set slot a vehicle may occupy.
"""

import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, CheckConstraint
from fleet_inspection.database import Base


class VehicleCategory(str, enum.Enum):
    TRACTOR = "tractor"     # cavalo mecânico
    TRAILER = "trailer"     # carreta
    DOLLY = "dolly"


# Labels still sent by older clients
LEGACY_CATEGORY_LABELS = {
    "cavalo": VehicleCategory.TRACTOR,
    "carreta": VehicleCategory.TRAILER,
}

_CATEGORY_VALUES = ", ".join(f"'{c.value}'" for c in VehicleCategory)


class Vehicle(Base):
    __tablename__ = "vehicles"
    __table_args__ = (
        CheckConstraint(f"category IN ({_CATEGORY_VALUES})", name="ck_vehicles_category"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    plate = Column(String(7), unique=True, nullable=False, index=True)
    chassis = Column(String(17), unique=True, nullable=False, index=True)
    model = Column(String(100), nullable=False)
    brand = Column(String(100), nullable=False)
    year = Column(Integer, nullable=False)
    type = Column(String(100), nullable=False)          # legacy free-text label, e.g. "Caminhão Baú"
    category = Column(String(20), nullable=False, index=True)
    photo = Column(String(500))
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Vehicle {self.plate} category={self.category}>"
