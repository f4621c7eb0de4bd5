# fleet_inspection/services/vehicle_service.py
"""
Vehicle registry: create, patch, delete and look up trucks, trailers and dollies.
Used by the vehicles router and by the vehicle-set and inspection-request services.
"""

import re
from dataclasses import dataclass
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from fleet_inspection.database import unit_of_work
from fleet_inspection.errors import ConflictError, NotFoundError, ValidationError
from fleet_inspection.models.inspection_request import InspectionRequest
from fleet_inspection.models.vehicle import LEGACY_CATEGORY_LABELS, Vehicle, VehicleCategory
from fleet_inspection.models.vehicle_set import VehicleSetSlot
from fleet_inspection.schemas.vehicle import VehicleCreate, VehicleUpdate
from fleet_inspection.services import photo_store
from fleet_inspection.services.photo_store import PhotoUpload
from fleet_inspection.services.validation import apply_patch, clean_text, require_min_length
from fleet_inspection.utils.logger import get_logger

logger = get_logger(__name__)

# Old format ABC1234 and Mercosul format ABC1D23
PLATE_PATTERN = re.compile(r"^[A-Z]{3}[0-9][0-9A-Z][0-9]{2}$")
CHASSIS_LENGTH = 17
MIN_YEAR = 1950


@dataclass(frozen=True)
class VehicleDraft:
    plate: Optional[str]
    chassis: Optional[str]
    model: Optional[str]
    brand: Optional[str]
    year: Optional[int]
    type: Optional[str]
    category: Optional[str]

    @classmethod
    def from_row(cls, vehicle: Vehicle) -> "VehicleDraft":
        return cls(vehicle.plate, vehicle.chassis, vehicle.model, vehicle.brand,
                   vehicle.year, vehicle.type, vehicle.category)

    def normalized(self) -> "VehicleDraft":
        return VehicleDraft(
            plate=(self.plate or "").strip().upper() or None,
            chassis=(self.chassis or "").strip().upper() or None,
            model=clean_text(self.model),
            brand=clean_text(self.brand),
            year=self.year,
            type=clean_text(self.type),
            category=self.category,
        )


def parse_category(value) -> VehicleCategory:
    if isinstance(value, VehicleCategory):
        return value
    key = (value or "").strip().lower()
    if key in LEGACY_CATEGORY_LABELS:
        return LEGACY_CATEGORY_LABELS[key]
    try:
        return VehicleCategory(key)
    except ValueError:
        raise ValidationError("Vehicle category is required (tractor, trailer or dolly)")


def validate_vehicle(draft: VehicleDraft) -> VehicleCategory:
    """Field rules for a vehicle. Returns the parsed category."""
    if not draft.plate or not PLATE_PATTERN.match(draft.plate):
        raise ValidationError("Invalid plate. Use the format ABC1234 or ABC1D23")
    if not draft.chassis or len(draft.chassis) != CHASSIS_LENGTH:
        raise ValidationError(f"Chassis number must have {CHASSIS_LENGTH} characters")
    require_min_length(draft.model, 2, "Model is required")
    require_min_length(draft.brand, 2, "Brand is required")
    max_year = date.today().year + 1
    if draft.year is None or draft.year < MIN_YEAR or draft.year > max_year:
        raise ValidationError(f"Invalid year, must be between {MIN_YEAR} and {max_year}")
    if not draft.type:
        raise ValidationError("Vehicle type is required")
    return parse_category(draft.category)


def lookup_vehicle_by_plate(db: Session, plate: str) -> Optional[Vehicle]:
    """Find a vehicle by plate number. Returns None if not found."""
    return db.query(Vehicle).filter(Vehicle.plate == plate.strip().upper()).first()


def lookup_vehicle_by_chassis(db: Session, chassis: str) -> Optional[Vehicle]:
    return db.query(Vehicle).filter(Vehicle.chassis == chassis.strip().upper()).first()


def _check_unique(db: Session, draft: VehicleDraft, vehicle_id: Optional[int] = None):
    by_plate = lookup_vehicle_by_plate(db, draft.plate)
    if by_plate and by_plate.id != vehicle_id:
        raise ConflictError(f"A vehicle with plate {draft.plate} is already registered")
    by_chassis = lookup_vehicle_by_chassis(db, draft.chassis)
    if by_chassis and by_chassis.id != vehicle_id:
        raise ConflictError("A vehicle with this chassis number is already registered")


def _in_vehicle_set(db: Session, vehicle_id: int) -> bool:
    return db.query(VehicleSetSlot.id).filter(VehicleSetSlot.vehicle_id == vehicle_id).first() is not None


async def get_vehicle(db: Session, vehicle_id: int) -> Vehicle:
    vehicle = db.get(Vehicle, vehicle_id)
    if not vehicle:
        raise NotFoundError("Vehicle not found")
    return vehicle


async def get_vehicle_by_plate(db: Session, plate: str) -> Vehicle:
    vehicle = lookup_vehicle_by_plate(db, plate)
    if not vehicle:
        raise NotFoundError("Vehicle not found")
    return vehicle


async def get_vehicle_by_chassis(db: Session, chassis: str) -> Vehicle:
    vehicle = lookup_vehicle_by_chassis(db, chassis)
    if not vehicle:
        raise NotFoundError("Vehicle not found")
    return vehicle


async def create_vehicle(db: Session, data: VehicleCreate) -> Vehicle:
    draft = VehicleDraft(**data.model_dump()).normalized()
    category = validate_vehicle(draft)
    _check_unique(db, draft)

    vehicle = Vehicle(
        plate=draft.plate,
        chassis=draft.chassis,
        model=draft.model,
        brand=draft.brand,
        year=draft.year,
        type=draft.type,
        category=category.value,
    )
    with unit_of_work(db):
        db.add(vehicle)
    db.refresh(vehicle)
    logger.info(f"[VEHICLES] Registered {vehicle.plate} ({vehicle.category}) id={vehicle.id}")
    return vehicle


async def update_vehicle(db: Session, vehicle_id: int, patch: VehicleUpdate) -> Vehicle:
    vehicle = await get_vehicle(db, vehicle_id)
    draft = apply_patch(VehicleDraft.from_row(vehicle), patch).normalized()
    category = validate_vehicle(draft)
    _check_unique(db, draft, vehicle_id=vehicle.id)
    if category.value != vehicle.category and _in_vehicle_set(db, vehicle.id):
        raise ConflictError(
            "This vehicle is part of a vehicle set; remove it from the set before changing its category"
        )

    with unit_of_work(db):
        vehicle.plate = draft.plate
        vehicle.chassis = draft.chassis
        vehicle.model = draft.model
        vehicle.brand = draft.brand
        vehicle.year = draft.year
        vehicle.type = draft.type
        vehicle.category = category.value
    db.refresh(vehicle)
    logger.info(f"[VEHICLES] Updated {vehicle.plate} id={vehicle.id}")
    return vehicle


async def delete_vehicle(db: Session, vehicle_id: int) -> None:
    """No cascade: fails with ConflictError while a vehicle set or inspection request references it."""
    vehicle = await get_vehicle(db, vehicle_id)
    if _in_vehicle_set(db, vehicle.id):
        raise ConflictError("This vehicle is part of a vehicle set; remove it from the set first")
    inspected = db.query(InspectionRequest.id).filter(InspectionRequest.vehicle_id == vehicle.id).first()
    if inspected:
        raise ConflictError("This vehicle has inspection requests and cannot be deleted")

    photo = vehicle.photo
    with unit_of_work(db):
        db.delete(vehicle)
    photo_store.remove_photo(photo)
    logger.info(f"[VEHICLES] Deleted vehicle id={vehicle_id}")


async def search_vehicles(
    db: Session,
    plate: Optional[str] = None,
    model: Optional[str] = None,
    brand: Optional[str] = None,
    type: Optional[str] = None,
    category: Optional[str] = None,
    year: Optional[int] = None,
) -> list[Vehicle]:
    q = db.query(Vehicle)
    if plate:
        q = q.filter(Vehicle.plate.ilike(f"%{plate.strip()}%"))
    if model:
        q = q.filter(Vehicle.model.ilike(f"%{model.strip()}%"))
    if brand:
        q = q.filter(Vehicle.brand.ilike(f"%{brand.strip()}%"))
    if type:
        q = q.filter(Vehicle.type == type)
    if category:
        q = q.filter(Vehicle.category == parse_category(category).value)
    if year:
        q = q.filter(Vehicle.year == year)
    return q.order_by(Vehicle.created_at.desc(), Vehicle.id.desc()).all()


async def set_vehicle_photo(db: Session, vehicle_id: int, photo: PhotoUpload) -> Vehicle:
    vehicle = await get_vehicle(db, vehicle_id)
    photo_store.validate_photos([photo], max_count=1)
    url = await photo_store.save_photo("vehicles", photo, naming_hint=vehicle.plate)
    previous = vehicle.photo
    try:
        with unit_of_work(db):
            vehicle.photo = url
    except Exception:
        photo_store.remove_photo(url)
        raise
    photo_store.remove_photo(previous)
    db.refresh(vehicle)
    return vehicle
