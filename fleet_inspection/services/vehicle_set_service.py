# fleet_inspection/services/vehicle_set_service.py
"""
Vehicle set composer: combines registry vehicles into tractor / trailer / dolly sets.

Checks run in two passes before anything is written:
  1. validate_vehicle_set_fields: name, type, and which slots the type requires or forbids
  2. validate_vehicle_set: each occupied slot points at an existing vehicle of the
     matching category that no *other* set already uses, and no vehicle fills two slots

The vehicle_set_slots table mirrors the slot columns inside the same transaction,
so a concurrent writer that slips past check 2 still fails on its UNIQUE(vehicle_id).
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from fleet_inspection.database import unit_of_work
from fleet_inspection.errors import ConflictError, NotFoundError, ValidationError
from fleet_inspection.models.inspection_request import InspectionRequest
from fleet_inspection.models.vehicle import Vehicle
from fleet_inspection.models.vehicle_set import (
    FORBIDDEN, LEGACY_SET_TYPE_LABELS, REQUIRED, SLOT_RULES,
    Slot, VehicleSet, VehicleSetSlot, VehicleSetType,
)
from fleet_inspection.schemas.vehicle_set import VehicleSetCreate, VehicleSetUpdate
from fleet_inspection.services.validation import apply_patch, clean_text, require_min_length
from fleet_inspection.services.vehicle_service import parse_category
from fleet_inspection.utils.logger import get_logger

logger = get_logger(__name__)

_SET_TYPES = ", ".join(t.value for t in VehicleSetType)


@dataclass(frozen=True)
class VehicleSetDraft:
    name: Optional[str]
    type: Optional[str]
    tractor_id: Optional[int] = None
    trailer_id: Optional[int] = None
    dolly_id: Optional[int] = None
    description: Optional[str] = None

    @classmethod
    def from_row(cls, vehicle_set: VehicleSet) -> "VehicleSetDraft":
        return cls(
            name=vehicle_set.name,
            type=vehicle_set.type,
            tractor_id=vehicle_set.tractor_id,
            trailer_id=vehicle_set.trailer_id,
            dolly_id=vehicle_set.dolly_id,
            description=vehicle_set.description,
        )

    def normalized(self) -> "VehicleSetDraft":
        return VehicleSetDraft(
            name=(self.name or "").strip(),
            type=self.type,
            tractor_id=self.tractor_id,
            trailer_id=self.trailer_id,
            dolly_id=self.dolly_id,
            description=clean_text(self.description),
        )

    def slot_vehicle_ids(self) -> dict:
        return {slot: getattr(self, slot.column) for slot in Slot if getattr(self, slot.column) is not None}


def parse_set_type(value) -> VehicleSetType:
    if isinstance(value, VehicleSetType):
        return value
    key = (value or "").strip().lower()
    if key in LEGACY_SET_TYPE_LABELS:
        return LEGACY_SET_TYPE_LABELS[key]
    try:
        return VehicleSetType(key)
    except ValueError:
        raise ValidationError(f"Invalid vehicle set type. Use one of: {_SET_TYPES}")


def validate_vehicle_set_fields(draft: VehicleSetDraft) -> VehicleSetType:
    """Name, type, and slot presence/absence per type. Returns the parsed type."""
    require_min_length(draft.name, 2, "Vehicle set name is required")
    set_type = parse_set_type(draft.type)

    for slot, rule in SLOT_RULES[set_type].items():
        vehicle_id = getattr(draft, slot.column)
        if rule == REQUIRED and vehicle_id is None:
            raise ValidationError(f"A {slot.value} is required for sets of type '{set_type.value}'")
        if rule == FORBIDDEN and vehicle_id is not None:
            raise ValidationError(f"Sets of type '{set_type.value}' must not have a {slot.value}")
    return set_type


def is_vehicle_in_use(db: Session, vehicle_id: int, exclude_set_id: Optional[int] = None) -> bool:
    """True when some set other than exclude_set_id holds this vehicle in any slot."""
    q = db.query(VehicleSetSlot.id).filter(VehicleSetSlot.vehicle_id == vehicle_id)
    if exclude_set_id is not None:
        q = q.filter(VehicleSetSlot.vehicle_set_id != exclude_set_id)
    return q.first() is not None


async def validate_vehicle_set(db: Session, draft: VehicleSetDraft, exclude_set_id: Optional[int] = None) -> None:
    slots = draft.slot_vehicle_ids()

    ids = list(slots.values())
    if len(set(ids)) != len(ids):
        raise ValidationError("The same vehicle cannot occupy two slots of one set")

    for slot, vehicle_id in slots.items():
        vehicle = db.get(Vehicle, vehicle_id)
        if not vehicle:
            raise NotFoundError(f"{slot.value.capitalize()} not found (vehicle id {vehicle_id})")
        if vehicle.category != slot.category.value:
            raise ValidationError(
                f"The vehicle selected as {slot.value} must be of category '{slot.category.value}'"
            )
        if is_vehicle_in_use(db, vehicle_id, exclude_set_id):
            logger.warning(f"[SETS] Vehicle {vehicle.plate} already in another set (slot={slot.value})")
            raise ConflictError(f"This {slot.value} is already part of another set")


def _sync_slots(db: Session, vehicle_set: VehicleSet) -> None:
    """Rewrite the membership rows of one set to match its slot columns."""
    db.query(VehicleSetSlot).filter(VehicleSetSlot.vehicle_set_id == vehicle_set.id).delete(
        synchronize_session=False
    )
    db.flush()
    for slot, vehicle_id in vehicle_set.slot_vehicle_ids().items():
        db.add(VehicleSetSlot(vehicle_set_id=vehicle_set.id, vehicle_id=vehicle_id, slot=slot.value))


async def get_vehicle_set(db: Session, set_id: int) -> VehicleSet:
    vehicle_set = db.get(VehicleSet, set_id)
    if not vehicle_set:
        raise NotFoundError("Vehicle set not found")
    return vehicle_set


async def get_vehicle_set_with_details(db: Session, set_id: int) -> VehicleSet:
    """Same row, with tractor / trailer / dolly records loaded for display."""
    vehicle_set = (
        db.query(VehicleSet)
        .options(joinedload(VehicleSet.tractor), joinedload(VehicleSet.trailer), joinedload(VehicleSet.dolly))
        .filter(VehicleSet.id == set_id)
        .first()
    )
    if not vehicle_set:
        raise NotFoundError("Vehicle set not found")
    return vehicle_set


async def create_vehicle_set(db: Session, data: VehicleSetCreate) -> VehicleSet:
    draft = VehicleSetDraft(**data.model_dump()).normalized()
    set_type = validate_vehicle_set_fields(draft)
    await validate_vehicle_set(db, draft)

    vehicle_set = VehicleSet(
        name=draft.name,
        type=set_type.value,
        tractor_id=draft.tractor_id,
        trailer_id=draft.trailer_id,
        dolly_id=draft.dolly_id,
        description=draft.description,
    )
    with unit_of_work(db):
        db.add(vehicle_set)
        db.flush()
        _sync_slots(db, vehicle_set)
    db.refresh(vehicle_set)
    logger.info(f"[SETS] Created set id={vehicle_set.id} {vehicle_set.name!r} type={vehicle_set.type}")
    return vehicle_set


async def update_vehicle_set(db: Session, set_id: int, patch: VehicleSetUpdate) -> VehicleSet:
    vehicle_set = await get_vehicle_set(db, set_id)
    draft = apply_patch(VehicleSetDraft.from_row(vehicle_set), patch).normalized()
    set_type = validate_vehicle_set_fields(draft)
    await validate_vehicle_set(db, draft, exclude_set_id=vehicle_set.id)

    with unit_of_work(db):
        vehicle_set.name = draft.name
        vehicle_set.type = set_type.value
        vehicle_set.tractor_id = draft.tractor_id
        vehicle_set.trailer_id = draft.trailer_id
        vehicle_set.dolly_id = draft.dolly_id
        vehicle_set.description = draft.description
        _sync_slots(db, vehicle_set)
    db.refresh(vehicle_set)
    logger.info(f"[SETS] Updated set id={vehicle_set.id} type={vehicle_set.type}")
    return vehicle_set


async def delete_vehicle_set(db: Session, set_id: int) -> None:
    vehicle_set = await get_vehicle_set(db, set_id)
    if db.query(InspectionRequest.id).filter(InspectionRequest.vehicle_set_id == vehicle_set.id).first():
        raise ConflictError("This vehicle set has inspection requests and cannot be deleted")

    with unit_of_work(db):
        db.query(VehicleSetSlot).filter(VehicleSetSlot.vehicle_set_id == vehicle_set.id).delete(
            synchronize_session=False
        )
        db.delete(vehicle_set)
    logger.info(f"[SETS] Deleted set id={set_id}")


async def search_vehicle_sets(db: Session, name: Optional[str] = None,
                              type: Optional[str] = None) -> list[VehicleSet]:
    q = db.query(VehicleSet).options(
        joinedload(VehicleSet.tractor), joinedload(VehicleSet.trailer), joinedload(VehicleSet.dolly)
    )
    if name:
        q = q.filter(VehicleSet.name.ilike(f"%{name.strip()}%"))
    if type:
        q = q.filter(VehicleSet.type == parse_set_type(type).value)
    return q.order_by(VehicleSet.created_at.desc(), VehicleSet.id.desc()).all()


async def get_available_vehicles_by_category(db: Session, category: str,
                                             exclude_set_id: Optional[int] = None) -> list[Vehicle]:
    """Vehicles of a category not held by any set other than exclude_set_id (picker lists)."""
    vehicle_category = parse_category(category)
    in_use = select(VehicleSetSlot.vehicle_id)
    if exclude_set_id is not None:
        in_use = in_use.where(VehicleSetSlot.vehicle_set_id != exclude_set_id)
    return (
        db.query(Vehicle)
        .filter(Vehicle.category == vehicle_category.value, Vehicle.id.not_in(in_use))
        .order_by(Vehicle.plate)
        .all()
    )
