# fleet_inspection/services/inspection_request_service.py
"""
Inspection request workflow.

Staff open a request for a driver and either one vehicle or one vehicle set.
The driver receives a link carrying a random token (the only credential of the
public form), fills in the inspection once, and staff approve or reject it:

    awaiting_submission --submit--> awaiting_review --approve/reject--> approved | rejected

State moves are conditional UPDATEs (WHERE state = <expected>), so two
concurrent submissions or reviews of the same request cannot both succeed.
The submission row update and the photo rows commit together or not at all.
"""

import math
import secrets
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence, Union

from sqlalchemy import or_
from sqlalchemy.orm import Session, aliased, joinedload

from fleet_inspection.config import settings
from fleet_inspection.database import unit_of_work
from fleet_inspection.errors import ConflictError, NotFoundError, ValidationError
from fleet_inspection.models.driver import Driver
from fleet_inspection.models.inspection_request import (
    InspectionPhoto, InspectionRequest, InspectionState, InspectionStatus,
)
from fleet_inspection.models.vehicle import Vehicle
from fleet_inspection.models.vehicle_set import VehicleSet
from fleet_inspection.schemas.inspection_request import InspectionRequestCreate, InspectionSubmission
from fleet_inspection.services import driver_service, photo_store, vehicle_service, vehicle_set_service
from fleet_inspection.services.photo_store import PhotoUpload
from fleet_inspection.services.validation import clean_text
from fleet_inspection.utils.logger import get_logger

logger = get_logger(__name__)

TOKEN_BYTES = 32   # 64 hex characters


@dataclass(frozen=True)
class SingleVehicle:
    vehicle_id: int


@dataclass(frozen=True)
class VehicleSetTarget:
    vehicle_set_id: int


VehicleTarget = Union[SingleVehicle, VehicleSetTarget]


def target_from_ids(vehicle_id: Optional[int] = None, vehicle_set_id: Optional[int] = None) -> VehicleTarget:
    """Exactly one of the two ids must be given."""
    if vehicle_id is None and vehicle_set_id is None:
        raise ValidationError("A vehicle or a vehicle set is required")
    if vehicle_id is not None and vehicle_set_id is not None:
        raise ValidationError("Choose either a vehicle or a vehicle set, not both")
    if vehicle_set_id is not None:
        return VehicleSetTarget(vehicle_set_id)
    return SingleVehicle(vehicle_id)


def generate_token() -> str:
    return secrets.token_hex(TOKEN_BYTES)


def inspection_url(request: InspectionRequest) -> str:
    return f"{settings.PUBLIC_FORM_URL.rstrip('/')}/{request.token}"


def resolve_display_plate(request: InspectionRequest) -> Optional[str]:
    """Plate used to name the photo folder: tractor first, then trailer, then dolly."""
    if request.vehicle_set is not None:
        for vehicle in (request.vehicle_set.tractor, request.vehicle_set.trailer, request.vehicle_set.dolly):
            if vehicle is not None:
                return vehicle.plate
    if request.vehicle is not None:
        return request.vehicle.plate
    return None


def _with_details(q):
    return q.options(
        joinedload(InspectionRequest.vehicle_set).joinedload(VehicleSet.tractor),
        joinedload(InspectionRequest.vehicle_set).joinedload(VehicleSet.trailer),
        joinedload(InspectionRequest.vehicle_set).joinedload(VehicleSet.dolly),
    )


async def create_request(db: Session, data: InspectionRequestCreate) -> InspectionRequest:
    target = target_from_ids(vehicle_id=data.truck_id, vehicle_set_id=data.vehicle_set_id)
    await driver_service.get_driver(db, data.driver_id)
    if isinstance(target, VehicleSetTarget):
        await vehicle_set_service.get_vehicle_set(db, target.vehicle_set_id)
    else:
        await vehicle_service.get_vehicle(db, target.vehicle_id)

    request = InspectionRequest(
        driver_id=data.driver_id,
        vehicle_id=target.vehicle_id if isinstance(target, SingleVehicle) else None,
        vehicle_set_id=target.vehicle_set_id if isinstance(target, VehicleSetTarget) else None,
        token=generate_token(),
        state=InspectionState.AWAITING_SUBMISSION.value,
    )
    with unit_of_work(db):
        db.add(request)
    db.refresh(request)
    logger.info(f"[REQUESTS] Opened request id={request.id} for {target} driver={data.driver_id}")
    return request


async def get_request(db: Session, request_id: int) -> InspectionRequest:
    request = _with_details(db.query(InspectionRequest)).filter(InspectionRequest.id == request_id).first()
    if not request:
        raise NotFoundError("Inspection request not found")
    return request


async def find_by_token(db: Session, token: str) -> InspectionRequest:
    request = _with_details(db.query(InspectionRequest)).filter(InspectionRequest.token == token).first()
    if not request:
        raise NotFoundError("Inspection request not found")
    return request


def validate_submission(data: InspectionSubmission) -> InspectionSubmission:
    """Result fields a submitted inspection must carry. Returns a cleaned copy."""
    if data.mileage is None or data.mileage <= 0:
        raise ValidationError("Mileage must be greater than zero")
    fuel = data.fuel_level
    if fuel is None or not math.isfinite(fuel) or fuel < 0 or fuel > 100:
        raise ValidationError("Fuel level must be between 0 and 100")
    brake = clean_text(data.brake_condition)
    if not brake:
        raise ValidationError("Brake condition is required")
    general = clean_text(data.general_condition)
    if not general:
        raise ValidationError("General condition is required")
    return InspectionSubmission(
        mileage=data.mileage,
        fuel_level=data.fuel_level,
        brake_condition=brake,
        general_condition=general,
        observations=clean_text(data.observations),
    )


async def submit_inspection(
    db: Session,
    token: str,
    data: InspectionSubmission,
    photos: Sequence[PhotoUpload] = (),
) -> InspectionRequest:
    request = await find_by_token(db, token)
    if InspectionState(request.state) != InspectionState.AWAITING_SUBMISSION:
        raise ConflictError("This inspection has already been submitted")

    submission = validate_submission(data)
    photos = list(photos)
    photo_store.validate_photos(photos)
    plate = resolve_display_plate(request)

    stored = []
    try:
        with unit_of_work(db):
            updated = (
                db.query(InspectionRequest)
                .filter(
                    InspectionRequest.id == request.id,
                    InspectionRequest.state == InspectionState.AWAITING_SUBMISSION.value,
                )
                .update(
                    {
                        InspectionRequest.state: InspectionState.AWAITING_REVIEW.value,
                        InspectionRequest.inspection_date: datetime.utcnow(),
                        InspectionRequest.mileage: submission.mileage,
                        InspectionRequest.fuel_level: submission.fuel_level,
                        InspectionRequest.brake_condition: submission.brake_condition,
                        InspectionRequest.general_condition: submission.general_condition,
                        InspectionRequest.observations: submission.observations,
                        InspectionRequest.updated_at: datetime.utcnow(),
                    },
                    synchronize_session=False,
                )
            )
            if updated != 1:
                raise ConflictError("This inspection has already been submitted")

            if photos:
                stored = await photo_store.save_photos(request.id, photos, naming_hint=plate)
            for url in stored:
                db.add(InspectionPhoto(inspection_id=request.id, photo_path=url))
    except Exception:
        photo_store.remove_photos(stored)
        raise

    db.expire(request)
    logger.info(f"[REQUESTS] Request id={request.id} submitted with {len(stored)} photo(s), awaiting review")
    return await get_request(db, request.id)


async def update_status(db: Session, request_id: int, status: str) -> InspectionRequest:
    """Staff decision. Only a submitted, not yet reviewed request can be approved or rejected."""
    request = await get_request(db, request_id)

    if status not in (InspectionStatus.APPROVED.value, InspectionStatus.REJECTED.value):
        raise ValidationError("Invalid status. Use 'approved' or 'rejected'")

    state = InspectionState(request.state)
    if state == InspectionState.AWAITING_SUBMISSION:
        raise ConflictError("This inspection has not been submitted yet")
    if state.is_terminal:
        raise ConflictError(f"This inspection was already {state.value}")

    with unit_of_work(db):
        updated = (
            db.query(InspectionRequest)
            .filter(
                InspectionRequest.id == request.id,
                InspectionRequest.state == InspectionState.AWAITING_REVIEW.value,
            )
            .update(
                {
                    InspectionRequest.state: status,
                    InspectionRequest.reviewed_at: datetime.utcnow(),
                    InspectionRequest.updated_at: datetime.utcnow(),
                },
                synchronize_session=False,
            )
        )
        if updated != 1:
            raise ConflictError("This inspection was already reviewed")

    db.expire(request)
    logger.info(f"[REQUESTS] Request id={request.id} {status}")
    return await get_request(db, request.id)


async def list_requests(
    db: Session,
    status: Optional[str] = None,
    vehicle_id: Optional[int] = None,
    vehicle_set_id: Optional[int] = None,
    driver_id: Optional[int] = None,
    plate: Optional[str] = None,
    driver_name: Optional[str] = None,
) -> list[InspectionRequest]:
    """Submitted requests only; those still awaiting the driver are never listed."""
    q = _with_details(db.query(InspectionRequest)).filter(InspectionRequest.inspection_date.isnot(None))

    if status:
        try:
            wanted = InspectionStatus(status)
        except ValueError:
            raise ValidationError("Invalid status filter. Use 'pending', 'approved' or 'rejected'")
        states = [s.value for s in InspectionState if s.status == wanted]
        q = q.filter(InspectionRequest.state.in_(states))
    if vehicle_id:
        q = q.filter(InspectionRequest.vehicle_id == vehicle_id)
    if vehicle_set_id:
        q = q.filter(InspectionRequest.vehicle_set_id == vehicle_set_id)
    if driver_id:
        q = q.filter(InspectionRequest.driver_id == driver_id)
    if driver_name:
        q = q.join(Driver, InspectionRequest.driver_id == Driver.id).filter(
            Driver.name.ilike(f"%{driver_name.strip()}%")
        )
    if plate:
        single = aliased(Vehicle)
        vehicle_set = aliased(VehicleSet)
        tractor, trailer, dolly = aliased(Vehicle), aliased(Vehicle), aliased(Vehicle)
        pattern = f"%{plate.strip()}%"
        q = (
            q.outerjoin(single, InspectionRequest.vehicle_id == single.id)
            .outerjoin(vehicle_set, InspectionRequest.vehicle_set_id == vehicle_set.id)
            .outerjoin(tractor, vehicle_set.tractor_id == tractor.id)
            .outerjoin(trailer, vehicle_set.trailer_id == trailer.id)
            .outerjoin(dolly, vehicle_set.dolly_id == dolly.id)
            .filter(or_(
                single.plate.ilike(pattern),
                tractor.plate.ilike(pattern),
                trailer.plate.ilike(pattern),
                dolly.plate.ilike(pattern),
            ))
        )

    return q.order_by(InspectionRequest.created_at.desc(), InspectionRequest.id.desc()).all()


async def get_photos(db: Session, request_id: int) -> list[str]:
    request = await get_request(db, request_id)
    return request.photos
