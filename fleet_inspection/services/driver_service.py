# fleet_inspection/services/driver_service.py
"""Driver registry: drivers are identified by an 11-digit national id."""

import re
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from fleet_inspection.database import unit_of_work
from fleet_inspection.errors import ConflictError, NotFoundError, ValidationError
from fleet_inspection.models.driver import Driver
from fleet_inspection.models.inspection_request import InspectionRequest
from fleet_inspection.schemas.driver import DriverCreate, DriverUpdate
from fleet_inspection.services import photo_store
from fleet_inspection.services.photo_store import PhotoUpload
from fleet_inspection.services.validation import apply_patch, require_min_length
from fleet_inspection.utils.logger import get_logger

logger = get_logger(__name__)

NATIONAL_ID_PATTERN = re.compile(r"^\d{11}$")


@dataclass(frozen=True)
class DriverDraft:
    name: Optional[str]
    national_id: Optional[str]

    def normalized(self) -> "DriverDraft":
        # Format only; the check digits are not verified
        digits = re.sub(r"\D", "", self.national_id or "")
        return DriverDraft(name=(self.name or "").strip(), national_id=digits)


def validate_driver(draft: DriverDraft) -> None:
    require_min_length(draft.name, 3, "Driver name must have at least 3 characters")
    if not NATIONAL_ID_PATTERN.match(draft.national_id or ""):
        raise ValidationError("National id must contain 11 digits")


def _check_unique(db: Session, national_id: str, driver_id: Optional[int] = None):
    existing = db.query(Driver).filter(Driver.national_id == national_id).first()
    if existing and existing.id != driver_id:
        raise ConflictError("A driver with this national id is already registered")


async def get_driver(db: Session, driver_id: int) -> Driver:
    driver = db.get(Driver, driver_id)
    if not driver:
        raise NotFoundError("Driver not found")
    return driver


async def create_driver(db: Session, data: DriverCreate) -> Driver:
    draft = DriverDraft(**data.model_dump()).normalized()
    validate_driver(draft)
    _check_unique(db, draft.national_id)

    driver = Driver(name=draft.name, national_id=draft.national_id)
    with unit_of_work(db):
        db.add(driver)
    db.refresh(driver)
    logger.info(f"[DRIVERS] Registered driver id={driver.id}")
    return driver


async def update_driver(db: Session, driver_id: int, patch: DriverUpdate) -> Driver:
    driver = await get_driver(db, driver_id)
    draft = apply_patch(DriverDraft(driver.name, driver.national_id), patch).normalized()
    validate_driver(draft)
    _check_unique(db, draft.national_id, driver_id=driver.id)

    with unit_of_work(db):
        driver.name = draft.name
        driver.national_id = draft.national_id
    db.refresh(driver)
    logger.info(f"[DRIVERS] Updated driver id={driver.id}")
    return driver


async def delete_driver(db: Session, driver_id: int) -> None:
    driver = await get_driver(db, driver_id)
    if db.query(InspectionRequest.id).filter(InspectionRequest.driver_id == driver.id).first():
        raise ConflictError("This driver has inspection requests and cannot be deleted")

    photo = driver.photo
    with unit_of_work(db):
        db.delete(driver)
    photo_store.remove_photo(photo)
    logger.info(f"[DRIVERS] Deleted driver id={driver_id}")


async def search_drivers(db: Session, name: Optional[str] = None,
                         national_id: Optional[str] = None) -> list[Driver]:
    q = db.query(Driver)
    if name:
        q = q.filter(Driver.name.ilike(f"%{name.strip()}%"))
    if national_id:
        q = q.filter(Driver.national_id.like(f"%{re.sub(r'[^0-9]', '', national_id)}%"))
    return q.order_by(Driver.name).all()


async def set_driver_photo(db: Session, driver_id: int, photo: PhotoUpload) -> Driver:
    driver = await get_driver(db, driver_id)
    photo_store.validate_photos([photo], max_count=1)
    url = await photo_store.save_photo("drivers", photo, naming_hint=f"driver-{driver.id}")
    previous = driver.photo
    try:
        with unit_of_work(db):
            driver.photo = url
    except Exception:
        photo_store.remove_photo(url)
        raise
    photo_store.remove_photo(previous)
    db.refresh(driver)
    return driver
