# fleet_inspection/routers/drivers.py
"""Driver registry endpoints."""

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.orm import Session
from fleet_inspection.database import get_db
from fleet_inspection.schemas.driver import DriverCreate, DriverOut, DriverUpdate
from fleet_inspection.services import driver_service
from fleet_inspection.utils.uploads import read_upload

router = APIRouter()


@router.get("/drivers", response_model=list[DriverOut], summary="List / search drivers")
async def list_drivers(name: str = None, national_id: str = None, db: Session = Depends(get_db)):
    return await driver_service.search_drivers(db, name=name, national_id=national_id)


@router.post("/drivers", response_model=DriverOut, status_code=status.HTTP_201_CREATED,
             summary="Register a driver")
async def create_driver(body: DriverCreate, db: Session = Depends(get_db)):
    return await driver_service.create_driver(db, body)


@router.get("/drivers/{driver_id}", response_model=DriverOut, summary="Get a driver")
async def get_driver(driver_id: int, db: Session = Depends(get_db)):
    return await driver_service.get_driver(db, driver_id)


@router.put("/drivers/{driver_id}", response_model=DriverOut, summary="Update a driver")
async def update_driver(driver_id: int, body: DriverUpdate, db: Session = Depends(get_db)):
    return await driver_service.update_driver(db, driver_id, body)


@router.delete("/drivers/{driver_id}", summary="Remove a driver")
async def delete_driver(driver_id: int, db: Session = Depends(get_db)):
    await driver_service.delete_driver(db, driver_id)
    return {"status": "removed", "id": driver_id}


@router.put("/drivers/{driver_id}/photo", response_model=DriverOut, summary="Upload a driver photo")
async def upload_driver_photo(driver_id: int, photo: UploadFile = File(...), db: Session = Depends(get_db)):
    return await driver_service.set_driver_photo(db, driver_id, await read_upload(photo))
