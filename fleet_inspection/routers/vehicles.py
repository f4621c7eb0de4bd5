# fleet_inspection/routers/vehicles.py
"""Vehicle registry: CRUD, plate / chassis lookup, and photo upload."""

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.orm import Session
from fleet_inspection.database import get_db
from fleet_inspection.schemas.vehicle import VehicleCreate, VehicleOut, VehicleUpdate
from fleet_inspection.services import vehicle_service
from fleet_inspection.utils.uploads import read_upload

router = APIRouter()


@router.get("/vehicles", response_model=list[VehicleOut], summary="List / search vehicles")
async def list_vehicles(plate: str = None, model: str = None, brand: str = None, type: str = None,
                        category: str = None, year: int = None, db: Session = Depends(get_db)):
    """Partial, case-insensitive match on plate, model and brand; exact match on the rest."""
    return await vehicle_service.search_vehicles(
        db, plate=plate, model=model, brand=brand, type=type, category=category, year=year
    )


@router.post("/vehicles", response_model=VehicleOut, status_code=status.HTTP_201_CREATED,
             summary="Register a vehicle")
async def create_vehicle(body: VehicleCreate, db: Session = Depends(get_db)):
    return await vehicle_service.create_vehicle(db, body)


@router.get("/vehicles/plate/{plate}", response_model=VehicleOut, summary="Look up a vehicle by plate")
async def get_vehicle_by_plate(plate: str, db: Session = Depends(get_db)):
    return await vehicle_service.get_vehicle_by_plate(db, plate)


@router.get("/vehicles/chassis/{chassis}", response_model=VehicleOut, summary="Look up a vehicle by chassis")
async def get_vehicle_by_chassis(chassis: str, db: Session = Depends(get_db)):
    return await vehicle_service.get_vehicle_by_chassis(db, chassis)


@router.get("/vehicles/{vehicle_id}", response_model=VehicleOut, summary="Get a vehicle")
async def get_vehicle(vehicle_id: int, db: Session = Depends(get_db)):
    return await vehicle_service.get_vehicle(db, vehicle_id)


@router.put("/vehicles/{vehicle_id}", response_model=VehicleOut, summary="Update a vehicle")
async def update_vehicle(vehicle_id: int, body: VehicleUpdate, db: Session = Depends(get_db)):
    """Only the fields present in the body are changed; the result is revalidated as a whole."""
    return await vehicle_service.update_vehicle(db, vehicle_id, body)


@router.delete("/vehicles/{vehicle_id}", summary="Remove a vehicle")
async def delete_vehicle(vehicle_id: int, db: Session = Depends(get_db)):
    await vehicle_service.delete_vehicle(db, vehicle_id)
    return {"status": "removed", "id": vehicle_id}


@router.put("/vehicles/{vehicle_id}/photo", response_model=VehicleOut, summary="Upload a vehicle photo")
async def upload_vehicle_photo(vehicle_id: int, photo: UploadFile = File(...), db: Session = Depends(get_db)):
    return await vehicle_service.set_vehicle_photo(db, vehicle_id, await read_upload(photo))
