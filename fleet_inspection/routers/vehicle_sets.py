# fleet_inspection/routers/vehicle_sets.py
"""
Vehicle set endpoints.
GET /vehicle-sets/available/{category} feeds the slot pickers of the set form:
it lists vehicles of that category not held by any other set.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from fleet_inspection.database import get_db
from fleet_inspection.schemas.vehicle import VehicleOut
from fleet_inspection.schemas.vehicle_set import VehicleSetCreate, VehicleSetOut, VehicleSetUpdate
from fleet_inspection.services import vehicle_set_service

router = APIRouter()


@router.get("/vehicle-sets", response_model=list[VehicleSetOut], summary="List / search vehicle sets")
async def list_vehicle_sets(name: str = None, type: str = None, db: Session = Depends(get_db)):
    return await vehicle_set_service.search_vehicle_sets(db, name=name, type=type)


@router.post("/vehicle-sets", response_model=VehicleSetOut, status_code=status.HTTP_201_CREATED,
             summary="Compose a vehicle set")
async def create_vehicle_set(body: VehicleSetCreate, db: Session = Depends(get_db)):
    vehicle_set = await vehicle_set_service.create_vehicle_set(db, body)
    return await vehicle_set_service.get_vehicle_set_with_details(db, vehicle_set.id)


@router.get("/vehicle-sets/available/{category}", response_model=list[VehicleOut],
            summary="Vehicles of a category free to join a set")
async def available_vehicles(category: str, exclude_set_id: int = None, db: Session = Depends(get_db)):
    """Pass exclude_set_id when editing a set so its own vehicles stay selectable."""
    return await vehicle_set_service.get_available_vehicles_by_category(db, category, exclude_set_id)


@router.get("/vehicle-sets/{set_id}", response_model=VehicleSetOut, summary="Get a vehicle set")
async def get_vehicle_set(set_id: int, db: Session = Depends(get_db)):
    return await vehicle_set_service.get_vehicle_set_with_details(db, set_id)


@router.put("/vehicle-sets/{set_id}", response_model=VehicleSetOut, summary="Update a vehicle set")
async def update_vehicle_set(set_id: int, body: VehicleSetUpdate, db: Session = Depends(get_db)):
    await vehicle_set_service.update_vehicle_set(db, set_id, body)
    return await vehicle_set_service.get_vehicle_set_with_details(db, set_id)


@router.delete("/vehicle-sets/{set_id}", summary="Dissolve a vehicle set")
async def delete_vehicle_set(set_id: int, db: Session = Depends(get_db)):
    await vehicle_set_service.delete_vehicle_set(db, set_id)
    return {"status": "removed", "id": set_id}
