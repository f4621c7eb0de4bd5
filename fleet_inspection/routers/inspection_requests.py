# fleet_inspection/routers/inspection_requests.py
"""
Staff side of the inspection workflow.
POST   /inspection-requests              open a request, returns the driver link
GET    /inspection-requests              submitted requests, filterable
PATCH  /inspection-requests/{id}/status  approve or reject
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from fleet_inspection.database import get_db
from fleet_inspection.schemas.inspection_request import (
    InspectionRequestCreate, InspectionRequestCreated, InspectionRequestOut, StatusUpdate,
)
from fleet_inspection.services import inspection_request_service

router = APIRouter()


@router.post("/inspection-requests", response_model=InspectionRequestCreated,
             status_code=status.HTTP_201_CREATED, summary="Open an inspection request")
async def create_request(body: InspectionRequestCreate, db: Session = Depends(get_db)):
    """Send either vehicle_set_id or truck_id (alias vehicle_id), never both."""
    request = await inspection_request_service.create_request(db, body)
    return {
        "message": "Inspection request created",
        "inspection_url": inspection_request_service.inspection_url(request),
        "request": request,
    }


@router.get("/inspection-requests", response_model=list[InspectionRequestOut],
            summary="List submitted inspections")
async def list_requests(status: str = None, vehicle_id: int = None, vehicle_set_id: int = None,
                        driver_id: int = None, plate: str = None, driver_name: str = None,
                        db: Session = Depends(get_db)):
    """Newest first. Requests the driver has not submitted yet are not listed."""
    return await inspection_request_service.list_requests(
        db, status=status, vehicle_id=vehicle_id, vehicle_set_id=vehicle_set_id,
        driver_id=driver_id, plate=plate, driver_name=driver_name,
    )


@router.get("/inspection-requests/{request_id}", response_model=InspectionRequestOut,
            summary="Get an inspection request")
async def get_request(request_id: int, db: Session = Depends(get_db)):
    return await inspection_request_service.get_request(db, request_id)


@router.patch("/inspection-requests/{request_id}/status", response_model=InspectionRequestOut,
              summary="Approve or reject a submitted inspection")
async def update_status(request_id: int, body: StatusUpdate, db: Session = Depends(get_db)):
    return await inspection_request_service.update_status(db, request_id, body.status)


@router.get("/inspection-requests/{request_id}/photos", response_model=list[str],
            summary="Photo URLs of an inspection")
async def get_photos(request_id: int, db: Session = Depends(get_db)):
    return await inspection_request_service.get_photos(db, request_id)
