# fleet_inspection/routers/public_inspections.py
"""
Driver-facing inspection form. The token in the path is the only credential,
so these routes stay open even when API_KEY is set.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session
from fleet_inspection.database import get_db
from fleet_inspection.schemas.inspection_request import InspectionRequestOut, InspectionSubmission
from fleet_inspection.services import inspection_request_service
from fleet_inspection.utils.logger import get_logger
from fleet_inspection.utils.uploads import read_uploads

router = APIRouter()
logger = get_logger(__name__)


@router.get("/public/inspections/{token}", response_model=InspectionRequestOut,
            summary="Load an inspection form by token")
async def get_inspection_form(token: str, db: Session = Depends(get_db)):
    return await inspection_request_service.find_by_token(db, token)


@router.post("/public/inspections/{token}/submit", response_model=InspectionRequestOut,
             summary="Submit an inspection (multipart form + photos)")
async def submit_inspection(
    token: str,
    mileage: Optional[int] = Form(None),
    fuel_level: Optional[float] = Form(None),
    brake_condition: Optional[str] = Form(None),
    general_condition: Optional[str] = Form(None),
    observations: Optional[str] = Form(None),
    photos: list[UploadFile] = File(default=[]),
    db: Session = Depends(get_db),
):
    data = InspectionSubmission(
        mileage=mileage,
        fuel_level=fuel_level,
        brake_condition=brake_condition,
        general_condition=general_condition,
        observations=observations,
    )
    uploads = await read_uploads(photos)
    logger.info(f"[REQUESTS] Submission received with {len(uploads)} photo(s)")
    return await inspection_request_service.submit_inspection(db, token, data, uploads)
