# Fleet Inspection Database Models
# Import all models here for SQLAlchemy discovery

from fleet_inspection.models.driver import Driver                                    # noqa
from fleet_inspection.models.vehicle import Vehicle, VehicleCategory                 # noqa
from fleet_inspection.models.vehicle_set import VehicleSet, VehicleSetSlot, VehicleSetType  # noqa
from fleet_inspection.models.inspection_request import (                             # noqa
    InspectionRequest, InspectionPhoto, InspectionState, InspectionStatus,
)
