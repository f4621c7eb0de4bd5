# fleet_inspection/models/driver.py
"""
Drivers table.
One row per person, identified by an 11-digit national id.
Referenced (never owned) by inspection_requests.driver_id.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime
from fleet_inspection.database import Base


class Driver(Base):
    __tablename__ = "drivers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False, index=True)
    national_id = Column(String(11), unique=True, nullable=False, index=True)
    photo = Column(String(500))                 # URL returned by the photo store
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Driver {self.id} name={self.name}>"
