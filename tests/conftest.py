# tests/conftest.py
"""Shared fixtures: in-memory database, temporary photo store, and row factories."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import itertools

import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fleet_inspection.config import settings
from fleet_inspection.database import build_engine, create_tables
from fleet_inspection.models.driver import Driver
from fleet_inspection.models.vehicle import Vehicle
from fleet_inspection.services.photo_store import PhotoUpload

# Smallest valid PNG header is enough, the store never decodes images
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32

_seq = itertools.count(1)


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    path = tmp_path / "uploads"
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(path))
    return path


@pytest.fixture
def make_vehicle(db):
    def _make(category="tractor", plate=None, chassis=None, **overrides):
        n = next(_seq)
        vehicle = Vehicle(
            plate=plate or f"TST{n:04d}",
            chassis=chassis or f"9BWZZZ377VT{n:06d}",
            model=overrides.pop("model", "FH 540"),
            brand=overrides.pop("brand", "Volvo"),
            year=overrides.pop("year", 2021),
            type=overrides.pop("type", "Truck"),
            category=category,
            **overrides,
        )
        db.add(vehicle)
        db.commit()
        db.refresh(vehicle)
        return vehicle
    return _make


@pytest.fixture
def make_driver(db):
    def _make(name="Test Driver", national_id=None):
        driver = Driver(name=name, national_id=national_id or f"{next(_seq):011d}")
        db.add(driver)
        db.commit()
        db.refresh(driver)
        return driver
    return _make


@pytest.fixture
def make_photo():
    def _make(filename="photo.png", content=PNG_BYTES, content_type="image/png"):
        return PhotoUpload(content=content, filename=filename, content_type=content_type)
    return _make
