# tests/test_vehicle_service.py
"""Unit tests for the vehicle registry service."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from fleet_inspection.errors import ConflictError, NotFoundError, ValidationError
from fleet_inspection.models.inspection_request import InspectionRequest
from fleet_inspection.schemas.vehicle import VehicleCreate, VehicleUpdate
from fleet_inspection.schemas.vehicle_set import VehicleSetCreate
from fleet_inspection.services import vehicle_service, vehicle_set_service


def vehicle_payload(**overrides):
    data = {
        "plate": "abc1d23",
        "chassis": "9bwzzz377vt004251",
        "model": "FH 540",
        "brand": "Volvo",
        "year": 2021,
        "type": "Cavalo Mecânico",
        "category": "tractor",
    }
    data.update(overrides)
    return VehicleCreate(**data)


class TestCreateVehicle:
    @pytest.mark.asyncio
    async def test_plate_and_chassis_are_normalized(self, db):
        vehicle = await vehicle_service.create_vehicle(db, vehicle_payload())
        assert vehicle.plate == "ABC1D23"
        assert vehicle.chassis == "9BWZZZ377VT004251"
        assert vehicle.category == "tractor"

    @pytest.mark.asyncio
    async def test_old_plate_format_accepted(self, db):
        vehicle = await vehicle_service.create_vehicle(db, vehicle_payload(plate="ABC1234"))
        assert vehicle.plate == "ABC1234"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("plate", ["AB12345", "ABCD123", "ABC-1234", ""])
    async def test_invalid_plate_rejected(self, db, plate):
        with pytest.raises(ValidationError):
            await vehicle_service.create_vehicle(db, vehicle_payload(plate=plate))

    @pytest.mark.asyncio
    async def test_chassis_must_have_17_chars(self, db):
        with pytest.raises(ValidationError):
            await vehicle_service.create_vehicle(db, vehicle_payload(chassis="9BWZZZ377VT"))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("year", [1949, 2999])
    async def test_year_out_of_range(self, db, year):
        with pytest.raises(ValidationError):
            await vehicle_service.create_vehicle(db, vehicle_payload(year=year))

    @pytest.mark.asyncio
    async def test_legacy_category_label(self, db):
        vehicle = await vehicle_service.create_vehicle(db, vehicle_payload(category="carreta"))
        assert vehicle.category == "trailer"

    @pytest.mark.asyncio
    async def test_unknown_category_rejected(self, db):
        with pytest.raises(ValidationError):
            await vehicle_service.create_vehicle(db, vehicle_payload(category="bus"))

    @pytest.mark.asyncio
    async def test_duplicate_plate_conflicts(self, db):
        await vehicle_service.create_vehicle(db, vehicle_payload())
        with pytest.raises(ConflictError):
            await vehicle_service.create_vehicle(db, vehicle_payload(chassis="9BWZZZ377VT999999"))

    @pytest.mark.asyncio
    async def test_duplicate_chassis_conflicts(self, db):
        await vehicle_service.create_vehicle(db, vehicle_payload())
        with pytest.raises(ConflictError):
            await vehicle_service.create_vehicle(db, vehicle_payload(plate="XYZ9876"))


class TestUpdateVehicle:
    @pytest.mark.asyncio
    async def test_patch_changes_only_sent_fields(self, db, make_vehicle):
        vehicle = make_vehicle(model="Old model")
        updated = await vehicle_service.update_vehicle(db, vehicle.id, VehicleUpdate(model="New model"))
        assert updated.model == "New model"
        assert updated.plate == vehicle.plate
        assert updated.year == 2021

    @pytest.mark.asyncio
    async def test_patch_is_revalidated(self, db, make_vehicle):
        vehicle = make_vehicle()
        with pytest.raises(ValidationError):
            await vehicle_service.update_vehicle(db, vehicle.id, VehicleUpdate(year=1900))

    @pytest.mark.asyncio
    async def test_keeping_own_plate_is_not_a_conflict(self, db, make_vehicle):
        vehicle = make_vehicle()
        updated = await vehicle_service.update_vehicle(db, vehicle.id, VehicleUpdate(plate=vehicle.plate.lower()))
        assert updated.plate == vehicle.plate

    @pytest.mark.asyncio
    async def test_taking_another_plate_conflicts(self, db, make_vehicle):
        first = make_vehicle()
        second = make_vehicle()
        with pytest.raises(ConflictError):
            await vehicle_service.update_vehicle(db, second.id, VehicleUpdate(plate=first.plate))

    @pytest.mark.asyncio
    async def test_missing_vehicle(self, db):
        with pytest.raises(NotFoundError):
            await vehicle_service.update_vehicle(db, 999, VehicleUpdate(model="X"))


class TestSetMembersStayConsistent:
    async def _combined_set(self, db, make_vehicle):
        tractor = make_vehicle("tractor")
        trailer = make_vehicle("trailer")
        vehicle_set = await vehicle_set_service.create_vehicle_set(
            db, VehicleSetCreate(name="Road train", type="combined", tractor_id=tractor.id, trailer_id=trailer.id)
        )
        return vehicle_set, tractor, trailer

    @pytest.mark.asyncio
    async def test_category_change_of_set_member_conflicts(self, db, make_vehicle):
        vehicle_set, tractor, _ = await self._combined_set(db, make_vehicle)
        with pytest.raises(ConflictError):
            await vehicle_service.update_vehicle(db, tractor.id, VehicleUpdate(category="dolly"))

        db.expire_all()
        details = await vehicle_set_service.get_vehicle_set_with_details(db, vehicle_set.id)
        assert details.tractor.category == "tractor"

    @pytest.mark.asyncio
    async def test_legacy_label_for_same_category_is_allowed(self, db, make_vehicle):
        _, tractor, _ = await self._combined_set(db, make_vehicle)
        updated = await vehicle_service.update_vehicle(db, tractor.id, VehicleUpdate(category="cavalo"))
        assert updated.category == "tractor"

    @pytest.mark.asyncio
    async def test_plate_and_chassis_of_set_member_can_change(self, db, make_vehicle):
        vehicle_set, _, trailer = await self._combined_set(db, make_vehicle)
        await vehicle_service.update_vehicle(
            db, trailer.id, VehicleUpdate(plate="new1a23", chassis="9bwzzz377vt777777")
        )

        db.expire_all()
        details = await vehicle_set_service.get_vehicle_set_with_details(db, vehicle_set.id)
        assert details.trailer.plate == "NEW1A23"
        assert details.trailer.chassis == "9BWZZZ377VT777777"
        assert details.trailer.category == "trailer"

    @pytest.mark.asyncio
    async def test_category_change_allowed_once_out_of_the_set(self, db, make_vehicle):
        vehicle_set, tractor, _ = await self._combined_set(db, make_vehicle)
        await vehicle_set_service.delete_vehicle_set(db, vehicle_set.id)
        updated = await vehicle_service.update_vehicle(db, tractor.id, VehicleUpdate(category="dolly"))
        assert updated.category == "dolly"

    @pytest.mark.asyncio
    async def test_free_vehicle_category_can_change(self, db, make_vehicle):
        vehicle = make_vehicle("trailer")
        updated = await vehicle_service.update_vehicle(db, vehicle.id, VehicleUpdate(category="dolly"))
        assert updated.category == "dolly"

class TestDeleteVehicle:
    @pytest.mark.asyncio
    async def test_delete_free_vehicle(self, db, make_vehicle):
        vehicle = make_vehicle()
        await vehicle_service.delete_vehicle(db, vehicle.id)
        with pytest.raises(NotFoundError):
            await vehicle_service.get_vehicle(db, vehicle.id)

    @pytest.mark.asyncio
    async def test_vehicle_in_a_set_cannot_be_deleted(self, db, make_vehicle):
        tractor = make_vehicle("tractor")
        await vehicle_set_service.create_vehicle_set(
            db, VehicleSetCreate(name="Solo", type="tractor", tractor_id=tractor.id)
        )
        with pytest.raises(ConflictError):
            await vehicle_service.delete_vehicle(db, tractor.id)

    @pytest.mark.asyncio
    async def test_vehicle_with_requests_cannot_be_deleted(self, db, make_vehicle, make_driver):
        vehicle = make_vehicle()
        driver = make_driver()
        db.add(InspectionRequest(vehicle_id=vehicle.id, driver_id=driver.id, token="a" * 64))
        db.commit()
        with pytest.raises(ConflictError):
            await vehicle_service.delete_vehicle(db, vehicle.id)


class TestLookupAndSearch:
    @pytest.mark.asyncio
    async def test_lookup_by_plate_is_case_insensitive(self, db, make_vehicle):
        vehicle = make_vehicle(plate="QWE1R23")
        found = await vehicle_service.get_vehicle_by_plate(db, "qwe1r23")
        assert found.id == vehicle.id

    @pytest.mark.asyncio
    async def test_lookup_by_chassis(self, db, make_vehicle):
        vehicle = make_vehicle(chassis="9BWZZZ377VT123456")
        found = await vehicle_service.get_vehicle_by_chassis(db, "9bwzzz377vt123456")
        assert found.id == vehicle.id

    @pytest.mark.asyncio
    async def test_unknown_plate(self, db):
        assert vehicle_service.lookup_vehicle_by_plate(db, "ZZZ9999") is None
        with pytest.raises(NotFoundError):
            await vehicle_service.get_vehicle_by_plate(db, "ZZZ9999")

    @pytest.mark.asyncio
    async def test_search_filters(self, db, make_vehicle):
        make_vehicle("tractor", brand="Scania")
        make_vehicle("trailer", brand="Randon")
        make_vehicle("trailer", brand="Librelato")

        trailers = await vehicle_service.search_vehicles(db, category="trailer")
        assert {v.brand for v in trailers} == {"Randon", "Librelato"}

        scania = await vehicle_service.search_vehicles(db, brand="scan")
        assert [v.brand for v in scania] == ["Scania"]

        legacy = await vehicle_service.search_vehicles(db, category="cavalo")
        assert [v.brand for v in legacy] == ["Scania"]


class TestVehiclePhoto:
    @pytest.mark.asyncio
    async def test_replacing_photo_removes_previous_file(self, db, make_vehicle, make_photo, upload_dir):
        vehicle = make_vehicle()
        first = await vehicle_service.set_vehicle_photo(db, vehicle.id, make_photo("a.png"))
        first_url = first.photo
        assert len(list((upload_dir / "vehicles").iterdir())) == 1

        second = await vehicle_service.set_vehicle_photo(db, vehicle.id, make_photo("b.png"))
        assert second.photo != first_url
        assert len(list((upload_dir / "vehicles").iterdir())) == 1

    @pytest.mark.asyncio
    async def test_non_image_rejected(self, db, make_vehicle, make_photo):
        vehicle = make_vehicle()
        with pytest.raises(ValidationError):
            await vehicle_service.set_vehicle_photo(
                db, vehicle.id, make_photo("doc.pdf", content_type="application/pdf")
            )
