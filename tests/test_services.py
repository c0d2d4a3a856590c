"""
Tests for the per-type master services: derived fields, parent validation,
defaults and the named queries that build their own conditions.
"""

import uuid
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from app.core.amenity_service import AmenityService
from app.core.city_service import DEFAULT_CITY_RADIUS_METERS, CityService
from app.core.exceptions import NotFoundException, ValidationException
from app.core.floor_service import FloorService, floor_display_name
from app.core.location_service import DEFAULT_LOCATION_RADIUS_METERS, LocationService
from app.core.master_service import MasterService
from app.core.room_service import RoomService
from app.core.tower_service import TowerService
from app.core.washroom_service import WashroomService
from app.schemas.master_record import MasterType
from app.schemas.masters import (
    AmenityCreate,
    CityCreate,
    CityQuery,
    CityUpdate,
    FloorCreate,
    FloorUpdate,
    LocationCreate,
    LocationQuery,
    LocationUpdate,
    RoomCreate,
    RoomUpdate,
    TowerCreate,
    TowerUpdate,
    WashroomUpdate,
)


def mocked(service):
    """Replace the service's store with a MagicMock that echoes writes back."""
    service.store = MagicMock()
    service.store.create.side_effect = lambda fields: fields
    service.store.update.side_effect = lambda record_id, fields: fields
    return service


# ============================================================================
# Floors
# ============================================================================

@pytest.mark.parametrize("number, expected", [
    (0, "Ground Floor"),
    (-2, "Basement 2"),
    (1, "1st Floor"),
    (2, "2nd Floor"),
    (3, "3rd Floor"),
    (4, "4th Floor"),
    (11, "11th Floor"),
    (12, "12th Floor"),
    (13, "13th Floor"),
    (21, "21st Floor"),
    (22, "22nd Floor"),
    (101, "101st Floor"),
    (111, "111th Floor"),
])
def test_floor_display_name(number, expected):
    assert floor_display_name(number) == expected


def test_floor_create_derives_display_name():
    service = mocked(FloorService())

    fields = service.create(FloorCreate(name="Second", numeric_value=2))

    assert fields["display_name"] == "2nd Floor"
    assert fields["unit"] == "Floor"
    assert fields["is_available"] is True


def test_floor_create_keeps_supplied_display_name():
    service = mocked(FloorService())

    fields = service.create(FloorCreate(name="Podium", numeric_value=1, display_name="Podium Level"))

    assert fields["display_name"] == "Podium Level"


def test_floor_renumber_refreshes_display_name():
    service = mocked(FloorService())

    fields = service.update(str(uuid.uuid4()), FloorUpdate(numeric_value=-1))

    assert fields == {"numeric_value": -1, "display_name": "Basement 1"}


def test_floor_rename_only_leaves_display_name_alone():
    service = mocked(FloorService())

    fields = service.update(str(uuid.uuid4()), FloorUpdate(name="Terrace"))

    assert fields == {"name": "Terrace"}


def test_floor_update_cannot_clear_number():
    service = mocked(FloorService())

    with pytest.raises(ValidationException) as exc_info:
        service.update(str(uuid.uuid4()), FloorUpdate(numeric_value=None))

    assert exc_info.value.details == {"fields": ["numeric_value"]}
    service.store.update.assert_not_called()


def test_floor_ground_missing():
    service = mocked(FloorService())
    service.store.find_where.return_value = []

    with pytest.raises(NotFoundException):
        service.find_ground()


def test_floor_statistics_shape():
    service = mocked(FloorService())
    service.store.count_by.return_value = {}
    service.store.aggregate.return_value = {
        "available": 8,
        "unavailable": 2,
        "min_floor": -2,
        "max_floor": 7,
        "basement_floors": 2,
        "ground_floors": 1,
        "upper_floors": 7,
        "average_price_multiplier": 1.2345,
    }

    statistics = service.extra_statistics()

    assert statistics["availability"] == {"available": 8, "unavailable": 2}
    assert statistics["floor_range"] == {
        "min": -2,
        "max": 7,
        "basement_floors": 2,
        "ground_floors": 1,
        "upper_floors": 7,
    }
    assert statistics["average_price_multiplier"] == 1.23
    assert set(statistics) >= {"by_floor_type", "by_usage"}


def test_floor_create_requires_number():
    with pytest.raises(ValidationError):
        FloorCreate(name="Nowhere")


# ============================================================================
# Towers, rooms
# ============================================================================

def test_tower_create_derives_display_name():
    service = mocked(TowerService())

    fields = service.create(TowerCreate(name="A", numeric_value=3))

    assert fields["display_name"] == "Tower 3"
    assert fields["is_active"] is True


def test_room_create_derives_display_name():
    service = mocked(RoomService())

    fields = service.create(RoomCreate(name="2 BHK", numeric_value=2))

    assert fields["display_name"] == "2 BHK"


def test_tower_renumber_keeps_stored_unit():
    service = mocked(TowerService())
    service.store.find_by_id.return_value = {"unit": "Wing", "numeric_value": 1}

    fields = service.update(str(uuid.uuid4()), TowerUpdate(numeric_value=4))

    assert fields["display_name"] == "Wing 4"


def test_tower_renumber_with_new_unit_skips_lookup():
    service = mocked(TowerService())

    fields = service.update(str(uuid.uuid4()), TowerUpdate(numeric_value=2, unit="Block"))

    assert fields["display_name"] == "Block 2"
    service.store.find_by_id.assert_not_called()


@pytest.mark.parametrize("service_class, update, expected", [
    (RoomService, RoomUpdate(numeric_value=3), "3 BHK"),
    (WashroomService, WashroomUpdate(numeric_value=2), "2 Bathroom"),
])
def test_renumber_refreshes_display_name(service_class, update, expected):
    service = mocked(service_class())
    service.store.find_by_id.return_value = {}

    fields = service.update(str(uuid.uuid4()), update)

    assert fields["display_name"] == expected


def test_room_explicit_display_name_wins():
    service = mocked(RoomService())

    fields = service.update(str(uuid.uuid4()), RoomUpdate(numeric_value=3, display_name="Three Bed"))

    assert fields["display_name"] == "Three Bed"
    service.store.find_by_id.assert_not_called()


# ============================================================================
# Cities
# ============================================================================

def test_city_requires_state():
    with pytest.raises(ValidationError):
        CityCreate(name="Pune")


def test_city_defaults():
    service = mocked(CityService())

    fields = service.create(CityCreate(name="Pune", state="Maharashtra", state_code="mh"))

    assert fields["country"] == "India"
    assert fields["pin_codes"] == []
    assert fields["state_code"] == "MH"


@pytest.mark.parametrize("update, cleared", [
    (CityUpdate(state=None), ["state"]),
    (CityUpdate(country=None, name=None), ["name", "country"]),
])
def test_city_update_cannot_clear_required_fields(update, cleared):
    service = mocked(CityService())

    with pytest.raises(ValidationException) as exc_info:
        service.update(str(uuid.uuid4()), update)

    assert exc_info.value.details == {"fields": cleared}
    service.store.update.assert_not_called()


def test_city_update_may_clear_optional_field():
    service = mocked(CityService())

    fields = service.update(str(uuid.uuid4()), CityUpdate(description=None))

    assert fields == {"description": None}


def test_radius_without_point_rejected():
    with pytest.raises(ValidationError):
        CityQuery(radius=5000)


def test_city_near_uses_default_radius(db):
    db.execute_query.return_value = []

    CityService().find_near(73.8567, 18.5204)

    _, values = db.execute_query.call_args.args
    assert DEFAULT_CITY_RADIUS_METERS in values
    assert DEFAULT_CITY_RADIUS_METERS == 100000


def test_city_coordinates_validated():
    with pytest.raises(ValidationError):
        CityCreate(name="Nowhere", state="X", coordinates=[200, 10])


# ============================================================================
# Locations
# ============================================================================

def test_location_requires_existing_city():
    service = mocked(LocationService())
    service.city_store = MagicMock()
    parent_id = str(uuid.uuid4())
    service.city_store.find_by_id.side_effect = NotFoundException("City", parent_id)

    with pytest.raises(ValidationException) as exc_info:
        service.create(LocationCreate(name="Kothrud", parent_id=parent_id))

    assert exc_info.value.status_code == 400
    service.store.create.assert_not_called()


def test_location_create_links_city():
    service = mocked(LocationService())
    service.city_store = MagicMock()
    parent_id = str(uuid.uuid4())
    service.city_store.find_by_id.return_value = {"id": parent_id, "type": "city"}

    fields = service.create(LocationCreate(name="Kothrud", parent_id=parent_id))

    assert fields["parent_id"] == parent_id
    assert fields["parent_type"] == "city"


def test_location_update_cannot_clear_parent():
    service = mocked(LocationService())

    with pytest.raises(ValidationException):
        service.update(str(uuid.uuid4()), LocationUpdate(parent_id=None))


def test_location_update_without_parent_skips_city_lookup():
    service = mocked(LocationService())
    service.city_store = MagicMock()

    service.update(str(uuid.uuid4()), LocationUpdate(area="West Pune"))

    service.city_store.find_by_id.assert_not_called()


def test_location_list_near_uses_default_radius(db):
    db.execute_query.side_effect = [{"total": 0}, []]

    LocationService().find_all(LocationQuery(longitude=73.8, latitude=18.5))

    _, count_values = db.execute_query.call_args_list[0].args
    assert DEFAULT_LOCATION_RADIUS_METERS in count_values
    assert DEFAULT_LOCATION_RADIUS_METERS == 50000


def test_location_query_needs_both_coordinates():
    with pytest.raises(ValidationError):
        LocationQuery(longitude=73.8)


# ============================================================================
# Amenities
# ============================================================================

def test_amenity_tags_normalized():
    service = mocked(AmenityService())

    fields = service.create(
        AmenityCreate(name="Pool", category="recreational", tags=["Pool", " outdoor ", "pool"])
    )

    assert fields["tags"] == ["pool", "outdoor"]


def test_amenity_unknown_availability():
    service = mocked(AmenityService())

    with pytest.raises(ValidationException):
        service.find_by_availability("industrial")


def test_amenity_availability_matches_attribute():
    service = mocked(AmenityService())
    service.store.find_where.return_value = []

    service.find_by_availability("luxury")

    conditions = service.store.find_where.call_args.args[0]
    sql, params = conditions[0]
    assert sql == "attributes @> %s::jsonb"
    assert params[0].adapted == {"availability": {"luxury": True}}


def test_amenity_tags_required():
    service = mocked(AmenityService())

    with pytest.raises(ValidationException):
        service.find_by_tags(["  "])


# ============================================================================
# Base class
# ============================================================================

def test_service_without_usage_check_cannot_be_instantiated():
    class IncompleteService(MasterService):
        master_type = MasterType.CITY

    with pytest.raises(TypeError):
        IncompleteService()
