"""
Pydantic schemas for the individual master data types.
Each type has a Create model (required fields enforced), an Update model
(everything optional) and a Query model for its list endpoint.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from app.schemas.master_record import (
    MasterQuery,
    MasterRecordCreate,
    MasterRecordUpdate,
    NumericRangeQuery,
    validate_coordinates,
)


# ============================================================================
# Enums
# ============================================================================

class AmenityCategory(str, Enum):
    BASIC = "basic"
    RECREATIONAL = "recreational"
    SECURITY = "security"
    CONVENIENCE = "convenience"
    WELLNESS = "wellness"
    SPORTS = "sports"
    COMMUNITY = "community"
    PARKING = "parking"
    UTILITIES = "utilities"


class PropertyTypeCategory(str, Enum):
    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    MIXED_USE = "mixed_use"
    INDUSTRIAL = "industrial"
    AGRICULTURAL = "agricultural"
    INSTITUTIONAL = "institutional"


class LocationType(str, Enum):
    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    MIXED = "mixed"
    INDUSTRIAL = "industrial"
    IT_HUB = "it_hub"
    BUSINESS_DISTRICT = "business_district"
    SUBURB = "suburb"
    DOWNTOWN = "downtown"
    WATERFRONT = "waterfront"
    HILLSIDE = "hillside"


class LocationCategory(str, Enum):
    PRIME = "prime"
    PREMIUM = "premium"
    MID_RANGE = "mid_range"
    BUDGET = "budget"
    LUXURY = "luxury"
    AFFORDABLE = "affordable"
    UPCOMING = "upcoming"
    ESTABLISHED = "established"


class FloorType(str, Enum):
    BASEMENT = "basement"
    GROUND = "ground"
    MEZZANINE = "mezzanine"
    REGULAR = "regular"
    PENTHOUSE = "penthouse"
    ROOFTOP = "rooftop"
    PARKING = "parking"
    MECHANICAL = "mechanical"
    TERRACE = "terrace"


class FloorUsage(str, Enum):
    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    MIXED = "mixed"
    PARKING = "parking"
    AMENITY = "amenity"
    MECHANICAL = "mechanical"
    RETAIL = "retail"
    OFFICE = "office"


class TowerType(str, Enum):
    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    MIXED_USE = "mixed_use"
    OFFICE = "office"
    RETAIL = "retail"
    HOSPITALITY = "hospitality"
    INDUSTRIAL = "industrial"


class RoomType(str, Enum):
    STUDIO = "studio"
    ONE_BHK = "1bhk"
    TWO_BHK = "2bhk"
    THREE_BHK = "3bhk"
    FOUR_BHK = "4bhk"
    FIVE_BHK = "5bhk"
    PENTHOUSE = "penthouse"


class WashroomType(str, Enum):
    ATTACHED = "attached"
    COMMON = "common"
    POWDER_ROOM = "powder_room"
    MASTER_BATHROOM = "master_bathroom"
    GUEST_BATHROOM = "guest_bathroom"


# ============================================================================
# Shared mixins
# ============================================================================

class CoordinatesMixin(BaseModel):
    coordinates: Optional[List[float]] = Field(
        None, description="[longitude, latitude]", examples=[[73.8567, 18.5204]]
    )

    @field_validator("coordinates")
    @classmethod
    def check_coordinates(cls, v):
        return validate_coordinates(v)


class NumericFields(BaseModel):
    unit: Optional[str] = Field(None, max_length=20)
    min_value: Optional[float] = None
    max_value: Optional[float] = None

    @model_validator(mode="after")
    def check_bounds(self):
        if self.min_value is not None and self.max_value is not None and self.min_value > self.max_value:
            raise ValueError("min_value cannot be greater than max_value")
        return self


class NearQuery(BaseModel):
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    radius: Optional[float] = Field(None, gt=0, description="Radius in meters")

    @model_validator(mode="after")
    def check_point(self):
        if (self.longitude is None) != (self.latitude is None):
            raise ValueError("longitude and latitude must be provided together")
        if self.radius is not None and self.longitude is None:
            raise ValueError("radius requires longitude and latitude")
        return self


# ============================================================================
# City
# ============================================================================

class CityFields(CoordinatesMixin):
    country: Optional[str] = Field(None, min_length=1, max_length=100)
    timezone: Optional[str] = Field(None, max_length=50)
    pin_codes: Optional[List[str]] = None
    state_code: Optional[str] = Field(None, max_length=10)
    country_code: Optional[str] = Field(None, max_length=5)
    district: Optional[str] = Field(None, max_length=100)
    alternate_names: Optional[List[str]] = None
    average_property_price: Optional[float] = Field(None, ge=0)


class CityCreate(CityFields, MasterRecordCreate):
    state: str = Field(..., min_length=1, max_length=100)
    country: str = Field("India", min_length=1, max_length=100)


class CityUpdate(CityFields, MasterRecordUpdate):
    state: Optional[str] = Field(None, min_length=1, max_length=100)


class CityQuery(NearQuery, MasterQuery):
    state: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)
    pin_code: Optional[str] = Field(None, max_length=10)
    state_code: Optional[str] = Field(None, max_length=10)
    country_code: Optional[str] = Field(None, max_length=5)
    min_property_price: Optional[float] = Field(None, ge=0)
    max_property_price: Optional[float] = Field(None, ge=0)


# ============================================================================
# Location
# ============================================================================

class LocationFields(CoordinatesMixin):
    location_type: Optional[LocationType] = None
    location_category: Optional[LocationCategory] = None
    pincode: Optional[str] = Field(None, max_length=10)
    area: Optional[str] = Field(None, max_length=100)
    landmarks: Optional[List[str]] = None
    average_price: Optional[float] = Field(None, ge=0)


class LocationCreate(LocationFields, MasterRecordCreate):
    parent_id: str = Field(..., description="Id of the city this location belongs to")


class LocationUpdate(LocationFields, MasterRecordUpdate):
    parent_id: Optional[str] = None


class LocationQuery(NearQuery, MasterQuery):
    parent_id: Optional[str] = None
    location_type: Optional[LocationType] = None
    location_category: Optional[LocationCategory] = None
    pincode: Optional[str] = Field(None, max_length=10)


# ============================================================================
# Amenity
# ============================================================================

class AmenityAvailability(BaseModel):
    residential: bool = False
    commercial: bool = False
    luxury: bool = False
    basic: bool = False


class AmenityFields(BaseModel):
    icon: Optional[str] = Field(None, max_length=50)
    color: Optional[str] = Field(None, max_length=10)
    tags: Optional[List[str]] = None
    importance_level: Optional[int] = Field(None, ge=1, le=5)
    availability: Optional[AmenityAvailability] = None
    specifications: Optional[Dict[str, Any]] = None


class AmenityCreate(AmenityFields, MasterRecordCreate):
    category: AmenityCategory


class AmenityUpdate(AmenityFields, MasterRecordUpdate):
    category: Optional[AmenityCategory] = None


class AmenityQuery(MasterQuery):
    category: Optional[AmenityCategory] = None
    importance_level: Optional[int] = Field(None, ge=1, le=5)


# ============================================================================
# Property type
# ============================================================================

class PropertyTypeFields(BaseModel):
    icon: Optional[str] = Field(None, max_length=50)
    color: Optional[str] = Field(None, max_length=10)
    suitable_for: Optional[List[str]] = None
    popularity_rating: Optional[int] = Field(None, ge=1, le=5)
    specifications: Optional[Dict[str, Any]] = None


class PropertyTypeCreate(PropertyTypeFields, MasterRecordCreate):
    category: PropertyTypeCategory


class PropertyTypeUpdate(PropertyTypeFields, MasterRecordUpdate):
    category: Optional[PropertyTypeCategory] = None


class PropertyTypeQuery(MasterQuery):
    category: Optional[PropertyTypeCategory] = None


# ============================================================================
# Floor
# ============================================================================

class FloorFields(NumericFields):
    display_name: Optional[str] = Field(None, max_length=50)
    floor_type: Optional[FloorType] = None
    usage: Optional[FloorUsage] = None
    features: Optional[List[str]] = None
    price_multiplier: Optional[float] = Field(None, gt=0, le=10)
    is_available: Optional[bool] = None
    specifications: Optional[Dict[str, Any]] = None


class FloorCreate(FloorFields, MasterRecordCreate):
    numeric_value: int = Field(..., ge=-20, le=300, description="Floor number; 0 is ground, negative is basement")
    unit: str = Field("Floor", max_length=20)
    is_available: bool = True


class FloorUpdate(FloorFields, MasterRecordUpdate):
    numeric_value: Optional[int] = Field(None, ge=-20, le=300)


class FloorQuery(NumericRangeQuery):
    floor_type: Optional[FloorType] = None
    usage: Optional[FloorUsage] = None
    sort_by: str = Field("numeric_value", description="Field to sort by")


# ============================================================================
# Tower
# ============================================================================

class TowerFields(NumericFields):
    display_name: Optional[str] = Field(None, max_length=50)
    tower_type: Optional[TowerType] = None
    total_floors: Optional[int] = Field(None, ge=1, le=200)
    total_units: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None
    specifications: Optional[Dict[str, Any]] = None


class TowerCreate(TowerFields, MasterRecordCreate):
    numeric_value: int = Field(..., ge=1, description="Tower number")
    unit: str = Field("Tower", max_length=20)
    is_active: bool = True


class TowerUpdate(TowerFields, MasterRecordUpdate):
    numeric_value: Optional[int] = Field(None, ge=1)


class TowerQuery(NumericRangeQuery):
    tower_type: Optional[TowerType] = None


# ============================================================================
# Room
# ============================================================================

class RoomFields(NumericFields):
    display_name: Optional[str] = Field(None, max_length=50)
    room_type: Optional[RoomType] = None
    features: Optional[List[str]] = None
    typical_area: Optional[float] = Field(None, ge=0, description="Typical carpet area in sq ft")
    popularity_rating: Optional[int] = Field(None, ge=1, le=5)


class RoomCreate(RoomFields, MasterRecordCreate):
    numeric_value: int = Field(..., ge=0, le=10, description="Number of bedrooms")
    unit: str = Field("BHK", max_length=20)


class RoomUpdate(RoomFields, MasterRecordUpdate):
    numeric_value: Optional[int] = Field(None, ge=0, le=10)


class RoomQuery(NumericRangeQuery):
    room_type: Optional[RoomType] = None


# ============================================================================
# Washroom
# ============================================================================

class WashroomFields(NumericFields):
    display_name: Optional[str] = Field(None, max_length=50)
    washroom_type: Optional[WashroomType] = None
    features: Optional[List[str]] = None
    typical_area: Optional[float] = Field(None, ge=0, description="Typical area in sq ft")
    popularity_rating: Optional[int] = Field(None, ge=1, le=5)
    specifications: Optional[Dict[str, Any]] = None


class WashroomCreate(WashroomFields, MasterRecordCreate):
    numeric_value: int = Field(..., ge=0, le=10, description="Number of bathrooms")
    unit: str = Field("Bathroom", max_length=20)


class WashroomUpdate(WashroomFields, MasterRecordUpdate):
    numeric_value: Optional[int] = Field(None, ge=0, le=10)


class WashroomQuery(NumericRangeQuery):
    washroom_type: Optional[WashroomType] = None
