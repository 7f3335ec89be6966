# carbon_api/footprint.py
"""
Carbon footprint engine for a single freight shipment.

Pure functions only: no I/O, no shared state. The request layer validates
inputs before anything here is called.
"""
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable

EARTH_RADIUS_KM = 6371.0

# One tree absorbs ~21 kg CO2 per year
KG_CO2_PER_TREE = 21

COOLING_PENALTY = 1.3


class TransportMode(str, Enum):
    TRUCK = 'truck'
    SHIP = 'ship'
    PLANE = 'plane'
    TRAIN = 'train'
    INTERMODAL = 'intermodal'
    OTHER = 'other'


class FuelType(str, Enum):
    DIESEL = 'diesel'
    CNG = 'cng'
    BEV = 'bev'
    HVO = 'hvo'


# kg CO2 per tonne-km
MODE_FACTORS = {
    TransportMode.TRUCK.value: 0.12,
    TransportMode.SHIP.value: 0.04,
    TransportMode.PLANE.value: 0.5,
    TransportMode.TRAIN.value: 0.03,
    TransportMode.INTERMODAL.value: 0.08,
}
DEFAULT_MODE_FACTOR = 0.10

TRUCK_FUEL_FACTORS = {
    FuelType.DIESEL.value: 0.12,
    FuelType.CNG.value: 0.10,
    FuelType.BEV.value: 0.04,
    FuelType.HVO.value: 0.08,
}
# Unknown fuel tags are averaged in as diesel
DEFAULT_FUEL_FACTOR = 0.12

# Upper bounds, used to reject shipments whose footprint would overflow a float
MAX_EMISSION_FACTOR = max(list(MODE_FACTORS.values()) + list(TRUCK_FUEL_FACTORS.values()) + [DEFAULT_MODE_FACTOR]) * COOLING_PENALTY
MAX_DISTANCE_KM = math.pi * EARTH_RADIUS_KM


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class CalculationInput:
    quantity: float
    unit: str
    tonnes_per_unit: float
    transport_mode: str
    origin: GeoPoint
    destination: GeoPoint
    fuels: FrozenSet[str] = field(default_factory=frozenset)
    cooled: bool = False


@dataclass(frozen=True)
class CalculationResult:
    total_weight_tonnes: float
    distance_km: float
    emission_factor: float
    carbon_footprint_kg: float
    trees_needed: int

    def as_record(self) -> dict:
        """Presentation values, keyed the way the API stores and returns them."""
        return {
            'totalWeight': self.total_weight_tonnes,
            'distance': round(self.distance_km, 2),
            'emissionFactor': round(self.emission_factor, 4),
            'carbonFootprint': round(self.carbon_footprint_kg, 2),
            'treesNeeded': self.trees_needed,
        }


def _tag_value(tag) -> str:
    return tag.value if isinstance(tag, Enum) else tag


def distance(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in km between two points (Haversine)."""
    d_lat = math.radians(b.latitude - a.latitude)
    d_lon = math.radians(b.longitude - a.longitude)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(a.latitude)) * math.cos(math.radians(b.latitude))
        * math.sin(d_lon / 2) ** 2
    )
    # Rounding can push h just outside [0, 1] for antipodal points
    h = min(1.0, max(0.0, h))
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_KM * c


def emission_factor(mode, fuels: Iterable[str] = (), cooled: bool = False) -> float:
    """
    Return kg CO2 per tonne-km for a transport configuration.
    Truck uses the mean of the selected fuel factors when any are selected;
    unknown modes fall back to 0.10. Cooling adds a flat 30% last.
    """
    mode = _tag_value(mode)
    factor = MODE_FACTORS.get(mode, DEFAULT_MODE_FACTOR)

    if mode == TransportMode.TRUCK.value:
        selected = [_tag_value(f) for f in fuels]
        if selected:
            factor = sum(TRUCK_FUEL_FACTORS.get(f, DEFAULT_FUEL_FACTOR) for f in selected) / len(selected)

    if cooled:
        factor *= COOLING_PENALTY
    return factor


def trees_needed(carbon_footprint_kg: float) -> int:
    """Trees needed for a year to absorb the footprint, rounded up."""
    return max(0, math.ceil(carbon_footprint_kg / KG_CO2_PER_TREE))


def compute_footprint(calc: CalculationInput) -> CalculationResult:
    total_weight = calc.quantity * calc.tonnes_per_unit
    distance_km = distance(calc.origin, calc.destination)
    factor = emission_factor(calc.transport_mode, calc.fuels, calc.cooled)
    footprint = total_weight * distance_km * factor
    return CalculationResult(
        total_weight_tonnes=total_weight,
        distance_km=distance_km,
        emission_factor=factor,
        carbon_footprint_kg=footprint,
        trees_needed=trees_needed(footprint),
    )
