from .footprint import (
    CalculationInput,
    CalculationResult,
    FuelType,
    GeoPoint,
    TransportMode,
    compute_footprint,
    distance,
    emission_factor,
    trees_needed,
)
