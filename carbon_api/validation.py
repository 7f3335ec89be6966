# carbon_api/validation.py
import math

from .footprint import MAX_DISTANCE_KM, MAX_EMISSION_FACTOR, CalculationInput, GeoPoint


class ValidationError(ValueError):
    """Request payload rejected; message is returned to the caller as-is."""


REQUIRED_FIELDS = ('quantity', 'tonnesPerUnit', 'transportMode', 'origin', 'destination')


def _positive_float(value, name):
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a number")
    if not math.isfinite(number) or number <= 0:
        raise ValidationError(f"{name} must be greater than zero")
    return number

def _coordinate(value, low, high, name):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{name} must be a number")
    if not math.isfinite(value) or not low <= value <= high:
        raise ValidationError(f"{name} must be between {low} and {high}")
    return float(value)

def parse_geo_point(coords, name):
    """Accepts {"lat": .., "lng": ..} and returns a GeoPoint."""
    if not isinstance(coords, dict) or 'lat' not in coords or 'lng' not in coords:
        raise ValidationError(f"{name} must contain lat and lng")
    return GeoPoint(
        latitude=_coordinate(coords['lat'], -90, 90, f"{name}.lat"),
        longitude=_coordinate(coords['lng'], -180, 180, f"{name}.lng"),
    )

def parse_fuel_selection(fuel_types):
    """
    Normalize fuel selection to a frozenset of tags.
    Accepts a record of boolean flags ({"diesel": true, "bev": false}) or a list of tags.
    """
    if not fuel_types:
        return frozenset()
    if isinstance(fuel_types, dict):
        return frozenset(str(k) for k, v in fuel_types.items() if v)
    if isinstance(fuel_types, (list, tuple)):
        return frozenset(str(f) for f in fuel_types if f)
    raise ValidationError("fuelTypes must be an object of flags or a list of fuel names")

def parse_calculation_request(data):
    """
    Validate a calculate-carbon payload.
    Returns (CalculationInput, normalized request fields to persist alongside the result).
    """
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")

    if any(not data.get(k) for k in REQUIRED_FIELDS):
        raise ValidationError("Missing required fields")
    if not data.get('originCoords') or not data.get('destinationCoords'):
        raise ValidationError("Origin and destination coordinates are required")

    quantity = _positive_float(data['quantity'], 'quantity')
    tonnes_per_unit = _positive_float(data['tonnesPerUnit'], 'tonnesPerUnit')
    if not math.isfinite(quantity * tonnes_per_unit * MAX_DISTANCE_KM * MAX_EMISSION_FACTOR):
        raise ValidationError("quantity x tonnesPerUnit is too large")
    origin = parse_geo_point(data['originCoords'], 'originCoords')
    destination = parse_geo_point(data['destinationCoords'], 'destinationCoords')
    fuels = parse_fuel_selection(data.get('fuelTypes'))
    cooled = bool(data.get('cooledTransport', False))
    transport_mode = str(data['transportMode'])

    calc = CalculationInput(
        quantity=quantity,
        unit=data.get('unit'),
        tonnes_per_unit=tonnes_per_unit,
        transport_mode=transport_mode,
        origin=origin,
        destination=destination,
        fuels=fuels,
        cooled=cooled,
    )
    fields = {
        'userId': data.get('userId') or 'anonymous',
        'quantity': quantity,
        'unit': data.get('unit'),
        'tonnesPerUnit': tonnes_per_unit,
        'cooledTransport': cooled,
        'transportMode': transport_mode,
        'fuelTypes': data.get('fuelTypes') or {},
        'origin': data['origin'],
        'destination': data['destination'],
        'originCoords': {'lat': origin.latitude, 'lng': origin.longitude},
        'destinationCoords': {'lat': destination.latitude, 'lng': destination.longitude},
        'originDetails': data.get('originDetails'),
        'destinationDetails': data.get('destinationDetails'),
    }
    return calc, fields
