"""Tests for carbon_api.footprint -- distance, emission factors, footprint."""

import math

import pytest
from carbon_api.footprint import (
    CalculationInput,
    FuelType,
    GeoPoint,
    TransportMode,
    compute_footprint,
    distance,
    emission_factor,
    trees_needed,
)

BERLIN = GeoPoint(52.52, 13.405)
PARIS = GeoPoint(48.8566, 2.3522)


class TestDistance:
    def test_same_point_is_zero(self):
        assert distance(BERLIN, BERLIN) == 0

    def test_symmetric(self):
        assert distance(BERLIN, PARIS) == pytest.approx(distance(PARIS, BERLIN))

    def test_quarter_great_circle(self):
        d = distance(GeoPoint(0, 0), GeoPoint(0, 90))
        assert d == pytest.approx(10007.5, abs=0.1)

    def test_antipodes_half_circumference(self):
        d = distance(GeoPoint(0, 0), GeoPoint(0, 180))
        assert d == pytest.approx(math.pi * 6371, rel=1e-9)

    def test_berlin_paris(self):
        assert distance(BERLIN, PARIS) == pytest.approx(877.5, abs=1.0)

    def test_never_negative(self):
        assert distance(GeoPoint(-45, -170), GeoPoint(60, 170)) > 0

    @pytest.mark.parametrize("lat", [-89.9, -74.6, -45.0, -12.3, 0.0, 12.3, 45.0, 74.6, 89.9])
    @pytest.mark.parametrize("lon", [-180.0, -90.0, -0.1, 0.0, 33.3, 179.9])
    def test_antipodal_pairs(self, lat, lon):
        antipode = GeoPoint(-lat, lon + 180 if lon <= 0 else lon - 180)
        d = distance(GeoPoint(lat, lon), antipode)
        assert d == pytest.approx(math.pi * 6371, rel=1e-6)

    def test_out_of_range_coordinates_still_defined(self):
        d = distance(GeoPoint(120, 400), GeoPoint(-95, -200))
        assert math.isfinite(d)
        assert d >= 0


class TestEmissionFactor:
    @pytest.mark.parametrize("mode,expected", [
        ("ship", 0.04),
        ("plane", 0.5),
        ("train", 0.03),
        ("intermodal", 0.08),
        ("truck", 0.12),
        ("other", 0.10),
        ("unknown-mode", 0.10),
    ])
    def test_base_factors(self, mode, expected):
        assert emission_factor(mode, set(), False) == pytest.approx(expected)

    def test_accepts_enum_members(self):
        assert emission_factor(TransportMode.SHIP) == pytest.approx(0.04)
        assert emission_factor(TransportMode.TRUCK, {FuelType.BEV}) == pytest.approx(0.04)

    def test_cooled_plane(self):
        assert emission_factor("plane", set(), True) == pytest.approx(0.65)

    def test_truck_fuel_mean(self):
        assert emission_factor("truck", {"diesel", "bev"}, False) == pytest.approx(0.08)

    def test_truck_all_fuels(self):
        expected = (0.12 + 0.10 + 0.04 + 0.08) / 4
        assert emission_factor("truck", {"diesel", "cng", "bev", "hvo"}) == pytest.approx(expected)

    def test_unknown_fuel_counts_as_diesel(self):
        assert emission_factor("truck", {"bev", "hydrogen"}) == pytest.approx((0.04 + 0.12) / 2)

    def test_fuels_ignored_for_other_modes(self):
        assert emission_factor("ship", {"bev"}) == pytest.approx(0.04)

    def test_cooling_applied_after_fuel_mean(self):
        assert emission_factor("truck", {"hvo"}, True) == pytest.approx(0.08 * 1.3)

    def test_cooled_unknown_mode(self):
        assert emission_factor("barge", set(), True) == pytest.approx(0.13)


class TestTreesNeeded:
    def test_exact_multiple(self):
        assert trees_needed(21.0) == 1

    def test_rounds_up(self):
        assert trees_needed(21.01) == 2

    def test_zero(self):
        assert trees_needed(0) == 0


class TestComputeFootprint:
    def _input(self, **overrides):
        values = dict(
            quantity=10,
            unit="pallets",
            tonnes_per_unit=1,
            transport_mode="train",
            origin=BERLIN,
            destination=BERLIN,
        )
        values.update(overrides)
        return CalculationInput(**values)

    def test_same_origin_and_destination(self):
        result = compute_footprint(self._input())
        assert result.total_weight_tonnes == 10
        assert result.distance_km == 0
        assert result.carbon_footprint_kg == 0
        assert result.trees_needed == 0

    def test_composition(self):
        calc = self._input(quantity=5, tonnes_per_unit=2, transport_mode="truck",
                           destination=PARIS, fuels=frozenset({"diesel", "bev"}), cooled=True)
        result = compute_footprint(calc)
        expected = 10 * distance(BERLIN, PARIS) * 0.08 * 1.3
        assert result.emission_factor == pytest.approx(0.104)
        assert result.carbon_footprint_kg == pytest.approx(expected)
        assert result.trees_needed == math.ceil(result.carbon_footprint_kg / 21)

    def test_deterministic(self):
        calc = self._input(transport_mode="plane", destination=PARIS)
        assert compute_footprint(calc) == compute_footprint(calc)

    def test_as_record_rounding(self):
        result = compute_footprint(self._input(transport_mode="plane", destination=PARIS))
        record = result.as_record()
        assert record["distance"] == round(result.distance_km, 2)
        assert record["emissionFactor"] == 0.5
        assert record["carbonFootprint"] == round(result.carbon_footprint_kg, 2)
        assert record["treesNeeded"] == result.trees_needed
        assert record["totalWeight"] == 10
