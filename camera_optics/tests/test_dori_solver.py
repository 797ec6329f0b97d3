"""Tests for the DORI parameter-range solver: every fixed/free combination."""

import itertools
import logging
import math

import pytest

from camera_optics import constants, dori_solver
from camera_optics.dori_solver import NoDoriTargetError, calculate_dori_parameter_ranges
from camera_optics.types import DoriTargets, ParameterConstraint, ParameterRange

ASPECT = constants.STANDARD_ASPECT_RATIO
ID_10M = DoriTargets(identification_m=10.0)


def _fov_deg(sensor_mm: float, focal_mm: float) -> float:
    return math.degrees(2.0 * math.atan(sensor_mm / (2.0 * focal_mm)))


def _solve(**constraints):
    return calculate_dori_parameter_ranges(ID_10M, ParameterConstraint(**constraints))


def _assert_range(value: ParameterRange, lo: float, hi: float, rel: float = 1e-9):
    assert value is not None
    assert value.min == pytest.approx(lo, rel=rel)
    assert value.max == pytest.approx(hi, rel=rel)


# ---------------------------------------------------------------------------
# Target selection / precondition
# ---------------------------------------------------------------------------

class TestTargetSelection:
    def test_no_target_raises(self):
        with pytest.raises(NoDoriTargetError, match="At least one DORI target"):
            calculate_dori_parameter_ranges(DoriTargets(), ParameterConstraint())

    def test_no_target_error_is_value_error(self):
        with pytest.raises(ValueError):
            calculate_dori_parameter_ranges(DoriTargets(), ParameterConstraint(focal_length_mm=8.0))

    def test_identification_wins(self):
        target = dori_solver.select_target(
            DoriTargets(detection_m=500.0, recognition_m=40.0, identification_m=10.0)
        )
        assert target.category == "identification"
        assert target.distance_m == 10.0
        assert target.px_per_m == constants.IDENTIFICATION_PX_PER_M

    def test_priority_order(self):
        assert dori_solver.select_target(DoriTargets(detection_m=1.0, observation_m=2.0)).category == "observation"
        assert dori_solver.select_target(DoriTargets(detection_m=1.0, recognition_m=2.0)).category == "recognition"
        assert dori_solver.select_target(DoriTargets(detection_m=1.0)).px_per_m == constants.DETECTION_PX_PER_M

    @pytest.mark.parametrize("targets", [
        DoriTargets(recognition_m=20.0),
        DoriTargets(observation_m=40.0),
        DoriTargets(detection_m=100.0),
    ])
    def test_equivalent_targets_give_same_ranges(self, targets):
        # 10 m identification == 20 m recognition == 40 m observation == 100 m detection
        constraints = ParameterConstraint(focal_length_mm=8.0, pixel_width=1920)
        expected = calculate_dori_parameter_ranges(ID_10M, constraints)
        actual = calculate_dori_parameter_ranges(targets, constraints)
        assert actual.sensor_width_mm.min == pytest.approx(expected.sensor_width_mm.min, rel=1e-12)


# ---------------------------------------------------------------------------
# FOV fixed
# ---------------------------------------------------------------------------

class TestFovFixed:
    def test_fov_and_focal_determine_sensor(self):
        ranges = _solve(horizontal_fov_deg=60.0, focal_length_mm=25.0)
        sensor = 2.0 * 25.0 * math.tan(math.radians(30.0))

        _assert_range(ranges.sensor_width_mm, sensor, sensor)
        assert ranges.sensor_width_mm.min == pytest.approx(28.87, abs=0.01)
        assert ranges.sensor_width_mm.is_determined
        assert ranges.focal_length_mm is None
        assert ranges.horizontal_fov_deg is None

        required = 10.0 * sensor * 250.0 / 25.0
        _assert_range(ranges.pixel_width, required, 8192.0)
        _assert_range(ranges.pixel_height, required / ASPECT, 8192.0 / ASPECT)
        _assert_range(ranges.sensor_height_mm, sensor / ASPECT, sensor / ASPECT)

    def test_fov_focal_pixel_suppresses_pixel_range(self):
        ranges = _solve(horizontal_fov_deg=60.0, focal_length_mm=25.0, pixel_width=4000)
        assert ranges.pixel_width is None
        assert ranges.focal_length_mm is None
        assert ranges.sensor_width_mm.is_determined
        _assert_range(ranges.pixel_height, 4000 / ASPECT, 4000 / ASPECT)

    def test_inconsistent_sensor_is_recomputed(self):
        ranges = _solve(horizontal_fov_deg=60.0, focal_length_mm=25.0, sensor_width_mm=10.0)
        sensor = 2.0 * 25.0 * math.tan(math.radians(30.0))
        _assert_range(ranges.sensor_width_mm, sensor, sensor)
        assert ranges.sensor_width_mm.min != pytest.approx(10.0)

    def test_fov_sensor_pixel_determines_focal(self):
        ranges = _solve(horizontal_fov_deg=8.0, sensor_width_mm=4.2, pixel_width=6000)
        focal = 4.2 / (2.0 * math.tan(math.radians(4.0)))

        _assert_range(ranges.focal_length_mm, focal, focal)
        assert ranges.focal_length_mm.min == pytest.approx(30.03, abs=0.01)
        assert ranges.sensor_width_mm is None
        assert ranges.pixel_width is None
        assert ranges.horizontal_fov_deg is None
        _assert_range(ranges.sensor_height_mm, 3.15, 3.15)
        _assert_range(ranges.pixel_height, 4500.0, 4500.0)

    def test_fov_and_sensor_give_pixel_range(self):
        ranges = _solve(horizontal_fov_deg=45.0, sensor_width_mm=6.0)
        tan_half = math.tan(math.radians(22.5))
        focal = 6.0 / (2.0 * tan_half)

        assert ranges.focal_length_mm.is_determined
        assert ranges.focal_length_mm.min == pytest.approx(focal)
        _assert_range(ranges.pixel_width, 10.0 * 2.0 * tan_half * 250.0, 8192.0)
        _assert_range(ranges.sensor_height_mm, 4.5, 4.5)

    def test_fov_and_pixel_bound_focal_by_sensor_limits(self):
        ranges = _solve(horizontal_fov_deg=60.0, pixel_width=4000)
        tan_half = math.tan(math.radians(30.0))

        _assert_range(ranges.focal_length_mm, 3.0 / (2 * tan_half), 50.0 / (2 * tan_half))
        _assert_range(ranges.sensor_width_mm, 3.0, 50.0)
        _assert_range(ranges.sensor_height_mm, 3.0 / ASPECT, 50.0 / ASPECT)
        assert ranges.pixel_width is None

    def test_narrow_fov_clamps_focal_to_maximum(self):
        ranges = _solve(horizontal_fov_deg=1.0)
        tan_half = math.tan(math.radians(0.5))

        _assert_range(ranges.focal_length_mm, 3.0 / (2 * tan_half), 400.0)
        _assert_range(ranges.sensor_width_mm, 3.0, 2.0 * 400.0 * tan_half)

    def test_wide_fov_clamps_focal_to_minimum(self):
        ranges = _solve(horizontal_fov_deg=120.0)
        tan_half = math.tan(math.radians(60.0))

        assert ranges.focal_length_mm.min == pytest.approx(2.0)
        assert ranges.sensor_width_mm.min == pytest.approx(4.0 * tan_half)

    def test_fov_only_pixel_floor(self):
        ranges = _solve(horizontal_fov_deg=60.0)
        required = 10.0 * 2.0 * math.tan(math.radians(30.0)) * 250.0

        _assert_range(ranges.pixel_width, required, 8192.0)
        assert ranges.horizontal_fov_deg is None

    def test_fov_only_small_target_uses_minimum_pixels(self):
        ranges = calculate_dori_parameter_ranges(
            DoriTargets(identification_m=0.5),
            ParameterConstraint(horizontal_fov_deg=30.0),
        )
        _assert_range(ranges.pixel_width, 640.0, 8192.0)

    def test_fixed_heights_are_not_reported(self):
        ranges = _solve(horizontal_fov_deg=45.0, sensor_width_mm=6.0, sensor_height_mm=4.5, pixel_height=1080)
        assert ranges.sensor_height_mm is None
        assert ranges.pixel_height is None
        assert ranges.focal_length_mm.is_determined


# ---------------------------------------------------------------------------
# FOV free
# ---------------------------------------------------------------------------

class TestFocalFixed:
    def test_focal_and_sensor(self):
        ranges = _solve(focal_length_mm=25.0, sensor_width_mm=8.0)

        _assert_range(ranges.pixel_width, 800.0, 8192.0)
        fov = _fov_deg(8.0, 25.0)
        _assert_range(ranges.horizontal_fov_deg, fov, fov)
        _assert_range(ranges.sensor_height_mm, 6.0, 6.0)
        _assert_range(ranges.pixel_height, 600.0, 8192.0 / ASPECT)
        assert ranges.focal_length_mm is None
        assert ranges.sensor_width_mm is None

    def test_focal_and_sensor_small_requirement_clamps_to_minimum(self):
        ranges = _solve(focal_length_mm=50.0, sensor_width_mm=8.0)
        # 10 * 8 * 250 / 50 = 400 < 640
        _assert_range(ranges.pixel_width, 640.0, 8192.0)

    def test_fixed_sensor_height_still_fills_pixels_at_four_by_three(self):
        ranges = _solve(focal_length_mm=25.0, sensor_width_mm=8.0, sensor_height_mm=6.0)
        assert ranges.sensor_height_mm is None
        _assert_range(ranges.pixel_height, 600.0, 8192.0 / ASPECT)

    def test_widescreen_sensor_height_does_not_change_pixel_aspect(self):
        ranges = _solve(focal_length_mm=25.0, sensor_width_mm=8.0, sensor_height_mm=4.5)

        assert ranges.sensor_height_mm is None
        _assert_range(ranges.pixel_width, 800.0, 8192.0)
        _assert_range(ranges.pixel_height, 600.0, 6144.0)
        assert ranges.pixel_width.min / ranges.pixel_height.min == pytest.approx(ASPECT, rel=1e-9)
        assert ranges.pixel_width.max / ranges.pixel_height.max == pytest.approx(ASPECT, rel=1e-9)

    def test_focal_sensor_pixel_reports_fov_only(self):
        ranges = _solve(focal_length_mm=50.0, sensor_width_mm=12.0, pixel_width=1920,
                        sensor_height_mm=9.0, pixel_height=1440)
        fov = _fov_deg(12.0, 50.0)
        _assert_range(ranges.horizontal_fov_deg, fov, fov)
        assert ranges.pixel_width is None
        assert ranges.sensor_width_mm is None
        assert ranges.sensor_height_mm is None
        assert ranges.pixel_height is None
        assert ranges.focal_length_mm is None

    def test_focal_and_pixel_determine_sensor(self):
        ranges = _solve(focal_length_mm=8.0, pixel_width=1920)
        sensor = 8.0 * 1920 / (10.0 * 250.0)

        _assert_range(ranges.sensor_width_mm, sensor, sensor)
        fov = _fov_deg(sensor, 8.0)
        _assert_range(ranges.horizontal_fov_deg, fov, fov)
        _assert_range(ranges.sensor_height_mm, sensor / ASPECT, sensor / ASPECT)
        _assert_range(ranges.pixel_height, 1440.0, 1440.0)

    def test_focal_only(self):
        ranges = _solve(focal_length_mm=25.0)

        _assert_range(ranges.sensor_width_mm, 3.0, 50.0)
        _assert_range(ranges.pixel_width, 640.0, 8192.0)
        _assert_range(ranges.horizontal_fov_deg, _fov_deg(3.0, 25.0), _fov_deg(50.0, 25.0))
        assert ranges.focal_length_mm is None


class TestSensorFixed:
    def test_sensor_and_pixel_give_minimum_focal(self):
        ranges = _solve(sensor_width_mm=6.4, pixel_width=1920)
        min_focal = 10.0 * 6.4 * 250.0 / 1920

        _assert_range(ranges.focal_length_mm, min_focal, 400.0)
        _assert_range(ranges.horizontal_fov_deg, _fov_deg(6.4, 400.0), _fov_deg(6.4, min_focal))
        assert ranges.pixel_width is None
        assert ranges.sensor_width_mm is None

    def test_sensor_and_pixel_clamp_to_minimum_focal(self):
        ranges = calculate_dori_parameter_ranges(
            DoriTargets(identification_m=1.0),
            ParameterConstraint(sensor_width_mm=6.4, pixel_width=1920),
        )
        # 1 * 6.4 * 250 / 1920 = 0.83 < 2.0
        _assert_range(ranges.focal_length_mm, 2.0, 400.0)

    def test_all_dimensions_fixed_except_focal(self):
        ranges = _solve(sensor_width_mm=8.0, sensor_height_mm=6.0, pixel_width=1920, pixel_height=1080)
        assert ranges.sensor_width_mm is None
        assert ranges.sensor_height_mm is None
        assert ranges.pixel_width is None
        assert ranges.pixel_height is None
        assert ranges.focal_length_mm is not None

    def test_sensor_only(self):
        ranges = _solve(sensor_width_mm=8.0)

        _assert_range(ranges.focal_length_mm, 2.0, 400.0)
        _assert_range(ranges.pixel_width, 640.0, 8192.0)
        _assert_range(ranges.horizontal_fov_deg, _fov_deg(8.0, 400.0), _fov_deg(8.0, 2.0))
        _assert_range(ranges.sensor_height_mm, 6.0, 6.0)

    def test_unreachable_target_is_reported_not_raised(self, caplog):
        with caplog.at_level(logging.WARNING, logger="camera_optics.dori_solver"):
            ranges = calculate_dori_parameter_ranges(
                DoriTargets(identification_m=1000.0),
                ParameterConstraint(sensor_width_mm=6.4, pixel_width=1920),
            )
        assert not ranges.focal_length_mm.is_feasible
        assert "No feasible focal_length_mm" in caplog.text

    def test_zero_fov_is_reported_as_undefined(self, caplog):
        with caplog.at_level(logging.WARNING, logger="camera_optics.dori_solver"):
            ranges = _solve(horizontal_fov_deg=0.0)
        assert math.isnan(ranges.sensor_width_mm.min)
        assert ranges.to_dict()["sensor_width_mm"]["min"] is None
        assert "Undefined sensor_width_mm" in caplog.text
        assert "minimum nan" not in caplog.text


class TestPixelFixed:
    def test_pixel_only(self):
        ranges = _solve(pixel_width=1920)
        d_times_p = 10.0 * 250.0

        _assert_range(ranges.focal_length_mm, 3.0 * d_times_p / 1920, 50.0 * d_times_p / 1920)
        # 2 * 1920 / 2500 < 3 and 400 * 1920 / 2500 > 50: both clamp
        _assert_range(ranges.sensor_width_mm, 3.0, 50.0)
        _assert_range(ranges.pixel_height, 1440.0, 1440.0)
        assert ranges.pixel_width is None

    def test_pixel_only_far_target_limits_sensor(self):
        ranges = calculate_dori_parameter_ranges(
            DoriTargets(identification_m=100.0),
            ParameterConstraint(pixel_width=2000),
        )
        d_times_p = 100.0 * 250.0
        _assert_range(ranges.sensor_width_mm, 3.0, 400.0 * 2000 / d_times_p)
        _assert_range(ranges.focal_length_mm, 3.0 * d_times_p / 2000, 400.0)


class TestNothingFixed:
    def test_full_physical_bounds(self):
        ranges = _solve()

        _assert_range(ranges.sensor_width_mm, 3.0, 50.0)
        _assert_range(ranges.pixel_width, 640.0, 8192.0)
        _assert_range(ranges.focal_length_mm, 2.0, 400.0)

    def test_fov_range_within_half_circle(self):
        fov = _solve().horizontal_fov_deg

        assert 0.0 < fov.min < fov.max < 180.0
        assert fov.min == pytest.approx(_fov_deg(3.0, 400.0))
        assert fov.max == pytest.approx(_fov_deg(50.0, 2.0))

    def test_heights_default_to_four_by_three(self):
        ranges = _solve()
        _assert_range(ranges.sensor_height_mm, 2.25, 37.5)
        _assert_range(ranges.pixel_height, 480.0, 6144.0)


# ---------------------------------------------------------------------------
# Properties over all 16 combinations
# ---------------------------------------------------------------------------

_VALUES = {
    "horizontal_fov_deg": 30.0,
    "focal_length_mm": 25.0,
    "sensor_width_mm": 8.0,
    "pixel_width": 1920,
}
_COMBOS = list(itertools.product([True, False], repeat=4))


def _constraints_for(key) -> ParameterConstraint:
    return ParameterConstraint(**{
        name: value for name, value, fixed in zip(_VALUES, _VALUES.values(), key) if fixed
    })


class TestAllCombinations:
    def test_dispatch_table_is_complete(self):
        assert set(dori_solver._CASES) == set(_COMBOS)

    @pytest.mark.parametrize("key", _COMBOS)
    def test_case_key(self, key):
        assert dori_solver.case_key(_constraints_for(key)) == key

    @pytest.mark.parametrize("key", _COMBOS)
    def test_fixed_inputs_are_omitted(self, key):
        constraints = _constraints_for(key)
        ranges = calculate_dori_parameter_ranges(ID_10M, constraints)
        fov_fixed, focal_fixed = key[0], key[1]

        for name in constraints.fixed_fields():
            if name == "sensor_width_mm" and fov_fixed and focal_fixed:
                # Recomputed from FOV and focal length
                assert getattr(ranges, name).is_determined
            else:
                assert getattr(ranges, name) is None, name

    @pytest.mark.parametrize("key", _COMBOS)
    def test_heights_follow_widths_at_four_by_three(self, key):
        constraints = _constraints_for(key)
        ranges = calculate_dori_parameter_ranges(ID_10M, constraints)

        for height, width, fixed_width in (
            ("sensor_height_mm", "sensor_width_mm", constraints.sensor_width_mm),
            ("pixel_height", "pixel_width", constraints.pixel_width),
        ):
            height_range = getattr(ranges, height)
            width_range = getattr(ranges, width) or ParameterRange.point(float(fixed_width))
            assert width_range.min / height_range.min == pytest.approx(ASPECT, rel=1e-9)
            assert width_range.max / height_range.max == pytest.approx(ASPECT, rel=1e-9)

    @pytest.mark.parametrize("key", _COMBOS)
    def test_pixel_height_ignores_fixed_sensor_height(self, key):
        constraints = ParameterConstraint(sensor_height_mm=4.5, **_constraints_for(key).to_dict())
        ranges = calculate_dori_parameter_ranges(ID_10M, constraints)

        width = ranges.pixel_width or ParameterRange.point(float(constraints.pixel_width))
        assert width.min / ranges.pixel_height.min == pytest.approx(ASPECT, rel=1e-9)
        assert width.max / ranges.pixel_height.max == pytest.approx(ASPECT, rel=1e-9)
        assert ranges.sensor_height_mm is None

    @pytest.mark.parametrize("key", _COMBOS)
    def test_ranges_are_ordered(self, key):
        ranges = calculate_dori_parameter_ranges(ID_10M, _constraints_for(key))
        for value in ranges.to_dict().values():
            assert value["min"] <= value["max"]

    @pytest.mark.parametrize("constraints, field", [
        (ParameterConstraint(horizontal_fov_deg=30.0, focal_length_mm=25.0), "sensor_width_mm"),
        (ParameterConstraint(horizontal_fov_deg=30.0, sensor_width_mm=8.0), "focal_length_mm"),
        (ParameterConstraint(focal_length_mm=25.0, sensor_width_mm=8.0), "horizontal_fov_deg"),
    ])
    def test_two_pinned_determine_the_third(self, constraints, field):
        value = getattr(calculate_dori_parameter_ranges(ID_10M, constraints), field)
        assert value.min == pytest.approx(value.max, rel=1e-9)
