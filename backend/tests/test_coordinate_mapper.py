"""
Tests for pointer/display/natural coordinate mapping.

Run with: pytest tests/test_coordinate_mapper.py -v
"""
import pytest

from domain.models import Point, Transform
from services.coordinate_mapper import CoordinateMapper


def _mapper(natural=(4000, 3000), display=(400, 300), left=0.0, top=0.0):
    mapper = CoordinateMapper(*natural)
    mapper.measure(display[0], display[1], left, top)
    return mapper


class TestScale:
    def test_scale_factors_from_display_over_natural(self):
        mapper = _mapper()
        assert mapper.scale_x == pytest.approx(0.1)
        assert mapper.scale_y == pytest.approx(0.1)

    def test_not_ready_until_both_sizes_known(self):
        mapper = CoordinateMapper()
        assert not mapper.is_ready
        mapper.measure(400, 300)
        assert not mapper.is_ready
        mapper.set_natural_size(4000, 3000)
        assert mapper.is_ready

    def test_zero_natural_size_is_not_ready(self):
        mapper = _mapper(natural=(0, 0))
        assert not mapper.is_ready
        assert mapper.device_to_natural(10, 10) is None

    def test_label_scale_uses_smaller_axis_and_zoom(self):
        mapper = _mapper(natural=(1000, 1000), display=(500, 250))
        mapper.set_transform(Transform(scale=2.0))
        assert mapper.label_scale == pytest.approx(0.5)


class TestDeviceToNatural:
    def test_downscaled_click(self):
        """A click at (40, 30) on a 4000x3000 image shown at 400x300 is (400, 300)."""
        point = _mapper().device_to_natural(40, 30)
        assert point.x == pytest.approx(400)
        assert point.y == pytest.approx(300)

    def test_surface_offset_is_subtracted(self):
        mapper = _mapper(natural=(200, 100), display=(200, 100), left=50, top=20)
        assert mapper.device_to_natural(60, 30) == Point(10, 10)

    def test_outside_surface_is_rejected(self):
        mapper = _mapper(natural=(200, 100), display=(200, 100), left=50, top=20)
        assert mapper.device_to_natural(40, 30) is None
        assert mapper.device_to_natural(260, 30) is None
        assert mapper.device_to_natural(60, 130) is None

    def test_surface_edges_are_inside(self):
        mapper = _mapper(natural=(200, 100), display=(200, 100))
        assert mapper.device_to_natural(0, 0) == Point(0, 0)
        assert mapper.device_to_natural(200, 100) == Point(200, 100)

    def test_not_loaded_rejects(self):
        assert CoordinateMapper().device_to_natural(10, 10) is None

    def test_pan_zoom_is_undone(self):
        mapper = _mapper(natural=(1000, 1000), display=(500, 500))
        mapper.set_transform(Transform(scale=2.0, offset_x=-100, offset_y=-50))
        point = mapper.device_to_natural(100, 150)
        # (100 + 100) / 2 = 100 display -> 200 natural; (150 + 50) / 2 = 100 -> 200
        assert point.x == pytest.approx(200)
        assert point.y == pytest.approx(200)

    def test_zoomed_out_click_beside_image_is_rejected(self):
        mapper = _mapper(natural=(100, 100), display=(100, 100))
        mapper.set_transform(Transform(scale=0.5))
        assert mapper.device_to_natural(80, 10) is None

    def test_none_transform_means_identity(self):
        mapper = _mapper(natural=(100, 100), display=(100, 100))
        mapper.set_transform(Transform(scale=3.0))
        mapper.set_transform(None)
        assert mapper.transform == Transform.identity()


class TestRoundTrip:
    @pytest.mark.parametrize(
        "display,transform",
        [
            ((400, 300), Transform()),
            ((1234, 567), Transform()),
            ((800, 600), Transform(scale=1.7, offset_x=-35.5, offset_y=12.25)),
        ],
    )
    def test_display_natural_display(self, display, transform):
        mapper = _mapper(natural=(4000, 3000), display=display)
        mapper.set_transform(transform)
        for dx, dy in [(10.0, 10.0), (123.4, 56.7), (display[0] / 3, display[1] / 2)]:
            point = mapper.device_to_natural(dx, dy)
            assert point is not None
            x, y = mapper.natural_to_display(point)
            assert x == pytest.approx(dx)
            assert y == pytest.approx(dy)

    def test_natural_to_display_requires_measurement(self):
        with pytest.raises(ValueError):
            CoordinateMapper().natural_to_display(Point(1, 1))


def test_transform_rejects_non_positive_scale():
    with pytest.raises(ValueError):
        Transform(scale=0)
