"""Unit tests for crop validation and gravity placement."""

import pytest

from cl_resize_tools.common.schemas import CropRect, Gravity
from cl_resize_tools.plugins.image_resize.algo.crop import (
    GRAVITY_PRECEDENCE,
    calc_gravity_crop,
    validate_crop,
)

# ============================================================================
# Crop Validator
# ============================================================================


class TestValidateCrop:
    """Test clamping and rejection of explicit crop rectangles."""

    def test_no_rect(self) -> None:
        assert validate_crop(200, 100, None) is None

    def test_valid_rect_returned_unchanged(self) -> None:
        rect = CropRect(top=10, left=20, width=50, height=40)
        assert validate_crop(200, 100, rect) == rect

    def test_idempotent(self) -> None:
        rect = CropRect(top=0, left=0, width=1000, height=1000)
        once = validate_crop(200, 100, rect)
        assert once is not None
        assert validate_crop(200, 100, once) == once

    def test_clamps_oversized_rect(self) -> None:
        rect = CropRect(top=0, left=0, width=1000, height=1000)
        assert validate_crop(200, 100, rect) == CropRect(top=0, left=0, width=200, height=100)

    def test_clamps_from_offset(self) -> None:
        rect = CropRect(top=60, left=150, width=100, height=100)
        assert validate_crop(200, 100, rect) == CropRect(top=60, left=150, width=50, height=40)

    def test_rejects_top_outside_image(self) -> None:
        rect = CropRect(top=500, left=0, width=10, height=10)
        assert validate_crop(200, 100, rect) is None

    def test_rejects_left_outside_image(self) -> None:
        rect = CropRect(top=0, left=201, width=10, height=10)
        assert validate_crop(200, 100, rect) is None

    def test_rejects_empty_region_on_edge(self) -> None:
        rect = CropRect(top=100, left=0, width=10, height=10)
        assert validate_crop(200, 100, rect) is None

    def test_rejects_zero_sized_request(self) -> None:
        rect = CropRect(top=0, left=0, width=0, height=10)
        assert validate_crop(200, 100, rect) is None

    def test_does_not_mutate_input(self) -> None:
        rect = CropRect(top=0, left=0, width=1000, height=1000)
        _ = validate_crop(200, 100, rect)
        assert rect.width == 1000
        assert rect.height == 1000

    def test_rect_is_immutable(self) -> None:
        rect = CropRect(top=0, left=0, width=10, height=10)
        with pytest.raises(ValueError):
            rect.width = 5  # type: ignore[misc]

    def test_negative_values_rejected(self) -> None:
        with pytest.raises(ValueError):
            _ = CropRect(top=-1, left=0, width=10, height=10)


# ============================================================================
# Gravity Resolver
# ============================================================================


class TestCalcGravityCrop:
    """Test crop origin placement for each gravity flag."""

    def test_centre(self) -> None:
        assert calc_gravity_crop(100, 100, 50, 50, Gravity.CENTRE) == (25, 25)

    def test_north(self) -> None:
        assert calc_gravity_crop(100, 100, 50, 50, Gravity.NORTH) == (25, 0)

    def test_south_east(self) -> None:
        assert calc_gravity_crop(100, 100, 50, 50, Gravity.SOUTH | Gravity.EAST) == (50, 50)

    def test_west(self) -> None:
        assert calc_gravity_crop(100, 80, 50, 50, Gravity.WEST) == (0, 15)

    def test_north_west(self) -> None:
        assert calc_gravity_crop(100, 80, 50, 50, Gravity.NORTH | Gravity.WEST) == (0, 0)

    def test_centre_odd_remainder_takes_extra_pixel_first(self) -> None:
        """The +1 bias is defined behaviour: (101 - 50 + 1) // 2 == 26."""
        assert calc_gravity_crop(101, 101, 50, 50, Gravity.CENTRE) == (26, 26)
        assert calc_gravity_crop(100, 100, 51, 51, Gravity.CENTRE) == (25, 25)

    def test_precedence_order(self) -> None:
        assert GRAVITY_PRECEDENCE == (Gravity.NORTH, Gravity.EAST, Gravity.SOUTH, Gravity.WEST)

    def test_contradictory_vertical_flags_south_wins(self) -> None:
        assert calc_gravity_crop(100, 100, 50, 50, Gravity.NORTH | Gravity.SOUTH) == (25, 50)

    def test_contradictory_horizontal_flags_west_wins(self) -> None:
        assert calc_gravity_crop(100, 100, 50, 50, Gravity.EAST | Gravity.WEST) == (0, 25)

    def test_all_flags(self) -> None:
        gravity = Gravity.CENTRE | Gravity.NORTH | Gravity.EAST | Gravity.SOUTH | Gravity.WEST
        assert calc_gravity_crop(100, 100, 50, 50, gravity) == (0, 50)

    def test_no_bounds_check(self) -> None:
        """Oversized outputs are a caller error, not a raised one."""
        left, top = calc_gravity_crop(50, 50, 100, 100, Gravity.EAST | Gravity.SOUTH)
        assert (left, top) == (-50, -50)
