"""Tests for spatiotemporal identifier parsing."""
import math

import pytest

from voxel_layers.models import Range, Scalar, Unbounded
from voxel_layers.core.parser import (
    VoxelIdError, parse_dimension, parse_time_part, parse_voxel_id, parse_voxel_ids, split_tokens,
)


class TestParseDimension:
    def test_integer_literal(self):
        assert parse_dimension(4, "X", "7") == Scalar(value=7)

    def test_dash_xy_at_zoom_zero_is_scalar(self):
        assert parse_dimension(0, "X", "-") == Scalar(value=0)
        assert parse_dimension(0, "Y", "-") == Scalar(value=0)

    def test_dash_xy_at_zoom_three(self):
        assert parse_dimension(3, "X", "-") == Range(lo=0, hi=7)
        assert parse_dimension(3, "Y", "-") == Range(lo=0, hi=7)

    def test_dash_f_is_unbounded(self):
        assert parse_dimension(3, "F", "-") == Unbounded()

    def test_open_upper_bound(self):
        assert parse_dimension(3, "X", "2:-") == Range(lo=2, hi=7)
        assert parse_dimension(3, "F", "2:-") == Range(lo=2, hi=7)

    def test_open_lower_bound(self):
        assert parse_dimension(3, "Y", "-:4") == Range(lo=0, hi=4)
        assert parse_dimension(3, "F", "-:1") == Range(lo=-8, hi=1)

    def test_y_and_f_ranges_sorted(self):
        assert parse_dimension(4, "Y", "5:2") == Range(lo=2, hi=5)
        assert parse_dimension(4, "F", "1:-3") == Range(lo=-3, hi=1)

    def test_x_range_keeps_order(self):
        assert parse_dimension(4, "X", "14:1") == Range(lo=14, hi=1)

    def test_non_integer_rejected(self):
        with pytest.raises(ValueError, match="not an integer"):
            parse_dimension(4, "X", "1.5")

    def test_out_of_range_rejected(self):
        with pytest.raises(ValueError, match="outside"):
            parse_dimension(4, "X", "16")
        with pytest.raises(ValueError, match="outside"):
            parse_dimension(4, "Y", "-1")
        with pytest.raises(ValueError, match="outside"):
            parse_dimension(2, "F", "-5")

    def test_negative_f_within_bounds(self):
        assert parse_dimension(2, "F", "-4") == Scalar(value=-4)


class TestParseTimePart:
    def test_no_time_part(self):
        assert parse_time_part(None) == (None, None)

    def test_single_tick(self):
        assert parse_time_part("60/10") == (600.0, 660.0)

    def test_tick_range_upper_exclusive(self):
        assert parse_time_part("60/10:12") == (600.0, 780.0)

    def test_open_ended(self):
        start, end = parse_time_part("60/3:-")
        assert start == 180.0
        assert math.isinf(end)

    def test_open_start(self):
        assert parse_time_part("60/-:2") == (0.0, 180.0)

    def test_dash_means_unconstrained(self):
        assert parse_time_part("60/-") == (None, None)

    def test_missing_tick_rejected(self):
        with pytest.raises(ValueError):
            parse_time_part("60")

    def test_non_positive_interval_rejected(self):
        with pytest.raises(ValueError, match="positive"):
            parse_time_part("0/3")

    def test_inverted_tick_range_rejected(self):
        with pytest.raises(ValueError, match="inverted"):
            parse_time_part("60/5:2")


class TestParseVoxelId:
    def test_spatial_only(self):
        v = parse_voxel_id("4/0/14:1/3")
        assert v.z == 4
        assert v.f == Scalar(value=0)
        assert v.x == Range(lo=14, hi=1)
        assert v.y == Scalar(value=3)
        assert v.start_time is None and v.end_time is None

    def test_with_time(self):
        v = parse_voxel_id("20/2/931080/412913_60/10:12")
        assert v.z == 20
        assert v.start_time == 600.0
        assert v.end_time == 780.0

    def test_negative_zoom_rejected(self):
        with pytest.raises(VoxelIdError, match="non-negative"):
            parse_voxel_id("-1/0/0/0")

    def test_wrong_part_count(self):
        with pytest.raises(VoxelIdError, match="Z/F/X/Y"):
            parse_voxel_id("4/0/1")

    def test_error_is_value_error_with_token(self):
        with pytest.raises(ValueError) as exc_info:
            parse_voxel_id("4/0/abc/3")
        assert isinstance(exc_info.value, VoxelIdError)
        assert exc_info.value.token == "4/0/abc/3"


class TestParseVoxelIds:
    def test_empty_input(self):
        result = parse_voxel_ids("")
        assert result.voxels == []
        assert result.errors == []

    def test_whitespace_input(self):
        assert parse_voxel_ids("   ").voxels == []

    def test_decoration_stripped(self):
        result = parse_voxel_ids("['4/0/14:1/3', '1/0/0/1']")
        assert len(result.voxels) == 2
        assert result.ok

    def test_blank_tokens_skipped(self):
        assert split_tokens("1/0/0/0, ,2/0/1/1,") == ["1/0/0/0", "2/0/1/1"]

    def test_order_preserved(self):
        result = parse_voxel_ids("3/0/1/1, 1/0/0/0, 2/0/2/2")
        assert [v.z for v in result.voxels] == [3, 1, 2]

    def test_malformed_token_does_not_discard_batch(self):
        result = parse_voxel_ids("4/0/abc/3, 4/0/1/1, 4/0/99/1")
        assert len(result.voxels) == 1
        assert result.voxels[0].x == Scalar(value=1)
        assert [e.index for e in result.errors] == [0, 2]
        assert result.errors[0].token == "4/0/abc/3"
        assert not result.ok

    def test_split_on_last_underscore(self):
        result = parse_voxel_ids("2/0/1/1_10/3")
        assert result.voxels[0].start_time == 30.0
        assert result.voxels[0].end_time == 40.0
