"""Tests for trayanim.sampling module."""

import math

import pytest

from trayanim.profiles import BALANCED_PROFILE, LIGHT_PROFILE, PROFILES
from trayanim.sampling import (
    SamplingResult,
    clamp_delay,
    compute_stride,
    sample_for_profile,
    sample_indices,
)


class TestComputeStride:
    """Tests for compute_stride function."""

    @pytest.mark.fast
    @pytest.mark.parametrize(
        "total,max_frames,expected",
        [(0, 30, 1), (1, 30, 1), (30, 30, 1), (31, 30, 2), (60, 30, 2), (61, 30, 3), (100, 15, 7)],
    )
    def test_ceiling_division(self, total, max_frames, expected):
        assert compute_stride(total, max_frames) == expected

    @pytest.mark.fast
    def test_rejects_invalid_arguments(self):
        with pytest.raises(ValueError):
            compute_stride(10, 0)
        with pytest.raises(ValueError):
            compute_stride(-1, 10)


class TestSampleIndices:
    """Tests for sample_indices function."""

    @pytest.mark.fast
    def test_all_frames_kept_when_under_budget(self):
        result = sample_indices(10, 30)

        assert result.sampled_indices == list(range(10))
        assert result.is_full_sampling()
        assert result.sampling_rate == 1.0

    @pytest.mark.fast
    def test_hundred_frames_balanced(self):
        result = sample_indices(100, 30)

        assert result.stride == 4
        assert result.sampled_indices == list(range(0, 100, 4))
        assert result.num_sampled == 25

    @pytest.mark.fast
    def test_zero_frames(self):
        result = sample_indices(0, 30)

        assert result.sampled_indices == []
        assert result.sampling_rate == 0.0

    @pytest.mark.parametrize("name", sorted(PROFILES))
    def test_stride_property_holds_for_every_profile(self, name):
        max_frames = PROFILES[name].max_frames
        for total in range(0, 400):
            result = sample_indices(total, max_frames)
            stride = math.ceil(total / max_frames) or 1

            assert result.sampled_indices == list(range(0, total, stride))[:max_frames]
            assert len(result.sampled_indices) <= max_frames
            assert len(result.sampled_indices) == min(total, math.ceil(total / stride))
            assert all(0 <= i < total for i in result.sampled_indices)

    @pytest.mark.fast
    def test_sample_for_profile(self):
        result = sample_for_profile(45, LIGHT_PROFILE)

        assert isinstance(result, SamplingResult)
        assert result.stride == 3
        assert result.num_sampled == 15
        assert result.metadata["max_frames"] == LIGHT_PROFILE.max_frames


class TestClampDelay:
    """Tests for clamp_delay function."""

    @pytest.mark.fast
    @pytest.mark.parametrize(
        "declared,minimum,expected",
        [(None, 50, 100), (0, 50, 100), (0, 120, 120), (20, 50, 50), (70, 50, 70), (20, 30, 30)],
    )
    def test_clamping(self, declared, minimum, expected):
        assert clamp_delay(declared, minimum) == expected

    @pytest.mark.parametrize("name", sorted(PROFILES))
    def test_never_below_profile_minimum(self, name):
        profile = PROFILES[name]
        for declared in [None, 0, 1, 10, 29, 30, 49, 50, 79, 80, 500]:
            assert clamp_delay(declared, profile.min_frame_delay) >= profile.min_frame_delay

    @pytest.mark.fast
    def test_balanced_profile_floor(self):
        assert clamp_delay(10, BALANCED_PROFILE.min_frame_delay) == 50
