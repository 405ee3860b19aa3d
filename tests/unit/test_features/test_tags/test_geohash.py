"""Tests for geohash encoding."""
from __future__ import annotations

import pytest

from campus_service.features.tags.geohash import DEFAULT_PRECISION, encode


@pytest.mark.parametrize(
    ("latitude", "longitude", "precision", "expected"),
    [
        (57.64911, 10.40744, 11, "u4pruydqqvj"),
        (0.0, 0.0, 5, "s0000"),
        (-90.0, -180.0, 4, "0000"),
        (90.0, 180.0, 4, "zzzz"),
    ],
)
def test_known_geohashes(latitude: float, longitude: float, precision: int, expected: str) -> None:
    assert encode(latitude, longitude, precision) == expected


def test_default_precision() -> None:
    assert len(encode(24.7869, 120.9975)) == DEFAULT_PRECISION


def test_prefix_is_coarser_cell() -> None:
    fine = encode(24.7869, 120.9975, 9)

    assert encode(24.7869, 120.9975, 5) == fine[:5]


@pytest.mark.parametrize(("latitude", "longitude"), [(91.0, 0.0), (0.0, -180.5)])
def test_out_of_range_raises(latitude: float, longitude: float) -> None:
    with pytest.raises(ValueError):
        encode(latitude, longitude)
