"""Geohash encoding for proximity queries.

Standard base32 geohash (Niemeyer). Precision 9 is about 4.8m x 4.8m, finer
than a building entrance.
"""

from __future__ import annotations

_BASE32 = "0123456789bcdefghjkmnpqrstuvwxyz"

DEFAULT_PRECISION = 9


def encode(latitude: float, longitude: float, precision: int = DEFAULT_PRECISION) -> str:
    """Encode a coordinate pair to a geohash string.

    Example:
        >>> encode(57.64911, 10.40744, 11)
        'u4pruydqqvj'
    """
    if not -90.0 <= latitude <= 90.0:
        msg = f"latitude out of range: {latitude}"
        raise ValueError(msg)
    if not -180.0 <= longitude <= 180.0:
        msg = f"longitude out of range: {longitude}"
        raise ValueError(msg)

    lat_range = [-90.0, 90.0]
    lon_range = [-180.0, 180.0]
    chars: list[str] = []
    bits = 0
    bit_count = 0
    even = True  # longitude first

    while len(chars) < precision:
        if even:
            mid = (lon_range[0] + lon_range[1]) / 2
            if longitude >= mid:
                bits = (bits << 1) | 1
                lon_range[0] = mid
            else:
                bits <<= 1
                lon_range[1] = mid
        else:
            mid = (lat_range[0] + lat_range[1]) / 2
            if latitude >= mid:
                bits = (bits << 1) | 1
                lat_range[0] = mid
            else:
                bits <<= 1
                lat_range[1] = mid
        even = not even
        bit_count += 1
        if bit_count == 5:
            chars.append(_BASE32[bits])
            bits = 0
            bit_count = 0

    return "".join(chars)
