"""Bit-mask, alignment and clamping helpers for fixed-width integers."""

from __future__ import annotations

from typing import Optional, TypeVar

T = TypeVar("T")


def bit_mask(bit_count: int, width: int = 32) -> int:
    """Return a mask of the low ``bit_count`` bits of a ``width``-bit value.

    Counts at or above ``width`` give a mask with every bit set.
    """
    if bit_count >= width:
        return (1 << width) - 1
    return (1 << bit_count) - 1


def bit_mask_s(bit_count: int, width: int = 32) -> int:
    """Like :func:`bit_mask`, but reject counts wider than the type."""
    if bit_count > width:
        raise ValueError("Requested bit mask cannot be stored by target type")
    return bit_mask(bit_count, width)


def is_power_of_two(val: int) -> bool:
    return val > 0 and (val & (val - 1)) == 0


def align(val: int, alignment: int, width: int = 64) -> int:
    """Round ``val`` up to the next multiple of a power-of-two ``alignment``."""
    if alignment <= 0 or not is_power_of_two(alignment):
        raise ValueError("align: Invalid alignment")
    full = bit_mask(width, width)
    return ((val + alignment - 1) & (full - (alignment - 1))) & full


def is_aligned(val: int, alignment: int) -> bool:
    if alignment <= 0 or not is_power_of_two(alignment):
        raise ValueError("isAligned: Invalid alignment")
    return ((alignment - 1) & val) == 0


def get_bit(shift: int, width: int = 32) -> int:
    """Return the value with only bit ``shift`` set, within ``width`` bits."""
    if shift > width:
        raise ValueError("shift value too large for this data type")
    return (1 << shift) & bit_mask(width, width)


def is_in_range(lower_limit, upper_limit, start, end) -> bool:
    """Return whether ``[start, end]`` overlaps ``[lower_limit, upper_limit]``."""
    return not (end < lower_limit or start > upper_limit)


def overlapping_range(lower_limit, upper_limit, start, end) -> Optional[tuple]:
    """Return the overlap of the two ranges, or ``None`` when they are disjoint."""
    if not is_in_range(lower_limit, upper_limit, start, end):
        return None
    low = start if start > lower_limit else lower_limit
    high = upper_limit if end > upper_limit else end
    return low, high


def save_assign(val: T, minimum: T, maximum: T) -> T:
    """Clamp ``val`` into ``[minimum, maximum]``."""
    if val > maximum:
        return maximum
    if val < minimum:
        return minimum
    return val


def get_clipped_value(val, minimum, maximum):
    """Clip ``val`` to the limits of a target type given as ``minimum``/``maximum``."""
    if val > maximum:
        return maximum
    if val < minimum:
        return minimum
    return val