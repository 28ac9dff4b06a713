from datetime import time
from typing import Optional, Tuple, Union

from splitpay.core.exceptions import MalformedTimeError

MINUTES_PER_DAY = 24 * 60

def time_to_minutes(value: Union[str, time], shift_id: Optional[str] = None) -> int:
    """
    Convert a local time of day to minutes since midnight.

    Accepts 'HH:MM', 'HH:MM:SS' or 'HH:MM:SS.ffffff'; seconds and anything
    finer are discarded. An hour of 24 is read as midnight.

    Raises:
        MalformedTimeError: hours or minutes are not plain non-negative integers
    """
    if isinstance(value, time):
        return value.hour * 60 + value.minute

    if not isinstance(value, str):
        raise MalformedTimeError(value, shift_id)

    clean = value.strip().split('.')[0]
    parts = clean.split(':')
    if len(parts) < 2:
        raise MalformedTimeError(value, shift_id)

    hours_str, minutes_str = parts[0].strip(), parts[1].strip()
    if not hours_str.isdigit() or not minutes_str.isdigit():
        raise MalformedTimeError(value, shift_id)

    hours, minutes = int(hours_str), int(minutes_str)
    if hours > 24 or minutes > 59:
        raise MalformedTimeError(value, shift_id)

    return (hours % 24) * 60 + minutes

def overlap_minutes(a_start: int, a_end: int, b_start: int, b_end: int) -> int:
    """Length of the intersection of [a_start, a_end) and [b_start, b_end) on one unwrapped timeline"""
    return max(0, min(a_end, b_end) - max(a_start, b_start))

def unwrap_window(start: int, end: int) -> Tuple[int, int]:
    """A window whose end is not after its start crosses midnight"""
    if end <= start:
        end += MINUTES_PER_DAY
    return start, end

def window_overlap(shift_start: int, shift_end: int, window_start: int, window_end: int) -> int:
    """
    Overlap of a shift with a daily window, counting the window on the
    clock-in day and its copy on the following day. Both are summed since a
    shift crossing midnight can touch both occurrences.
    """
    window_start, window_end = unwrap_window(window_start, window_end)
    return (
        overlap_minutes(shift_start, shift_end, window_start, window_end)
        + overlap_minutes(shift_start, shift_end,
                          window_start + MINUTES_PER_DAY, window_end + MINUTES_PER_DAY)
    )
