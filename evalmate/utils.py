"""
Utility functions
"""
import math
import random
import string
import time


_ID_ALPHABET = string.digits + string.ascii_lowercase


def now_ms() -> int:
    """Current time in milliseconds since the epoch"""
    return int(time.time() * 1000)


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_ID_ALPHABET[rem])
    return "".join(reversed(digits))


def generate_id() -> str:
    """
    Generate a client-side unique id

    Base36 millisecond timestamp followed by a random base36 suffix.

    Example:
        >>> generate_id()  # doctest: +SKIP
        'm2x9k1qz7f3a8c1d'
    """
    suffix = "".join(random.choices(_ID_ALPHABET, k=10))
    return _base36(now_ms()) + suffix


def round1(value: float) -> float:
    """Round half-up to one decimal (2.25 -> 2.3, 2.24 -> 2.2)"""
    return math.floor(value * 10 + 0.5) / 10


def format_time(seconds: int) -> str:
    """
    Format seconds as MM:SS

    Example:
        >>> format_time(600)
        '10:00'
    """
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{secs:02d}"
