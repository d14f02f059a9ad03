import math
import hashlib


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round halves away from zero for positives (2.5 -> 3), unlike Python's banker's rounding."""
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def stable_hash_int(text: str) -> int:
    """Deterministic 32-bit integer derived from the md5 of `text`."""
    digest = hashlib.md5(text.encode("utf-8")).hexdigest()
    return int(digest[:8], 16)
