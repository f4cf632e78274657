"""Seeded jitter - deterministic pseudo-random factors for estimates.

Fee, bridge and ETA estimates vary across tokens, strategies and amounts but
must be identical for identical inputs. The seed string is hashed with
SHA-256 and the first 8 bytes mapped onto [0, 1).
"""

import hashlib


def seeded_unit(seed: str) -> float:
    """Map a seed string to a well-distributed float in [0, 1)."""
    digest = hashlib.sha256((seed or "seed").encode()).digest()
    return int.from_bytes(digest[:8], "big") / 2**64


def seeded_jitter(seed: str, low: float, high: float) -> float:
    """Deterministic value in [low, high) for this seed, rounded to 6 dp."""
    return round(low + (high - low) * seeded_unit(seed), 6)
