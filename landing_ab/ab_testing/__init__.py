"""A/B testing utilities.

Functions in this module assign visitors to one of the two variants of a
landing page campaign.  The draw is a fair coin; stickiness comes from the
assignment cookie managed by :mod:`.assignment`, not from the draw itself.
"""

from __future__ import annotations

import random
from typing import Literal, Optional

Variant = Literal["a", "b"]

VARIANTS: tuple[Variant, Variant] = ("a", "b")


def draw_variant(rng: Optional[random.Random] = None) -> Variant:
    """Draw variant ``a`` or ``b`` with equal probability.

    Args:
        rng: Optional random source, mostly for tests.  Defaults to the
            module level generator.

    Returns:
        "a" or "b".
    """
    source = rng if rng is not None else random
    return "a" if source.random() < 0.5 else "b"


def parse_variant(value: Optional[str]) -> Optional[Variant]:
    """Return ``value`` if it is exactly ``a`` or ``b``, else None."""
    if value == "a":
        return "a"
    if value == "b":
        return "b"
    return None


__all__ = ["draw_variant", "parse_variant", "Variant", "VARIANTS"]
