"""Age-range overlap test between a catalog entry and a viewer's filter."""

# purpose: decide catalog inclusion for declared age ranges with unknown bounds
# status: active
# related_docs: DESIGN.md (age policy decision)

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

RawAge = Union[int, float, str, None]


class AgePolicy(str, Enum):
    """How an entry with an unknown age bound behaves while a filter is active."""

    # unknown lower bound means no younger limit, unknown upper bound no older limit
    OPEN = "open"
    # any unknown bound hides the entry
    STRICT = "strict"


def default_policy() -> AgePolicy:
    return AgePolicy(os.getenv("CATALOG_AGE_POLICY", AgePolicy.OPEN.value))


def parse_age(value: RawAge) -> Optional[float]:
    """Coerce typed input to a non-negative finite number or ``None`` when blank.

    Raises ``ValueError`` for anything else.
    """

    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"Invalid age: {value!r}")
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    number = float(value)
    if not math.isfinite(number) or number < 0:
        raise ValueError(f"Invalid age: {value!r}")
    return number


def normalize_range(
    filter_min: Optional[float], filter_max: Optional[float]
) -> tuple[Optional[float], Optional[float]]:
    if filter_min is not None and filter_max is not None and filter_min > filter_max:
        return filter_max, filter_min
    return filter_min, filter_max


def overlaps(
    entry_min: Optional[float],
    entry_max: Optional[float],
    filter_min: Optional[float],
    filter_max: Optional[float],
    policy: AgePolicy = AgePolicy.OPEN,
) -> bool:
    """Return whether an entry's age range intersects a normalized filter range."""

    if filter_min is None and filter_max is None:
        return True
    if policy is AgePolicy.STRICT and (entry_min is None or entry_max is None):
        return False

    low = 0.0 if entry_min is None else entry_min
    high = math.inf if entry_max is None else entry_max
    if filter_min is not None and filter_min > high:
        return False
    if filter_max is not None and filter_max < low:
        return False
    return True


@dataclass(frozen=True)
class AgeFilter:
    """A parsed filter range bound to a policy."""

    minimum: Optional[float] = None
    maximum: Optional[float] = None
    policy: AgePolicy = AgePolicy.OPEN
    rejected: bool = False

    @classmethod
    def from_raw(
        cls, raw_min: RawAge, raw_max: RawAge, policy: AgePolicy = AgePolicy.OPEN
    ) -> "AgeFilter":
        """Parse raw bounds; an unparseable bound is dropped under ``OPEN``
        and rejects every entry under ``STRICT``."""

        bounds = []
        rejected = False
        for raw in (raw_min, raw_max):
            try:
                bounds.append(parse_age(raw))
            except (TypeError, ValueError):
                bounds.append(None)
                rejected = policy is AgePolicy.STRICT
        minimum, maximum = normalize_range(*bounds)
        return cls(minimum=minimum, maximum=maximum, policy=policy, rejected=rejected)

    @property
    def active(self) -> bool:
        return self.rejected or self.minimum is not None or self.maximum is not None

    def accepts(self, entry_min: Optional[float], entry_max: Optional[float]) -> bool:
        if self.rejected:
            return False
        return overlaps(entry_min, entry_max, self.minimum, self.maximum, self.policy)
