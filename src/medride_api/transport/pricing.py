"""
Pricing Engine

Tiered trip pricing. Pure functions: identical input always gives the
identical cost, which is what cost auditing relies on.

Tiers (after clamping the distance to at least 1 km):

    distance <= 3 km        ->  50
    3 km < distance <= 5 km -> 100
    distance > 5 km         -> 100 + (distance - 5) * 40
"""

import math
from numbers import Real

from medride_api.errors import ValidationError
from medride_api.transport.models.request import PriceEstimate

__all__ = [
    "MIN_DISTANCE_KM",
    "normalize_distance",
    "cost",
    "tier_label",
    "estimate",
]

MIN_DISTANCE_KM = 1.0

SHORT_TIER_MAX_KM = 3.0
SHORT_TIER_COST = 50.0

MID_TIER_MAX_KM = 5.0
MID_TIER_COST = 100.0

LONG_TIER_RATE_PER_KM = 40.0


def normalize_distance(distance_km) -> float:
    """
    Validate a distance and clamp it to the 1 km minimum.

    Parameters
    ----------
    distance_km : int | float
        Trip distance supplied by the caller

    Returns
    -------
    float
        The distance, raised to MIN_DISTANCE_KM when smaller

    Raises
    ------
    ValidationError
        If the distance is not a real number, is NaN/infinite or is negative
    """
    if isinstance(distance_km, bool) or not isinstance(distance_km, Real):
        raise ValidationError(f"Distance must be a number, got {distance_km!r}", distance_km=repr(distance_km))

    distance = float(distance_km)
    if not math.isfinite(distance):
        raise ValidationError(f"Distance must be finite, got {distance}", distance_km=str(distance))
    if distance < 0:
        raise ValidationError(f"Distance cannot be negative, got {distance}", distance_km=distance)

    return max(MIN_DISTANCE_KM, distance)


def cost(distance_km) -> float:
    """Return the estimated trip cost for a distance in kilometres."""
    distance = normalize_distance(distance_km)

    if distance <= SHORT_TIER_MAX_KM:
        return SHORT_TIER_COST
    if distance <= MID_TIER_MAX_KM:
        return MID_TIER_COST
    return MID_TIER_COST + (distance - MID_TIER_MAX_KM) * LONG_TIER_RATE_PER_KM


def tier_label(distance_km) -> str:
    """Return the human-readable tier a distance falls in ("0-3km", "3-5km" or ">5km")."""
    distance = normalize_distance(distance_km)

    if distance <= SHORT_TIER_MAX_KM:
        return "0-3km"
    if distance <= MID_TIER_MAX_KM:
        return "3-5km"
    return ">5km"


def estimate(distance_km) -> PriceEstimate:
    """Cost and tier for a distance, as shown to the requester before booking."""
    return PriceEstimate(
        distance_km=normalize_distance(distance_km),
        cost=cost(distance_km),
        tier=tier_label(distance_km),
    )
