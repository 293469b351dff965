"""
Mode choice and fare rules for local transport.

Fares are per person. Distances are metres, durations minutes.
"""

import math
from dataclasses import dataclass

from tripgraph.shared.contracts.transport_output import TransportMode


@dataclass
class TransportPolicy:
    WALKING_LIMIT_M: float = 1000.0
    CHEAP_WALKING_LIMIT_M: float = 2000.0
    CYCLING_LIMIT_M: float = 5000.0
    TRANSIT_WAIT_MIN: float = 10.0
    TAXI_WAIT_MIN: float = 5.0


DEFAULT_POLICY = TransportPolicy()

# Straight-line travel speeds in metres per minute
_DIRECT_SPEEDS = {
    TransportMode.WALKING: 80.0,
    TransportMode.CYCLING: 250.0,
    TransportMode.TRANSIT: 500.0,
}


def cycling_fare(duration_min: float) -> float:
    """Bike share: 1.5 per started 15 minutes, capped at 5."""
    return min(math.ceil(duration_min / 15) * 1.5, 5.0) if duration_min > 0 else 1.5


def transit_fare(distance_m: float) -> float:
    """2 per started 5 km, capped at 10."""
    return min(math.ceil(distance_m / 5000) * 2.0, 10.0) if distance_m > 0 else 2.0


def taxi_fare(distance_m: float) -> float:
    """13 flag fall covering 3 km, then 2.5 per km."""
    km = distance_m / 1000.0
    if km <= 3:
        return 13.0
    return float(round(13 + (km - 3) * 2.5))


def direct_mode(distance_m: float, walking_limit_m: float, policy: TransportPolicy = DEFAULT_POLICY) -> TransportMode:
    if distance_m < walking_limit_m:
        return TransportMode.WALKING
    if distance_m < policy.CYCLING_LIMIT_M:
        return TransportMode.CYCLING
    return TransportMode.TRANSIT


def direct_estimate(distance_m: float, walking_limit_m: float, policy: TransportPolicy = DEFAULT_POLICY):
    """
    Mode, duration and per-person fare from straight-line distance alone.

    Returns:
        Tuple of (mode, duration_min, fare)
    """
    mode = direct_mode(distance_m, walking_limit_m, policy)
    duration = math.ceil(distance_m / _DIRECT_SPEEDS[mode])
    if mode == TransportMode.WALKING:
        return mode, float(duration), 0.0
    if mode == TransportMode.CYCLING:
        return mode, float(duration), cycling_fare(duration)
    return mode, float(duration + 15), transit_fare(distance_m)
