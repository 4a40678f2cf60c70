"""
Observation types consumed by the window store and clusterer.

The clusterer only needs two capabilities from an observation: a symmetric
distance to another observation of the same kind, and the eps threshold
under which two observations count as neighbours. Any object providing
both can be clustered.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np
from haversine import haversine, Unit


@runtime_checkable
class Observation(Protocol):
    """Capability set required of anything placed in the window."""

    def distance_from(self, other: "Observation") -> float:
        ...

    def epsilon(self) -> float:
        ...


class VectorObservation:
    """
    Feature-vector reading (e.g. a WiFi signal-strength fingerprint).

    Distance is Euclidean; eps is supplied by whoever builds the reading.
    """

    __slots__ = ('values', 'eps')

    def __init__(self, values, eps: float):
        self.values = np.asarray(values, dtype=np.float64)
        self.eps = float(eps)

    def distance_from(self, other: "VectorObservation") -> float:
        if self.values.shape != other.values.shape:
            raise ValueError(
                f"Cannot compare vectors of shape {self.values.shape} and {other.values.shape}"
            )
        return float(np.linalg.norm(self.values - other.values))

    def epsilon(self) -> float:
        return self.eps

    def __repr__(self) -> str:
        return f"VectorObservation({self.values.tolist()}, eps={self.eps})"


class GeoObservation:
    """Latitude/longitude fix. Distance and eps are both in metres."""

    __slots__ = ('latitude', 'longitude', 'eps')

    def __init__(self, latitude: float, longitude: float, eps: float = 25.0):
        self.latitude = float(latitude)
        self.longitude = float(longitude)
        self.eps = float(eps)

    def distance_from(self, other: "GeoObservation") -> float:
        return haversine(
            (self.latitude, self.longitude),
            (other.latitude, other.longitude),
            unit=Unit.METERS,
        )

    def epsilon(self) -> float:
        return self.eps

    def __repr__(self) -> str:
        return f"GeoObservation({self.latitude:.6f}, {self.longitude:.6f}, eps={self.eps})"
