"""
Window storage, eviction policies, observation types and event logging.
"""

from .observation import Observation, VectorObservation, GeoObservation
from .eviction import EvictionPolicy, TimeWindowPolicy, CountWindowPolicy, make_eviction_policy
from .window_store import (
    ObservationWindowStore,
    WindowEntry,
    TimestampOrderError,
    SENTINEL,
)
from .logger import Logger

__all__ = [
    "Observation",
    "VectorObservation",
    "GeoObservation",
    "EvictionPolicy",
    "TimeWindowPolicy",
    "CountWindowPolicy",
    "make_eviction_policy",
    "ObservationWindowStore",
    "WindowEntry",
    "TimestampOrderError",
    "SENTINEL",
    "Logger",
]
