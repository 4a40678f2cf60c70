"""
motionstate - Online motion/stationary detection over sensor streams.

A sliding window of observations is re-clustered on every reading; the
first stationary step after motion is handed to a place clusterer.
"""

from .config import ClustererConfig, ConfigurationError, load_config
from .clustering import WindowedDensityClusterer, SignificantPlaceClusterer

__all__ = [
    "ClustererConfig",
    "ConfigurationError",
    "load_config",
    "WindowedDensityClusterer",
    "SignificantPlaceClusterer",
]
