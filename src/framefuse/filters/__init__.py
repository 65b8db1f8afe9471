"""Fusion filters for redundant and streaming measurements."""

from .smoothing import ExponentialMovingAverage, SmoothedState
from .weighted_mean import WeightedMean

__all__ = ["ExponentialMovingAverage", "SmoothedState", "WeightedMean"]
