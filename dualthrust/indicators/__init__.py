"""
Indicators Module - Pure math functions for the Dual Thrust strategy.

All functions are stateless and operate on candle data.
"""

from .dual_thrust import (
    BreakoutLevels,
    DualThrustSignal,
    compute_levels,
    dual_thrust_range,
    latest_signal,
)

__all__ = [
    "BreakoutLevels",
    "DualThrustSignal",
    "compute_levels",
    "dual_thrust_range",
    "latest_signal",
]
