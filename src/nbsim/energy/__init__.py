"""Energy modeling module for nbsim.

This module provides battery-life projection from sampled energy consumption.
"""

from nbsim.energy.battery import (
    DEFAULT_BATTERY,
    BatterySpec,
    estimate_battery_life_years,
)

__all__ = [
    "BatterySpec",
    "DEFAULT_BATTERY",
    "estimate_battery_life_years",
]
