"""Battery specification and lifetime projection.

Battery life follows

    daily_energy = mean_energy * hours_per_day
    years = capacity_joules / (daily_energy * days_per_year)

``mean_energy`` is treated as an hourly-equivalent cost per device, so the
daily figure multiplies it by 24. The formula is kept as the reference model
states it; it is not a packets-per-day model.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from nbsim.errors import SimulationError


@dataclass(frozen=True)
class BatterySpec:
    """Battery specifications.

    Attributes:
        capacity_joules: Usable capacity in Joules (5 Wh nominal cell).
        hours_per_day: Multiplier converting mean energy to daily energy.
        days_per_year: Days per year for the lifetime projection.
        jitter: (low, high) multiplicative capacity variance per trial.
    """

    capacity_joules: float = 18000.0
    hours_per_day: float = 24.0
    days_per_year: float = 365.0
    jitter: tuple[float, float] = (0.9, 1.1)

    def __post_init__(self) -> None:
        for name in ("capacity_joules", "hours_per_day", "days_per_year"):
            value = getattr(self, name)
            if value <= 0:
                raise SimulationError(f"{name} must be positive, got {value}")

        try:
            low, high = (float(v) for v in self.jitter)
        except (TypeError, ValueError) as e:
            raise SimulationError(f"jitter must be a (low, high) pair, got {self.jitter!r}") from e
        if low <= 0 or low > high:
            raise SimulationError(f"Invalid battery jitter range: {self.jitter}")
        object.__setattr__(self, "jitter", (low, high))

    @property
    def capacity_wh(self) -> float:
        """Battery capacity in Wh."""
        return self.capacity_joules / 3600.0

    def daily_energy(self, mean_energy: float) -> float:
        """Daily energy in Joules for a given mean per-device energy."""
        return mean_energy * self.hours_per_day

    @classmethod
    def from_dict(cls, config: Mapping[str, Any]) -> "BatterySpec":
        """Create BatterySpec from configuration dictionary.

        Args:
            config: Dictionary with battery parameters.

        Returns:
            BatterySpec instance.
        """
        return cls(
            capacity_joules=float(config.get("capacity_joules", 18000.0)),
            hours_per_day=float(config.get("hours_per_day", 24.0)),
            days_per_year=float(config.get("days_per_year", 365.0)),
            jitter=config.get("jitter", (0.9, 1.1)),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "capacity_joules": self.capacity_joules,
            "hours_per_day": self.hours_per_day,
            "days_per_year": self.days_per_year,
            "jitter": list(self.jitter),
        }


DEFAULT_BATTERY = BatterySpec()


def estimate_battery_life_years(
    mean_energy: float,
    battery: BatterySpec = DEFAULT_BATTERY,
) -> float:
    """Estimate battery life given mean per-device energy consumption.

    Args:
        mean_energy: Mean energy per device in Joules.
        battery: Battery specification.

    Returns:
        Estimated battery life in years, ``inf`` when no energy is consumed.
    """
    daily_energy = battery.daily_energy(mean_energy)
    if daily_energy <= 0:
        return float("inf")
    return battery.capacity_joules / (daily_energy * battery.days_per_year)
