"""Transmission strategies and their sampling parameters.

Each strategy models one NB-IoT uplink access mode:

- RAP: legacy random-access procedure (baseline)
- EDT: early data transmission (optimized A)
- PUR: preconfigured uplink resources (optimized B)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from nbsim.errors import InvalidStrategyConfig


class Strategy(Enum):
    """Closed set of transmission strategies being compared."""

    RAP = "Baseline"
    EDT = "Optimized-A"
    PUR = "Optimized-B"

    @classmethod
    def from_name(cls, name: str | Strategy) -> Strategy:
        """Get strategy from a name or display label.

        Args:
            name: Strategy name ("PUR") or label ("Optimized-B"), case insensitive.

        Returns:
            Strategy enum value.

        Raises:
            InvalidStrategyConfig: If name is not a known strategy.
        """
        if isinstance(name, Strategy):
            return name
        key = str(name).strip().upper()
        for strategy in cls:
            if key in (strategy.name, strategy.value.upper()):
                return strategy
        raise InvalidStrategyConfig(f"Unknown strategy name: {name}")

    @property
    def label(self) -> str:
        """Human-readable role of the strategy."""
        return self.value

    @property
    def is_baseline(self) -> bool:
        return self is Strategy.RAP


@dataclass(frozen=True)
class StrategyConfig:
    """Sampling parameters for one strategy.

    Attributes:
        energy_range: (low, high) base energy per trial in Joules.
        latency_range: (low, high) base latency per trial in milliseconds.
        interference_coefficient: Contention severity per 1000 devices.
    """

    energy_range: tuple[float, float]
    latency_range: tuple[float, float]
    interference_coefficient: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "energy_range", _check_range("energy_range", self.energy_range))
        object.__setattr__(self, "latency_range", _check_range("latency_range", self.latency_range))
        if self.interference_coefficient < 0:
            raise InvalidStrategyConfig(
                f"interference_coefficient must be >= 0, got {self.interference_coefficient}"
            )

    @classmethod
    def from_dict(
        cls,
        config: Mapping[str, Any],
        default: "StrategyConfig | None" = None,
    ) -> "StrategyConfig":
        """Create StrategyConfig from a configuration mapping.

        Args:
            config: Mapping with energy_range, latency_range, interference_coefficient.
            default: Values used for keys missing from config.

        Returns:
            StrategyConfig instance.

        Raises:
            InvalidStrategyConfig: If a required key is missing with no default,
                or if any value is invalid.
        """
        values = {}
        for key in ("energy_range", "latency_range", "interference_coefficient"):
            if key in config and config[key] is not None:
                values[key] = config[key]
            elif default is not None:
                values[key] = getattr(default, key)
            else:
                raise InvalidStrategyConfig(f"Missing strategy parameter: {key}")

        try:
            coefficient = float(values["interference_coefficient"])
        except (TypeError, ValueError) as e:
            raise InvalidStrategyConfig(f"Invalid interference_coefficient: {e}") from e

        return cls(
            energy_range=values["energy_range"],
            latency_range=values["latency_range"],
            interference_coefficient=coefficient,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "energy_range": list(self.energy_range),
            "latency_range": list(self.latency_range),
            "interference_coefficient": self.interference_coefficient,
        }


def _check_range(name: str, bounds: Any) -> tuple[float, float]:
    try:
        low, high = (float(b) for b in bounds)
    except (TypeError, ValueError) as e:
        raise InvalidStrategyConfig(f"{name} must be a (low, high) pair, got {bounds!r}") from e
    if low <= 0 or high <= 0:
        raise InvalidStrategyConfig(f"{name} bounds must be positive, got ({low}, {high})")
    if low > high:
        raise InvalidStrategyConfig(f"{name} bounds are inverted: ({low}, {high})")
    return (low, high)


# Reference parameters for NB-IoT access modes
DEFAULT_STRATEGY_CONFIGS: dict[Strategy, StrategyConfig] = {
    Strategy.RAP: StrategyConfig(
        energy_range=(4.0, 6.0),
        latency_range=(400.0, 600.0),
        interference_coefficient=0.3,
    ),
    Strategy.EDT: StrategyConfig(
        energy_range=(3.0, 4.5),
        latency_range=(200.0, 300.0),
        interference_coefficient=0.2,
    ),
    Strategy.PUR: StrategyConfig(
        energy_range=(2.0, 3.0),
        latency_range=(100.0, 180.0),
        interference_coefficient=0.1,
    ),
}


def build_strategy_configs(
    config: Mapping[str, Any] | None = None,
) -> dict[Strategy, StrategyConfig]:
    """Build the strategy table from a configuration mapping.

    Strategies absent from config keep their defaults; partially specified
    strategies take missing keys from the defaults.

    Args:
        config: Mapping of strategy name to parameter mapping.

    Returns:
        Dictionary of Strategy to StrategyConfig, in enum order.
    """
    table = dict(DEFAULT_STRATEGY_CONFIGS)
    if not config:
        return table

    for name, params in config.items():
        strategy = Strategy.from_name(name)
        if params is None:
            continue
        table[strategy] = StrategyConfig.from_dict(params, default=DEFAULT_STRATEGY_CONFIGS[strategy])

    return {strategy: table[strategy] for strategy in Strategy}
