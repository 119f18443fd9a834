"""nbsim: Monte-Carlo energy and latency estimation for NB-IoT access strategies.

This package provides tools for:
- Sampling per-device energy and latency under RAP, EDT and PUR transmission
- Running repeated trials over a grid of population sizes
- Battery-life projection from sampled energy consumption
- Cross-strategy statistical comparison with confidence intervals
"""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("nbsim")
except PackageNotFoundError:
    __version__ = "0.1.0"

__all__ = ["__version__"]
