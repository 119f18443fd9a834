"""Utility functions for nbsim.

This module provides configuration, logging, and reproducibility utilities.
"""

from nbsim.utils.config import (
    get_nested,
    load_config,
    merge_configs,
    save_config,
    to_dict,
    validate_config,
)
from nbsim.utils.logging import (
    LoggerAdapter,
    get_logger,
    log_metrics,
    setup_logging,
)
from nbsim.utils.seed import (
    RandomSource,
    entropy_seed,
    get_rng,
)

__all__ = [
    # config
    "load_config",
    "merge_configs",
    "to_dict",
    "validate_config",
    "get_nested",
    "save_config",
    # logging
    "setup_logging",
    "get_logger",
    "LoggerAdapter",
    "log_metrics",
    # seed
    "RandomSource",
    "entropy_seed",
    "get_rng",
]
