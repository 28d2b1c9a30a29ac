# experiment_config.py — Lake problem experiment settings (defaults + .env overrides)

import math
import sys
from pathlib import Path
from typing import Any, Dict, Optional

_SCRIPT_DIR = Path(__file__).resolve().parent
if str(_SCRIPT_DIR) not in sys.path:
    sys.path.insert(0, str(_SCRIPT_DIR))
from load_env import env_seed, env_value, find_env_path, load_dotenv

DEFAULT_CONFIG = {
    "horizon": 100,
    "n_samples": 1000,
    "q": 2.5,
    "b": 0.4,
    "x0": 0.0,
    "forcing_log_mean": math.log(0.03),
    "forcing_log_std": 0.1,
    "seed": 42,
    "max_exceedance_probability": 0.8,
    "threshold_lower": 0.1,
    "threshold_upper": 1.5,
    "policy_lower": 0.0,
    "policy_upper": 0.1,
    "n_workers": 1,
}

ENV_KEYS = {
    "horizon": "LAKE_HORIZON",
    "n_samples": "LAKE_N_SAMPLES",
    "q": "LAKE_Q",
    "b": "LAKE_B",
    "x0": "LAKE_X0",
    "forcing_log_mean": "LAKE_FORCING_LOG_MEAN",
    "forcing_log_std": "LAKE_FORCING_LOG_STD",
    "seed": "LAKE_SEED",
    "max_exceedance_probability": "LAKE_MAX_EXCEEDANCE_PROB",
    "threshold_lower": "LAKE_THRESHOLD_LOWER",
    "threshold_upper": "LAKE_THRESHOLD_UPPER",
    "policy_lower": "LAKE_POLICY_LOWER",
    "policy_upper": "LAKE_POLICY_UPPER",
    "n_workers": "LAKE_N_WORKERS",
}

_INT_KEYS = ("horizon", "n_samples", "n_workers")


def validate_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Reject settings the simulator cannot run with. Returns cfg unchanged."""
    missing = [k for k in DEFAULT_CONFIG if k not in cfg]
    if missing:
        raise ValueError(f"Config missing keys: {missing}")
    if cfg["horizon"] < 1 or cfg["n_samples"] < 1:
        raise ValueError("horizon and n_samples must both be at least 1.")
    if cfg["q"] <= 0:
        raise ValueError("Recycling exponent q must be > 0.")
    if not 0.0 < cfg["b"] <= 1.0:
        raise ValueError("Outflow rate b must lie in (0, 1].")
    if cfg["x0"] < 0:
        raise ValueError("Initial concentration x0 must be >= 0.")
    if cfg["forcing_log_std"] < 0:
        raise ValueError("forcing_log_std must be >= 0.")
    if not 0.0 <= cfg["max_exceedance_probability"] <= 1.0:
        raise ValueError("max_exceedance_probability must lie in [0, 1].")
    # f(0) == 0 for every q and b, so a bracket starting at 0 never isolates the threshold
    if not 0.0 < cfg["threshold_lower"] < cfg["threshold_upper"]:
        raise ValueError("Threshold bracket must satisfy 0 < lower < upper.")
    if not 0.0 <= cfg["policy_lower"] <= cfg["policy_upper"]:
        raise ValueError("Policy bounds must satisfy 0 <= lower <= upper.")
    if cfg["n_workers"] < 1:
        raise ValueError("n_workers must be at least 1.")
    return cfg


def get_experiment_config(env_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Return the experiment settings: defaults overridden by LAKE_* variables
    from the environment (after loading .env). LAKE_SEED=none means
    unseeded; empty values keep the default.
    """
    load_dotenv(env_path or find_env_path())
    cfg: Dict[str, Any] = {}
    for key, default in DEFAULT_CONFIG.items():
        name = ENV_KEYS[key]
        if key == "seed":
            cfg[key] = env_seed(name, default)
        else:
            cfg[key] = env_value(name, default, int if key in _INT_KEYS else float)
    return validate_config(cfg)
