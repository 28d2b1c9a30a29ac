# forcing.py — Non-point-source phosphorus runoff: Y[t, n] ~ LogNormal(μ, σ)

from typing import Optional

import numpy as np


def generate_forcing(
    horizon: int,
    n_samples: int,
    log_mean: float,
    log_std: float,
    seed: Optional[int] = None,
) -> np.ndarray:
    """
    Draw the (horizon, n_samples) forcing ensemble, one independent log-normal
    draw per (time step, sample path). Each call builds its own generator from
    `seed`, so the same seed always yields a bit-identical ensemble.
    """
    horizon = int(horizon)
    n_samples = int(n_samples)
    if horizon < 1 or n_samples < 1:
        raise ValueError(
            f"Forcing ensemble needs horizon >= 1 and n_samples >= 1 (got {horizon}, {n_samples})."
        )
    if not np.isfinite(log_mean) or not np.isfinite(log_std) or log_std < 0:
        raise ValueError("log_mean must be finite and log_std finite and >= 0.")

    rng = np.random.default_rng(seed)
    return rng.lognormal(mean=log_mean, sigma=log_std, size=(horizon, n_samples))


def forcing_from_config(cfg: dict) -> np.ndarray:
    """Forcing ensemble for an experiment config dict (see experiment_config)."""
    return generate_forcing(
        cfg["horizon"],
        cfg["n_samples"],
        cfg["forcing_log_mean"],
        cfg["forcing_log_std"],
        seed=cfg["seed"],
    )
