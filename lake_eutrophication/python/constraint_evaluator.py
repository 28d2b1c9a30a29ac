# constraint_evaluator.py — Objective and reliability constraint for an optimizer

import sys
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

_SCRIPT_DIR = Path(__file__).resolve().parent
if str(_SCRIPT_DIR) not in sys.path:
    sys.path.insert(0, str(_SCRIPT_DIR))
from lake_model import simulate_ensemble

EvaluationResult = Tuple[float, List[float], List[float]]


def _check_states(states) -> np.ndarray:
    X = np.asarray(states, dtype=np.float64)
    if X.ndim != 2 or X.shape[0] < 2 or X.shape[1] == 0:
        raise ValueError(
            f"State matrix must be (T+1, N) with T >= 1 and N >= 1, got shape {X.shape}."
        )
    return X


def exceedance_probability(states, threshold: float) -> float:
    """Fraction of sample paths whose terminal state X[T] is above threshold."""
    X = _check_states(states)
    return float(np.mean(X[-1] > threshold))


def evaluate(
    policy,
    forcing,
    threshold: float,
    q: float,
    b: float,
    max_exceedance_probability: float,
    x0: float = 0.0,
    n_workers: Optional[int] = None,
) -> EvaluationResult:
    """
    Simulate the ensemble under `policy` and return
    (mean loading, [P_exceed - max_exceedance_probability], [0.0]).

    The objective is to be maximized; an inequality value <= 0 is feasible.
    The equality list is a placeholder slot for optimizers that require one.
    """
    if not 0.0 <= max_exceedance_probability <= 1.0:
        raise ValueError(
            f"max_exceedance_probability must lie in [0, 1] (got {max_exceedance_probability})."
        )
    if not (np.isfinite(threshold) and threshold > 0):
        raise ValueError(f"Critical threshold must be finite and > 0 (got {threshold}).")
    states = simulate_ensemble(policy, forcing, q, b, x0=x0, n_workers=n_workers)
    if not np.all(np.isfinite(states)):
        raise ValueError(
            f"Ensemble diverged (non-finite states) for q={q}, b={b}, x0={x0}; "
            "policy or forcing values are too large for the recurrence."
        )
    p_exceed = exceedance_probability(states, threshold)
    objective = float(np.mean(np.asarray(policy, dtype=np.float64)))
    return objective, [p_exceed - max_exceedance_probability], [0.0]


def make_evaluator(
    forcing,
    threshold: float,
    q: float,
    b: float,
    max_exceedance_probability: float,
    x0: float = 0.0,
    n_workers: Optional[int] = None,
) -> Callable[[Sequence[float]], EvaluationResult]:
    """Bind the experiment constants; returns evaluate(policy) for a black-box optimizer."""
    Y = np.array(forcing, dtype=np.float64, copy=True)
    Y.setflags(write=False)

    def _evaluate(policy) -> EvaluationResult:
        return evaluate(
            policy, Y, threshold, q, b, max_exceedance_probability,
            x0=x0, n_workers=n_workers,
        )

    _evaluate.forcing = Y
    _evaluate.threshold = threshold
    _evaluate.max_exceedance_probability = max_exceedance_probability
    return _evaluate


def summarize_ensemble(states, threshold: float) -> dict:
    """
    Ensemble statistics: terminal and any-time exceedance probabilities,
    reliability, mean/quantile paths, and a per-step table.
    """
    X = _check_states(states)
    above = X > threshold

    per_step = pd.DataFrame({
        "step": np.arange(X.shape[0]),
        "mean": X.mean(axis=1),
        "q05": np.percentile(X, 5, axis=1),
        "median": np.median(X, axis=1),
        "q95": np.percentile(X, 95, axis=1),
        "exceedance_fraction": above.mean(axis=1),
    })

    return {
        "horizon": X.shape[0] - 1,
        "n_samples": X.shape[1],
        "threshold": threshold,
        "prob_exceed_end": float(np.mean(above[-1])),
        "prob_exceed_any": float(np.mean(np.any(above[1:], axis=0))),
        "reliability": float(1.0 - np.mean(above[1:])),
        "mean_path": per_step["mean"].to_numpy(),
        "q05_path": per_step["q05"].to_numpy(),
        "q95_path": per_step["q95"].to_numpy(),
        "terminal_distribution": X[-1].copy(),
        "per_step": per_step,
    }


def sweep_constant_policies(
    evaluator: Callable[[Sequence[float]], EvaluationResult],
    horizon: int,
    lower: float,
    upper: float,
    n_levels: int = 11,
) -> pd.DataFrame:
    """
    Evaluate constant loading policies a(t) = level over an even grid in
    [lower, upper], using an evaluator built by make_evaluator. Returns one
    row per level with objective, exceedance probability, violation and
    feasibility. This is a coarse scan, not a search.
    """
    if n_levels < 1:
        raise ValueError("n_levels must be at least 1.")
    rows = []
    for level in np.linspace(lower, upper, n_levels):
        objective, ineq, _ = evaluator(np.full(int(horizon), level))
        rows.append({
            "level": float(level),
            "objective": objective,
            "p_exceed": round(ineq[0] + evaluator.max_exceedance_probability, 12),
            "violation": ineq[0],
            "feasible": ineq[0] <= 0,
        })
    return pd.DataFrame(rows)
