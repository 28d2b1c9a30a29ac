# lake_model.py — Lake phosphorus recurrence and ensemble runner
#
#   X(t+1) = X(t) + a(t) + Y(t) + X(t)^q / (1 + X(t)^q) - b X(t),   X(0) = x0
#
# Indexing is zero-based: a[t] and Y[t] drive the step X[t] -> X[t+1], so a
# horizon of T steps gives T+1 states and the terminal state is X[T].

import os
from concurrent.futures import ProcessPoolExecutor
from typing import Optional, Tuple

import numpy as np


def _check_params(q: float, b: float, x0: float) -> None:
    if not (np.isfinite(q) and q > 0):
        raise ValueError(f"Recycling exponent q must be finite and > 0 (got {q}).")
    # b <= 1 keeps X(t) - b X(t) >= 0, so states stay nonnegative
    if not (np.isfinite(b) and 0 < b <= 1):
        raise ValueError(f"Outflow rate b must lie in (0, 1] (got {b}).")
    if not (np.isfinite(x0) and x0 >= 0):
        raise ValueError(f"Initial concentration x0 must be finite and >= 0 (got {x0}).")


def _as_policy(policy) -> np.ndarray:
    a = np.asarray(policy, dtype=np.float64)
    if a.ndim != 1:
        raise ValueError(f"Policy must be a 1-D sequence, got shape {a.shape}.")
    if a.size == 0:
        raise ValueError("Policy is empty: horizon T must be at least 1.")
    if not np.all(np.isfinite(a)) or np.any(a < 0):
        raise ValueError("Policy values must be finite and nonnegative.")
    return a


def _as_forcing(forcing, horizon: int) -> np.ndarray:
    y = np.asarray(forcing, dtype=np.float64)
    if y.ndim != 2:
        raise ValueError(f"Forcing ensemble must be 2-D (T, N), got shape {y.shape}.")
    if y.shape[0] != horizon:
        raise ValueError(
            f"Forcing ensemble has {y.shape[0]} rows but policy has horizon {horizon}."
        )
    if y.shape[1] == 0:
        raise ValueError("Forcing ensemble has no sample paths (N = 0).")
    if not np.all(np.isfinite(y)) or np.any(y < 0):
        raise ValueError("Forcing values must be finite and nonnegative.")
    return y


def _propagate(a: np.ndarray, y: np.ndarray, q: float, b: float, x0: float) -> np.ndarray:
    # Inputs already validated; the same scalar arithmetic serves the
    # single-path and ensemble entry points so their columns match exactly.
    T = a.shape[0]
    x = np.empty(T + 1, dtype=np.float64)
    x[0] = x0
    for t in range(T):
        xq = x[t] ** q
        x[t + 1] = x[t] + a[t] + y[t] + xq / (1 + xq) - b * x[t]
    return x


def propagate_path(policy, forcing, q: float, b: float, x0: float = 0.0) -> np.ndarray:
    """
    Simulate one sample path. Returns the full trajectory X[0..T] (length T+1)
    with X[0] == x0. States are not clamped; nonnegative inputs keep them
    nonnegative for the physical parameter range.
    """
    _check_params(q, b, x0)
    a = _as_policy(policy)
    y = np.asarray(forcing, dtype=np.float64)
    if y.ndim != 1 or y.shape[0] != a.shape[0]:
        raise ValueError(
            f"Forcing path shape {y.shape} does not match policy horizon {a.shape[0]}."
        )
    if not np.all(np.isfinite(y)) or np.any(y < 0):
        raise ValueError("Forcing values must be finite and nonnegative.")
    return _propagate(a, y, float(q), float(b), float(x0))


def _run_columns(args: Tuple[np.ndarray, np.ndarray, float, float, float]) -> np.ndarray:
    a, y_block, q, b, x0 = args
    out = np.empty((a.shape[0] + 1, y_block.shape[1]), dtype=np.float64)
    for n in range(y_block.shape[1]):
        out[:, n] = _propagate(a, y_block[:, n], q, b, x0)
    return out


def simulate_ensemble(
    policy,
    forcing,
    q: float,
    b: float,
    x0: float = 0.0,
    n_workers: Optional[int] = None,
) -> np.ndarray:
    """
    Run the recurrence for every column of the (T, N) forcing ensemble with
    the shared policy and initial state. Returns the (T+1, N) state matrix.

    With n_workers > 1 the columns are split into contiguous batches and run
    in worker processes; the result is identical to the sequential run.
    """
    _check_params(q, b, x0)
    a = _as_policy(policy)
    y = _as_forcing(forcing, a.shape[0])
    q, b, x0 = float(q), float(b), float(x0)
    N = y.shape[1]

    if n_workers is None or n_workers <= 1 or N == 1:
        return _run_columns((a, y, q, b, x0))

    n_workers = min(int(n_workers), N, os.cpu_count() or 1)
    bounds = np.linspace(0, N, n_workers + 1).astype(int)
    blocks = [(int(lo), int(hi)) for lo, hi in zip(bounds[:-1], bounds[1:]) if hi > lo]

    states = np.empty((a.shape[0] + 1, N), dtype=np.float64)
    with ProcessPoolExecutor(max_workers=len(blocks)) as executor:
        tasks = [(a, y[:, lo:hi], q, b, x0) for lo, hi in blocks]
        for (lo, hi), block in zip(blocks, executor.map(_run_columns, tasks)):
            states[:, lo:hi] = block
    return states
