# critical_threshold.py — Eutrophication threshold, equilibria and their stability

from typing import List

import numpy as np
import pandas as pd
from scipy.optimize import brentq


def recycling_balance(x, q: float, b: float):
    """f(x) = x^q / (1 + x^q) - b x: net internal loading minus outflow."""
    xq = np.power(x, q)
    return xq / (1 + xq) - b * x


def map_derivative(x, q: float, b: float):
    """g'(x) for the unforced map g(x) = x + f(x)."""
    x = np.asarray(x, dtype=np.float64)
    return 1 - b + q * np.power(x, q - 1) / (1 + np.power(x, q)) ** 2


def find_critical_threshold(
    q: float,
    b: float,
    lower: float = 0.1,
    upper: float = 1.5,
    xtol: float = 1e-12,
) -> float:
    """
    Positive root of recycling_balance inside [lower, upper]. Above this
    concentration recycling outpaces outflow and the lake tips into the
    eutrophic state. Raises RuntimeError when the bracket holds no sign change.
    """
    if q <= 0 or b <= 0:
        raise ValueError(f"q and b must be > 0 (got q={q}, b={b}).")
    if not 0 <= lower < upper:
        raise ValueError(f"Invalid bracket [{lower}, {upper}].")

    f_lo = recycling_balance(lower, q, b)
    f_hi = recycling_balance(upper, q, b)
    if f_lo == 0:
        raise RuntimeError(
            f"Bracket lower bound {lower} is itself a root; choose a bracket around the threshold."
        )
    if f_hi == 0:
        raise RuntimeError(
            f"Bracket upper bound {upper} is itself a root; choose a bracket around the threshold."
        )
    try:
        x_crit, res = brentq(
            recycling_balance, lower, upper, args=(q, b), xtol=xtol, full_output=True
        )
    except ValueError as e:
        raise RuntimeError(
            f"No critical threshold in [{lower}, {upper}] for q={q}, b={b}: "
            f"f(lower)={f_lo:.4g}, f(upper)={f_hi:.4g} — widen the bracket."
        ) from e
    if not res.converged:
        raise RuntimeError(f"Threshold solver did not converge: {res.flag}")
    return float(x_crit)


def find_equilibria(q: float, b: float, x_max: float = 5.0, n_grid: int = 2000) -> List[float]:
    """All equilibria of the unforced map in [0, x_max], ascending. 0 is always one."""
    grid = np.linspace(0.0, x_max, n_grid + 1)[1:]
    vals = recycling_balance(grid, q, b)
    roots = [0.0]
    for i in range(len(grid) - 1):
        if vals[i] == 0:
            roots.append(float(grid[i]))
        elif vals[i] * vals[i + 1] < 0:
            roots.append(float(brentq(recycling_balance, grid[i], grid[i + 1], args=(q, b))))
    return roots


def compute_stability_metrics(q: float, b: float, x_max: float = 5.0) -> dict:
    """
    Classify the equilibria of X(t+1) = X(t) + f(X(t)) by |g'(x*)| < 1.
    A positive unstable equilibrium marks a tipping point between the
    oligotrophic and eutrophic basins.
    """
    eq = np.array(find_equilibria(q, b, x_max=x_max))
    slope = map_derivative(eq, q, b)
    stable = np.abs(slope) < 1

    table = pd.DataFrame({
        "equilibrium": eq,
        "map_derivative": slope,
        "is_stable": stable,
    })
    unstable_pos = eq[(eq > 0) & ~stable]
    has_tipping_point = unstable_pos.size > 0
    if has_tipping_point:
        condition = f"tipping point at x = {unstable_pos[0]:.4f}: eutrophication is irreversible"
    else:
        condition = "no positive unstable equilibrium: lake recovers once loading stops"

    return {
        "equilibria": table,
        "n_equilibria": len(eq),
        "has_tipping_point": bool(has_tipping_point),
        "tipping_point": float(unstable_pos[0]) if has_tipping_point else None,
        "stability_condition": condition,
    }
