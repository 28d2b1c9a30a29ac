#!/usr/bin/env python3
# run_all.py — Run the full lake eutrophication Monte Carlo pipeline

import os
import sys
from pathlib import Path

import numpy as np

# Run from lake_eutrophication or project root
ROOT = Path(__file__).resolve().parent
if ROOT.name != "lake_eutrophication" and (ROOT / "lake_eutrophication").exists():
    ROOT = ROOT / "lake_eutrophication"
os.chdir(ROOT)
sys.path.insert(0, str(ROOT / "python"))


def main():
    print("=== Lake Eutrophication Ensemble Simulator — Pipeline ===\n")

    # Phase 1: Configuration
    print("--- Phase 1: Configuration ---")
    import experiment_config
    cfg = experiment_config.get_experiment_config()
    print(
        f"T={cfg['horizon']}, N={cfg['n_samples']}, q={cfg['q']}, b={cfg['b']}, "
        f"seed={cfg['seed']}, max P(exceed)={cfg['max_exceedance_probability']}"
    )

    # Phase 2: Critical threshold and equilibria
    print("\n--- Phase 2: Critical threshold ---")
    import critical_threshold
    x_crit = critical_threshold.find_critical_threshold(
        cfg["q"], cfg["b"], cfg["threshold_lower"], cfg["threshold_upper"]
    )
    print(f"Critical phosphorus threshold x* = {x_crit:.6f}")
    stab = critical_threshold.compute_stability_metrics(cfg["q"], cfg["b"])
    print(stab["stability_condition"])
    print(stab["equilibria"].to_string(index=False))

    # Phase 3: Forcing ensemble
    print("\n--- Phase 3: Forcing ensemble ---")
    import forcing
    Y = forcing.forcing_from_config(cfg)
    print(f"Drew {Y.shape[0]} x {Y.shape[1]} log-normal runoff values (mean {Y.mean():.4f}).")

    # Phase 4: Monte Carlo evaluation
    print("\n--- Phase 4: Monte Carlo (no point-source loading) ---")
    import constraint_evaluator
    import lake_model
    evaluator = constraint_evaluator.make_evaluator(
        Y, x_crit, cfg["q"], cfg["b"], cfg["max_exceedance_probability"],
        x0=cfg["x0"], n_workers=cfg["n_workers"],
    )
    zero_policy = np.zeros(cfg["horizon"])
    objective, ineq, eq = evaluator(zero_policy)
    states = lake_model.simulate_ensemble(
        zero_policy, Y, cfg["q"], cfg["b"], x0=cfg["x0"], n_workers=cfg["n_workers"]
    )
    summary = constraint_evaluator.summarize_ensemble(states, x_crit)
    print(f"Objective (mean loading): {objective:.4f}")
    print(f"Exceedance prob (end): {summary['prob_exceed_end']:.3f}")
    print(f"Exceedance prob (any step): {summary['prob_exceed_any']:.3f}")
    print(f"Reliability: {summary['reliability']:.3f}")
    print(f"Constraint violation: {ineq[0]:.3f} ({'feasible' if ineq[0] <= 0 else 'infeasible'})")

    # Phase 5: Constant-policy scan
    print("\n--- Phase 5: Constant loading scan ---")
    sweep = constraint_evaluator.sweep_constant_policies(
        evaluator, cfg["horizon"], cfg["policy_lower"], cfg["policy_upper"]
    )
    print(sweep.to_string(index=False))
    feasible = sweep[sweep["feasible"]]
    if len(feasible) > 0:
        print(f"Largest feasible constant loading: {feasible['level'].max():.4f}")
    else:
        print("No constant loading in the policy bounds meets the reliability constraint.")

    print("\n=== Pipeline complete. ===")


if __name__ == "__main__":
    main()
