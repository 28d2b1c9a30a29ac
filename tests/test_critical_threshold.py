import sys
import os
sys.path.append(os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "lake_eutrophication", "python"))

import numpy as np
import pytest

from critical_threshold import (
    compute_stability_metrics,
    find_critical_threshold,
    find_equilibria,
    map_derivative,
    recycling_balance,
)


def test_threshold_is_root_inside_bracket():
    x_crit = find_critical_threshold(2.5, 0.4, 0.1, 1.5)
    assert 0.1 < x_crit < 1.5
    assert abs(recycling_balance(x_crit, 2.5, 0.4)) < 1e-10


def test_threshold_is_repeatable():
    assert find_critical_threshold(2.5, 0.4) == find_critical_threshold(2.5, 0.4)


def test_no_sign_change_is_configuration_error():
    # f < 0 over the whole bracket below the tipping point
    with pytest.raises(RuntimeError):
        find_critical_threshold(2.5, 0.4, 0.1, 0.3)


def test_invalid_threshold_inputs():
    with pytest.raises(ValueError):
        find_critical_threshold(0.0, 0.4)
    with pytest.raises(ValueError):
        find_critical_threshold(2.5, 0.4, 1.5, 0.1)


def test_equilibria_for_reference_lake():
    eq = find_equilibria(2.5, 0.4)
    assert eq[0] == 0.0
    assert len(eq) == 3
    x_crit = find_critical_threshold(2.5, 0.4)
    assert np.isclose(eq[1], x_crit)
    for x in eq:
        assert abs(recycling_balance(x, 2.5, 0.4)) < 1e-9


def test_stability_classification():
    metrics = compute_stability_metrics(2.5, 0.4)
    table = metrics["equilibria"]
    assert list(table["is_stable"]) == [True, False, True]
    assert metrics["has_tipping_point"]
    assert np.isclose(metrics["tipping_point"], find_critical_threshold(2.5, 0.4))
    assert np.isclose(map_derivative(0.0, 2.5, 0.4), 0.6)


def test_high_outflow_has_no_tipping_point():
    # b large enough that outflow dominates recycling everywhere
    metrics = compute_stability_metrics(2.5, 0.9)
    assert not metrics["has_tipping_point"]
    assert metrics["tipping_point"] is None
    assert metrics["n_equilibria"] == 1


def test_bracket_endpoint_root_is_configuration_error():
    # f(0) == 0 for every lake, so a bracket from 0 never isolates the threshold
    with pytest.raises(RuntimeError, match="itself a root"):
        find_critical_threshold(2.5, 0.4, 0.0, 1.5)
