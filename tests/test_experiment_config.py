import sys
import os
sys.path.append(os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "lake_eutrophication", "python"))

import math

import pytest

from experiment_config import DEFAULT_CONFIG, ENV_KEYS, get_experiment_config, validate_config
from load_env import load_dotenv


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # setenv first so teardown also removes values written by load_dotenv
    for name in ENV_KEYS.values():
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


def test_defaults(tmp_path):
    cfg = get_experiment_config(str(tmp_path / "missing.env"))
    assert cfg == DEFAULT_CONFIG
    assert cfg["horizon"] == 100
    assert cfg["n_samples"] == 1000
    assert math.isclose(cfg["forcing_log_mean"], math.log(0.03))


def test_env_overrides(tmp_path, monkeypatch):
    env = tmp_path / ".env"
    env.write_text("LAKE_HORIZON=50\n# LAKE_B=0.45\nLAKE_SEED=none\n\nnot a setting\n", encoding="utf-8")
    monkeypatch.setenv("LAKE_N_SAMPLES", "200")
    cfg = get_experiment_config(str(env))
    assert cfg["horizon"] == 50
    assert cfg["b"] == 0.45
    assert cfg["n_samples"] == 200
    assert cfg["seed"] is None


def test_load_dotenv_sets_environ(tmp_path):
    env = tmp_path / ".env"
    env.write_text("LAKE_Q = 3.0\n", encoding="utf-8")
    load_dotenv(str(env))
    assert os.environ["LAKE_Q"] == "3.0"


def test_bad_number_names_variable(tmp_path, monkeypatch):
    monkeypatch.setenv("LAKE_Q", "steep")
    with pytest.raises(ValueError, match="LAKE_Q"):
        get_experiment_config(str(tmp_path / "missing.env"))


@pytest.mark.parametrize("key,value", [
    ("horizon", 0),
    ("n_samples", 0),
    ("q", 0.0),
    ("b", -0.4),
    ("b", 1.5),
    ("max_exceedance_probability", 1.2),
    ("threshold_upper", 0.05),
    ("threshold_lower", 0.0),
    ("policy_upper", -0.1),
    ("n_workers", 0),
])
def test_validate_rejects(key, value):
    with pytest.raises(ValueError):
        validate_config(dict(DEFAULT_CONFIG, **{key: value}))


def test_empty_seed_keeps_default(tmp_path, monkeypatch):
    monkeypatch.setenv("LAKE_SEED", "")
    cfg = get_experiment_config(str(tmp_path / "missing.env"))
    assert cfg["seed"] == DEFAULT_CONFIG["seed"]
    monkeypatch.setenv("LAKE_SEED", "None")
    assert get_experiment_config(str(tmp_path / "missing.env"))["seed"] is None
    monkeypatch.setenv("LAKE_SEED", "7")
    assert get_experiment_config(str(tmp_path / "missing.env"))["seed"] == 7
